"""
The gateway engine.

Requests from the bus are turned into commands and queued. Each tick sends the oldest queued command
to the controller, connecting first if needed, and remembers the service that expects the response.
Only one command is outstanding at a time: the next tick replaces the pending service whether or not
a response arrived. Responses from the controller are decoded for the pending service and published
on the bus as status messages.

Everything runs on the thread of the bus loop. Handlers must not dispatch further events
while an event is being dispatched.
"""
import logging

from xplhan.bus import Bus, MessageType, StatusMessage
from xplhan.connector.base import Connector, ConnectorDisconnectedEvent, ConnectorError
from xplhan.connector.socketconn import SocketConnector, TCPServerEndpoint
from xplhan.decoders import DecodeError, RESPONSE_DECODERS, STATUS_SCHEMA
from xplhan.events import DeviceLineReady, InboundBusRequest, Tick
from xplhan.protocol.han import LINE_TERMINATOR, decode_response
from xplhan.requests import REQUEST_BUILDERS, RequestError, build_request
from xplhan.services import ServiceRegistry, identity_hash
from xplhan.workqueue import WorkQueue

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 1.0


class ConnectionState:
    disconnected = 'disconnected'
    connecting = 'connecting'
    connected = 'connected'


class Gateway:
    """
    Owns the services, the work queue, the connection to the controller and the pending response.

    :param registry: the configured services
    :param connector: the connector to the controller. It is connected only when a command is to be sent.
    :param bus: the bus used to publish status messages and register for input and ticks.
    :param tick_interval: seconds between ticks. One queued command is sent per tick.
    """

    def __init__(self, registry: ServiceRegistry, connector: Connector, bus: Bus,
                 tick_interval=DEFAULT_TICK_INTERVAL, decoders=None, builders=None):
        self.registry = registry
        self.connector = connector
        self.bus = bus
        self.tick_interval = tick_interval
        self.decoders = RESPONSE_DECODERS if decoders is None else decoders
        self.builders = REQUEST_BUILDERS if builders is None else builders
        self.queue = WorkQueue()
        self.pending = None     # the service expecting the next response
        self.failed = False     # the last connection attempt or send failed
        self.state = ConnectionState.disconnected
        self._io_handle = None
        self._dispatching = False
        self._handlers = {
            InboundBusRequest: lambda e: self.on_bus_request(e.message),
            DeviceLineReady: self._line_ready,
            Tick: lambda e: self.drain_one(),
        }
        connector.events.add(self._connector_events)

    def start(self):
        """ registers for ticks with the bus. """
        self.bus.register_tick(self.tick_interval, self.on_tick)
        logger.info("gateway started with %d services, sending to %s"
                    % (len(self.registry), self.connector.endpoint))

    def probe(self):
        """
        Checks that the controller can be reached by connecting and disconnecting.
        :raises ConnectorError: if the controller cannot be reached
        """
        self.connector.connect()
        self.connector.disconnect()

    def shutdown(self):
        """ closes the connection and discards queued commands. """
        self.connector.disconnect()
        self._connector_closed()
        self.queue.clear()
        self.pending = None

    @property
    def connected(self):
        return self.state == ConnectionState.connected

    # bus loop callbacks

    def on_tick(self):
        self.dispatch(Tick())

    def on_readable(self):
        self.dispatch(DeviceLineReady())

    def on_bus_message(self, message):
        self.dispatch(InboundBusRequest(message))

    def dispatch(self, event):
        """ Processes a single event. """
        if self._dispatching:
            raise RuntimeError("re-entrant dispatch of %s" % event)
        self._dispatching = True
        try:
            self._handlers[type(event)](event)
        finally:
            self._dispatching = False

    # requests

    def on_bus_request(self, message):
        """
        Queues the command for a request addressed to one of the services.
        Messages not addressed to a service, or with a schema that does not match the service,
        are ignored. Invalid requests are logged and dropped.
        """
        if message.is_broadcast or message.message_type != MessageType.command:
            return
        instance = message.target_identity
        service = self.registry.find_by_identity(identity_hash(instance), instance)
        if service is None:
            return
        if service.schema_class != message.schema_class or service.schema_type != message.schema_type:
            logger.debug("ignoring %s.%s message for %s" % (message.schema_class, message.schema_type, instance))
            return
        try:
            frame = build_request(message, service, self.builders)
        except RequestError as e:
            logger.warning("request for %s dropped: %s" % (service.name, e))
            return
        self.queue.enqueue(frame.service, frame.encode())
        logger.debug("queued command %s for %s" % (frame.encode(), service.name))

    def drain_one(self):
        """
        Sends the oldest queued command. The command is removed from the queue whether or not it
        was sent, and the pending service is replaced by the service that expects its response.
        :return: True if a command was sent
        """
        item = self.queue.peek()
        if item is None:
            return False
        sent = False
        try:
            if not self.connector.connected:
                self._connect()
            logger.debug("Sending command: %s" % item.line)
            self.connector.conduit.write_all((item.line + LINE_TERMINATOR).encode('ascii'))
            sent = True
        except ConnectorError as e:
            logger.warning("Command %s not sent: %s" % (item.line, e))
            self._drop_connection()
        finally:
            self.pending = item.service if sent else None
            self.queue.pop()
        return sent

    # connection

    def _connect(self):
        self._connector_closed()
        self.state = ConnectionState.connecting
        try:
            self.connector.connect()
        except ConnectorError:
            self.state = ConnectionState.disconnected
            raise
        self.state = ConnectionState.connected
        self.failed = False
        self._io_handle = self.connector.conduit
        self.bus.register_io_handle(self._io_handle, self.on_readable)

    def _drop_connection(self):
        self.failed = True
        self.connector.disconnect()
        self._connector_closed()

    def _connector_events(self, event):
        if isinstance(event, ConnectorDisconnectedEvent):
            self._connector_closed()

    def _connector_closed(self):
        handle = self._io_handle
        self._io_handle = None
        if handle is not None:
            self.bus.unregister_io_handle(handle)
        self.state = ConnectionState.disconnected

    # responses

    def _line_ready(self, event: DeviceLineReady):
        line = event.line
        if line is None:
            line = self._read_line()
        if line is not None:
            self.on_response_line(line)

    def _read_line(self):
        if not self.connector.connected:
            return None
        try:
            return self.connector.conduit.read_line()
        except ConnectorError as e:
            logger.warning("connection to %s lost: %s" % (self.connector.endpoint, e))
            self._drop_connection()
            return None

    def on_response_line(self, line):
        """
        Decodes a line from the controller and publishes the status for the pending service.
        Lines that are not responses, and responses that arrive with no pending service or from
        another address, are discarded.
        """
        response = decode_response(line)
        if response is None:
            logger.debug("ignoring line: %s" % line)
            return
        service = self.pending
        if service is None:
            logger.debug("no response pending, discarding: %s" % line)
            return
        if service.address != response.address:
            logger.debug("response from address %d while waiting on %d, discarding: %s"
                         % (response.address, service.address, line))
            return

        self.pending = None
        decoder = self.decoders.get(response.command)
        if decoder is None:
            logger.warning("Unknown response received: %s" % line)
            return
        try:
            values = decoder.decode(response, service)
        except DecodeError as e:
            logger.warning("%s for %s: %s" % (e, service.name, line))
            return
        if values is not None:
            self.bus.publish_status(StatusMessage(service, STATUS_SCHEMA[0], STATUS_SCHEMA[1], values))


def create_gateway(settings, descriptors, bus: Bus, timeout=5) -> Gateway:
    """
    Builds a gateway from the loaded configuration.
    :param settings: the GatewaySettings
    :param descriptors: the service descriptors, validated here.
    :raises ConfigurationError: if the services are not valid.
    """
    registry = ServiceRegistry(descriptors)
    connector = SocketConnector(TCPServerEndpoint(settings.host, settings.port), timeout)
    return Gateway(registry, connector, bus, settings.tick_interval)
