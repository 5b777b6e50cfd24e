"""
The contract between the gateway and the message bus.

The bus itself - message encoding, publish/subscribe and the loop that polls for readable
file descriptors and timer ticks - is provided by the host application. It delivers inbound
messages to the gateway as BusMessage values and implements Bus so the gateway can publish
status messages and be notified of device input and ticks.
"""
from abc import abstractmethod

from xplhan.support.mixins import CommonEqualityMixin, StringerMixin


class MessageType:
    command = 'xpl-cmnd'
    status = 'xpl-stat'
    trigger = 'xpl-trig'


class BusMessage(CommonEqualityMixin, StringerMixin):
    """
    A message received from the bus.
    :param target: the instance identity the message is addressed to, or None when broadcast.
    :param values: the named values carried by the message.
    """
    def __init__(self, message_type, schema_class, schema_type, target=None, values=None, source=None):
        self.message_type = message_type
        self.schema_class = schema_class
        self.schema_type = schema_type
        self.target = target
        self.values = dict(values or {})
        self.source = source

    @property
    def is_broadcast(self):
        return self.target is None or self.target == '*'

    @property
    def target_identity(self):
        return self.target

    def named_value(self, key):
        return self.values.get(key)


class StatusMessage(CommonEqualityMixin, StringerMixin):
    """ A status message published on behalf of a service. """
    def __init__(self, service, schema_class, schema_type, values):
        self.service = service
        self.schema_class = schema_class
        self.schema_type = schema_type
        self.values = values


class Bus:
    """
    The services the gateway needs from the bus.
    """

    @abstractmethod
    def publish_status(self, message: StatusMessage):
        """ broadcasts a status message from the message's service. """
        raise NotImplementedError

    @abstractmethod
    def register_io_handle(self, handle, on_readable):
        """
        Calls on_readable() from the bus loop each time the handle (a file descriptor or an object
        with fileno()) is readable.
        """
        raise NotImplementedError

    @abstractmethod
    def unregister_io_handle(self, handle):
        raise NotImplementedError

    @abstractmethod
    def register_tick(self, interval, on_tick):
        """ Calls on_tick() from the bus loop every interval seconds. """
        raise NotImplementedError
