"""
The inputs to the gateway. The bus loop turns its callbacks into these events and passes them
to Gateway.dispatch().
"""
from xplhan.bus import BusMessage
from xplhan.support.mixins import CommonEqualityMixin, StringerMixin


class GatewayEvent(CommonEqualityMixin, StringerMixin):
    """ base class for gateway events. """


class InboundBusRequest(GatewayEvent):
    """ A message arrived from the bus. """
    def __init__(self, message: BusMessage):
        self.message = message


class DeviceLineReady(GatewayEvent):
    """
    The controller connection has data. When line is None, the line is read from the connection,
    otherwise the given line is processed as though it was read.
    """
    def __init__(self, line=None):
        self.line = line


class Tick(GatewayEvent):
    """ The periodic tick that sends the next queued command. """
