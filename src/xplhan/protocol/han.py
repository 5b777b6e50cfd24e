"""
Provides the framing of the HAN controller protocol.

Commands are sent as a single line of text: the prefix "CA", the device address, the command code
and each parameter byte as two hex digits, followed by the "00" terminator. For example, reading
temperature channel 2 of device 1 is "CA01120200000000".

Responses arrive as a single line: the prefix "RS", the address of the responding device,
the command code and the parameter bytes, e.g. "RS0112020A00E803".
"""
from xplhan.protocol.hexstream import byte2h, hex2
from xplhan.support.mixins import CommonEqualityMixin, StringerMixin

COMMAND_PREFIX = "CA"
RESPONSE_PREFIX = "RS"
COMMAND_TERMINATOR = "00"
LINE_TERMINATOR = "\n"

# the largest number of parameter bytes decoded from a response
MAX_RESPONSE_PARAMS = 16


class Commands(object):
    """Describes the command name and the corresponding code"""

    no_op = 0x00
    valve = 0x10
    relay = 0x11
    temperature = 0x12
    output = 0x13
    input = 0x14
    ac = 0x15


class OutputFunctions:
    """ the sub-function codes of the output command """
    low = 0
    high = 1
    status = 2


def check_byte(value, name='value'):
    if not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise ValueError("%s must be a byte, got %r" % (name, value))
    return value


def encode_command(address, command, params=()):
    """
    Encodes a command as a protocol line, without the line terminator.

    >>> encode_command(1, Commands.ac, [0, 0, 0])
    'CA011500000000'
    >>> encode_command(0x1F, Commands.output, [12, 2])
    'CA1F130C0200'
    """
    check_byte(address, 'address')
    check_byte(command, 'command')
    for p in params:
        check_byte(p, 'parameter')
    return COMMAND_PREFIX + byte2h(address) + byte2h(command) + \
        "".join(byte2h(p) for p in params) + COMMAND_TERMINATOR


def decode_response(line):
    """
    Decodes a response line.
    :return: a ResponseFrame, or None when the line is not a response.

    >>> decode_response('RS0112020A00E803').params
    [2, 10, 0, 232, 3]
    >>> decode_response('AB0112') is None
    True
    """
    if not line.startswith(RESPONSE_PREFIX):
        return None
    pcount = min(max(len(line) - 6, 0) >> 1, MAX_RESPONSE_PARAMS)
    params = [hex2(line, 6 + (i << 1)) for i in range(pcount)]
    return ResponseFrame(hex2(line, 2), hex2(line, 4), params)


class CommandFrame(CommonEqualityMixin, StringerMixin):
    """
    A command to send to the controller.
    :param service: the service that receives the response to this command, or None
        when no response is expected.
    """

    def __init__(self, address, command, params=(), service=None):
        self.address = address
        self.command = command
        self.params = list(params)
        self.service = service

    def encode(self):
        return encode_command(self.address, self.command, self.params)


class ResponseFrame(CommonEqualityMixin, StringerMixin):
    """ A response received from the controller. """

    def __init__(self, address, command, params=()):
        self.address = address
        self.command = command
        self.params = list(params)

    @property
    def pcount(self):
        return len(self.params)
