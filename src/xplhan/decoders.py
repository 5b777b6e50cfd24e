"""
Decodes the parameters of controller responses into the named values of a status message.

There is one decoder per command. A decoder checks the parameter count, converts the raw values
to the engineering units of the service that asked, and returns the named values to publish,
or None when the response does not warrant a status message.
"""
from abc import abstractmethod

from xplhan.protocol.han import Commands, OutputFunctions, ResponseFrame
from xplhan.services import Units

STATUS_SCHEMA = ('sensor', 'basic')


class DecodeError(ValueError):
    """ The response parameters cannot be decoded. """


def signed_byte(b):
    """Convert an unsigned byte to a corresponding 2's complement signed value.

    >>> signed_byte(255)
    -1
    >>> signed_byte(127)
    127
    """
    return b if b < 128 else b - 256


def short_decode(buf):
    """ decodes a little endian, signed 16-bit value
    >>> short_decode([0xE8, 0x03])
    1000
    >>> short_decode([0xFF, 0xFF])
    -1
    """
    return (signed_byte(buf[1]) * 256) + buf[0]


def unsigned_short_decode(buf):
    """
    >>> unsigned_short_decode([0x68, 0x01])
    360
    """
    return (buf[1] * 256) + buf[0]


def int_div(a, b):
    """ integer division truncating toward zero
    >>> int_div(-7, 2)
    -3
    >>> int_div(7, 2)
    3
    """
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


class ResponseDecoder:
    """ Decodes the response to a command. """
    name = None
    param_count = 0

    def decode(self, response: ResponseFrame, service):
        """
        :return: the named values for the status message, or None if no status is sent.
        :raises DecodeError: if the response is malformed.
        """
        if response.pcount != self.param_count:
            raise DecodeError("%s: received an incorrect number of parameters, got %d, need %d"
                              % (self.name, response.pcount, self.param_count))
        return self._decode(response.params, service)

    @abstractmethod
    def _decode(self, params, service):
        raise NotImplementedError


class TemperatureDecoder(ResponseDecoder):
    """
    parameters: channel, counts per degree C, 2 reserved bytes, raw temperature (signed, little endian)
    """
    name = 'temperature'
    param_count = 5

    def _decode(self, params, service):
        channel = params[0]
        counts = params[1]
        raw = short_decode(params[3:5])
        if not counts:
            raise DecodeError("temperature: zero counts per degree")

        if service.units == Units.celsius:
            value = int_div(raw, counts)
        elif service.units == Units.fahrenheit:
            value = int_div(9 * raw, 5 * counts) + 32
        else:
            raise DecodeError("temperature: invalid unit for conversion")

        return {
            'device': str(channel),
            'type': 'temp',
            'current': str(value),
            'units': Units.keyword(service.units),
        }


class ACDecoder(ResponseDecoder):
    """ parameters: volts x 10, frequency x 100, both unsigned little endian """
    name = 'AC'
    param_count = 4

    def _decode(self, params, service):
        volts = unsigned_short_decode(params[0:2]) / 10
        freq = unsigned_short_decode(params[2:4]) / 100
        if service.units == Units.volts:
            return {'type': 'volts', 'current': "%3.1f" % volts, 'units': 'volts'}
        return {'type': 'frequency', 'current': "%2.2f" % freq, 'units': 'hertz'}


class OutputDecoder(ResponseDecoder):
    """ parameters: device, sub-function, state. Only status responses are published. """
    name = 'output'
    param_count = 3
    states = {0: 'low', 1: 'high'}

    def _decode(self, params, service):
        device, function, state = params
        if function != OutputFunctions.status:
            return None
        if state not in self.states:
            raise DecodeError("output: unexpected state received: %d" % state)
        return {
            'device': str(device),
            'type': 'output',
            'current': self.states[state],
        }


RESPONSE_DECODERS = {
    Commands.temperature: TemperatureDecoder(),
    Commands.ac: ACDecoder(),
    Commands.output: OutputDecoder(),
}
