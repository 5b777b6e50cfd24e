"""
Builds HAN commands from bus requests.

Each command has a builder that validates the named values of the request addressed to a service,
and produces the CommandFrame to send. Invalid requests raise RequestError.
"""
from abc import abstractmethod

from xplhan.bus import BusMessage
from xplhan.protocol.han import CommandFrame, Commands, OutputFunctions

# highest device (channel) number accepted in a request
MAX_DEVICE = 16

CURRENT_REQUEST = 'current'
OUTPUT_TYPE = 'output'
OUTPUT_STATES = {
    'high': OutputFunctions.high,
    'low': OutputFunctions.low,
}


class RequestError(ValueError):
    """ The request cannot be turned into a command. """


def required_value(message: BusMessage, key):
    value = message.named_value(key)
    if value is None:
        raise RequestError("%s missing, %s required" % (key, key))
    return value


def parse_device(value, maximum=MAX_DEVICE):
    """
    Parses a device number. Only decimal digits are accepted.
    >>> parse_device('12')
    12
    """
    if not value.isdigit() or not value.isascii() or int(value) > maximum:
        raise RequestError("bad device number: %s" % value)
    return int(value)


def check_current_request(message: BusMessage):
    request = required_value(message, 'request')
    if request != CURRENT_REQUEST:
        raise RequestError("only the 'current' request is supported, got '%s'" % request)


class RequestBuilder:
    """ Builds the command for a request to a service. """

    @abstractmethod
    def build(self, message: BusMessage, service) -> CommandFrame:
        raise NotImplementedError


class TemperatureRequestBuilder(RequestBuilder):
    """ reads the current temperature of a channel: request=current, device=<channel> """

    def build(self, message, service):
        required_value(message, 'request')
        device = parse_device(required_value(message, 'device'))
        check_current_request(message)
        return CommandFrame(service.address, service.command, [device, 0, 0, 0], service)


class ACRequestBuilder(RequestBuilder):
    """ reads the AC line voltage and frequency: request=current """

    def build(self, message, service):
        check_current_request(message)
        return CommandFrame(service.address, service.command, [0, 0, 0], service)


class OutputRequestBuilder(RequestBuilder):
    """
    Outputs are queried by sensor services (request=current) and set by control services
    (type=output, current=high|low). Both need the device number.
    """

    def build(self, message, service):
        device = parse_device(required_value(message, 'device'))
        if service.is_sensor:
            check_current_request(message)
            function = OutputFunctions.status
        else:
            output_type = required_value(message, 'type')
            current = required_value(message, 'current')
            if output_type != OUTPUT_TYPE:
                raise RequestError("type must be '%s', got '%s'" % (OUTPUT_TYPE, output_type))
            if current not in OUTPUT_STATES:
                raise RequestError("current must be one of: %s" % ", ".join(sorted(OUTPUT_STATES)))
            function = OUTPUT_STATES[current]
        return CommandFrame(service.address, service.command, [device, function], service)


REQUEST_BUILDERS = {
    Commands.temperature: TemperatureRequestBuilder(),
    Commands.ac: ACRequestBuilder(),
    Commands.output: OutputRequestBuilder(),
}


def build_request(message: BusMessage, service, builders=REQUEST_BUILDERS) -> CommandFrame:
    """
    Builds the command for a request addressed to a service.
    :raises RequestError: when the request is not valid for the service's command.
    """
    builder = builders.get(service.command)
    if builder is None:
        raise RequestError("Invalid han command: %02X" % service.command)
    return builder.build(message, service)
