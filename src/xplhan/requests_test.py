import unittest

from hamcrest import assert_that, is_, calling, raises

from xplhan.bus import BusMessage, MessageType
from xplhan.protocol.han import Commands
from xplhan.requests import RequestError, build_request, parse_device
from xplhan.services import ServiceDescriptor, ServiceRegistry


def request(**values):
    return BusMessage(MessageType.command, 'sensor', 'request', 'hall', values)


class RequestTestCase(unittest.TestCase):
    def setUp(self):
        self.registry = ServiceRegistry([
            ServiceDescriptor('temp', 'hall', 1, 'sensor', 'basic', 'gtmp', 'celsius'),
            ServiceDescriptor('mains', 'mains', 2, 'sensor', 'basic', 'gacd', 'volts'),
            ServiceDescriptor('outputs', 'outputs', 3, 'sensor', 'basic', 'gout', 'output'),
            ServiceDescriptor('switch', 'switch', 3, 'control', 'basic', 'gout', None),
        ])

    def service(self, name):
        return [s for s in self.registry if s.name == name][0]

    def assert_line(self, message, service, line):
        frame = build_request(message, self.service(service))
        assert_that(frame.encode(), is_(line))
        assert_that(frame.service, is_(self.service(service)))

    def assert_rejected(self, message, service, pattern=None):
        assert_that(calling(build_request).with_args(message, self.service(service)),
                    raises(RequestError, pattern))


class TemperatureRequestTest(RequestTestCase):
    def test_current(self):
        self.assert_line(request(request='current', device='2'), 'temp', 'CA01120200000000')

    def test_device_bounds(self):
        self.assert_line(request(request='current', device='16'), 'temp', 'CA01121000000000')
        self.assert_rejected(request(request='current', device='17'), 'temp', 'bad device')
        self.assert_rejected(request(request='current', device='-1'), 'temp', 'bad device')
        self.assert_rejected(request(request='current', device='0x1'), 'temp', 'bad device')

    def test_missing_values(self):
        self.assert_rejected(request(device='2'), 'temp', 'request missing')
        self.assert_rejected(request(request='current'), 'temp', 'device missing')

    def test_only_current(self):
        self.assert_rejected(request(request='max', device='2'), 'temp', 'current')


class ACRequestTest(RequestTestCase):
    def test_current(self):
        self.assert_line(request(request='current'), 'mains', 'CA021500000000')

    def test_rejected(self):
        self.assert_rejected(request(), 'mains', 'request missing')
        self.assert_rejected(request(request='min'), 'mains')


class OutputRequestTest(RequestTestCase):
    def test_sensor_status(self):
        self.assert_line(request(request='current', device='12'), 'outputs', 'CA03130C0200')

    def test_sensor_requires_current_request(self):
        self.assert_rejected(request(device='12'), 'outputs', 'request missing')
        self.assert_rejected(request(request='last', device='12'), 'outputs')

    def test_control(self):
        self.assert_line(request(type='output', current='high', device='1'), 'switch', 'CA0313010100')
        self.assert_line(request(type='output', current='low', device='1'), 'switch', 'CA0313010000')

    def test_control_rejected(self):
        self.assert_rejected(request(current='high', device='1'), 'switch', 'type missing')
        self.assert_rejected(request(type='output', device='1'), 'switch', 'current missing')
        self.assert_rejected(request(type='input', current='high', device='1'), 'switch', 'type must be')
        self.assert_rejected(request(type='output', current='on', device='1'), 'switch', 'one of: high, low')
        self.assert_rejected(request(type='output', current='on'), 'switch', 'device missing')


class BuildRequestTest(unittest.TestCase):
    def test_unsupported_command(self):
        service = ServiceRegistry([ServiceDescriptor('t', 'i', 1, 'sensor', 'basic', 'gtmp', 'celsius')]).all()[0]
        service.command = Commands.relay
        assert_that(calling(build_request).with_args(request(), service), raises(RequestError, 'Invalid han command'))

    def test_parse_device(self):
        assert_that(parse_device('0'), is_(0))
        assert_that(calling(parse_device).with_args(''), raises(RequestError))


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
