import unittest
from unittest.mock import Mock

from hamcrest import assert_that, is_, calling, raises, instance_of

from xplhan.connector.base import AbstractConnector, ConnectionNotConnectedError, ConnectorConnectedEvent, \
    ConnectorDisconnectedEvent, ConnectorError


class FakeConnector(AbstractConnector):
    def __init__(self, conduit):
        super().__init__()
        self.new_conduit = conduit
        self.connect_count = 0

    @property
    def endpoint(self):
        return 'fake'

    def _connect(self):
        self.connect_count += 1
        if isinstance(self.new_conduit, Exception):
            raise self.new_conduit
        return self.new_conduit


class AbstractConnectorTest(unittest.TestCase):
    def setUp(self):
        self.conduit = Mock()
        self.conduit.open = True
        self.sut = FakeConnector(self.conduit)
        self.events = Mock()
        self.sut.events += self.events

    def test_conduit_requires_connection(self):
        assert_that(calling(lambda: self.sut.conduit), raises(ConnectionNotConnectedError))

    def test_connect_fires_event(self):
        self.sut.connect()
        assert_that(self.sut.connected, is_(True))
        assert_that(self.sut.conduit, is_(self.conduit))
        event = self.events.call_args[0][0]
        assert_that(event, is_(instance_of(ConnectorConnectedEvent)))
        assert_that(event.connector, is_(self.sut))

    def test_connect_when_connected_does_nothing(self):
        self.sut.connect()
        self.sut.connect()
        assert_that(self.sut.connect_count, is_(1))

    def test_connect_failure(self):
        self.sut.new_conduit = ConnectorError("nope")
        assert_that(calling(self.sut.connect), raises(ConnectorError))
        assert_that(self.sut.connected, is_(False))
        self.events.assert_not_called()

    def test_disconnect_closes_conduit(self):
        self.sut.connect()
        self.sut.disconnect()
        self.conduit.close.assert_called_once_with()
        assert_that(self.sut.connected, is_(False))
        assert_that(self.events.call_args[0][0], is_(instance_of(ConnectorDisconnectedEvent)))

    def test_disconnect_when_not_connected(self):
        self.sut.disconnect()
        self.conduit.close.assert_not_called()
        self.events.assert_not_called()

    def test_closed_conduit_is_not_connected(self):
        self.sut.connect()
        self.conduit.open = False
        assert_that(self.sut.connected, is_(False))


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
