import errno
import socket
import unittest
from unittest.mock import Mock, patch

from hamcrest import assert_that, is_, calling, raises, equal_to

from xplhan.conduit.socket_conduit import SocketConduit
from xplhan.connector.base import ConnectorError, ConnectionClosedError


class SocketConduitLineTest(unittest.TestCase):
    """ reads lines from one end of a connected socket pair. """

    def setUp(self):
        self.local, self.remote = socket.socketpair()
        self.sut = SocketConduit(self.local)

    def tearDown(self):
        self.sut.close()
        self.remote.close()

    def test_socket_made_nonblocking(self):
        assert_that(self.local.getblocking(), is_(False))

    def test_no_data_is_incomplete(self):
        assert_that(self.sut.read_line(), is_(None))

    def test_line_split_across_deliveries(self):
        self.remote.sendall(b"RS0112")
        assert_that(self.sut.read_line(), is_(None))
        assert_that(self.sut.pending, is_(b"RS0112"))
        self.remote.sendall(b"020A00E803\r\n")
        assert_that(self.sut.read_line(), is_("RS0112020A00E803"))
        assert_that(self.sut.read_line(), is_(None))
        assert_that(self.sut.pending, is_(b""))

    def test_one_line_per_call(self):
        self.remote.sendall(b"RS01\nRS02\n")
        assert_that(self.sut.read_line(), is_("RS01"))
        assert_that(self.sut.read_line(), is_("RS02"))
        assert_that(self.sut.read_line(), is_(None))

    def test_empty_line(self):
        self.remote.sendall(b"\r\n")
        assert_that(self.sut.read_line(), is_(""))

    def test_overrun_drops_excess_characters(self):
        self.sut.max_line = 4
        self.remote.sendall(b"RS0112\nRS")
        assert_that(self.sut.read_line(), is_("RS01"))
        assert_that(self.sut.read_line(), is_(None))
        assert_that(self.sut.pending, is_(b"RS"))

    def test_peer_close(self):
        self.remote.sendall(b"RS01")
        self.remote.close()
        assert_that(calling(self.sut.read_line), raises(ConnectionClosedError))
        assert_that(self.sut.pending, is_(b""))

    def test_write_all(self):
        self.sut.write_all(b"CA01120000000000\n")
        assert_that(self.remote.recv(64), is_(b"CA01120000000000\n"))

    def test_open(self):
        assert_that(self.sut.open, is_(True))
        self.sut.close()
        assert_that(self.sut.open, is_(False))


class SocketConduitErrorTest(unittest.TestCase):

    def setUp(self):
        self.sock = Mock()
        self.sock.fileno.return_value = 7
        self.sut = SocketConduit(self.sock)

    def test_read_error_resets_line(self):
        self.sock.recv.side_effect = [b"R", b"S", OSError(errno.ECONNRESET, "reset")]
        assert_that(calling(self.sut.read_line), raises(ConnectorError))
        assert_that(self.sut.pending, is_(b""))

    def test_read_error_is_not_closed_error(self):
        self.sock.recv.side_effect = OSError(errno.EBADF, "bad fd")
        try:
            self.sut.read_line()
            self.fail("expected ConnectorError")
        except ConnectorError as e:
            assert_that(isinstance(e, ConnectionClosedError), is_(False))

    def test_write_retries_partial_and_would_block(self):
        written = []

        def send(view):
            written.append(bytes(view))
            return 2

        self.sock.send.side_effect = self._sequence(BlockingIOError(), send, send)
        with patch('xplhan.conduit.socket_conduit.select') as select:
            self.sut.write_all(b"CA01")
            select.select.assert_called_once_with((), (self.sock,), ())
        assert_that(written, is_(equal_to([b"CA01", b"01"])))

    def test_write_error(self):
        self.sock.send.side_effect = OSError(errno.EPIPE, "broken pipe")
        assert_that(calling(self.sut.write_all).with_args(b"CA01"), raises(ConnectorError))

    def test_close_swallows_shutdown_error(self):
        self.sock.shutdown.side_effect = OSError("not connected")
        self.sut.close()
        self.sock.shutdown.assert_called_once_with(socket.SHUT_RDWR)
        self.sock.close.assert_called_once_with()

    @staticmethod
    def _sequence(*steps):
        """ a side effect that raises exceptions or delegates to callables, in turn. """
        remaining = list(steps)

        def next_step(*args):
            step = remaining.pop(0)
            if isinstance(step, BaseException):
                raise step
            return step(*args)
        return next_step


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
