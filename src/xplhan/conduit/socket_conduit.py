import logging
import select
import socket

from xplhan.conduit import base
from xplhan.connector.base import ConnectorError, ConnectionClosedError

logger = logging.getLogger(__name__)

# longest line kept, excess characters are dropped
MAX_LINE = 255


class SocketConduit(base.Conduit):
    """
    A conduit that exchanges lines via a nonblocking socket.

    Bytes are read one at a time so that data following a line terminator stays in the socket,
    and the next readiness notification delivers it. The partially received line is kept
    between calls to read_line().

    :param sock The open, connected socket. It is switched to nonblocking mode.
    :param max_line The longest line that is kept. Further characters are dropped until the line ends.
    """
    def __init__(self, sock: socket.socket, max_line=MAX_LINE):
        self.sock = sock
        self.sock.setblocking(False)
        self.max_line = max_line
        self._line = bytearray()

    @property
    def open(self) -> bool:
        return self.sock.fileno() >= 0

    @property
    def target(self):
        return self.sock

    def fileno(self):
        return self.sock.fileno()

    @property
    def pending(self) -> bytes:
        """ the characters received for the line not yet terminated """
        return bytes(self._line)

    def read_line(self):
        while True:
            try:
                c = self.sock.recv(1)
            except BlockingIOError:
                return None
            except OSError as e:
                logger.warning("Read error on fd %d: %s" % (self.sock.fileno(), e))
                self._line.clear()
                raise ConnectorError("read error") from e

            if not c:
                self._line.clear()
                raise ConnectionClosedError("connection closed by peer")
            if c == b'\r':
                continue
            if c == b'\n':
                line = self._line.decode('ascii', errors='replace')
                self._line.clear()
                logger.debug("Line received: %s" % line)
                return line
            if len(self._line) < self.max_line:
                self._line += c
            else:
                logger.warning("End of line buffer reached, dropped %r" % c)

    def write_all(self, data: bytes):
        view = memoryview(data)
        while len(view):
            try:
                sent = self.sock.send(view)
            except BlockingIOError:
                select.select((), (self.sock,), ())
                continue
            except OSError as e:
                raise ConnectorError("write error: %s" % e) from e
            view = view[sent:]

    def close(self):
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass    # the peer may have closed the socket
        finally:
            self.sock.close()
            self._line.clear()
