import logging
import socket

from xplhan.conduit.base import Conduit
from xplhan.conduit.socket_conduit import SocketConduit
from xplhan.connector.base import AbstractConnector, ConnectorError

logger = logging.getLogger(__name__)


class TCPServerEndpoint:
    """
    Describes a TCP server endpoint by host name (or address literal) and port.
    """
    def __init__(self, hostname, port):
        self.hostname = hostname
        self.port = port

    def key(self):
        """
        >>> TCPServerEndpoint('localhost', 1129).key()
        'localhost:1129'
        """
        return str(self.hostname) + ':' + str(self.port)

    def __str__(self):
        return self.key()


def resolve_endpoint(endpoint: TCPServerEndpoint, getaddrinfo=socket.getaddrinfo):
    """
    Resolves the endpoint to a stream socket address. The first IPv6 result is preferred
    over the first IPv4 result when both are available.
    :return: a tuple of (family, type, proto, sockaddr)
    :raises ConnectorError: if the name cannot be resolved, or has no IP address.
    """
    try:
        infos = getaddrinfo(endpoint.hostname, endpoint.port, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as e:
        raise ConnectorError("could not resolve %s: %s" % (endpoint.key(), e)) from e

    ipv6 = next((info for info in infos if info[0] == socket.AF_INET6), None)
    ipv4 = next((info for info in infos if info[0] == socket.AF_INET), None)
    info = ipv6 or ipv4
    if info is None:
        raise ConnectorError("could not find a suitable IP address for %s" % endpoint.key())
    family, socktype, proto, canonname, sockaddr = info
    return family, socktype, proto, sockaddr


class SocketConnector(AbstractConnector):
    """
    A connector that communicates lines via a TCP socket.
    The connection is made in blocking mode (bounded by the timeout). The conduit switches
    the socket to nonblocking mode once connected.
    """
    def __init__(self, endpoint: TCPServerEndpoint, timeout=5, report_errors=True):
        """
        :param endpoint the TCP server to connect to.
        :param timeout the time in seconds allowed to establish the connection.
        """
        super().__init__()
        self._endpoint = endpoint
        self.timeout = timeout
        self._report_errors = report_errors

    @property
    def endpoint(self):
        return self._endpoint

    def _connect(self) -> Conduit:
        family, socktype, proto, address = resolve_endpoint(self._endpoint)
        sock = None
        try:
            sock = socket.socket(family, socktype, proto)
            sock.settimeout(self.timeout)
            sock.connect(address)
            logger.info("opened socket to %s" % self._endpoint.key())
            return SocketConduit(sock)
        except OSError as e:
            if sock is not None:
                sock.close()
            method = logger.warning if self._report_errors else logger.debug
            method("error opening socket to %s: %s" % (self._endpoint.key(), e))
            raise ConnectorError("could not connect to %s" % self._endpoint.key()) from e
