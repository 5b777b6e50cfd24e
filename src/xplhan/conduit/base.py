from abc import abstractmethod


class Conduit:
    """
    A conduit allows two-way, line oriented communication with an endpoint. Lines are read
    without blocking the caller, and written in full.
    """

    @property
    @abstractmethod
    def target(self):
        """ the underlying resource, such as a socket. """
        raise NotImplementedError

    @abstractmethod
    def fileno(self) -> int:
        """ the file descriptor to watch for readability. """
        raise NotImplementedError

    @property
    @abstractmethod
    def open(self) -> bool:
        """ determines if this conduit is open. When open, lines can be read and written. """
        raise NotImplementedError

    @abstractmethod
    def read_line(self):
        """
        Reads the data available without blocking.
        :return: the completed line, without the line terminator, or None if the line is not yet complete.
        :raises ConnectionClosedError: when the peer has closed the connection.
        :raises ConnectorError: when the conduit can no longer be read from.
        """
        raise NotImplementedError

    @abstractmethod
    def write_all(self, data: bytes):
        """
        Writes all of the given data.
        :raises ConnectorError: when the data could not be completely written.
        """
        raise NotImplementedError

    @abstractmethod
    def close(self):
        raise NotImplementedError
