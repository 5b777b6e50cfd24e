"""
The conduit package provides an abstraction of a bi-directional line channel to an endpoint.
The concrete implementation is a nonblocking TCP socket.
"""
