"""Transport layer: TCP connection to the control port."""

from .tcp_connection import ConnectionInfo, TCPConnection
