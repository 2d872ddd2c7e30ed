"""TCP connection to an FTP server's control port.

Resolves the address, opens the socket and exposes it as a pair of
buffered binary streams for :class:`~ftp_control_mcp.protocol.ControlChannel`.
The socket timeout applies to every blocking read and write; an expiry
surfaces as ``TimeoutError``.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import BinaryIO

logger = logging.getLogger(__name__)

DEFAULT_PORT = 21
DEFAULT_TIMEOUT = 30.0


@dataclass
class ConnectionInfo:
    """Endpoints of an established control connection."""

    host: str
    port: int
    local_address: str = ""
    local_port: int = 0
    remote_address: str = ""

    def to_dict(self) -> dict:
        return {
            "host": self.host,
            "port": self.port,
            "local_address": self.local_address,
            "local_port": self.local_port,
            "remote_address": self.remote_address,
        }


class TCPConnection:
    """Manages the TCP socket of one control session.

    Usage::

        conn = TCPConnection("ftp.example.com")
        conn.open()
        conn.writer.write(b"NOOP\\r\\n")
        conn.writer.flush()
        line = conn.reader.readline()
        conn.close()
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        self._host = host
        self._port = port
        self._timeout = timeout
        self._sock: socket.socket | None = None
        self._reader: BinaryIO | None = None
        self._writer: BinaryIO | None = None
        self._info = ConnectionInfo(host=host, port=port)

    @property
    def connected(self) -> bool:
        return self._sock is not None

    @property
    def info(self) -> ConnectionInfo:
        return self._info

    @property
    def reader(self) -> BinaryIO:
        if self._reader is None:
            raise ConnectionError("Not connected to server")
        return self._reader

    @property
    def writer(self) -> BinaryIO:
        if self._writer is None:
            raise ConnectionError("Not connected to server")
        return self._writer

    def open(self) -> ConnectionInfo:
        """Connect to the server.

        Returns:
            ConnectionInfo with the local and remote endpoints.

        Raises:
            ConnectionError: If the host cannot be resolved or reached.
        """
        if self._sock is not None:
            raise ConnectionError(f"Already connected to {self._host}:{self._port}")

        try:
            sock = socket.create_connection((self._host, self._port), timeout=self._timeout)
        except OSError as e:
            raise ConnectionError(
                f"Could not connect to {self._host}:{self._port}: {e}"
            ) from e

        local = sock.getsockname()
        remote = sock.getpeername()
        self._sock = sock
        self._reader = sock.makefile("rb")
        self._writer = sock.makefile("wb")
        self._info = ConnectionInfo(
            host=self._host,
            port=self._port,
            local_address=local[0],
            local_port=local[1],
            remote_address=remote[0],
        )

        logger.info(
            "Connected to %s:%s (%s)",
            self._host,
            self._port,
            self._info.remote_address,
        )
        return self._info

    def close(self) -> None:
        """Close the streams and the socket."""
        if self._sock is None:
            return

        try:
            # Shutdown wakes a recv blocked in another thread, which holds
            # the reader lock that closing the stream needs.
            try:
                self._sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                # Peer already gone
                pass
            for stream in (self._writer, self._reader):
                try:
                    stream.close()
                except OSError as e:
                    logger.warning("Error closing stream: %s", e)
        finally:
            self._sock.close()
            self._sock = None
            self._reader = None
            self._writer = None
            logger.info("Disconnected from %s:%s", self._host, self._port)
