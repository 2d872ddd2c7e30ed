"""Shared fixtures: an in-memory connection for the control channel."""

from __future__ import annotations

import io
import threading

import pytest

from ftp_control_mcp.protocol.channel import ControlChannel


class FakeConnection:
    """Connection backed by byte buffers instead of a socket."""

    def __init__(self, data: bytes = b"") -> None:
        self.reader = io.BytesIO(data)
        self.writer = io.BytesIO()
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1


class ChunkedStream:
    """Read-only stream handing out one predefined chunk per ``read`` call."""

    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = list(chunks)

    def read(self, size: int = -1) -> bytes:
        if not self._chunks:
            return b""
        return self._chunks.pop(0)


class RecordingObserver:
    """Appends ``(name, direction, line)`` to a shared event list."""

    def __init__(self, name: str, events: list) -> None:
        self.name = name
        self.events = events

    def on_sent(self, line: str) -> None:
        self.events.append((self.name, "sent", line))

    def on_received(self, line: str) -> None:
        self.events.append((self.name, "received", line))


@pytest.fixture
def make_channel():
    """Build a channel whose server side sends the given reply lines."""

    def _make(*lines: str, encoding: str = "utf-8") -> tuple[ControlChannel, FakeConnection]:
        data = "".join(line + "\r\n" for line in lines).encode(encoding)
        conn = FakeConnection(data)
        return ControlChannel(conn, encoding=encoding), conn

    return _make


class BlockingStream:
    """Stream whose first read blocks until ``release`` is set."""

    def __init__(self, data: bytes) -> None:
        self.reading = threading.Event()
        self.release = threading.Event()
        self._data = data

    def read(self, size: int = -1) -> bytes:
        self.reading.set()
        self.release.wait(timeout=5.0)
        data, self._data = self._data, b""
        return data


@pytest.fixture
def fake_connection():
    """Factory for in-memory connections."""
    return FakeConnection


@pytest.fixture
def chunked_stream():
    """Factory for streams returning one chunk per read."""
    return ChunkedStream


@pytest.fixture
def blocking_stream():
    """Factory for streams that block until released."""
    return BlockingStream


@pytest.fixture
def recording_observer():
    """Factory for observers appending to a shared event list."""
    return RecordingObserver
