"""Exceptions raised by the control channel."""

from __future__ import annotations


class IllegalReplyError(Exception):
    """The server broke the reply framing rules.

    Raised for a short first line, a first line without a leading numeric
    code, a continuation line declaring a different code, or a separator
    that is neither a space nor a hyphen.
    """

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"Illegal reply line {line!r}: {reason}")
        self.line = line
        self.reason = reason


class UnsupportedEncodingError(LookupError):
    """The requested text encoding is not known to the codec registry."""

    def __init__(self, encoding: str) -> None:
        super().__init__(f"Unsupported encoding: {encoding!r}")
        self.encoding = encoding


class ConnectionClosedError(ConnectionError):
    """The server closed the stream before a complete reply arrived."""


class ChannelClosedError(ConnectionError):
    """The channel was used after ``close()``."""


class ChannelBusyError(RuntimeError):
    """Another call is already in progress on the channel."""
