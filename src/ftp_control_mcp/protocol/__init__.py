"""Protocol layer: line transport, reply framing, and communication observers."""

from .channel import CommunicationObserver, Connection, ControlChannel
from .errors import (
    ChannelBusyError,
    ChannelClosedError,
    ConnectionClosedError,
    IllegalReplyError,
    UnsupportedEncodingError,
)
from .lines import LineReader, LineWriter
from .observers import LoggingObserver
from .reply import Reply
