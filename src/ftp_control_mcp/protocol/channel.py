"""Control channel: sends command lines and reads framed replies.

Reply framing (RFC 959 section 4.2)::

    331 Please specify the password.        single-line reply

    250-First line.                         multi-line reply: every line but
    250-Second line.                        the last has a hyphen after the
    250 End.                                code, the last one a space

Lines inside a multi-line reply that do not start with a code are kept
verbatim as message lines. Lines are only checked for framing; what a
code means is left to the caller.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Protocol

from .errors import (
    ChannelBusyError,
    ChannelClosedError,
    ConnectionClosedError,
    IllegalReplyError,
)
from .lines import DEFAULT_ENCODING, LineReader, LineWriter, resolve_encoding
from .reply import Reply

logger = logging.getLogger(__name__)

CODE_LENGTH = 3


class Connection(Protocol):
    """Duplex byte stream the channel runs on."""

    @property
    def reader(self) -> BinaryIO: ...

    @property
    def writer(self) -> BinaryIO: ...

    def close(self) -> None: ...


class CommunicationObserver(Protocol):
    """Receives every raw line crossing the channel, in wire order."""

    def on_sent(self, line: str) -> None: ...

    def on_received(self, line: str) -> None: ...


def _parse_code(line: str) -> int | None:
    prefix = line[:CODE_LENGTH]
    if len(prefix) == CODE_LENGTH and prefix.isascii() and prefix.isdigit():
        return int(prefix)
    return None


class ControlChannel:
    """Command/reply channel over a :class:`Connection`.

    The channel is meant for one owner at a time. Overlapping calls to
    :meth:`send_command`, :meth:`read_reply` or :meth:`change_encoding`
    (from another thread, or from inside an observer callback) raise
    :class:`ChannelBusyError`.

    Observers are notified in registration order. Each notification pass
    works on the observer list as it was when the pass started: an observer
    added or removed from inside a callback only sees the change from the
    next line on.

    Usage::

        with ControlChannel(conn, encoding="latin-1") as channel:
            greeting = channel.read_reply()
            channel.send_command("USER anonymous")
            reply = channel.read_reply()
    """

    def __init__(self, connection: Connection, encoding: str = DEFAULT_ENCODING) -> None:
        self._connection = connection
        self._reader = LineReader(connection.reader, encoding)
        self._writer = LineWriter(connection.writer, encoding)
        self._observers: tuple[CommunicationObserver, ...] = ()
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> ControlChannel:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def encoding(self) -> str:
        return self._writer.encoding

    @property
    def observers(self) -> tuple[CommunicationObserver, ...]:
        return self._observers

    # ─── OBSERVERS ────────────────────────────────────────────────────

    def add_observer(self, observer: CommunicationObserver) -> None:
        self._observers = (*self._observers, observer)

    def remove_observer(self, observer: CommunicationObserver) -> None:
        """Unregister ``observer``. Unknown observers are ignored."""
        observers = list(self._observers)
        if observer in observers:
            observers.remove(observer)
            self._observers = tuple(observers)

    # ─── COMMANDS AND REPLIES ─────────────────────────────────────────

    def send_command(self, command: str) -> None:
        """Write one command line and notify observers.

        No reply is read; pair it with :meth:`read_reply` as many times as
        the command produces replies.

        Raises:
            ChannelClosedError: If the channel was closed.
            OSError: If the write fails.
        """
        with self._owned():
            self._writer.write_line(command)
            for observer in self._observers:
                observer.on_sent(command)

    def read_reply(self) -> Reply:
        """Read lines until one complete reply has arrived.

        Returns:
            The reply code and its message lines, separators stripped.

        Raises:
            IllegalReplyError: If a line breaks the framing rules.
            ConnectionClosedError: If the stream ends before the reply does.
            ChannelClosedError: If the channel was closed.
            OSError: If the read fails.
        """
        with self._owned():
            code = 0
            messages: list[str] = []
            while True:
                line = self._read_line()
                length = len(line)
                if code == 0 and length < CODE_LENGTH:
                    raise IllegalReplyError(line, "line is too short for a reply code")

                aux = _parse_code(line)
                if aux is None:
                    if code == 0:
                        raise IllegalReplyError(line, "line does not start with a reply code")
                    aux = 0

                if code != 0 and aux != 0 and aux != code:
                    raise IllegalReplyError(
                        line, f"code {aux:03d} inside a {code:03d} reply"
                    )

                if code == 0:
                    code = aux

                if aux != 0 and length > CODE_LENGTH:
                    separator = line[CODE_LENGTH]
                    if separator == " ":
                        messages.append(line[CODE_LENGTH + 1 :])
                        break
                    if separator == "-":
                        messages.append(line[CODE_LENGTH + 1 :])
                        continue
                    raise IllegalReplyError(line, f"invalid separator {separator!r}")

                messages.append(line)

        logger.debug("Reply %03d (%d lines)", code, len(messages))
        return Reply(code=code, messages=tuple(messages))

    def change_encoding(self, name: str) -> None:
        """Switch both directions to another text encoding.

        Raises:
            UnsupportedEncodingError: If ``name`` is not a known text
                encoding. Neither direction is changed in that case.
        """
        with self._owned():
            encoding = resolve_encoding(name)
            self._reader.change_encoding(encoding)
            self._writer.change_encoding(encoding)
        logger.info("Control channel encoding changed to %s", encoding)

    def close(self) -> None:
        """Close the underlying connection, ignoring any error it raises."""
        if self._closed:
            return
        self._closed = True
        try:
            self._connection.close()
        except Exception as e:
            logger.debug("Ignored error while closing connection: %s", e)

    # ─── INTERNALS ────────────────────────────────────────────────────

    @contextmanager
    def _owned(self) -> Iterator[None]:
        if self._closed:
            raise ChannelClosedError("Control channel is closed")
        if not self._lock.acquire(blocking=False):
            raise ChannelBusyError("Another call is in progress on this channel")
        try:
            yield
        finally:
            self._lock.release()

    def _read_line(self) -> str:
        line = self._reader.read_line()
        if line is None:
            raise ConnectionClosedError("Connection closed by server")
        for observer in self._observers:
            observer.on_received(line)
        return line
