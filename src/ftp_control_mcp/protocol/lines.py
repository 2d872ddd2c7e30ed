"""Text line transport over a duplex byte stream.

Control connection lines look like::

    +------------------+-----------+
    |  encoded text    |  CR  LF   |
    +------------------+-----------+

- Outgoing lines are encoded with the session encoding and always end in CRLF.
- Incoming lines are split on LF; a CR right before the LF is dropped too,
  so servers sending bare LF still work.
- The encoding can be switched mid-session (``OPTS UTF8 ON`` and friends).
  Text that was already decoded when the switch happens is kept as is.
"""

from __future__ import annotations

import codecs
import logging
from typing import BinaryIO

from .errors import UnsupportedEncodingError

logger = logging.getLogger(__name__)

LINE_TERMINATOR = "\r\n"
DEFAULT_ENCODING = "utf-8"
READ_CHUNK_SIZE = 4096


def resolve_encoding(name: str) -> str:
    """Return the canonical codec name for ``name``.

    Raises:
        UnsupportedEncodingError: If ``name`` is unknown or is not a text
            encoding (``base64``, ``zlib`` and the like).
    """
    try:
        "".encode(name)
        return codecs.lookup(name).name
    except (LookupError, ValueError) as e:
        raise UnsupportedEncodingError(name) from e


class LineReader:
    """Reads decoded text lines from a binary stream.

    Bytes are decoded as soon as they come off the stream, so a later
    :meth:`change_encoding` only applies to bytes that have not been read yet.
    """

    def __init__(self, stream: BinaryIO, encoding: str = DEFAULT_ENCODING) -> None:
        self._stream = stream
        self._encoding = resolve_encoding(encoding)
        self._decoder = codecs.getincrementaldecoder(self._encoding)(errors="replace")
        self._pending = ""
        self._eof = False

    @property
    def encoding(self) -> str:
        return self._encoding

    def change_encoding(self, name: str) -> None:
        encoding = resolve_encoding(name)
        # Bytes the old decoder is still holding (half of a multi-byte
        # sequence) have not been decoded yet; hand them to the new one.
        undecoded, _ = self._decoder.getstate()
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._encoding = encoding
        if undecoded:
            self._pending += self._decoder.decode(undecoded)
        logger.debug("Reader encoding set to %s", encoding)

    def read_line(self) -> str | None:
        """Block until a full line is available and return it.

        Returns:
            The line without its terminator, or ``None`` once the stream has
            ended. An unterminated fragment left at end of stream is
            returned as a last line before ``None``.
        """
        while True:
            index = self._pending.find("\n")
            if index >= 0:
                line = self._pending[:index]
                self._pending = self._pending[index + 1 :]
                return line[:-1] if line.endswith("\r") else line

            if self._eof:
                if not self._pending:
                    return None
                line, self._pending = self._pending, ""
                return line[:-1] if line.endswith("\r") else line

            self._fill()

    def _fill(self) -> None:
        read1 = getattr(self._stream, "read1", None)
        if read1 is not None:
            chunk = read1(READ_CHUNK_SIZE)
        else:
            chunk = self._stream.read(READ_CHUNK_SIZE)

        if chunk:
            self._pending += self._decoder.decode(chunk)
        else:
            self._eof = True
            self._pending += self._decoder.decode(b"", final=True)


class LineWriter:
    """Writes text lines, CRLF-terminated, to a binary stream."""

    def __init__(self, stream: BinaryIO, encoding: str = DEFAULT_ENCODING) -> None:
        self._stream = stream
        self._encoding = resolve_encoding(encoding)

    @property
    def encoding(self) -> str:
        return self._encoding

    def change_encoding(self, name: str) -> None:
        self._encoding = resolve_encoding(name)
        logger.debug("Writer encoding set to %s", self._encoding)

    def write_line(self, text: str) -> None:
        """Encode ``text``, append CRLF, write it in one call and flush.

        Characters the encoding cannot represent are sent as ``?``.

        Raises:
            OSError: If the write or flush fails.
        """
        data = (text + LINE_TERMINATOR).encode(self._encoding, errors="replace")
        self._stream.write(data)
        self._stream.flush()
