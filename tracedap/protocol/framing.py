"""Content-Length framing for the debug adapter byte stream.

Each message on the wire is::

    Content-Length: <decimal>\\r\\n
    \\r\\n
    <payload bytes>

The reader commits to consuming exactly the announced number of bytes. A
missing header, a missing separator line or a short payload raises
:class:`~tracedap.errors.FramingError`.
"""

from __future__ import annotations

import logging
from typing import BinaryIO
from typing import Callable

from tracedap.errors import FramingError

logger = logging.getLogger(__name__)

HEADER_NAME = b"Content-Length"
HEADER_TERMINATOR = b"\r\n"


def pack_frame(payload: bytes) -> bytes:
    """Prefix *payload* with its Content-Length header and separator."""
    header = HEADER_NAME + b": " + str(len(payload)).encode("ascii")
    return header + HEADER_TERMINATOR + HEADER_TERMINATOR + payload


def parse_header(line: bytes) -> int:
    """Return the announced payload length from a header line."""
    name, sep, value = line.rstrip(b"\r\n").partition(b":")
    if not sep or name.strip() != HEADER_NAME:
        msg = f"Expected Content-Length header, got {line[:64]!r}"
        raise FramingError(msg)
    value = value.strip()
    if not value.isdigit():
        msg = f"Invalid Content-Length value: {value[:32]!r}"
        raise FramingError(msg)
    return int(value)


def read_exact(stream: BinaryIO, n: int) -> bytes:
    """Read up to n bytes, stopping early only at end of stream."""
    chunks = bytearray()
    while len(chunks) < n:
        chunk = stream.read(n - len(chunks))
        if not chunk:
            break
        chunks.extend(chunk)
    return bytes(chunks)


class FrameReader:
    """Reads length-prefixed frames from a binary stream.

    When *set_timeout* is given, waiting for a header blocks indefinitely and
    the rest of the frame must arrive within *read_timeout* seconds.
    """

    def __init__(
        self,
        stream: BinaryIO,
        *,
        read_timeout: float | None = None,
        set_timeout: Callable[[float | None], None] | None = None,
    ) -> None:
        self.stream = stream
        self.read_timeout = read_timeout
        self._set_timeout = set_timeout

    def _arm(self, timeout: float | None) -> None:
        if self._set_timeout is not None:
            self._set_timeout(timeout)

    def _readline(self) -> bytes:
        try:
            return self.stream.readline()
        except TimeoutError as exc:
            msg = "Timed out waiting for frame data"
            raise FramingError(msg, cause=exc) from exc

    def read_frame(self) -> bytes | None:
        """Read one frame payload.

        Returns None when the stream ends cleanly before a header starts.
        """
        self._arm(None)
        header = self._readline()
        if not header:
            return None
        self._arm(self.read_timeout)

        length = parse_header(header)

        separator = self._readline()
        if not separator or separator.strip(b"\r\n"):
            msg = "Missing blank separator line after Content-Length header"
            raise FramingError(msg, expected=length)

        try:
            payload = read_exact(self.stream, length)
        except TimeoutError as exc:
            msg = f"Timed out reading {length} payload bytes"
            raise FramingError(msg, expected=length, cause=exc) from exc

        if len(payload) < length:
            msg = f"Stream ended after {len(payload)} of {length} payload bytes"
            raise FramingError(msg, expected=length, received=len(payload))
        return payload


class FrameWriter:
    """Writes length-prefixed frames to a binary stream, flushing each one."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def write_frame(self, payload: bytes) -> None:
        try:
            self.stream.write(pack_frame(payload))
            self.stream.flush()
        except OSError as exc:
            msg = "Lost the client channel while writing a frame"
            raise FramingError(msg, cause=exc) from exc
