"""
Client channels: the duplex byte stream the adapter speaks over.

``stdio`` uses the process's binary stdin/stdout. ``tcp`` listens on
``host:port``, accepts a single client and serves it until it goes away.
"""

from __future__ import annotations

import contextlib
import logging
import socket
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import BinaryIO

from tracedap.protocol.framing import FrameReader
from tracedap.protocol.framing import FrameWriter

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tracedap.config import TransportConfig

logger = logging.getLogger(__name__)


@dataclass
class Channel:
    reader: FrameReader
    writer: FrameWriter


@contextlib.contextmanager
def open_stdio_channel(
    stdin: BinaryIO | None = None, stdout: BinaryIO | None = None
) -> Iterator[Channel]:
    # Bound once, before any debuggee gets a chance to replace sys.stdout
    rfile = stdin or sys.stdin.buffer
    wfile = stdout or sys.stdout.buffer
    logger.info("Serving on stdio")
    yield Channel(FrameReader(rfile), FrameWriter(wfile))


@contextlib.contextmanager
def open_tcp_channel(config: TransportConfig) -> Iterator[Channel]:
    """Accept one client on ``config.host:config.port``."""
    if config.port is None:
        msg = "TCP transport requires a port"
        raise ValueError(msg)
    with socket.create_server((config.host, config.port)) as server:
        logger.info("Listening on %s:%d", config.host, server.getsockname()[1])
        sock, peer = server.accept()
    logger.info("Client connected from %s:%d", peer[0], peer[1])
    with sock:
        rfile = sock.makefile("rb")
        wfile = sock.makefile("wb")
        try:
            reader = FrameReader(
                rfile, read_timeout=config.read_timeout, set_timeout=sock.settimeout
            )
            yield Channel(reader, FrameWriter(wfile))
        finally:
            with contextlib.suppress(OSError):
                wfile.close()
            rfile.close()


def open_channel(config: TransportConfig) -> contextlib.AbstractContextManager[Channel]:
    if config.transport == "tcp":
        return open_tcp_channel(config)
    return open_stdio_channel()
