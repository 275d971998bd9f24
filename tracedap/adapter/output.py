"""
Output relay: text for the client, wrapped as Output events.

Everything relayed goes out through :meth:`Session.send`, so the diagnostic
trace always holds at least what the client was shown.
"""

from __future__ import annotations

import contextlib
import io
import logging
import sys
from typing import TYPE_CHECKING

from tracedap.protocol.messages import OutputEvent

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tracedap.session import Session

logger = logging.getLogger(__name__)


class OutputRelay:
    def __init__(self, session: Session) -> None:
        self.session = session

    def emit(self, text: str, category: str = "console") -> None:
        """Send *text* as an Output event; dropped once the client disconnected."""
        if not text or self.session.disconnected:
            return
        logger.debug("Output [%s]: %r", category, text)
        self.session.send(OutputEvent(output=text, category=category))

    def stream(self, category: str) -> OutputStream:
        return OutputStream(self, category)

    @contextlib.contextmanager
    def capture_stdio(self) -> Iterator[None]:
        """Route ``sys.stdout``/``sys.stderr`` writes to Output events."""
        with contextlib.redirect_stdout(self.stream("stdout")), contextlib.redirect_stderr(
            self.stream("stderr")
        ):
            yield


class OutputStream(io.TextIOBase):
    """Text stream whose writes become Output events of one category."""

    def __init__(self, relay: OutputRelay, category: str) -> None:
        self.relay = relay
        self.category = category

    @property
    def encoding(self) -> str:
        return "utf-8"

    def writable(self) -> bool:
        return True

    def isatty(self) -> bool:
        return False

    def write(self, s: str) -> int:
        if self.closed:
            msg = "I/O operation on closed output stream"
            raise ValueError(msg)
        # Frames run while encoding the event must not become debuggee stops
        previous = sys.gettrace()
        sys.settrace(None)
        try:
            self.relay.emit(s, self.category)
        finally:
            sys.settrace(previous)
        return len(s)

    def flush(self) -> None:
        return None
