"""Debug session state.

One :class:`Session` value is created per client connection and threaded
through every request handler and the execution hook. It owns the lifecycle
state, the emit-once thread event flag, the outbound channel and the stack of
stopped contexts the debuggee is currently suspended in.

Lifecycle::

    BIRTH -> INITIALIZED -> LAUNCHED -> RUNNING <-> STOPPED -> TERMINATED

TERMINATED is absorbing and reachable from every other state.

With the bdb tracer the stop stack holds at most one entry: the debuggee only
runs inside Launch, and Launch is refused once the session left INITIALIZED,
so a stopped debuggee never starts a second nested run.
:data:`MAX_NESTED_STOPS` bounds interpreters whose hooks could re-enter.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING
from typing import ClassVar

from tracedap.errors import TracedapError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tracedap.core.context import ExecutionContext
    from tracedap.core.stepping import StopReason
    from tracedap.errors import FramingError
    from tracedap.protocol.codec import ProtocolCodec
    from tracedap.protocol.framing import FrameReader
    from tracedap.protocol.framing import FrameWriter
    from tracedap.protocol.messages import OutboundMessage

logger = logging.getLogger(__name__)
trace_logger = logging.getLogger("tracedap.trace")

# Stops nest once per hook activation that re-enters the dispatch loop.
MAX_NESTED_STOPS = 32


class SessionState(IntEnum):
    """Lifecycle states, ordered so guards can compare them."""

    BIRTH = 1
    INITIALIZED = 2
    LAUNCHED = 3
    RUNNING = 4
    STOPPED = 5
    TERMINATED = 6


class LifecycleTransitionError(TracedapError):
    """Raised when an invalid lifecycle state transition is attempted."""

    def __init__(self, from_state: SessionState, to_state: SessionState) -> None:
        super().__init__(
            f"Invalid lifecycle transition: {from_state.name} -> {to_state.name}",
            error_code="LifecycleTransitionError",
            details={"from": from_state.name, "to": to_state.name},
        )
        self.from_state = from_state
        self.to_state = to_state


@dataclass(frozen=True)
class StoppedContext:
    """One suspension of the debuggee: where it stopped and why."""

    context: ExecutionContext
    reason: StopReason | None = None


class Session:
    """State shared by the dispatcher and the execution hook."""

    _VALID_TRANSITIONS: ClassVar[dict[SessionState, set[SessionState]]] = {
        SessionState.BIRTH: {SessionState.INITIALIZED, SessionState.TERMINATED},
        SessionState.INITIALIZED: {SessionState.LAUNCHED, SessionState.TERMINATED},
        SessionState.LAUNCHED: {SessionState.RUNNING, SessionState.TERMINATED},
        SessionState.RUNNING: {SessionState.STOPPED, SessionState.TERMINATED},
        SessionState.STOPPED: {SessionState.RUNNING, SessionState.TERMINATED},
        SessionState.TERMINATED: set(),
    }

    def __init__(
        self,
        reader: FrameReader,
        writer: FrameWriter,
        codec: ProtocolCodec,
        *,
        trace: logging.Logger | None = None,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.codec = codec
        self.trace = trace or trace_logger

        self._state = SessionState.BIRTH
        self.thread_event_sent = False
        self.disconnected = False
        self.fatal_error: FramingError | None = None
        self._stops: list[StoppedContext] = []

    # ---- Lifecycle ---------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_terminated(self) -> bool:
        return self._state is SessionState.TERMINATED

    def transition_to(self, new_state: SessionState) -> None:
        """Move to *new_state*.

        Raises:
            LifecycleTransitionError: If the transition is invalid.
        """
        if new_state not in self._VALID_TRANSITIONS[self._state]:
            raise LifecycleTransitionError(self._state, new_state)
        logger.debug("Session: %s -> %s", self._state.name, new_state.name)
        self._state = new_state

    def close(self) -> None:
        """End the session after a disconnect or loss of the client."""
        self.disconnected = True
        if not self.is_terminated:
            self.transition_to(SessionState.TERMINATED)

    # ---- Stopped contexts --------------------------------------------------

    @property
    def current_context(self) -> ExecutionContext | None:
        """The execution context of the innermost stop, if stopped."""
        return self._stops[-1].context if self._stops else None

    @property
    def stop_depth(self) -> int:
        return len(self._stops)

    @contextmanager
    def suspended(
        self, context: ExecutionContext, reason: StopReason | None = None
    ) -> Iterator[StoppedContext]:
        """Make *context* the inspectable stop for the duration of the block."""
        if len(self._stops) >= MAX_NESTED_STOPS:
            msg = f"More than {MAX_NESTED_STOPS} nested stops"
            raise TracedapError(msg, details={"stop_depth": len(self._stops)})
        stop = StoppedContext(context, reason)
        self._stops.append(stop)
        try:
            yield stop
        finally:
            self._stops.pop()

    # ---- Channel -----------------------------------------------------------

    def read_payload(self) -> bytes | None:
        """Block until the next frame arrives; None once the client is gone."""
        payload = self.reader.read_frame()
        if payload is not None:
            self.trace.info(
                "--> Content-Length: %d\r\n\r\n%s",
                len(payload),
                payload.decode("utf-8", errors="replace"),
            )
        return payload

    def send(self, message: OutboundMessage) -> None:
        """Encode and write one response or event, mirroring it to the trace."""
        payload = self.codec.encode(message)
        self.trace.info("<-- %s", payload.decode("utf-8"))
        self.writer.write_frame(payload)
