"""
The execution hook: what runs when the debuggee reaches an inspectable point.

The interpreter calls the hook synchronously from inside the debuggee's own
call stack. The hook announces the stop, pushes the context onto the
session's stop stack and re-enters the request dispatch loop until the client
asks to resume or goes away.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Callable

from tracedap.core.stepping import ResumeAction
from tracedap.core.stepping import StopReason
from tracedap.errors import FramingError
from tracedap.protocol.messages import StoppedEvent
from tracedap.protocol.messages import ThreadEvent
from tracedap.session import SessionState

if TYPE_CHECKING:
    from tracedap.core.context import ExecutionContext
    from tracedap.session import Session

logger = logging.getLogger(__name__)


class ExecutionHook:
    """Callable handed to the interpreter for the duration of a launch."""

    def __init__(self, session: Session, dispatch: Callable[[], ResumeAction]) -> None:
        self.session = session
        self.dispatch = dispatch

    def __call__(self, context: ExecutionContext) -> ResumeAction:
        session = self.session
        if session.is_terminated:
            return ResumeAction.QUIT

        reason = None
        try:
            if session.state is SessionState.RUNNING:
                reason = self._announce_stop()
                session.transition_to(SessionState.STOPPED)
            with session.suspended(context, reason):
                action = self.dispatch()
        except FramingError as exc:
            logger.error("Client channel failed while stopped: %s", exc)
            session.fatal_error = exc
            session.close()
            return ResumeAction.QUIT

        if action is ResumeAction.QUIT or session.is_terminated:
            return ResumeAction.QUIT
        session.transition_to(SessionState.RUNNING)
        return action

    def _announce_stop(self) -> StopReason:
        session = self.session
        if session.thread_event_sent:
            reason = StopReason.STEP
        else:
            session.send(ThreadEvent(started=True))
            session.thread_event_sent = True
            reason = StopReason.ENTRY
        session.send(StoppedEvent(reason=reason.value))
        logger.debug("Stopped (%s)", reason.value)
        return reason
