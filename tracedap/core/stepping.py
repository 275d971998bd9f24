"""
Stop reasons and resume actions exchanged between the hook and the dispatcher.
"""

from __future__ import annotations

from enum import Enum


class StopReason(str, Enum):
    """DAP stop reasons reported by this adapter."""

    ENTRY = "entry"
    STEP = "step"


class ResumeAction(str, Enum):
    """How the debuggee continues once the dispatch loop hands control back.

    - STEP_IN: stop at the next line event anywhere.
    - NEXT: stop at the next line in the current frame or a caller.
    - STEP_OUT: stop once the current frame has returned.
    - CONTINUE: run on without further stops.
    - QUIT: the client is gone; unwind the debuggee.
    """

    STEP_IN = "stepIn"
    NEXT = "next"
    STEP_OUT = "stepOut"
    CONTINUE = "continue"
    QUIT = "quit"

    @property
    def resumes(self) -> bool:
        return self is not ResumeAction.QUIT


__all__ = ["ResumeAction", "StopReason"]
