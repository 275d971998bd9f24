from tracedap.session.state import MAX_NESTED_STOPS
from tracedap.session.state import LifecycleTransitionError
from tracedap.session.state import Session
from tracedap.session.state import SessionState
from tracedap.session.state import StoppedContext

__all__ = [
    "MAX_NESTED_STOPS",
    "LifecycleTransitionError",
    "Session",
    "SessionState",
    "StoppedContext",
]
