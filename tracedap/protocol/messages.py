"""
Tagged message types exchanged with the debugging client.

Requests are decoded into one dataclass per command; responses and events are
built by handlers and encoded by :mod:`tracedap.protocol.codec`. The set of
request kinds is closed: :data:`REQUEST_TYPES` lists every variant and the
dispatcher refuses to start unless it has a handler for each one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import ClassVar
from typing import Union

THREAD_ID = 1


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RequestBase:
    seq: int

    COMMAND: ClassVar[str] = ""

    @property
    def command(self) -> str:
        return self.COMMAND


@dataclass(frozen=True)
class InitializeRequest(RequestBase):
    COMMAND: ClassVar[str] = "initialize"

    client_id: str | None = None
    adapter_id: str | None = None


@dataclass(frozen=True)
class LaunchRequest(RequestBase):
    COMMAND: ClassVar[str] = "launch"

    program: str = ""
    args: tuple[str, ...] = ()
    no_debug: bool = False


@dataclass(frozen=True)
class StackTraceRequest(RequestBase):
    """``levels`` of None means no client-side bound."""

    COMMAND: ClassVar[str] = "stackTrace"

    levels: int | None = None


@dataclass(frozen=True)
class ScopesRequest(RequestBase):
    COMMAND: ClassVar[str] = "scopes"

    frame_id: int = 0


@dataclass(frozen=True)
class VariablesRequest(RequestBase):
    COMMAND: ClassVar[str] = "variables"

    variables_reference: int = 0


@dataclass(frozen=True)
class ThreadsRequest(RequestBase):
    COMMAND: ClassVar[str] = "threads"


@dataclass(frozen=True)
class DisconnectRequest(RequestBase):
    COMMAND: ClassVar[str] = "disconnect"


@dataclass(frozen=True)
class SetExceptionBreakpointsRequest(RequestBase):
    COMMAND: ClassVar[str] = "setExceptionBreakpoints"

    filters: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConfigurationDoneRequest(RequestBase):
    COMMAND: ClassVar[str] = "configurationDone"


@dataclass(frozen=True)
class StepInRequest(RequestBase):
    COMMAND: ClassVar[str] = "stepIn"


@dataclass(frozen=True)
class StepOutRequest(RequestBase):
    COMMAND: ClassVar[str] = "stepOut"


@dataclass(frozen=True)
class NextRequest(RequestBase):
    COMMAND: ClassVar[str] = "next"


@dataclass(frozen=True)
class ContinueRequest(RequestBase):
    COMMAND: ClassVar[str] = "continue"


@dataclass(frozen=True)
class UnknownRequest(RequestBase):
    raw_command: str = ""

    @property
    def command(self) -> str:
        return self.raw_command


Request = Union[
    InitializeRequest,
    LaunchRequest,
    StackTraceRequest,
    ScopesRequest,
    VariablesRequest,
    ThreadsRequest,
    DisconnectRequest,
    SetExceptionBreakpointsRequest,
    ConfigurationDoneRequest,
    StepInRequest,
    StepOutRequest,
    NextRequest,
    ContinueRequest,
    UnknownRequest,
]

REQUEST_TYPES: tuple[type[RequestBase], ...] = (
    InitializeRequest,
    LaunchRequest,
    StackTraceRequest,
    ScopesRequest,
    VariablesRequest,
    ThreadsRequest,
    DisconnectRequest,
    SetExceptionBreakpointsRequest,
    ConfigurationDoneRequest,
    StepInRequest,
    StepOutRequest,
    NextRequest,
    ContinueRequest,
    UnknownRequest,
)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Response:
    request_seq: int
    command: str
    success: bool
    body: dict[str, Any] | None = None
    message: str | None = None

    @classmethod
    def ok(cls, request: RequestBase, body: dict[str, Any] | None = None) -> Response:
        return cls(request.seq, request.command, True, body)

    @classmethod
    def error(
        cls,
        request: RequestBase,
        message: str,
        body: dict[str, Any] | None = None,
    ) -> Response:
        return cls(request.seq, request.command, False, body, message)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EventBase:
    EVENT: ClassVar[str] = ""

    def body(self) -> dict[str, Any] | None:
        return None


@dataclass(frozen=True)
class InitializedEvent(EventBase):
    EVENT: ClassVar[str] = "initialized"


@dataclass(frozen=True)
class StoppedEvent(EventBase):
    EVENT: ClassVar[str] = "stopped"

    reason: str = "step"
    thread_id: int = THREAD_ID

    def body(self) -> dict[str, Any]:
        return {"reason": self.reason, "threadId": self.thread_id, "allThreadsStopped": True}


@dataclass(frozen=True)
class ThreadEvent(EventBase):
    EVENT: ClassVar[str] = "thread"

    started: bool = True
    thread_id: int = THREAD_ID

    def body(self) -> dict[str, Any]:
        return {"reason": "started" if self.started else "exited", "threadId": self.thread_id}


@dataclass(frozen=True)
class OutputEvent(EventBase):
    EVENT: ClassVar[str] = "output"

    output: str = ""
    category: str = "console"

    def body(self) -> dict[str, Any]:
        return {"category": self.category, "output": self.output}


@dataclass(frozen=True)
class ExitedEvent(EventBase):
    EVENT: ClassVar[str] = "exited"

    exit_code: int = 0

    def body(self) -> dict[str, Any]:
        return {"exitCode": self.exit_code}


@dataclass(frozen=True)
class TerminatedEvent(EventBase):
    EVENT: ClassVar[str] = "terminated"


Event = Union[
    InitializedEvent,
    StoppedEvent,
    ThreadEvent,
    OutputEvent,
    ExitedEvent,
    TerminatedEvent,
]

OutboundMessage = Union[Response, Event]
