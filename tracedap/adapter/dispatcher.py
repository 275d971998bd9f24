"""
Request dispatcher: the loop that reads frames and routes requests.

The same loop serves two callers. The server runs it once at the top level;
the execution hook re-enters it every time the debuggee stops. Each run ends
with a :class:`~tracedap.core.stepping.ResumeAction`: a Step-class command or
Continue hands control back to a stopped debuggee, QUIT means the client
disconnected or closed the channel.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import Callable

from tracedap.adapter.output import OutputRelay
from tracedap.core.hook import ExecutionHook
from tracedap.core.introspection import Introspector
from tracedap.core.stepping import ResumeAction
from tracedap.errors import DebuggeeError
from tracedap.errors import FramingError
from tracedap.errors import LaunchError
from tracedap.errors import ProtocolError
from tracedap.errors import error_response_fields
from tracedap.protocol.messages import REQUEST_TYPES
from tracedap.protocol.messages import THREAD_ID
from tracedap.protocol.messages import ConfigurationDoneRequest
from tracedap.protocol.messages import ContinueRequest
from tracedap.protocol.messages import DisconnectRequest
from tracedap.protocol.messages import ExitedEvent
from tracedap.protocol.messages import InitializedEvent
from tracedap.protocol.messages import InitializeRequest
from tracedap.protocol.messages import LaunchRequest
from tracedap.protocol.messages import NextRequest
from tracedap.protocol.messages import Response
from tracedap.protocol.messages import ScopesRequest
from tracedap.protocol.messages import SetExceptionBreakpointsRequest
from tracedap.protocol.messages import StackTraceRequest
from tracedap.protocol.messages import StepInRequest
from tracedap.protocol.messages import StepOutRequest
from tracedap.protocol.messages import TerminatedEvent
from tracedap.protocol.messages import ThreadsRequest
from tracedap.protocol.messages import UnknownRequest
from tracedap.protocol.messages import VariablesRequest
from tracedap.session import SessionState

if TYPE_CHECKING:
    from tracedap.core.interpreter import PythonInterpreter
    from tracedap.protocol.messages import Request
    from tracedap.protocol.messages import RequestBase
    from tracedap.session import Session

logger = logging.getLogger(__name__)

Handler = Callable[[Any], "ResumeAction | None"]

_STEP_ACTIONS: dict[type[RequestBase], ResumeAction] = {
    StepInRequest: ResumeAction.STEP_IN,
    NextRequest: ResumeAction.NEXT,
    StepOutRequest: ResumeAction.STEP_OUT,
}

MAIN_THREAD_NAME = "Main Thread"


class RequestDispatcher:
    """Routes decoded requests to handlers bound to one session."""

    def __init__(
        self,
        session: Session,
        interpreter: PythonInterpreter,
        *,
        introspector: Introspector | None = None,
        relay: OutputRelay | None = None,
    ) -> None:
        self.session = session
        self.interpreter = interpreter
        self.introspector = introspector or Introspector()
        self.relay = relay or OutputRelay(session)

        self._handlers: dict[type[RequestBase], Handler] = {
            InitializeRequest: self._handle_initialize,
            LaunchRequest: self._handle_launch,
            StackTraceRequest: self._handle_stack_trace,
            ScopesRequest: self._handle_scopes,
            VariablesRequest: self._handle_variables,
            ThreadsRequest: self._handle_threads,
            DisconnectRequest: self._handle_disconnect,
            SetExceptionBreakpointsRequest: self._handle_set_exception_breakpoints,
            ConfigurationDoneRequest: self._handle_configuration_done,
            StepInRequest: self._handle_step,
            StepOutRequest: self._handle_step,
            NextRequest: self._handle_step,
            ContinueRequest: self._handle_continue,
            UnknownRequest: self._handle_unknown,
        }
        missing = [kind.__name__ for kind in REQUEST_TYPES if kind not in self._handlers]
        if missing:
            msg = f"No handler registered for: {', '.join(missing)}"
            raise TypeError(msg)

    # ---- Loop --------------------------------------------------------------

    def run(self) -> ResumeAction:
        """Serve requests until one resumes a stopped debuggee or ends the session.

        Raises:
            FramingError: The inbound stream is corrupt or was cut mid-frame.
        """
        session = self.session
        while True:
            payload = session.read_payload()
            if payload is None:
                logger.info("Client closed the channel")
                session.close()
                return ResumeAction.QUIT

            action = self.dispatch_payload(payload)
            if action is None:
                continue
            if action.resumes and session.current_context is None:
                logger.warning("Ignoring %s: the debuggee is not stopped", action.value)
                continue
            return action

    def dispatch_payload(self, payload: bytes) -> ResumeAction | None:
        try:
            request = self.session.codec.decode(payload)
        except ProtocolError as exc:
            self._reject_payload(exc)
            return None
        return self.dispatch(request)

    def dispatch(self, request: Request) -> ResumeAction | None:
        """Run the handler for *request*; handler errors become Error responses."""
        handler = self._handlers[type(request)]
        logger.debug("Handling %s (seq %d)", request.command, request.seq)
        try:
            return handler(request)
        except FramingError:
            raise
        except Exception as exc:
            message, body = error_response_fields(exc)
            logger.info("Request %s failed: %s", request.command, message)
            self.session.send(Response.error(request, message, body))
            return None

    def _reject_payload(self, error: ProtocolError) -> None:
        logger.warning("Rejected inbound message: %s", error)
        if error.sequence is None:
            # Nothing to correlate a response with
            self.relay.emit(f"{error.message}\n", "stderr")
            return
        message, body = error_response_fields(error)
        self.session.send(
            Response(
                request_seq=error.sequence,
                command=error.command or "",
                success=False,
                body=body,
                message=message,
            )
        )

    # ---- Lifecycle requests -----------------------------------------------

    def _handle_initialize(self, request: InitializeRequest) -> None:
        session = self.session
        if session.state >= SessionState.INITIALIZED:
            msg = "Debugger already initialized"
            raise ProtocolError(msg, command=request.command, sequence=request.seq)
        logger.info("Initialize from %s", request.client_id or "unknown client")
        session.send(InitializedEvent())
        session.send(Response.ok(request, {"supportsConfigurationDoneRequest": True}))
        session.transition_to(SessionState.INITIALIZED)
        self.relay.emit("Debugger initialized\n")

    def _handle_launch(self, request: LaunchRequest) -> ResumeAction | None:
        session = self.session
        if session.state is not SessionState.INITIALIZED:
            msg = "Debugger not initialized or in an unexpected state"
            raise ProtocolError(msg, command=request.command, sequence=request.seq)

        try:
            program = self.interpreter.load(request.program)
        except LaunchError as exc:
            self.relay.emit(
                f"Failed to launch {request.program} due to error: {exc.diagnostic}\n", "stderr"
            )
            _, body = error_response_fields(exc)
            session.send(Response.error(request, "Launch failed", body))
            return None

        session.transition_to(SessionState.LAUNCHED)
        session.send(Response.ok(request))
        session.transition_to(SessionState.RUNNING)

        hook = ExecutionHook(session, self.run)
        try:
            with self.relay.capture_stdio():
                exit_code = self.interpreter.run(
                    program, hook, args=request.args, no_debug=request.no_debug
                )
        except DebuggeeError as exc:
            logger.info("%s", exc.message)
            self.relay.emit("Program terminated with error\n", "stderr")
            self.relay.emit(exc.diagnostic, "stderr")
            exit_code = 1

        if session.fatal_error is not None:
            raise session.fatal_error
        if session.disconnected:
            return ResumeAction.QUIT

        session.send(ExitedEvent(exit_code=exit_code))
        session.send(TerminatedEvent())
        session.transition_to(SessionState.TERMINATED)
        return None

    def _handle_disconnect(self, request: DisconnectRequest) -> ResumeAction:
        self.session.send(Response.ok(request))
        self.session.close()
        return ResumeAction.QUIT

    def _handle_configuration_done(self, request: ConfigurationDoneRequest) -> None:
        self.session.send(Response.ok(request))

    def _handle_set_exception_breakpoints(self, request: SetExceptionBreakpointsRequest) -> None:
        if request.filters:
            logger.debug("Exception filters accepted but not applied: %s", request.filters)
        self.session.send(Response.ok(request))

    def _handle_unknown(self, request: UnknownRequest) -> None:
        msg = f"Unsupported command: {request.command}"
        raise ProtocolError(msg, command=request.command, sequence=request.seq)

    # ---- Introspection requests -------------------------------------------

    def _handle_threads(self, request: ThreadsRequest) -> None:
        threads = [{"id": THREAD_ID, "name": MAIN_THREAD_NAME}]
        self.session.send(Response.ok(request, {"threads": threads}))

    def _handle_stack_trace(self, request: StackTraceRequest) -> None:
        frames = self.introspector.stack_trace(self.session.current_context, request.levels)
        self.session.send(
            Response.ok(request, {"stackFrames": frames, "totalFrames": len(frames)})
        )

    def _handle_scopes(self, request: ScopesRequest) -> None:
        scopes = self.introspector.scopes(self.session.current_context, request.frame_id)
        self.session.send(Response.ok(request, {"scopes": scopes}))

    def _handle_variables(self, request: VariablesRequest) -> None:
        variables = self.introspector.variables(
            self.session.current_context, request.variables_reference
        )
        self.session.send(Response.ok(request, {"variables": variables}))

    # ---- Execution control -------------------------------------------------

    def _handle_step(self, request: StepInRequest | StepOutRequest | NextRequest) -> ResumeAction:
        self.session.send(Response.ok(request))
        return _STEP_ACTIONS[type(request)]

    def _handle_continue(self, request: ContinueRequest) -> ResumeAction:
        self.session.send(Response.ok(request, {"allThreadsContinued": True}))
        return ResumeAction.CONTINUE
