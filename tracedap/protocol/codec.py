"""
Debug Adapter Protocol JSON codec.

Turns frame payloads into typed requests and typed responses/events back into
payload bytes. The codec owns outbound sequence numbering; nothing else in the
engine looks at the JSON grammar.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from typing import Callable

from tracedap.errors import ProtocolError
from tracedap.protocol.messages import ConfigurationDoneRequest
from tracedap.protocol.messages import ContinueRequest
from tracedap.protocol.messages import DisconnectRequest
from tracedap.protocol.messages import EventBase
from tracedap.protocol.messages import InitializeRequest
from tracedap.protocol.messages import LaunchRequest
from tracedap.protocol.messages import NextRequest
from tracedap.protocol.messages import OutboundMessage
from tracedap.protocol.messages import Request
from tracedap.protocol.messages import Response
from tracedap.protocol.messages import ScopesRequest
from tracedap.protocol.messages import SetExceptionBreakpointsRequest
from tracedap.protocol.messages import StackTraceRequest
from tracedap.protocol.messages import StepInRequest
from tracedap.protocol.messages import StepOutRequest
from tracedap.protocol.messages import ThreadsRequest
from tracedap.protocol.messages import UnknownRequest
from tracedap.protocol.messages import VariablesRequest

logger = logging.getLogger(__name__)

Arguments = dict[str, Any]
RequestParser = Callable[[int, Arguments], Request]


def _int_argument(arguments: Arguments, key: str, command: str, seq: int) -> int:
    value = arguments.get(key)
    # bool is an int subclass but never a valid frame id or reference
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"'{command}' requires an integer '{key}' argument"
        raise ProtocolError(msg, command=command, sequence=seq)
    return value


def _str_list_argument(arguments: Arguments, key: str) -> tuple[str, ...]:
    value = arguments.get(key) or []
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value)


def _parse_initialize(seq: int, arguments: Arguments) -> Request:
    return InitializeRequest(
        seq,
        client_id=arguments.get("clientID"),
        adapter_id=arguments.get("adapterID"),
    )


def _parse_launch(seq: int, arguments: Arguments) -> Request:
    program = arguments.get("program", "")
    return LaunchRequest(
        seq,
        program=program if isinstance(program, str) else "",
        args=_str_list_argument(arguments, "args"),
        no_debug=bool(arguments.get("noDebug", False)),
    )


def _parse_stack_trace(seq: int, arguments: Arguments) -> Request:
    levels = arguments.get("levels")
    # Only a missing or malformed bound means "all frames"; 0 asks for none
    if not isinstance(levels, int) or isinstance(levels, bool) or levels < 0:
        levels = None
    return StackTraceRequest(seq, levels=levels)


def _parse_scopes(seq: int, arguments: Arguments) -> Request:
    return ScopesRequest(seq, frame_id=_int_argument(arguments, "frameId", "scopes", seq))


def _parse_variables(seq: int, arguments: Arguments) -> Request:
    reference = _int_argument(arguments, "variablesReference", "variables", seq)
    return VariablesRequest(seq, variables_reference=reference)


def _parse_set_exception_breakpoints(seq: int, arguments: Arguments) -> Request:
    return SetExceptionBreakpointsRequest(seq, filters=_str_list_argument(arguments, "filters"))


_PARSERS: dict[str, RequestParser] = {
    "initialize": _parse_initialize,
    "launch": _parse_launch,
    "stackTrace": _parse_stack_trace,
    "scopes": _parse_scopes,
    "variables": _parse_variables,
    "threads": lambda seq, _args: ThreadsRequest(seq),
    "disconnect": lambda seq, _args: DisconnectRequest(seq),
    "setExceptionBreakpoints": _parse_set_exception_breakpoints,
    "configurationDone": lambda seq, _args: ConfigurationDoneRequest(seq),
    "stepIn": lambda seq, _args: StepInRequest(seq),
    "stepOut": lambda seq, _args: StepOutRequest(seq),
    "next": lambda seq, _args: NextRequest(seq),
    "continue": lambda seq, _args: ContinueRequest(seq),
}


class ProtocolCodec:
    """Decodes request payloads and encodes responses/events.

    Outbound messages are numbered from ``seq_start`` in encoding order.
    """

    def __init__(self, *, seq_start: int = 1) -> None:
        self.seq_counter = seq_start

    def _next_seq(self) -> int:
        seq = self.seq_counter
        self.seq_counter += 1
        return seq

    # ---- Decoding ----------------------------------------------------------

    def decode(self, payload: bytes) -> Request:
        """Decode one frame payload into a typed request.

        Raises:
            ProtocolError: The payload is not a JSON request object or a known
                command is missing a required argument. ``sequence`` is set
                whenever the request's ``seq`` could be read.
        """
        try:
            message = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            msg = f"Malformed message payload: {exc}"
            raise ProtocolError(msg, cause=exc) from exc

        if not isinstance(message, dict):
            msg = "Message payload is not a JSON object"
            raise ProtocolError(msg)

        seq = message.get("seq")
        if not isinstance(seq, int) or isinstance(seq, bool):
            msg = "Message is missing an integer 'seq'"
            raise ProtocolError(msg)

        command = message.get("command")
        if message.get("type") != "request" or not isinstance(command, str):
            msg = f"Expected a request, got type {message.get('type')!r}"
            raise ProtocolError(msg, sequence=seq)

        arguments = message.get("arguments") or {}
        if not isinstance(arguments, dict):
            msg = f"'{command}' arguments must be an object"
            raise ProtocolError(msg, command=command, sequence=seq)

        parser = _PARSERS.get(command)
        if parser is None:
            return UnknownRequest(seq, raw_command=command)
        return parser(seq, arguments)

    # ---- Encoding ----------------------------------------------------------

    def to_dict(self, message: OutboundMessage) -> dict[str, Any]:
        """Build the wire dictionary for *message*, consuming one sequence number."""
        if isinstance(message, Response):
            result: dict[str, Any] = {
                "seq": self._next_seq(),
                "type": "response",
                "request_seq": message.request_seq,
                "success": message.success,
                "command": message.command,
            }
            if message.body is not None:
                result["body"] = message.body
            if not message.success and message.message is not None:
                result["message"] = message.message
            return result

        if isinstance(message, EventBase):
            result = {"seq": self._next_seq(), "type": "event", "event": message.EVENT}
            body = message.body()
            if body is not None:
                result["body"] = body
            return result

        msg = f"Cannot encode {type(message).__name__}"
        raise TypeError(msg)

    def encode(self, message: OutboundMessage) -> bytes:
        return json.dumps(self.to_dict(message), separators=(",", ":")).encode("utf-8")
