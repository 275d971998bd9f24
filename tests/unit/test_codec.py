"""Tests for the DAP JSON codec."""

from __future__ import annotations

import json

import pytest

from tracedap.errors import ProtocolError
from tracedap.protocol.codec import ProtocolCodec
from tracedap.protocol.messages import REQUEST_TYPES
from tracedap.protocol.messages import ContinueRequest
from tracedap.protocol.messages import ExitedEvent
from tracedap.protocol.messages import InitializeRequest
from tracedap.protocol.messages import LaunchRequest
from tracedap.protocol.messages import NextRequest
from tracedap.protocol.messages import OutputEvent
from tracedap.protocol.messages import Response
from tracedap.protocol.messages import ScopesRequest
from tracedap.protocol.messages import SetExceptionBreakpointsRequest
from tracedap.protocol.messages import StackTraceRequest
from tracedap.protocol.messages import StepInRequest
from tracedap.protocol.messages import StepOutRequest
from tracedap.protocol.messages import StoppedEvent
from tracedap.protocol.messages import ThreadEvent
from tracedap.protocol.messages import UnknownRequest
from tracedap.protocol.messages import VariablesRequest


def payload(message: dict) -> bytes:
    return json.dumps(message).encode("utf-8")


def request(command: str, seq: int = 1, **arguments) -> bytes:
    message = {"seq": seq, "type": "request", "command": command}
    if arguments:
        message["arguments"] = arguments
    return payload(message)


class TestDecode:
    def test_initialize(self) -> None:
        decoded = ProtocolCodec().decode(
            request("initialize", seq=3, clientID="vscode", adapterID="tracedap")
        )
        assert decoded == InitializeRequest(3, client_id="vscode", adapter_id="tracedap")

    def test_launch_arguments(self) -> None:
        decoded = ProtocolCodec().decode(
            request("launch", program="/tmp/p.py", args=["-v", 2], noDebug=True)
        )
        assert decoded == LaunchRequest(1, program="/tmp/p.py", args=("-v", "2"), no_debug=True)

    def test_launch_without_arguments(self) -> None:
        assert ProtocolCodec().decode(request("launch")) == LaunchRequest(1)

    @pytest.mark.parametrize(
        ("levels", "expected"),
        [(5, 5), (0, 0), (-2, None), ("3", None), (True, None), (None, None)],
    )
    def test_stack_trace_levels(self, levels, expected) -> None:
        decoded = ProtocolCodec().decode(request("stackTrace", threadId=1, levels=levels))
        assert decoded == StackTraceRequest(1, levels=expected)

    def test_scopes_and_variables(self) -> None:
        codec = ProtocolCodec()
        assert codec.decode(request("scopes", frameId=2)) == ScopesRequest(1, frame_id=2)
        assert codec.decode(request("variables", variablesReference=1_000_002)) == (
            VariablesRequest(1, variables_reference=1_000_002)
        )

    @pytest.mark.parametrize(
        ("command", "key"), [("scopes", "frameId"), ("variables", "variablesReference")]
    )
    @pytest.mark.parametrize("value", [None, "1", 1.5, True])
    def test_non_integer_handles(self, command: str, key: str, value) -> None:
        with pytest.raises(ProtocolError) as excinfo:
            ProtocolCodec().decode(request(command, seq=9, **{key: value}))
        assert excinfo.value.sequence == 9
        assert excinfo.value.command == command

    def test_step_class_commands(self) -> None:
        codec = ProtocolCodec()
        assert codec.decode(request("stepIn")) == StepInRequest(1)
        assert codec.decode(request("stepOut")) == StepOutRequest(1)
        assert codec.decode(request("next")) == NextRequest(1)
        assert codec.decode(request("continue")) == ContinueRequest(1)

    def test_exception_filters(self) -> None:
        decoded = ProtocolCodec().decode(request("setExceptionBreakpoints", filters=["raised"]))
        assert decoded == SetExceptionBreakpointsRequest(1, filters=("raised",))

    def test_unknown_command_keeps_raw_name(self) -> None:
        decoded = ProtocolCodec().decode(request("evaluate", expression="1"))
        assert decoded == UnknownRequest(1, raw_command="evaluate")
        assert decoded.command == "evaluate"

    def test_every_known_command_has_a_request_type(self) -> None:
        commands = {kind.COMMAND for kind in REQUEST_TYPES if kind is not UnknownRequest}
        for command in commands:
            decoded = ProtocolCodec().decode(
                request(command, frameId=0, variablesReference=1_000_000)
            )
            assert decoded.command == command

    @pytest.mark.parametrize(
        "raw",
        [b"not json", b"\xff\xfe", b"[1, 2]", b'{"type": "request", "command": "x"}'],
    )
    def test_uncorrelatable_payloads(self, raw: bytes) -> None:
        with pytest.raises(ProtocolError) as excinfo:
            ProtocolCodec().decode(raw)
        assert excinfo.value.sequence is None

    def test_not_a_request(self) -> None:
        with pytest.raises(ProtocolError) as excinfo:
            ProtocolCodec().decode(payload({"seq": 4, "type": "event", "event": "x"}))
        assert excinfo.value.sequence == 4

    def test_arguments_must_be_an_object(self) -> None:
        raw = payload({"seq": 2, "type": "request", "command": "launch", "arguments": [1]})
        with pytest.raises(ProtocolError) as excinfo:
            ProtocolCodec().decode(raw)
        assert excinfo.value.command == "launch"


class TestEncode:
    def test_sequence_numbers_start_at_one(self) -> None:
        codec = ProtocolCodec()
        first = codec.to_dict(ThreadEvent())
        second = codec.to_dict(StoppedEvent(reason="entry"))

        assert first == {
            "seq": 1,
            "type": "event",
            "event": "thread",
            "body": {"reason": "started", "threadId": 1},
        }
        assert second["seq"] == 2
        assert second["body"] == {"reason": "entry", "threadId": 1, "allThreadsStopped": True}

    def test_success_response(self) -> None:
        codec = ProtocolCodec()
        message = codec.to_dict(Response.ok(InitializeRequest(7), {"x": 1}))
        assert message == {
            "seq": 1,
            "type": "response",
            "request_seq": 7,
            "success": True,
            "command": "initialize",
            "body": {"x": 1},
        }

    def test_error_response_carries_message(self) -> None:
        unknown = UnknownRequest(3, raw_command="foo")
        message = ProtocolCodec().to_dict(Response.error(unknown, "nope"))
        assert message["success"] is False
        assert message["command"] == "foo"
        assert message["message"] == "nope"
        assert "body" not in message

    def test_event_bodies(self) -> None:
        codec = ProtocolCodec()
        assert codec.to_dict(OutputEvent("hi\n", "stdout"))["body"] == {
            "category": "stdout",
            "output": "hi\n",
        }
        assert codec.to_dict(ExitedEvent(3))["body"] == {"exitCode": 3}

    def test_encode_is_compact_json(self) -> None:
        encoded = ProtocolCodec().encode(ExitedEvent(0))
        assert encoded == b'{"seq":1,"type":"event","event":"exited","body":{"exitCode":0}}'

    def test_rejects_foreign_objects(self) -> None:
        with pytest.raises(TypeError):
            ProtocolCodec().to_dict(object())
