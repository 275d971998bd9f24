from __future__ import annotations

import io
import json
import textwrap
from dataclasses import dataclass
from dataclasses import field
from typing import Any

import pytest

from tracedap.adapter.server import DebugAdapterServer
from tracedap.adapter.transport import Channel
from tracedap.config import TracedapConfig
from tracedap.core.context import FrameInfo
from tracedap.protocol.framing import FrameReader
from tracedap.protocol.framing import FrameWriter
from tracedap.protocol.framing import pack_frame


# ---------------------------------------------------------------------------
# Wire helpers
# ---------------------------------------------------------------------------


def request_frame(seq: int, command: str, arguments: dict[str, Any] | None = None) -> bytes:
    message: dict[str, Any] = {"seq": seq, "type": "request", "command": command}
    if arguments is not None:
        message["arguments"] = arguments
    return pack_frame(json.dumps(message).encode("utf-8"))


def script_frames(*requests: tuple[str, dict[str, Any] | None] | str) -> bytes:
    """Frame a request script; entries are a command or ``(command, arguments)``."""
    data = b""
    for seq, entry in enumerate(requests, start=1):
        command, arguments = (entry, None) if isinstance(entry, str) else entry
        data += request_frame(seq, command, arguments)
    return data


def decode_frames(data: bytes) -> list[dict[str, Any]]:
    reader = FrameReader(io.BytesIO(data))
    messages = []
    while (payload := reader.read_frame()) is not None:
        messages.append(json.loads(payload))
    return messages


@dataclass
class Transcript:
    """Everything the adapter wrote during one scripted session."""

    exit_code: int
    messages: list[dict[str, Any]] = field(default_factory=list)

    def responses(self, command: str | None = None) -> list[dict[str, Any]]:
        return [
            m
            for m in self.messages
            if m["type"] == "response" and (command is None or m["command"] == command)
        ]

    def response(self, request_seq: int) -> dict[str, Any]:
        for message in self.messages:
            if message["type"] == "response" and message["request_seq"] == request_seq:
                return message
        msg = f"No response to request {request_seq}"
        raise AssertionError(msg)

    def events(self, name: str | None = None) -> list[dict[str, Any]]:
        return [
            m
            for m in self.messages
            if m["type"] == "event" and (name is None or m["event"] == name)
        ]

    def output(self, category: str | None = None) -> str:
        return "".join(
            e["body"]["output"]
            for e in self.events("output")
            if category is None or e["body"]["category"] == category
        )

    def kinds(self) -> list[str]:
        """Compact ``event:name`` / ``response:command`` sequence, outputs dropped."""
        return [
            f"event:{m['event']}" if m["type"] == "event" else f"response:{m['command']}"
            for m in self.messages
            if not (m["type"] == "event" and m["event"] == "output")
        ]


def run_script(data: bytes, config: TracedapConfig | None = None) -> Transcript:
    inbound = io.BytesIO(data)
    outbound = io.BytesIO()
    channel = Channel(FrameReader(inbound), FrameWriter(outbound))
    server = DebugAdapterServer(channel, config or TracedapConfig())
    exit_code = server.serve()
    return Transcript(exit_code, decode_frames(outbound.getvalue()))


# ---------------------------------------------------------------------------
# Fake execution contexts
# ---------------------------------------------------------------------------


@dataclass
class FakeFrame:
    source: str
    line: int
    function: str
    locals: list[str] = field(default_factory=list)
    upvalues: list[str] = field(default_factory=list)
    globals: list[str] = field(default_factory=list)


class FakeContext:
    """ExecutionContext over a list of frames, innermost first."""

    def __init__(self, frames: list[FakeFrame]) -> None:
        self.frames = frames

    def _frame(self, depth: int) -> FakeFrame | None:
        return self.frames[depth] if 0 <= depth < len(self.frames) else None

    @staticmethod
    def _slot(names: list[str], slot: int) -> str | None:
        return names[slot - 1] if 1 <= slot <= len(names) else None

    def frame_info(self, depth: int) -> FrameInfo | None:
        frame = self._frame(depth)
        if frame is None:
            return None
        return FrameInfo(frame.source, frame.line, frame.function)

    def local_name(self, depth: int, slot: int) -> str | None:
        frame = self._frame(depth)
        return self._slot(frame.locals, slot) if frame else None

    def upvalue_count(self, depth: int) -> int:
        frame = self._frame(depth)
        return len(frame.upvalues) if frame else 0

    def upvalue_name(self, depth: int, slot: int) -> str | None:
        frame = self._frame(depth)
        return self._slot(frame.upvalues, slot) if frame else None

    def global_name(self, depth: int, slot: int) -> str | None:
        frame = self._frame(depth)
        return self._slot(frame.globals, slot) if frame else None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def session_runner():
    """Run a framed request script through a full adapter server."""
    return run_script


@pytest.fixture
def frames():
    return script_frames


@pytest.fixture
def decode():
    return decode_frames


@pytest.fixture
def write_program(tmp_path):
    """Write a dedented program to ``tmp_path`` and return its path."""

    def _write(source: str, name: str = "program.py") -> str:
        path = tmp_path / name
        path.write_text(textwrap.dedent(source).lstrip("\n"), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def fake_context():
    return FakeContext


@pytest.fixture
def fake_frame():
    return FakeFrame
