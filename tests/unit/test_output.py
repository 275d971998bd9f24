"""Tests for the output relay and the stdio capture streams."""

from __future__ import annotations

import io
import json
import logging
import sys

import pytest

from tracedap.adapter.output import OutputRelay
from tracedap.adapter.output import OutputStream
from tracedap.protocol.codec import ProtocolCodec
from tracedap.protocol.framing import FrameReader
from tracedap.protocol.framing import FrameWriter
from tracedap.session import Session


@pytest.fixture
def relay_and_outbound():
    outbound = io.BytesIO()
    session = Session(FrameReader(io.BytesIO()), FrameWriter(outbound), ProtocolCodec())
    return OutputRelay(session), outbound


def output_events(outbound: io.BytesIO) -> list[dict]:
    reader = FrameReader(io.BytesIO(outbound.getvalue()))
    events = []
    while (payload := reader.read_frame()) is not None:
        events.append(json.loads(payload)["body"])
    return events


class TestOutputRelay:
    def test_emit(self, relay_and_outbound) -> None:
        relay, outbound = relay_and_outbound

        relay.emit("first\n")
        relay.emit("second\n", "stderr")

        assert output_events(outbound) == [
            {"category": "console", "output": "first\n"},
            {"category": "stderr", "output": "second\n"},
        ]

    def test_empty_text_is_dropped(self, relay_and_outbound) -> None:
        relay, outbound = relay_and_outbound
        relay.emit("")
        assert output_events(outbound) == []

    def test_dropped_once_the_client_is_gone(self, relay_and_outbound) -> None:
        relay, outbound = relay_and_outbound
        relay.session.close()

        relay.emit("late\n", "stdout")
        relay.stream("stderr").write("later\n")

        assert output_events(outbound) == []

    def test_duplicated_to_trace(self, relay_and_outbound, caplog) -> None:
        relay, _ = relay_and_outbound
        with caplog.at_level(logging.INFO, logger="tracedap.trace"):
            relay.emit("traced text\n")
        assert "traced text" in caplog.text


class TestOutputStream:
    def test_write_becomes_event(self, relay_and_outbound) -> None:
        relay, outbound = relay_and_outbound
        stream = relay.stream("stdout")

        assert stream.write("hello") == 5
        stream.flush()

        assert output_events(outbound) == [{"category": "stdout", "output": "hello"}]

    def test_stream_properties(self, relay_and_outbound) -> None:
        relay, _ = relay_and_outbound
        stream = OutputStream(relay, "stderr")

        assert stream.writable()
        assert not stream.readable()
        assert not stream.isatty()
        assert stream.encoding == "utf-8"

    def test_write_after_close(self, relay_and_outbound) -> None:
        relay, _ = relay_and_outbound
        stream = relay.stream("stdout")
        stream.close()

        with pytest.raises(ValueError):
            stream.write("late")

    def test_trace_function_is_restored(self, relay_and_outbound) -> None:
        relay, _ = relay_and_outbound
        calls = []

        def tracer(frame, event, arg):
            calls.append(event)

        previous = sys.gettrace()
        sys.settrace(tracer)
        try:
            relay.stream("stdout").write("x")
            restored = sys.gettrace()
        finally:
            sys.settrace(previous)

        assert restored is tracer


class TestCaptureStdio:
    def test_print_is_relayed(self, relay_and_outbound) -> None:
        relay, outbound = relay_and_outbound
        saved = sys.stdout, sys.stderr

        with relay.capture_stdio():
            print("to stdout")
            print("to stderr", file=sys.stderr)

        assert (sys.stdout, sys.stderr) == saved
        events = output_events(outbound)
        stdout = "".join(e["output"] for e in events if e["category"] == "stdout")
        stderr = "".join(e["output"] for e in events if e["category"] == "stderr")
        assert stdout == "to stdout\n"
        assert stderr == "to stderr\n"
