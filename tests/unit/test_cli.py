"""Tests for the command line entry point."""

from __future__ import annotations

import logging

import pytest

from tracedap import cli
from tracedap.config import TracedapConfig


@pytest.fixture
def trace_logger(monkeypatch):
    """The trace logger, with handlers and propagation restored afterwards."""
    logger = logging.getLogger("tracedap.trace")
    monkeypatch.setattr(logger, "propagate", logger.propagate)
    monkeypatch.setattr(logger, "handlers", list(logger.handlers))
    monkeypatch.setattr(logger, "level", logger.level)
    return logger


class TestParser:
    def test_defaults(self) -> None:
        args = cli.build_parser().parse_args([])

        assert args.tcp is None
        assert args.host == "127.0.0.1"
        assert args.log_level == "INFO"
        assert args.max_frames == 128
        assert args.max_variables == 256

    def test_all_options(self) -> None:
        args = cli.build_parser().parse_args(
            [
                "--tcp",
                "4711",
                "--host",
                "0.0.0.0",
                "--read-timeout",
                "1.5",
                "--trace-log",
                "dap.log",
                "--log-level",
                "DEBUG",
                "--max-frames",
                "8",
                "--max-variables",
                "16",
            ]
        )
        config = TracedapConfig.from_args(args)

        assert config.transport.transport == "tcp"
        assert config.transport.port == 4711
        assert config.transport.read_timeout == 1.5
        assert config.trace_log == "dap.log"
        assert (config.max_frames, config.max_variables) == (8, 16)

    def test_rejects_unknown_log_level(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--log-level", "LOUD"])


class TestRun:
    def test_invalid_configuration_exits_nonzero(self, capsys) -> None:
        assert cli.run(["--max-frames", "0"]) == 1
        assert "max_frames" in capsys.readouterr().err

    def test_unopenable_trace_log_exits_nonzero(self, tmp_path, trace_logger, capsys) -> None:
        assert cli.run(["--trace-log", str(tmp_path)]) == 1
        assert "trace log" in capsys.readouterr().err


class TestConfigureLogging:
    def test_trace_log_file(self, tmp_path, trace_logger) -> None:
        path = tmp_path / "trace.log"
        cli.configure_logging(TracedapConfig(trace_log=str(path)))

        trace_logger.info("<-- %s", '{"seq":1}')
        for handler in trace_logger.handlers:
            handler.flush()
            if isinstance(handler, logging.FileHandler):
                handler.close()

        assert '<-- {"seq":1}' in path.read_text(encoding="utf-8")
        assert trace_logger.propagate is False

    def test_without_trace_log(self, trace_logger) -> None:
        cli.configure_logging(TracedapConfig())
        assert not any(isinstance(h, logging.FileHandler) for h in trace_logger.handlers)
