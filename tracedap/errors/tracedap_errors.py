"""Centralized error types for the tracedap debug adapter.

Every engine-level failure derives from :class:`TracedapError` so the request
dispatcher can turn it into a structured DAP error response. Only
:class:`FramingError` is fatal to a session; the rest are answered and the
dispatch loop keeps reading.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class TracedapError(Exception):
    """An engine failure that can be reported to the client.

    ``error_code`` names the failure in the response body and ``details``
    carries the structured context the raising site knew about.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause

    def response_body(self) -> dict[str, Any]:
        return {"error": self.error_code, "details": self.details}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause!s})"
        return self.message


class ConfigurationError(TracedapError):
    """A command line setting is out of range or missing; ``config_key`` names it."""

    def __init__(self, message: str, *, config_key: str | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, error_code="ConfigurationError", details=details, **kwargs)
        self.config_key = config_key


class FramingError(TracedapError):
    """Raised when an inbound frame is malformed or truncated.

    Fatal to the session: after a framing error the reader can no longer
    tell where the next message starts.
    """

    def __init__(
        self,
        message: str,
        *,
        expected: int | None = None,
        received: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if expected is not None:
            details["expected"] = expected
        if received is not None:
            details["received"] = received
        super().__init__(message, error_code="FramingError", details=details, **kwargs)
        self.expected = expected
        self.received = received


class ProtocolError(TracedapError):
    """Raised for protocol or lifecycle violations (bad payload, wrong state)."""

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        sequence: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if command:
            details["command"] = command
        if sequence is not None:
            details["sequence"] = sequence
        super().__init__(message, error_code="ProtocolError", details=details, **kwargs)
        self.command = command
        self.sequence = sequence


class IntrospectionError(TracedapError):
    """Raised when a frame depth or variables reference no longer resolves."""

    def __init__(
        self,
        message: str,
        *,
        frame_depth: int | None = None,
        reference: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if frame_depth is not None:
            details["frame_depth"] = frame_depth
        if reference is not None:
            details["reference"] = reference
        super().__init__(message, error_code="IntrospectionError", details=details, **kwargs)
        self.frame_depth = frame_depth
        self.reference = reference


class LaunchError(TracedapError):
    """Raised when the debuggee program cannot be loaded."""

    def __init__(
        self,
        message: str,
        *,
        program: str | None = None,
        diagnostic: str = "",
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if program:
            details["program"] = program
        super().__init__(message, error_code="LaunchError", details=details, **kwargs)
        self.program = program
        self.diagnostic = diagnostic


class DebuggeeError(TracedapError):
    """Raised when the debuggee terminates with an uncaught exception."""

    def __init__(self, message: str, *, diagnostic: str = "", **kwargs: Any) -> None:
        super().__init__(message, error_code="DebuggeeError", **kwargs)
        self.diagnostic = diagnostic


def error_response_fields(error: Exception) -> tuple[str, dict[str, Any]]:
    """Return the ``(message, body)`` pair for an error response.

    Engine errors keep their own code and details; anything else is reported
    under its class name so the client still gets a readable message.
    """
    if isinstance(error, TracedapError):
        return error.message, error.response_body()
    logger.error("Unexpected handler error: %s", error, exc_info=error)
    return str(error) or error.__class__.__name__, {
        "error": error.__class__.__name__,
        "details": {},
    }
