"""Centralized configuration for the tracedap debug adapter.

The configuration is a plain value built once by the command line entry point
and handed to the server; nothing reads it from module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import Literal

from tracedap.errors import ConfigurationError

if TYPE_CHECKING:
    import argparse

# Caps on introspection results. Longer stacks and namespaces are truncated
# to these counts; names and paths themselves are never shortened.
DEFAULT_MAX_FRAMES = 128
DEFAULT_MAX_VARIABLES = 256

# Frame depths must stay below the width of one variables-reference range.
FRAME_DEPTH_LIMIT = 1_000_000


@dataclass
class TransportConfig:
    """Client transport configuration."""

    transport: Literal["stdio", "tcp"] = "stdio"
    host: str = "127.0.0.1"
    port: int | None = None
    read_timeout: float | None = None


@dataclass
class TracedapConfig:
    """Configuration for one debug adapter process."""

    transport: TransportConfig = field(default_factory=TransportConfig)

    trace_log: str | None = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    max_frames: int = DEFAULT_MAX_FRAMES
    max_variables: int = DEFAULT_MAX_VARIABLES

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> TracedapConfig:
        """Create config from parsed command line arguments."""
        port = getattr(args, "tcp", None)
        transport = TransportConfig(
            transport="tcp" if port is not None else "stdio",
            host=getattr(args, "host", "127.0.0.1"),
            port=port,
            read_timeout=getattr(args, "read_timeout", None),
        )
        return cls(
            transport=transport,
            trace_log=getattr(args, "trace_log", None),
            log_level=getattr(args, "log_level", "INFO"),
            max_frames=getattr(args, "max_frames", DEFAULT_MAX_FRAMES),
            max_variables=getattr(args, "max_variables", DEFAULT_MAX_VARIABLES),
        )

    def validate(self) -> None:
        """Validate configuration and raise errors for invalid setups."""
        if self.transport.transport == "tcp" and not self.transport.port:
            raise ConfigurationError(
                "Port is required for the TCP transport",
                config_key="port",
                details={"transport": self.transport.transport},
            )

        if self.transport.read_timeout is not None and self.transport.read_timeout <= 0:
            raise ConfigurationError(
                "Read timeout must be positive",
                config_key="read_timeout",
                details={"read_timeout": self.transport.read_timeout},
            )

        if not 0 < self.max_frames < FRAME_DEPTH_LIMIT:
            raise ConfigurationError(
                f"max_frames must be between 1 and {FRAME_DEPTH_LIMIT - 1}",
                config_key="max_frames",
                details={"max_frames": self.max_frames},
            )

        if self.max_variables <= 0:
            raise ConfigurationError(
                "max_variables must be positive",
                config_key="max_variables",
                details={"max_variables": self.max_variables},
            )


DEFAULT_CONFIG = TracedapConfig()
