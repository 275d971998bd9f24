"""Configuration management for the tracedap debug adapter."""

from tracedap.config.tracedap_config import DEFAULT_CONFIG
from tracedap.config.tracedap_config import DEFAULT_MAX_FRAMES
from tracedap.config.tracedap_config import DEFAULT_MAX_VARIABLES
from tracedap.config.tracedap_config import FRAME_DEPTH_LIMIT
from tracedap.config.tracedap_config import TracedapConfig
from tracedap.config.tracedap_config import TransportConfig

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_MAX_FRAMES",
    "DEFAULT_MAX_VARIABLES",
    "FRAME_DEPTH_LIMIT",
    "TracedapConfig",
    "TransportConfig",
]
