"""Error handling for the tracedap debug adapter."""

from tracedap.errors.tracedap_errors import ConfigurationError
from tracedap.errors.tracedap_errors import DebuggeeError
from tracedap.errors.tracedap_errors import FramingError
from tracedap.errors.tracedap_errors import IntrospectionError
from tracedap.errors.tracedap_errors import LaunchError
from tracedap.errors.tracedap_errors import ProtocolError
from tracedap.errors.tracedap_errors import TracedapError
from tracedap.errors.tracedap_errors import error_response_fields

__all__ = [
    "ConfigurationError",
    "DebuggeeError",
    "FramingError",
    "IntrospectionError",
    "LaunchError",
    "ProtocolError",
    "TracedapError",
    "error_response_fields",
]
