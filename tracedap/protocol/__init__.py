"""Wire-level pieces: Content-Length framing, typed messages and the JSON codec."""

from tracedap.protocol.codec import ProtocolCodec
from tracedap.protocol.framing import FrameReader
from tracedap.protocol.framing import FrameWriter
from tracedap.protocol.framing import pack_frame

__all__ = [
    "FrameReader",
    "FrameWriter",
    "ProtocolCodec",
    "pack_frame",
]
