"""Client-facing side of the adapter: transport, dispatch and output relay."""

from tracedap.adapter.dispatcher import RequestDispatcher
from tracedap.adapter.output import OutputRelay
from tracedap.adapter.output import OutputStream
from tracedap.adapter.server import DebugAdapterServer
from tracedap.adapter.transport import Channel
from tracedap.adapter.transport import open_channel

__all__ = [
    "Channel",
    "DebugAdapterServer",
    "OutputRelay",
    "OutputStream",
    "RequestDispatcher",
    "open_channel",
]
