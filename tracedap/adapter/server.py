"""
Debug adapter server: one session over one client channel.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tracedap.adapter.dispatcher import RequestDispatcher
from tracedap.adapter.output import OutputRelay
from tracedap.config import DEFAULT_CONFIG
from tracedap.core.interpreter import PythonInterpreter
from tracedap.core.introspection import Introspector
from tracedap.core.stepping import ResumeAction
from tracedap.errors import FramingError
from tracedap.protocol.codec import ProtocolCodec
from tracedap.session import Session

if TYPE_CHECKING:
    from tracedap.adapter.transport import Channel
    from tracedap.config import TracedapConfig

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class DebugAdapterServer:
    """Wires a session, its dispatcher and the interpreter to a channel."""

    def __init__(
        self,
        channel: Channel,
        config: TracedapConfig = DEFAULT_CONFIG,
        *,
        interpreter: PythonInterpreter | None = None,
    ) -> None:
        self.config = config
        self.session = Session(channel.reader, channel.writer, ProtocolCodec())
        self.relay = OutputRelay(self.session)
        self.dispatcher = RequestDispatcher(
            self.session,
            interpreter or PythonInterpreter(),
            introspector=Introspector(
                max_frames=config.max_frames, max_variables=config.max_variables
            ),
            relay=self.relay,
        )

    def serve(self) -> int:
        """Serve the client until it disconnects; return the process exit code."""
        try:
            action = self.dispatcher.run()
        except FramingError as exc:
            logger.error("Fatal framing error: %s", exc)
            return EXIT_FAILURE
        if action is not ResumeAction.QUIT:
            logger.warning("Dispatch loop ended with unexpected %s", action.value)
        logger.info("Session ended in state %s", self.session.state.name)
        return EXIT_OK
