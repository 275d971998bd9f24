"""Stack, scope and variable listings for a stopped debuggee.

The engine is stateless between requests: it reads whatever context is on top
of the session's stop stack and re-derives frames from depth numbers and scope
contents from encoded references. Stale ids raise
:class:`~tracedap.errors.IntrospectionError` and the client resynchronizes by
asking for a fresh stack trace.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Callable

from tracedap.config import DEFAULT_MAX_FRAMES
from tracedap.config import DEFAULT_MAX_VARIABLES
from tracedap.core.references import ScopeCategory
from tracedap.core.references import decode_reference
from tracedap.core.references import encode_reference
from tracedap.errors import IntrospectionError

if TYPE_CHECKING:
    from tracedap.core.context import ExecutionContext
    from tracedap.protocol.structures import Scope
    from tracedap.protocol.structures import Source
    from tracedap.protocol.structures import StackFrame
    from tracedap.protocol.structures import Variable

logger = logging.getLogger(__name__)


def split_source(identifier: str) -> Source:
    """Split a source identifier on its last path separator."""
    cut = max(identifier.rfind("/"), identifier.rfind("\\"))
    name = identifier[cut + 1 :] if cut >= 0 else identifier
    return {"name": name, "path": identifier}


class Introspector:
    """Builds stack trace, scopes and variables bodies from an execution context."""

    def __init__(
        self,
        *,
        max_frames: int = DEFAULT_MAX_FRAMES,
        max_variables: int = DEFAULT_MAX_VARIABLES,
    ) -> None:
        self.max_frames = max_frames
        self.max_variables = max_variables

    def stack_trace(
        self, context: ExecutionContext | None, levels: int | None = None
    ) -> list[StackFrame]:
        """Frames from depth 0 outward, bounded by *levels* and the frame cap."""
        limit = self.max_frames if levels is None else min(levels, self.max_frames)
        frames: list[StackFrame] = []
        if context is None:
            return frames
        for depth in range(limit):
            info = context.frame_info(depth)
            if info is None:
                break
            frames.append(
                {
                    "id": depth,
                    "name": info.function or "?",
                    "source": split_source(info.source),
                    "line": info.line,
                    "column": 0,
                }
            )
        return frames

    def scopes(self, context: ExecutionContext | None, depth: int) -> list[Scope]:
        """Scopes visible from the frame at *depth*."""
        if context is None or depth < 0 or context.frame_info(depth) is None:
            msg = "Error retrieving stack frame"
            raise IntrospectionError(msg, frame_depth=depth)

        categories = [ScopeCategory.LOCALS]
        if context.upvalue_count(depth) > 0:
            categories.append(ScopeCategory.UP_VALUES)
        categories.append(ScopeCategory.GLOBALS)

        return [
            {
                "name": category.label,
                "variablesReference": encode_reference(category, depth),
                "expensive": category.expensive,
            }
            for category in categories
        ]

    def variables(self, context: ExecutionContext | None, reference: int) -> list[Variable]:
        """Names in the scope *reference* points at, in slot order."""
        category, depth = decode_reference(reference)
        if context is None or context.frame_info(depth) is None:
            msg = "Error retrieving variables"
            raise IntrospectionError(msg, frame_depth=depth, reference=reference)

        lookup = self._lookup(context, category)
        variables: list[Variable] = []
        for slot in range(1, self.max_variables + 1):
            name = lookup(depth, slot)
            if name is None:
                break
            # Values are not resolved; an empty value with no children marks it
            variables.append({"name": name, "value": "", "variablesReference": 0})
        else:
            logger.debug("Variable listing for %d truncated at %d", reference, self.max_variables)
        return variables

    @staticmethod
    def _lookup(
        context: ExecutionContext, category: ScopeCategory
    ) -> Callable[[int, int], str | None]:
        if category is ScopeCategory.LOCALS:
            return context.local_name
        if category is ScopeCategory.UP_VALUES:
            return context.upvalue_name
        return context.global_name
