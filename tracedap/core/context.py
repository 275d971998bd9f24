"""Execution contexts: the debuggee state visible while it is stopped.

The introspection layer only talks to :class:`ExecutionContext`. The CPython
implementation walks frame objects from the frame that raised the trace event
outward, stopping at the tracer's bottom frame so adapter frames never show up
in a stack trace.

All slot numbers are 1-based. Function locals are numbered arguments first,
then in order of their first binding in the bytecode; a slot past the last
bound name answers None.
"""

from __future__ import annotations

import dis
import functools
import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Protocol

if TYPE_CHECKING:
    import types


@dataclass(frozen=True)
class FrameInfo:
    """Interpreter-reported facts about one active call."""

    source: str
    line: int
    function: str


class ExecutionContext(Protocol):
    """What the hook hands to the engine at a stop."""

    def frame_info(self, depth: int) -> FrameInfo | None: ...

    def local_name(self, depth: int, slot: int) -> str | None: ...

    def upvalue_count(self, depth: int) -> int: ...

    def upvalue_name(self, depth: int, slot: int) -> str | None: ...

    def global_name(self, depth: int, slot: int) -> str | None: ...


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


_STORE_OPS = frozenset(
    {"STORE_FAST", "STORE_DEREF", "STORE_FAST_STORE_FAST", "STORE_FAST_LOAD_FAST"}
)


@functools.lru_cache(maxsize=256)
def _binding_order(code: types.CodeType) -> tuple[str, ...]:
    """Local names of *code*: arguments, then the rest in order of first binding."""
    nargs = code.co_argcount + code.co_kwonlyargcount
    if code.co_flags & inspect.CO_VARARGS:
        nargs += 1
    if code.co_flags & inspect.CO_VARKEYWORDS:
        nargs += 1
    free = set(code.co_freevars)
    names = dict.fromkeys(code.co_varnames[:nargs])
    for instruction in dis.get_instructions(code):
        if instruction.opname not in _STORE_OPS:
            continue
        stored = instruction.argval
        if not isinstance(stored, tuple):
            stored = (stored,)
        elif instruction.opname == "STORE_FAST_LOAD_FAST":
            # Only the first name of the pair is stored
            stored = stored[:1]
        names.update(dict.fromkeys(name for name in stored if name not in free))
    # Names with no store instruction go last
    names.update(dict.fromkeys((*code.co_varnames, *code.co_cellvars)))
    return tuple(names)


def _slot(names: list[str], slot: int) -> str | None:
    if 1 <= slot <= len(names):
        return names[slot - 1]
    return None


class PythonFrameContext:
    """ExecutionContext over a chain of CPython frames.

    Snapshots the frame chain at construction; name lists are computed on
    first use per depth and kept for the lifetime of the stop.
    """

    def __init__(self, frame: types.FrameType | None, bottom: types.FrameType | None = None):
        frames: list[types.FrameType] = []
        while frame is not None and frame is not bottom:
            frames.append(frame)
            frame = frame.f_back
        self._frames = frames
        self._locals: dict[int, list[str]] = {}
        self._upvalues: dict[int, list[str]] = {}
        self._globals: dict[int, list[str]] = {}

    @property
    def depth(self) -> int:
        """Number of active calls visible to the client."""
        return len(self._frames)

    def _frame(self, depth: int) -> types.FrameType | None:
        if 0 <= depth < len(self._frames):
            return self._frames[depth]
        return None

    def frame_info(self, depth: int) -> FrameInfo | None:
        frame = self._frame(depth)
        if frame is None:
            return None
        code = frame.f_code
        return FrameInfo(
            source=code.co_filename,
            line=frame.f_lineno or 0,
            function=code.co_name or "?",
        )

    def _local_names(self, depth: int) -> list[str]:
        if depth not in self._locals:
            frame = self._frame(depth)
            names: list[str] = []
            if frame is not None:
                bound = frame.f_locals
                code = frame.f_code
                if code.co_flags & inspect.CO_OPTIMIZED:
                    names = [name for name in _binding_order(code) if name in bound]
                else:
                    names = [name for name in bound if not _is_dunder(name)]
            self._locals[depth] = names
        return self._locals[depth]

    def _upvalue_names(self, depth: int) -> list[str]:
        if depth not in self._upvalues:
            frame = self._frame(depth)
            names: list[str] = []
            if frame is not None:
                bound = frame.f_locals
                names = [name for name in frame.f_code.co_freevars if name in bound]
            self._upvalues[depth] = names
        return self._upvalues[depth]

    def local_name(self, depth: int, slot: int) -> str | None:
        return _slot(self._local_names(depth), slot)

    def upvalue_count(self, depth: int) -> int:
        return len(self._upvalue_names(depth))

    def upvalue_name(self, depth: int, slot: int) -> str | None:
        return _slot(self._upvalue_names(depth), slot)

    def global_name(self, depth: int, slot: int) -> str | None:
        if depth not in self._globals:
            frame = self._frame(depth)
            self._globals[depth] = list(frame.f_globals) if frame is not None else []
        return _slot(self._globals[depth], slot)
