"""
Object shapes carried in response bodies: Source, StackFrame, Scope, Variable, Thread
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import TypedDict

if TYPE_CHECKING:
    from typing_extensions import NotRequired


class Source(TypedDict):
    """A source is a descriptor for source code."""

    name: str  # Last path segment of the source identifier
    path: NotRequired[str]  # Full source identifier as reported by the interpreter


class StackFrame(TypedDict):
    """A stack frame; ``id`` is the frame depth, 0 being the innermost call."""

    id: int
    name: str
    source: Source
    line: int
    column: int


class Scope(TypedDict):
    """A named group of variables reachable from one stack frame."""

    name: str
    variablesReference: int
    expensive: bool


class Variable(TypedDict):
    """A variable name in a scope; ``value`` is left empty (not resolved)."""

    name: str
    value: str
    variablesReference: int


class Thread(TypedDict):
    id: int
    name: str
