"""Debug engine core: execution contexts, introspection and the execution hook."""

from tracedap.core.context import ExecutionContext
from tracedap.core.context import FrameInfo
from tracedap.core.context import PythonFrameContext
from tracedap.core.hook import ExecutionHook
from tracedap.core.interpreter import DebuggeeTracer
from tracedap.core.interpreter import LoadedProgram
from tracedap.core.interpreter import PythonInterpreter
from tracedap.core.introspection import Introspector
from tracedap.core.references import ScopeCategory
from tracedap.core.references import decode_reference
from tracedap.core.references import encode_reference
from tracedap.core.stepping import ResumeAction
from tracedap.core.stepping import StopReason

__all__ = [
    "DebuggeeTracer",
    "ExecutionContext",
    "ExecutionHook",
    "FrameInfo",
    "Introspector",
    "LoadedProgram",
    "PythonFrameContext",
    "PythonInterpreter",
    "ResumeAction",
    "ScopeCategory",
    "StopReason",
    "decode_reference",
    "encode_reference",
]
