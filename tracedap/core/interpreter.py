"""
The debuggee interpreter: CPython traced through :mod:`bdb`.

:class:`DebuggeeTracer` turns bdb's line events into calls of the execution
hook and maps the hook's :class:`~tracedap.core.stepping.ResumeAction` back
onto bdb's stepping primitives. :class:`PythonInterpreter` loads a program
file and runs it as ``__main__`` under the tracer.
"""

from __future__ import annotations

import bdb
import builtins
import contextlib
import logging
import os
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Any
from typing import Callable

from tracedap.core.context import PythonFrameContext
from tracedap.core.stepping import ResumeAction
from tracedap.errors import DebuggeeError
from tracedap.errors import LaunchError

if TYPE_CHECKING:
    import types
    from collections.abc import Iterator
    from collections.abc import Sequence

    from tracedap.core.context import ExecutionContext

logger = logging.getLogger(__name__)

Hook = Callable[["ExecutionContext"], ResumeAction]

# Adapter frames are traced through but never stopped in
SKIP_MODULES = ("tracedap", "tracedap.*")


class DebuggeeQuit(BaseException):
    """Unwinds the debuggee once the client is gone.

    Not an :class:`Exception`, so ``except Exception`` in the program does not
    stop it; unlike ``bdb.BdbQuit`` it also escapes :meth:`bdb.Bdb.run`.
    """


class DebuggeeTracer(bdb.Bdb):
    """bdb tracer that hands every stop to *hook* and obeys its answer.

    A fresh tracer starts in step mode, so the first line of the program is
    the first stop.
    """

    def __init__(self, hook: Hook) -> None:
        super().__init__(skip=SKIP_MODULES)
        self.hook = hook

    def user_line(self, frame: types.FrameType) -> None:
        context = PythonFrameContext(frame, self.botframe)
        action = self.hook(context)
        logger.debug("Resuming with %s at line %d", action.value, frame.f_lineno)
        self.apply(action, frame)

    def apply(self, action: ResumeAction, frame: types.FrameType) -> None:
        if action is ResumeAction.STEP_IN:
            self.set_step()
        elif action is ResumeAction.NEXT:
            self.set_next(frame)
        elif action is ResumeAction.STEP_OUT:
            self.set_return(frame)
        elif action is ResumeAction.CONTINUE:
            self.set_continue()
        else:
            self.set_quit()
            raise DebuggeeQuit


@dataclass(frozen=True)
class LoadedProgram:
    """A compiled program ready to run."""

    path: str
    code: types.CodeType


def _exit_code(code: Any) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


@contextlib.contextmanager
def _program_environment(path: str, args: Sequence[str]) -> Iterator[None]:
    """Present *path* as the running script for the duration of the block."""
    saved_argv = sys.argv
    saved_path = list(sys.path)
    sys.argv = [path, *args]
    sys.path.insert(0, os.path.dirname(path))
    try:
        yield
    finally:
        sys.argv = saved_argv
        sys.path[:] = saved_path


def _format_debuggee_traceback(exc: BaseException, path: str) -> str:
    """Format *exc*, dropping the adapter frames above the program's own code."""
    tb = exc.__traceback__
    while tb is not None and tb.tb_frame.f_code.co_filename != path:
        tb = tb.tb_next
    return "".join(traceback.format_exception(type(exc), exc, tb or exc.__traceback__))


class PythonInterpreter:
    """Loads and runs Python program files."""

    def load(self, program: str) -> LoadedProgram:
        """Read and compile *program*.

        Raises:
            LaunchError: The file is missing, unreadable or does not compile.
                ``diagnostic`` carries the loader's message.
        """
        path = os.path.abspath(program) if program else program
        try:
            source = Path(path).read_bytes()
            code = compile(source, path, "exec", dont_inherit=True)
        except (OSError, SyntaxError, ValueError) as exc:
            diagnostic = "".join(traceback.format_exception_only(type(exc), exc)).strip()
            msg = f"Could not load {program!r}"
            raise LaunchError(msg, program=program, diagnostic=diagnostic, cause=exc) from exc
        logger.info("Loaded %s", path)
        return LoadedProgram(path, code)

    def run(
        self,
        program: LoadedProgram,
        hook: Hook,
        *,
        args: Sequence[str] = (),
        no_debug: bool = False,
    ) -> int:
        """Run *program* to completion and return its exit code.

        With *no_debug* the program runs untraced and *hook* is never called.

        Raises:
            DebuggeeError: The program ended with an uncaught exception.
        """
        namespace: dict[str, Any] = {
            "__name__": "__main__",
            "__file__": program.path,
            "__builtins__": builtins,
        }
        try:
            with _program_environment(program.path, args):
                if no_debug:
                    exec(program.code, namespace)
                else:
                    DebuggeeTracer(hook).run(program.code, namespace)
        except DebuggeeQuit:
            logger.info("Program unwound after the client went away")
            return 0
        except SystemExit as exc:
            code = _exit_code(exc.code)
            logger.info("Program exited with code %d", code)
            return code
        except Exception as exc:
            diagnostic = _format_debuggee_traceback(exc, program.path)
            msg = f"Program terminated with {type(exc).__name__}"
            raise DebuggeeError(msg, diagnostic=diagnostic, cause=exc) from exc
        logger.info("Program finished")
        return 0


__all__ = ["DebuggeeQuit", "DebuggeeTracer", "LoadedProgram", "PythonInterpreter"]
