from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Awaitable, Callable, Dict, Iterator, List, Optional, Union

from lark import Tree

from .types import (
    Frame,
    FunctionDef,
    KrbValue,
    KarambaArityError,
    KarambaRecursionError,
    KarambaRuntimeError,
    KarambaUndefinedError,
    RunResult,
)
from .utils import deep_recursion

logger = logging.getLogger(__name__)

InputReply = Union[str, Awaitable[str]]
InputProvider = Callable[[str], InputReply]
OutputSink = Callable[[str], None]

ERROR_PREFIX = "Ошибка: "

class Interpreter:
    """
    Owns everything one run mutates: the current frame, the function table
    and the output buffer. Calls swap whole frames instead of nesting scopes.
    """

    def __init__(self, input_provider: Optional[InputProvider] = None, output_sink: Optional[OutputSink] = None):
        self.frame = Frame()
        self.functions: Dict[str, FunctionDef] = {}
        self.output: List[str] = []
        self.input_provider = input_provider
        self.output_sink = output_sink

    def interpret(self, program: Tree) -> RunResult:
        """Run a program; runtime errors become the last output line."""
        from .evaluator import exec_program  # local import to avoid cycle

        self.output = []

        try:
            with deep_recursion():
                exec_program(program, self)
        except RecursionError as exc:
            error = KarambaRecursionError()
            error.krb_py_trace = exc.__traceback__
            return self._absorb(error)
        except KarambaRuntimeError as error:
            error.krb_py_trace = error.__traceback__
            return self._absorb(error)

        return RunResult(list(self.output))

    def _absorb(self, error: KarambaRuntimeError) -> RunResult:
        logger.debug("runtime error absorbed into output: %s", error)
        self.emit(ERROR_PREFIX + error.message)
        return RunResult(list(self.output), error)

    def emit(self, line: str) -> None:
        self.output.append(line)
        if self.output_sink is not None:
            self.output_sink(line)

    def declare_function(self, fn: FunctionDef) -> None:
        if fn.name in self.functions:
            logger.debug("redeclaring function %s", fn.name)
        self.functions[fn.name] = fn

    def lookup_function(self, name: str) -> FunctionDef:
        fn = self.functions.get(name)
        if fn is None:
            raise KarambaUndefinedError(f"Функция {name} не определена")
        return fn

    @contextmanager
    def call_frame(self, bindings: Dict[str, KrbValue]) -> Iterator[Frame]:
        """Install a fresh frame holding only `bindings`; restore the caller's after."""
        saved = self.frame
        self.frame = Frame(dict(bindings))

        try:
            yield self.frame
        finally:
            self.frame = saved

    def reset(self) -> None:
        self.frame = Frame()
        self.functions.clear()
        self.output = []


def check_arity(fn: FunctionDef, argc: int) -> None:
    if argc != len(fn.params):
        raise KarambaArityError(f"Ожидается {len(fn.params)} аргументов, получено {argc}")

