from __future__ import annotations

from typing import Callable, Iterable

from lark import Tree

from ..runtime import Interpreter

ExecFunc = Callable[[Tree, Interpreter], None]

def exec_statements(stmts: Iterable[Tree], interp: Interpreter, exec_func: ExecFunc) -> None:
    """Run statements in order, stopping once the frame holds a non-null return."""
    for stmt in stmts:
        exec_func(stmt, interp)
        if interp.frame.has_returned():
            break
