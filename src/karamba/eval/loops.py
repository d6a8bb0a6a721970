from __future__ import annotations

from typing import Callable

from lark import Tree

from ..runtime import Interpreter
from ..types import KrbArray, KrbValue, KarambaTypeError
from .blocks import ExecFunc, exec_statements
from .common import body_statements, ident_name
from .helpers import is_truthy

EvalFunc = Callable[[Tree, Interpreter], KrbValue]

def eval_if_stmt(n: Tree, interp: Interpreter, eval_func: EvalFunc, exec_func: ExecFunc) -> None:
    cond, then_body, else_body = n.children

    if is_truthy(eval_func(cond, interp)):
        exec_statements(body_statements(then_body), interp, exec_func)
    elif else_body is not None:
        exec_statements(body_statements(else_body), interp, exec_func)

def eval_while_stmt(n: Tree, interp: Interpreter, eval_func: EvalFunc, exec_func: ExecFunc) -> None:
    cond, body = n.children
    stmts = body_statements(body)

    while is_truthy(eval_func(cond, interp)):
        exec_statements(stmts, interp, exec_func)
        if interp.frame.has_returned():
            return

def eval_for_stmt(n: Tree, interp: Interpreter, eval_func: EvalFunc, exec_func: ExecFunc) -> None:
    init, cond, incr, body = n.children
    stmts = body_statements(body)

    if init is not None:
        exec_func(init, interp)

    while cond is None or is_truthy(eval_func(cond, interp)):
        exec_statements(stmts, interp, exec_func)
        if interp.frame.has_returned():
            return

        if incr is None:
            continue

        # `i = i + 1` runs as an assignment, anything else is evaluated and dropped
        if incr.data == 'assign':
            exec_func(incr, interp)
        else:
            eval_func(incr, interp)

def eval_foreach_stmt(n: Tree, interp: Interpreter, eval_func: EvalFunc, exec_func: ExecFunc) -> None:
    """
    Bind each element of a live array to the loop name. Afterwards the name is
    back to its pre-loop state: old value restored, or removed if it was unset.
    """
    name_tok, source_node, body = n.children
    name = ident_name(name_tok)
    source = eval_func(source_node, interp)

    if not isinstance(source, KrbArray):
        raise KarambaTypeError('Цикл "для_каждого" работает только с массивами')

    stmts = body_statements(body)
    frame = interp.frame
    existed = name in frame.vars
    previous = frame.vars.get(name)

    try:
        for element in source.items:
            frame.define(name, element)
            exec_statements(stmts, interp, exec_func)
            if frame.has_returned():
                break
    finally:
        if existed:
            frame.vars[name] = previous
        else:
            frame.vars.pop(name, None)
