from __future__ import annotations

from typing import Callable, Dict

from lark import Tree

from .runtime import Interpreter
from .types import (
    KrbArray,
    KrbBool,
    KrbNumber,
    KrbString,
    KrbValue,
    KarambaRuntimeError,
)

from .eval.bind import eval_assign, eval_index, eval_let
from .eval.blocks import exec_statements
from .eval.common import body_statements, ident_name
from .eval.expr import eval_binary, eval_unary
from .eval.fn import eval_call, eval_fn_def, eval_return_stmt
from .eval.io import eval_input_stmt, eval_print_stmt
from .eval.loops import eval_for_stmt, eval_foreach_stmt, eval_if_stmt, eval_while_stmt

EvalFunc = Callable[[Tree, Interpreter], KrbValue]
ExecFunc = Callable[[Tree, Interpreter], None]


def _maybe_attach_location(exc: KarambaRuntimeError, node: Tree) -> None:
    """Record the innermost failing node's position; outer nodes leave it alone."""
    if exc.line is not None:
        return

    meta = getattr(node, "meta", None)
    if meta is None or getattr(meta, "empty", True):
        return

    exc.line = getattr(meta, "line", None)
    exc.column = getattr(meta, "column", None)

# ---------------- Public API ----------------

def exec_program(program: Tree, interp: Interpreter) -> None:
    # top-level statements form one block: a non-null `вернуть` ends the run
    exec_statements(program.children, interp, exec_node)

# ---------------- Core evaluator ----------------

def eval_node(n: Tree, interp: Interpreter) -> KrbValue:
    try:
        return _eval_node_inner(n, interp)
    except KarambaRuntimeError as e:
        _maybe_attach_location(e, n)
        raise

def exec_node(n: Tree, interp: Interpreter) -> None:
    try:
        _exec_node_inner(n, interp)
    except KarambaRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Tree, interp: Interpreter) -> KrbValue:
    handler = _EXPR_DISPATCH.get(n.data)
    if handler is not None:
        return handler(n, interp)

    match n.data:
        case 'number':
            return KrbNumber(n.children[0])
        case 'string':
            return KrbString(n.children[0])
        case 'boolean':
            return KrbBool(n.children[0])
        case 'variable':
            return interp.frame.get(ident_name(n.children[0]))
        case 'array':
            return KrbArray([eval_node(c, interp) for c in n.children])
        case _:
            raise KarambaRuntimeError(f"Неизвестное выражение: {n.data}")

def _exec_node_inner(n: Tree, interp: Interpreter) -> None:
    handler = _STMT_DISPATCH.get(n.data)
    if handler is None:
        raise KarambaRuntimeError(f"Неизвестная инструкция: {n.data}")

    handler(n, interp)

def _block(n: Tree, interp: Interpreter) -> None:
    exec_statements(body_statements(n), interp, exec_node)


_EXPR_DISPATCH: Dict[str, EvalFunc] = {
    'index': lambda n, interp: eval_index(n, interp, eval_node),
    'binary': lambda n, interp: eval_binary(n, interp, eval_node),
    'unary': lambda n, interp: eval_unary(n, interp, eval_node),
    'call': lambda n, interp: eval_call(n, interp, eval_node, exec_node),
}

_STMT_DISPATCH: Dict[str, ExecFunc] = {
    'let': lambda n, interp: eval_let(n, interp, eval_node),
    'assign': lambda n, interp: eval_assign(n, interp, eval_node),
    'if': lambda n, interp: eval_if_stmt(n, interp, eval_node, exec_node),
    'while': lambda n, interp: eval_while_stmt(n, interp, eval_node, exec_node),
    'for': lambda n, interp: eval_for_stmt(n, interp, eval_node, exec_node),
    'foreach': lambda n, interp: eval_foreach_stmt(n, interp, eval_node, exec_node),
    'print': lambda n, interp: eval_print_stmt(n, interp, eval_node),
    'input': eval_input_stmt,
    'function': eval_fn_def,
    'return': lambda n, interp: eval_return_stmt(n, interp, eval_node),
    'block': _block,
}
