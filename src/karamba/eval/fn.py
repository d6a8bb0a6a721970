from __future__ import annotations

from typing import Callable

from lark import Tree

from ..runtime import Interpreter, check_arity
from ..types import FunctionDef, KrbNull, KrbValue
from .blocks import ExecFunc, exec_statements
from .common import body_statements, ident_name

EvalFunc = Callable[[Tree, Interpreter], KrbValue]

def eval_fn_def(n: Tree, interp: Interpreter) -> None:
    name_tok, params, body = n.children
    fn = FunctionDef(
        name=ident_name(name_tok),
        params=[ident_name(p) for p in params.children],
        body=body,
    )
    interp.declare_function(fn)

def eval_return_stmt(n: Tree, interp: Interpreter, eval_func: EvalFunc) -> None:
    value_node = n.children[0]
    interp.frame.pending_return = KrbNull() if value_node is None else eval_func(value_node, interp)

def eval_call(n: Tree, interp: Interpreter, eval_func: EvalFunc, exec_func: ExecFunc) -> KrbValue:
    """
    Arguments are evaluated in the caller's frame, then the body runs in a
    frame holding only the parameters. The caller's frame, pending return
    included, comes back untouched.
    """
    name_tok, args_node = n.children
    fn = interp.lookup_function(ident_name(name_tok))
    check_arity(fn, len(args_node.children))

    args = [eval_func(arg, interp) for arg in args_node.children]

    with interp.call_frame(dict(zip(fn.params, args))) as callee:
        exec_statements(body_statements(fn.body), interp, exec_func)
        return callee.pending_return
