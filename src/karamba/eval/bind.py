from __future__ import annotations

from typing import Callable

from lark import Tree

from ..runtime import Interpreter
from ..types import (
    KrbArray,
    KrbNumber,
    KrbValue,
    KarambaIndexError,
    KarambaTypeError,
)
from .common import ident_name

EvalFunc = Callable[[Tree, Interpreter], KrbValue]

def eval_let(n: Tree, interp: Interpreter, eval_func: EvalFunc) -> None:
    name_tok, value_node = n.children
    interp.frame.define(ident_name(name_tok), eval_func(value_node, interp))

def eval_assign(n: Tree, interp: Interpreter, eval_func: EvalFunc) -> None:
    target, value_node = n.children
    value = eval_func(value_node, interp)

    if target.data == 'variable':
        interp.frame.set(ident_name(target.children[0]), value)
        return

    if target.data == 'index':
        set_index_value(target, value, interp, eval_func)
        return

    raise KarambaTypeError("Можно присваивать только переменным или элементам массивов")

def eval_index(n: Tree, interp: Interpreter, eval_func: EvalFunc) -> KrbValue:
    object_node, index_node = n.children
    container = eval_func(object_node, interp)
    index = eval_func(index_node, interp)

    if not isinstance(container, KrbArray):
        raise KarambaTypeError("Индексация возможна только для массивов")

    return container.items[checked_index(container, index)]

def set_index_value(target: Tree, value: KrbValue, interp: Interpreter, eval_func: EvalFunc) -> None:
    """Write through an index chain; every level is bounds-checked."""
    object_node, index_node = target.children
    container = _resolve_container(object_node, interp, eval_func)
    index = eval_func(index_node, interp)
    container.items[checked_index(container, index)] = value

def _resolve_container(node: Tree, interp: Interpreter, eval_func: EvalFunc) -> KrbArray:
    match node.data:
        case 'variable':
            name = ident_name(node.children[0])
            container = interp.frame.vars.get(name)
            if not isinstance(container, KrbArray):
                raise KarambaTypeError(f"Переменная {name} не является массивом")
            return container
        case 'index':
            container = eval_index(node, interp, eval_func)
            if not isinstance(container, KrbArray):
                raise KarambaTypeError("Вложенный элемент не является массивом")
            return container
        case _:
            raise KarambaTypeError("Присваивание возможно только элементам массивов")

def checked_index(container: KrbArray, index: KrbValue) -> int:
    if not isinstance(index, KrbNumber):
        raise KarambaTypeError("Индекс должен быть числом")

    value = index.value
    length = len(container.items)

    if value < 0 or value >= length:
        raise KarambaIndexError(value, length)

    if not value.is_integer():
        raise KarambaTypeError("Индекс должен быть целым числом")

    return int(value)
