from __future__ import annotations

import asyncio
import inspect
from typing import Awaitable, Callable, TypeVar

from lark import Tree

from ..runtime import InputReply, Interpreter
from ..types import KrbNumber, KrbString, KrbValue, KarambaInputError, KarambaRuntimeError
from .common import ident_name
from .helpers import parse_number_text, stringify

EvalFunc = Callable[[Tree, Interpreter], KrbValue]
_T = TypeVar("_T")

def input_prompt(name: str) -> str:
    return f"Введите значение для {name}:"

def eval_print_stmt(n: Tree, interp: Interpreter, eval_func: EvalFunc) -> None:
    interp.emit(stringify(eval_func(n.children[0], interp)))

def eval_input_stmt(n: Tree, interp: Interpreter) -> None:
    """Ask the provider for text, keep it as a number when it reads as one."""
    name = ident_name(n.children[0])

    if interp.input_provider is None:
        raise KarambaInputError("Функция ввода не настроена")

    try:
        reply = resolve_reply(interp.input_provider(input_prompt(name)))
    except (KarambaRuntimeError, RecursionError):
        raise
    except Exception as exc:  # provider failures surface as input errors
        raise KarambaInputError(str(exc) or type(exc).__name__) from exc

    if not isinstance(reply, str):
        raise KarambaInputError(f"Источник ввода вернул {type(reply).__name__} вместо строки")

    number = parse_number_text(reply)
    interp.frame.define(name, KrbString(reply) if number is None else KrbNumber(number))

def wrap_awaitable(value: Awaitable[_T]) -> Awaitable[_T]:
    async def _forward() -> _T:
        return await value
    return _forward()

def resolve_reply(reply: InputReply) -> object:
    if not inspect.isawaitable(reply):
        return reply

    try:
        asyncio.get_running_loop()
    except RuntimeError: # no active event loop, ok to run
        return asyncio.run(wrap_awaitable(reply))

    close = getattr(reply, "close", None)
    if close is not None:
        close()
    raise KarambaInputError("асинхронный ввод внутри работающего цикла событий: используйте run_async")
