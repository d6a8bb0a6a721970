from __future__ import annotations

import math
from typing import Callable

from lark import Token, Tree

from ..runtime import Interpreter
from ..types import (
    KrbBool,
    KrbNumber,
    KrbString,
    KrbValue,
    KarambaDivisionByZero,
    KarambaRuntimeError,
    KarambaTypeError,
)
from .helpers import is_truthy, require_number, stringify, values_equal

EvalFunc = Callable[[Tree, Interpreter], KrbValue]

def eval_unary(n: Tree, interp: Interpreter, eval_func: EvalFunc) -> KrbValue:
    op, operand_node = n.children
    operand = eval_func(operand_node, interp)

    match op:
        case Token(type='NOT'):
            return KrbBool(not is_truthy(operand))
        case Token(type='MINUS'):
            if not isinstance(operand, KrbNumber):
                raise KarambaTypeError("Унарный минус требует числовой операнд")
            return KrbNumber(-operand.value)
        case _:
            raise KarambaRuntimeError(f"Неизвестный унарный оператор: {op}")

def eval_binary(n: Tree, interp: Interpreter, eval_func: EvalFunc) -> KrbValue:
    """Evaluate both operands (no short-circuit), then apply the operator."""
    op, left_node, right_node = n.children
    left = eval_func(left_node, interp)
    right = eval_func(right_node, interp)

    return apply_binary(op, left, right)

def apply_binary(op: Token, left: KrbValue, right: KrbValue) -> KrbValue:
    match op.type:
        case 'PLUS':
            if isinstance(left, KrbString) or isinstance(right, KrbString):
                return KrbString(stringify(left) + stringify(right))
            return KrbNumber(require_number(left, op) + require_number(right, op))
        case 'MINUS':
            return KrbNumber(require_number(left, op) - require_number(right, op))
        case 'STAR':
            return KrbNumber(require_number(left, op) * require_number(right, op))
        case 'SLASH':
            dividend = require_number(left, op)
            divisor = require_number(right, op)
            if divisor == 0:
                raise KarambaDivisionByZero()
            return KrbNumber(dividend / divisor)
        case 'MOD':
            return KrbNumber(_remainder(require_number(left, op), require_number(right, op)))
        case 'EQ':
            return KrbBool(values_equal(left, right))
        case 'NEQ':
            return KrbBool(not values_equal(left, right))
        case 'LT':
            return KrbBool(require_number(left, op) < require_number(right, op))
        case 'LTE':
            return KrbBool(require_number(left, op) <= require_number(right, op))
        case 'GT':
            return KrbBool(require_number(left, op) > require_number(right, op))
        case 'GTE':
            return KrbBool(require_number(left, op) >= require_number(right, op))
        case 'AND':
            return KrbBool(is_truthy(left) and is_truthy(right))
        case 'OR':
            return KrbBool(is_truthy(left) or is_truthy(right))
        case _:
            raise KarambaRuntimeError(f"Неизвестный оператор: {op}")

def _remainder(dividend: float, divisor: float) -> float:
    # truncated remainder; NaN where fmod has no answer (x % 0, inf % y)
    try:
        return math.fmod(dividend, divisor)
    except ValueError:
        return math.nan
