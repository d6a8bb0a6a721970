from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Optional, Set

from ..types import KrbArray, KrbBool, KrbNull, KrbNumber, KrbString, KrbValue, KarambaTypeError

TRUE_WORD = "истина"
FALSE_WORD = "ложь"
NULL_WORD = "null"

def is_truthy(val: KrbValue) -> bool:
    match val:
        case KrbBool(value=b):
            return b
        case KrbNull():
            return False
        case KrbNumber(value=num):
            return num != 0
        case KrbString(value=s):
            return bool(s)
        case KrbArray(items=items):
            return bool(items)
        case _:
            return True

def values_equal(left: KrbValue, right: KrbValue) -> bool:
    """Strict equality: same kind and same value, arrays by identity."""
    match left, right:
        case KrbNumber(value=a), KrbNumber(value=b):
            return a == b
        case KrbString(value=a), KrbString(value=b):
            return a == b
        case KrbBool(value=a), KrbBool(value=b):
            return a == b
        case KrbNull(), KrbNull():
            return True
        case KrbArray(), KrbArray():
            return left is right
        case _:
            return False

def require_number(val: KrbValue, op: str) -> float:
    if isinstance(val, KrbNumber):
        return val.value

    raise KarambaTypeError(f"Оператор {op} требует числовых операндов")

def stringify(val: KrbValue, _seen: Optional[Set[int]] = None) -> str:
    match val:
        case KrbNull():
            return NULL_WORD
        case KrbBool(value=b):
            return TRUE_WORD if b else FALSE_WORD
        case KrbNumber(value=num):
            return format_number(num)
        case KrbString(value=s):
            return s
        case KrbArray(items=items):
            seen = _seen if _seen is not None else set()
            if id(val) in seen:
                return "[...]"

            seen.add(id(val))
            try:
                return "[" + ", ".join(stringify(item, seen) for item in items) + "]"
            finally:
                seen.discard(id(val))
        case _:
            raise KarambaTypeError(f"Неизвестное значение {type(val).__name__}")

def format_number(value: float) -> str:
    """Render a float the way JavaScript's Number#toString does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    # repr gives the shortest round-tripping digits
    parts = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in parts.digits)
    k = len(digits)
    n = parts.exponent + k  # position of the decimal point

    if k <= n <= 21:
        body = digits + "0" * (n - k)
    elif 0 < n <= 21:
        body = digits[:n] + "." + digits[n:]
    elif -6 < n <= 0:
        body = "0." + "0" * (-n) + digits
    else:
        exp = n - 1
        exp_str = f"e+{exp}" if exp >= 0 else f"e-{-exp}"
        mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
        body = mantissa + exp_str

    return sign + body

_DECIMAL_RE = re.compile(r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")
_RADIX_RE = re.compile(r"0([xXoObB])([0-9a-zA-Z]+)")
_RADIX_BASE = {"x": 16, "o": 8, "b": 2}

def parse_number_text(text: str) -> Optional[float]:
    """Number(text) as JavaScript reads it; None where it would give NaN."""
    s = text.strip()
    if not s:
        return 0.0

    if _DECIMAL_RE.fullmatch(s):
        if s.lstrip("+-") == "Infinity":
            return -math.inf if s.startswith("-") else math.inf
        return float(s)

    m = _RADIX_RE.fullmatch(s)
    if m:
        try:
            return float(int(m.group(2), _RADIX_BASE[m.group(1).lower()]))
        except ValueError:
            return None

    return None
