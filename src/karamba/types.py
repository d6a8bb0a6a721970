from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from typing_extensions import TypeAlias

from lark import Tree

# ---------- Value Model ----------

@dataclass
class KrbNull:
    def __repr__(self) -> str:
        return "null"

@dataclass
class KrbNumber:
    value: float
    def __repr__(self) -> str:
        v = self.value
        return str(int(v)) if v.is_integer() else str(v)

@dataclass
class KrbString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class KrbBool:
    value: bool
    def __repr__(self) -> str:
        return "истина" if self.value else "ложь"

@dataclass(eq=False)
class KrbArray:
    """Shared mutable sequence; every alias sees element writes."""
    items: List['KrbValue']
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

KrbValue: TypeAlias = KrbNull | KrbNumber | KrbString | KrbBool | KrbArray

# ---------- Environment ----------

@dataclass
class FunctionDef:
    name: str
    params: List[str]
    body: Tree

@dataclass
class Frame:
    """Variables of one call plus its pending return value.

    A null pending return means "nothing returned yet", so `вернуть;`
    cannot be told apart from not returning at all.
    """
    vars: Dict[str, KrbValue] = field(default_factory=dict)
    pending_return: KrbValue = field(default_factory=KrbNull)

    def has_returned(self) -> bool:
        return not isinstance(self.pending_return, KrbNull)

    def define(self, name: str, val: KrbValue) -> None:
        self.vars[name] = val

    def get(self, name: str) -> KrbValue:
        if name in self.vars:
            return self.vars[name]

        raise KarambaUndefinedError(f"Переменная {name} не определена")

    def set(self, name: str, val: KrbValue) -> None:
        if name not in self.vars:
            raise KarambaUndefinedError(f"Переменная {name} не объявлена")

        self.vars[name] = val

@dataclass
class RunResult:
    """Printed lines of one run; `error` is set when the last line reports it."""
    lines: List[str]
    error: Optional['KarambaRuntimeError'] = None

    @property
    def ok(self) -> bool:
        return self.error is None

# ---------- Exceptions ----------

class KarambaRuntimeError(Exception):
    line: Optional[int]
    column: Optional[int]

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.line = None
        self.column = None
        self.krb_py_trace = None

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        if self.column is None:
            return f"{self.message} (строка {self.line})"

        return f"{self.message} (строка {self.line}, столбец {self.column})"

class KarambaUndefinedError(KarambaRuntimeError):
    pass

class KarambaTypeError(KarambaRuntimeError):
    pass

class KarambaArityError(KarambaRuntimeError):
    pass

class KarambaIndexError(KarambaRuntimeError):
    def __init__(self, index: float, length: int):
        from .eval.helpers import format_number
        super().__init__(f"Индекс {format_number(index)} выходит за границы массива (длина: {length})")
        self.index = index
        self.length = length

class KarambaDivisionByZero(KarambaRuntimeError):
    def __init__(self, message: str = "Деление на ноль"):
        super().__init__(message)

class KarambaInputError(KarambaRuntimeError):
    pass

class KarambaRecursionError(KarambaRuntimeError):
    def __init__(self, message: str = "Превышена максимальная глубина рекурсии"):
        super().__init__(message)
