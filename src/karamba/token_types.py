"""
Token Types for the Karamba Parser

Shared between lexer, parser and highlighter to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - mirrors grammar terminals"""

    # Literals
    NUMBER = auto()
    STRING = auto()
    BOOLEAN = auto()
    IDENT = auto()

    # Keywords
    LET = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()
    WHILE = auto()
    FOR = auto()
    FOR_EACH = auto()
    IN = auto()
    FUNC = auto()
    RETURN = auto()
    PRINT = auto()
    INPUT = auto()

    # Logical
    AND = auto()
    OR = auto()
    NOT = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    MOD = auto()

    # Comparison
    EQ = auto()
    NEQ = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()

    # Assignment
    ASSIGN = auto()  # =

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LSQB = auto()
    RSQB = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    SEMI = auto()

    # Special
    EOF = auto()
    COMMENT = auto()


@dataclass(frozen=True)
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0
    start_pos: int = 0
    end_pos: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
