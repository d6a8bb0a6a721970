from __future__ import annotations

from typing import Any, List, Optional

from lark import Token, Tree

from ..types import KarambaRuntimeError

def token_kind(node: Any) -> Optional[str]:
    if not isinstance(node, Token):
        return None
    return str(node.type)

def ident_name(node: Any) -> str:
    if token_kind(node) == 'IDENT':
        return str(node.value)

    raise KarambaRuntimeError("Ожидается имя")

def body_statements(node: Optional[Tree]) -> List[Tree]:
    if node is None:
        return []
    return list(node.children)
