"""prompt_toolkit lexer for live Karamba syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as KrbLexer, LexError
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_KEYWORD_TT = (
    TT.LET, TT.IF, TT.THEN, TT.ELSE, TT.WHILE, TT.FOR, TT.FOR_EACH, TT.IN,
    TT.FUNC, TT.RETURN, TT.PRINT, TT.INPUT, TT.AND, TT.OR, TT.NOT,
)
_OPERATOR_TT = (
    TT.PLUS, TT.MINUS, TT.STAR, TT.SLASH, TT.MOD,
    TT.EQ, TT.NEQ, TT.LT, TT.LTE, TT.GT, TT.GTE, TT.ASSIGN,
)
_PUNCT_TT = (
    TT.LPAR, TT.RPAR, TT.LSQB, TT.RSQB, TT.LBRACE, TT.RBRACE, TT.COMMA, TT.SEMI,
)

# Token type → highlight group.
TT_GROUP = {
    **{tt: "keyword" for tt in _KEYWORD_TT},
    **{tt: "operator" for tt in _OPERATOR_TT},
    **{tt: "punctuation" for tt in _PUNCT_TT},
    TT.BOOLEAN: "boolean",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.COMMENT: "comment",
}


def token_group(tokens: list[Tok], idx: int) -> str:
    tok = tokens[idx]
    # a name directly followed by `(` is a call or a declaration
    if tok.type == TT.IDENT and idx + 1 < len(tokens) and tokens[idx + 1].type == TT.LPAR:
        return "function"
    return TT_GROUP.get(tok.type, "")


def highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = KrbLexer(text, emit_comments=True).tokenize()
    except LexError:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type == TT.EOF or tok.end_pos <= tok.start_pos:
            continue

        # Unstyled gap before token.
        if tok.start_pos > pos:
            result.append(("", text[pos:tok.start_pos]))

        style = GROUP_STYLE.get(token_group(tokens, i), "")
        result.append((style, text[tok.start_pos:tok.end_pos]))
        pos = tok.end_pos

    # Trailing unstyled text.
    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class KarambaLexer(Lexer):
    """prompt_toolkit Lexer that highlights Karamba source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
