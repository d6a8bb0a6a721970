"""
Lexer for Karamba - Recursive Descent Parser

Tokenizes Karamba source code into a stream of tokens.

Features:
- Single-pass tokenization
- Position tracking (line, column, source offsets)
- Case-insensitive Cyrillic keywords, longest keyword first
- Optional COMMENT tokens for the REPL highlighter
"""

from typing import List

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Karamba lexer.

    Whitespace and `//` comments separate tokens and are dropped, unless
    `emit_comments` is set, in which case comments come through as
    TT.COMMENT for highlighting.
    """

    # Keyword mapping (keys are lowercase)
    KEYWORDS = {
        'пусть': TT.LET,
        'если': TT.IF,
        'то': TT.THEN,
        'иначе': TT.ELSE,
        'пока': TT.WHILE,
        'для': TT.FOR,
        'для_каждого': TT.FOR_EACH,
        'в': TT.IN,
        'функция': TT.FUNC,
        'вернуть': TT.RETURN,
        'вывести': TT.PRINT,
        'ввести': TT.INPUT,
        'и': TT.AND,
        'или': TT.OR,
        'не': TT.NOT,
        'истина': TT.BOOLEAN,
        'ложь': TT.BOOLEAN,
    }

    TRUE_WORD = 'истина'
    FALSE_WORD = 'ложь'

    # Compound keywords must be tried before their prefixes (для_каждого vs для)
    KEYWORDS_BY_LENGTH = sorted(KEYWORDS, key=len, reverse=True)

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('<', TT.LT),
        ('>', TT.GT),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        (',', TT.COMMA),
        (';', TT.SEMI),
    ]

    def __init__(self, source: str, emit_comments: bool = False):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []
        self.emit_comments = emit_comments

        # Start of the token being scanned
        self.start_pos = 0
        self.start_line = 1
        self.start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark_start()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        # Skip whitespace, newlines included
        if self.skip_whitespace():
            return

        self.mark_start()

        # Comments
        if self.peek() == '/' and self.peek(1) == '/':
            self.scan_comment()
            return

        # String literals
        if self.peek() in ('"', "'"):
            self.scan_string()
            return

        # Numbers
        if is_digit(self.peek()):
            self.scan_number()
            return

        # Identifiers and keywords
        if is_ident_start(self.peek()):
            self.scan_identifier()
            return

        # Operators and punctuation
        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_comment(self):
        """Scan `//` comment until end of line"""
        value = ''
        while self.pos < len(self.source) and self.peek() != '\n':
            value += self.advance()

        if self.emit_comments:
            self.emit(TT.COMMENT, value)

    def scan_string(self):
        """Scan string literal: "..." or '...' (no escape processing)"""
        quote = self.advance()
        value = ''

        while self.pos < len(self.source) and self.peek() != quote:
            ch = self.advance()
            value += ch
            if ch == '\n':
                self.line += 1
                self.column = 1

        if self.pos >= len(self.source):
            raise LexError(f"Незакрытая строка на строке {self.start_line}", self.start_line, self.start_column)

        self.advance()  # Closing quote
        self.emit(TT.STRING, value)

    def scan_number(self):
        """Scan number literal: digits with an optional fractional part"""
        value = ''

        # Integer part
        while is_digit(self.peek()):
            value += self.advance()

        # Decimal part, only when a digit follows the dot
        if self.peek() == '.' and is_digit(self.peek(1)):
            value += self.advance()  # .
            while is_digit(self.peek()):
                value += self.advance()

        self.emit(TT.NUMBER, float(value))

    def scan_identifier(self):
        """Scan identifier or keyword"""
        value = ''

        while is_ident_char(self.peek()):
            value += self.advance()

        normalized = value.lower()
        for keyword in self.KEYWORDS_BY_LENGTH:
            if normalized == keyword:
                token_type = self.KEYWORDS[keyword]
                if token_type == TT.BOOLEAN:
                    self.emit(TT.BOOLEAN, normalized == self.TRUE_WORD)
                else:
                    self.emit(token_type, value)
                return

        self.emit(TT.IDENT, value)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)
                return

        ch = self.peek()
        raise LexError(
            f"Неожиданный символ: {ch} на строке {self.line}, столбец {self.column}",
            self.line,
            self.column,
        )

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = ''
        for _ in range(n):
            ch = self.source[self.pos] if self.pos < len(self.source) else '\0'
            result += ch
            self.pos += 1
            self.column += 1
        return result

    def skip_whitespace(self) -> bool:
        """Skip whitespace and newlines, return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t', '\r', '\n'):
            if self.advance() == '\n':
                self.line += 1
                self.column = 1
            skipped = True
        return skipped

    def mark_start(self):
        self.start_pos = self.pos
        self.start_line = self.line
        self.start_column = self.column

    def emit(self, token_type: TT, value):
        """Emit a token positioned at the start of its lexeme"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.start_line,
            column=self.start_column,
            start_pos=self.start_pos,
            end_pos=self.pos,
        )
        self.tokens.append(tok)


class LexError(Exception):
    """Lexical analysis error"""
    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'

def is_ident_start(ch: str) -> bool:
    return (
        'a' <= ch <= 'z'
        or 'A' <= ch <= 'Z'
        or 'а' <= ch <= 'я'
        or 'А' <= ch <= 'Я'
        or ch in ('ё', 'Ё', '_')
    )

def is_ident_char(ch: str) -> bool:
    return is_ident_start(ch) or is_digit(ch)


def tokenize(source: str, emit_comments: bool = False) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, emit_comments=emit_comments)
    return lexer.tokenize()
