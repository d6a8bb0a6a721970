"""
Recursive Descent Parser for Karamba

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: Recursive descent with one precedence layer per method
- AST: lark Trees, labelled by node kind, positioned via meta
"""

from typing import Any, List, Optional

from lark import Tree, Token
from lark.tree import Meta

from .lexer_rd import tokenize
from .token_types import TT, Tok
from .utils import deep_recursion

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else None
        self.column = token.column if token else None
        super().__init__(_describe(message, token))


def _describe(message: str, token: Optional[Tok]) -> str:
    if token is None:
        return message

    if token.type == TT.EOF:
        current = "Конец файла"
    else:
        value = '' if token.value is None else token.value
        current = f"Текущий токен: {token.type.name}({value})"

    return f"{message} на строке {token.line}, столбец {token.column}. {current}"


# Operator token types per binary precedence level
_EQUALITY_OPS = (TT.EQ, TT.NEQ)
_COMPARE_OPS = (TT.LT, TT.LTE, TT.GT, TT.GTE)
_ADD_OPS = (TT.PLUS, TT.MINUS)
_MUL_OPS = (TT.STAR, TT.SLASH, TT.MOD)


class Parser:
    """
    Recursive descent parser for Karamba.

    Expression precedence (lowest to highest):
    1. или
    2. и
    3. equality (==, !=)
    4. compare (<, <=, >, >=)
    5. add (+, -)
    6. mul (*, /, %)
    7. unary (не, -)
    8. postfix (call, [index])
    9. primary (literals, identifiers, arrays, parens)
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None, 0, 0)

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
            self.current = self.tokens[self.pos]
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: str) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            raise ParseError(message, self.current)
        return self.advance()

    def at_end(self) -> bool:
        return self.check(TT.EOF)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire program"""
        stmts = []

        with deep_recursion():
            while not self.at_end():
                # Stray separators between top-level statements
                if self.match(TT.SEMI):
                    continue

                try:
                    stmts.append(self.parse_declaration())
                except RecursionError:
                    raise ParseError("Слишком глубокая вложенность", self.current) from None

        return Tree('program', stmts)

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_declaration(self) -> Tree:
        if self.check(TT.LET):
            return self.parse_let_stmt()
        if self.check(TT.FUNC):
            return self.parse_function_stmt()
        return self.parse_statement()

    def parse_statement(self) -> Tree:
        """
        Parse a single statement.

        Keyword statements dispatch on their first token; anything else is an
        assignment or a bare expression, and a bare expression prints its value.
        """
        if self.check(TT.IF):
            return self.parse_if_stmt()
        if self.check(TT.WHILE):
            return self.parse_while_stmt()
        if self.check(TT.FOR_EACH):
            return self.parse_foreach_stmt()
        if self.check(TT.FOR):
            return self.parse_for_stmt()
        if self.check(TT.PRINT):
            return self.parse_print_stmt()
        if self.check(TT.INPUT):
            return self.parse_input_stmt()
        if self.check(TT.RETURN):
            return self.parse_return_stmt()
        if self.check(TT.LBRACE):
            lbrace = self.advance()
            return _node('block', self.parse_block_items(), lbrace)

        return self.parse_expr_stmt()

    def parse_let_stmt(self) -> Tree:
        """Parse `пусть NAME = expr ;`"""
        let_tok = self.expect(TT.LET, "Ожидается пусть")
        name = self._ident(self.expect(TT.IDENT, "Ожидается имя переменной"))

        if self.check(TT.LSQB):
            raise ParseError("Нельзя использовать индексацию при объявлении переменной", self.current)

        self.expect(TT.ASSIGN, "Ожидается =")
        value = self.parse_expr()
        self.expect(TT.SEMI, "Ожидается ;")
        return _node('let', [name, value], let_tok)

    def parse_function_stmt(self) -> Tree:
        """Parse `функция NAME ( params ) { body }`"""
        fn_tok = self.expect(TT.FUNC, "Ожидается функция")
        name = self._ident(self.expect(TT.IDENT, "Ожидается имя функции"))
        self.expect(TT.LPAR, "Ожидается (")

        params = []
        if not self.check(TT.RPAR):
            params.append(self._ident(self.expect(TT.IDENT, "Ожидается параметр")))
            while self.match(TT.COMMA):
                params.append(self._ident(self.expect(TT.IDENT, "Ожидается параметр")))

        self.expect(TT.RPAR, "Ожидается )")
        body = self.parse_body()
        return _node('function', [name, Tree('params', params), body], fn_tok)

    def parse_if_stmt(self) -> Tree:
        """
        Parse if statement:
        если (expr) то { body } [иначе { body }]
        """
        if_tok = self.expect(TT.IF, "Ожидается если")
        self.expect(TT.LPAR, "Ожидается (")
        cond = self.parse_expr()
        self.expect(TT.RPAR, "Ожидается )")
        self.expect(TT.THEN, "Ожидается то")
        then_body = self.parse_body()

        else_body = None
        if self.match(TT.ELSE):
            else_body = self.parse_body()

        return _node('if', [cond, then_body, else_body], if_tok)

    def parse_while_stmt(self) -> Tree:
        """Parse while loop: пока (expr) { body }"""
        while_tok = self.expect(TT.WHILE, "Ожидается пока")
        self.expect(TT.LPAR, "Ожидается (")
        cond = self.parse_expr()
        self.expect(TT.RPAR, "Ожидается )")
        body = self.parse_body()
        return _node('while', [cond, body], while_tok)

    def parse_foreach_stmt(self) -> Tree:
        """Parse for-each loop: для_каждого (NAME в expr) { body }"""
        each_tok = self.expect(TT.FOR_EACH, "Ожидается для_каждого")
        self.expect(TT.LPAR, "Ожидается (")
        name = self._ident(self.expect(TT.IDENT, "Ожидается имя переменной"))
        self.expect(TT.IN, 'Ожидается "в"')
        source = self.parse_expr()
        self.expect(TT.RPAR, "Ожидается )")
        body = self.parse_body()
        return _node('foreach', [name, source, body], each_tok)

    def parse_for_stmt(self) -> Tree:
        """
        Parse counting loop:
        для (init?; cond?; incr?) { body }

        init is a `пусть` declaration, an assignment or nothing; a bare
        expression in the init slot is parsed and dropped.
        """
        for_tok = self.expect(TT.FOR, "Ожидается для")
        self.expect(TT.LPAR, "Ожидается (")

        init = None
        if self.check(TT.LET):
            init = self.parse_let_stmt()
        elif not self.match(TT.SEMI):
            expr = self.parse_expr()
            if self.check(TT.ASSIGN):
                init = self._finish_assign(expr)
            self.expect(TT.SEMI, "Ожидается ;")

        cond = None
        if not self.check(TT.SEMI):
            cond = self.parse_expr()
        self.expect(TT.SEMI, "Ожидается ;")

        incr = None
        if not self.check(TT.RPAR):
            incr = self.parse_expr()
            if self.check(TT.ASSIGN):
                incr = self._finish_assign(incr)
        self.expect(TT.RPAR, "Ожидается )")

        body = self.parse_body()
        return _node('for', [init, cond, incr, body], for_tok)

    def parse_print_stmt(self) -> Tree:
        print_tok = self.expect(TT.PRINT, "Ожидается вывести")
        value = self.parse_expr()
        self.expect(TT.SEMI, "Ожидается ;")
        return _node('print', [value], print_tok)

    def parse_input_stmt(self) -> Tree:
        input_tok = self.expect(TT.INPUT, "Ожидается ввести")
        name = self._ident(self.expect(TT.IDENT, "Ожидается имя переменной"))
        self.expect(TT.SEMI, "Ожидается ;")
        return _node('input', [name], input_tok)

    def parse_return_stmt(self) -> Tree:
        return_tok = self.expect(TT.RETURN, "Ожидается вернуть")
        value = None
        if not self.check(TT.SEMI):
            value = self.parse_expr()
        self.expect(TT.SEMI, "Ожидается ;")
        return _node('return', [value], return_tok)

    def parse_expr_stmt(self) -> Tree:
        """Assignment `target = expr ;` or an expression printed implicitly"""
        start = self.current
        expr = self.parse_expr()

        if self.check(TT.ASSIGN):
            assign = self._finish_assign(expr)
            self.expect(TT.SEMI, "Ожидается ; после присваивания")
            return assign

        self.expect(TT.SEMI, "Ожидается ; после выражения")
        return _node('print', [expr], start)

    def _finish_assign(self, target: Tree) -> Tree:
        eq_tok = self.expect(TT.ASSIGN, "Ожидается =")
        if target.data not in ('variable', 'index'):
            raise ParseError("Присваивать можно только переменным или элементам массивов", eq_tok)

        value = self.parse_expr()
        return _node('assign', [target, value], _meta_token(target, eq_tok))

    def parse_body(self) -> Tree:
        """Parse `{ stmts }` into a body node"""
        lbrace = self.expect(TT.LBRACE, "Ожидается {")
        return _node('body', self.parse_block_items(), lbrace)

    def parse_block_items(self) -> List[Tree]:
        """Parse statements up to and including the closing brace"""
        stmts = []
        while not self.check(TT.RBRACE) and not self.at_end():
            stmts.append(self.parse_declaration())
        self.expect(TT.RBRACE, "Ожидается }")
        return stmts

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Tree:
        return self.parse_or_expr()

    def parse_or_expr(self) -> Tree:
        return self._binary_layer((TT.OR,), self.parse_and_expr)

    def parse_and_expr(self) -> Tree:
        return self._binary_layer((TT.AND,), self.parse_equality_expr)

    def parse_equality_expr(self) -> Tree:
        return self._binary_layer(_EQUALITY_OPS, self.parse_compare_expr)

    def parse_compare_expr(self) -> Tree:
        return self._binary_layer(_COMPARE_OPS, self.parse_add_expr)

    def parse_add_expr(self) -> Tree:
        return self._binary_layer(_ADD_OPS, self.parse_mul_expr)

    def parse_mul_expr(self) -> Tree:
        return self._binary_layer(_MUL_OPS, self.parse_unary_expr)

    def _binary_layer(self, ops, operand) -> Tree:
        """Left-associative chain of one precedence level"""
        left = operand()
        while self.check(*ops):
            op_tok = self.advance()
            right = operand()
            left = _node('binary', [_op_token(op_tok), left, right], op_tok)
        return left

    def parse_unary_expr(self) -> Tree:
        if self.check(TT.NOT, TT.MINUS):
            op_tok = self.advance()
            operand = self.parse_unary_expr()
            return _node('unary', [_op_token(op_tok), operand], op_tok)
        return self.parse_postfix_expr()

    def parse_postfix_expr(self) -> Tree:
        """
        Parse primary followed by `(args)` and `[index]` suffixes.

        Only a variable becomes a call. After anything else the `(args)`
        suffix is parsed and dropped: `a[0](1)` is just `a[0]` and
        `f(1)(2)` is just `f(1)`.
        """
        expr = self.parse_primary()

        while True:
            if self.check(TT.LPAR):
                lpar = self.advance()
                args = self.parse_call_args()
                if expr.data == 'variable':
                    expr = _node('call', [expr.children[0], Tree('args', args)], _meta_token(expr, lpar))
            elif self.check(TT.LSQB):
                lsqb = self.advance()
                index = self.parse_expr()
                self.expect(TT.RSQB, "Ожидается ]")
                expr = _node('index', [expr, index], _meta_token(expr, lsqb))
            else:
                break

        return expr

    def parse_call_args(self) -> List[Tree]:
        args = []
        if not self.check(TT.RPAR):
            args.append(self.parse_expr())
            while self.match(TT.COMMA):
                args.append(self.parse_expr())
        self.expect(TT.RPAR, "Ожидается )")
        return args

    def parse_primary(self) -> Tree:
        tok = self.current

        if self.match(TT.BOOLEAN):
            return _node('boolean', [tok.value], tok)
        if self.match(TT.NUMBER):
            return _node('number', [tok.value], tok)
        if self.match(TT.STRING):
            return _node('string', [tok.value], tok)

        if self.match(TT.LSQB):
            elements = []
            if not self.check(TT.RSQB):
                elements.append(self.parse_expr())
                while self.match(TT.COMMA):
                    elements.append(self.parse_expr())
            self.expect(TT.RSQB, "Ожидается ]")
            return _node('array', elements, tok)

        if self.match(TT.IDENT):
            return _node('variable', [self._ident(tok)], tok)

        if self.match(TT.LPAR):
            expr = self.parse_expr()
            self.expect(TT.RPAR, "Ожидается )")
            return expr

        raise ParseError("Ожидается выражение", tok)

    # ========================================================================
    # Helpers
    # ========================================================================

    def _ident(self, tok: Tok) -> Token:
        return Token('IDENT', tok.value, start_pos=tok.start_pos, line=tok.line, column=tok.column,
                     end_pos=tok.end_pos)


def _op_token(tok: Tok) -> Token:
    return Token(tok.type.name, tok.value, start_pos=tok.start_pos, line=tok.line, column=tok.column,
                 end_pos=tok.end_pos)


def _node(label: str, children: List[Any], tok: Optional[Tok]) -> Tree:
    """Build a tree whose meta points at the token that started it"""
    meta = Meta()
    if tok is not None:
        meta.empty = False
        meta.line = tok.line
        meta.column = tok.column
        meta.start_pos = tok.start_pos
    return Tree(label, children, meta)


def _meta_token(node: Tree, fallback: Tok) -> Tok:
    """Token-shaped position of an existing node (postfix and assignment heads)"""
    meta = node.meta
    if getattr(meta, 'empty', True):
        return fallback
    return Tok(fallback.type, fallback.value, meta.line, meta.column, getattr(meta, 'start_pos', 0))


# ============================================================================
# Convenience
# ============================================================================

def parse_tokens(tokens: List[Tok]) -> Tree:
    return Parser(tokens).parse()


def parse_source(source: str) -> Tree:
    """Tokenize and parse source into a program tree"""
    return parse_tokens(tokenize(source))
