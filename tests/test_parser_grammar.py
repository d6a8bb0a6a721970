from __future__ import annotations

from textwrap import dedent
from typing import Any

import pytest
from lark import Token, Tree

from tests.support.harness import ParseError, parse_source


def _stmt(source: str) -> Tree:
    program = parse_source(source)
    assert program.data == "program"
    assert len(program.children) == 1
    return program.children[0]


def _ident(name: str) -> Token:
    return Token("IDENT", name)


def _num(value: float) -> Tree:
    return Tree("number", [float(value)])


def _var(name: str) -> Tree:
    return Tree("variable", [_ident(name)])


def _bin(op: str, lexeme: str, left: Any, right: Any) -> Tree:
    return Tree("binary", [Token(op, lexeme), left, right])


def test_mul_binds_tighter_than_add() -> None:
    stmt = _stmt("1 + 2 * 3;")
    assert stmt == Tree("print", [_bin("PLUS", "+", _num(1), _bin("STAR", "*", _num(2), _num(3)))])


def test_binary_ops_are_left_associative() -> None:
    stmt = _stmt("10 - 4 - 3;")
    assert stmt.children[0] == _bin("MINUS", "-", _bin("MINUS", "-", _num(10), _num(4)), _num(3))


def test_unary_not_binds_tighter_than_and() -> None:
    stmt = _stmt("не a и b;")
    expected = _bin("AND", "и", Tree("unary", [Token("NOT", "не"), _var("a")]), _var("b"))
    assert stmt.children[0] == expected


def test_comparison_below_equality() -> None:
    stmt = _stmt("a < b == истина;")
    expected = _bin("EQ", "==", _bin("LT", "<", _var("a"), _var("b")), Tree("boolean", [True]))
    assert stmt.children[0] == expected


def test_parens_override_precedence() -> None:
    stmt = _stmt("(1 + 2) * 3;")
    assert stmt.children[0] == _bin("STAR", "*", _bin("PLUS", "+", _num(1), _num(2)), _num(3))


def test_let_shape() -> None:
    assert _stmt("пусть x = [1, 'a'];") == Tree(
        "let", [_ident("x"), Tree("array", [_num(1), Tree("string", ["a"])])]
    )


def test_index_assignment_shape() -> None:
    assert _stmt("m[0][1] = 5;") == Tree(
        "assign",
        [Tree("index", [Tree("index", [_var("m"), _num(0)]), _num(1)]), _num(5)],
    )


def test_call_shape() -> None:
    assert _stmt("f(1, x);") == Tree(
        "print", [Tree("call", [_ident("f"), Tree("args", [_num(1), _var("x")])])]
    )


def test_parenthesized_name_is_called() -> None:
    assert _stmt("(f)(1);") == Tree("print", [Tree("call", [_ident("f"), Tree("args", [_num(1)])])])


def test_call_suffix_after_index_is_dropped() -> None:
    assert _stmt("a[0](1);") == Tree("print", [Tree("index", [_var("a"), _num(0)])])


def test_call_suffix_after_call_is_dropped() -> None:
    assert _stmt("f(1)(2);") == Tree("print", [Tree("call", [_ident("f"), Tree("args", [_num(1)])])])


def test_dropped_call_args_still_parsed() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source("a[0](1;")

    assert "Ожидается )" in str(exc_info.value)


def test_moderate_nesting_parses() -> None:
    depth = 300
    assert _stmt("(" * depth + "1" + ")" * depth + ";") == Tree("print", [_num(1)])


def test_excessive_nesting_is_parse_error() -> None:
    depth = 5000
    with pytest.raises(ParseError) as exc_info:
        parse_source("вывести " + "(" * depth + "1" + ")" * depth + ";")

    assert "Слишком глубокая вложенность" in str(exc_info.value)


def test_parser_usable_after_nesting_error() -> None:
    with pytest.raises(ParseError):
        parse_source("[" * 5000)

    assert _stmt("вывести 2;") == Tree("print", [_num(2)])


def test_function_shape() -> None:
    stmt = _stmt("функция f(a, b) { вернуть a; }")
    name, params, body = stmt.children

    assert stmt.data == "function"
    assert name == "f"
    assert params == Tree("params", [_ident("a"), _ident("b")])
    assert body == Tree("body", [Tree("return", [_var("a")])])


def test_if_without_else_keeps_slot() -> None:
    stmt = _stmt("если (x) то { вывести 1; }")
    assert stmt.data == "if"
    assert stmt.children[2] is None


def test_for_loop_slots() -> None:
    stmt = _stmt("для (пусть i = 0; i < 3; i = i + 1) { вывести i; }")
    init, cond, incr, body = stmt.children

    assert init.data == "let"
    assert cond.data == "binary"
    assert incr.data == "assign"
    assert body.data == "body"


def test_for_loop_empty_slots() -> None:
    stmt = _stmt("для (;;) { вернуть 1; }")
    assert stmt.children[:3] == [None, None, None]


def test_for_loop_bare_init_is_dropped() -> None:
    stmt = _stmt("для (f(); ложь;) { }")
    assert stmt.children[0] is None


def test_foreach_shape() -> None:
    stmt = _stmt("для_каждого (x в [1, 2]) { x; }")
    assert stmt.data == "foreach"
    assert stmt.children[0] == "x"
    assert stmt.children[1].data == "array"


def test_return_without_value() -> None:
    program = parse_source("функция f() { вернуть; }")
    body = program.children[0].children[2]
    assert body.children[0] == Tree("return", [None])


def test_stray_top_level_semicolons() -> None:
    program = parse_source(";; вывести 1;;; вывести 2;")
    assert [stmt.data for stmt in program.children] == ["print", "print"]


def test_nested_block_statement() -> None:
    stmt = _stmt("{ пусть a = 1; { a; } }")
    assert stmt.data == "block"
    assert stmt.children[1].data == "block"


def test_statement_meta_positions() -> None:
    program = parse_source(dedent(
        """\
        пусть a = 1;
          вывести a;
        """
    ))
    printed = program.children[1]
    assert (printed.meta.line, printed.meta.column) == (2, 3)


PARSE_ERROR_CASES = [
    pytest.param("пусть a[0] = 1;", "Нельзя использовать индексацию при объявлении переменной", id="let-indexed"),
    pytest.param("1 = 2;", "Присваивать можно только переменным или элементам массивов", id="assign-literal"),
    pytest.param("f() = 2;", "Присваивать можно только переменным или элементам массивов", id="assign-call"),
    pytest.param("вывести 1", "Ожидается ;", id="missing-semicolon"),
    pytest.param("если x то { }", "Ожидается (", id="if-without-parens"),
    pytest.param("если (x) { }", "Ожидается то", id="if-without-then"),
    pytest.param("пока (x) { вывести 1;", "Ожидается }", id="unclosed-block"),
    pytest.param("{ ; }", "Ожидается выражение", id="semicolon-inside-block"),
    pytest.param("для_каждого (x из a) { }", 'Ожидается "в"', id="foreach-without-in"),
    pytest.param("функция (a) { }", "Ожидается имя функции", id="function-without-name"),
    pytest.param("x;\n  )", "Ожидается выражение на строке 2, столбец 3", id="error-position"),
]


@pytest.mark.parametrize("source, message", PARSE_ERROR_CASES)
def test_parse_errors(source: str, message: str) -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source(source)

    assert message in str(exc_info.value)


def test_parse_error_at_eof_mentions_end_of_file() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source("вывести 1")

    err = exc_info.value
    assert err.message == "Ожидается ;"
    assert "Конец файла" in str(err)


def test_parse_error_names_current_token() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source("пусть = 1;")

    assert "Текущий токен: ASSIGN(=)" in str(exc_info.value)
