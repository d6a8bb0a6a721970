from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import ParseError, run_runtime_case

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            пусть x = 5;
            если (x > 3) то {
                вывести "больше";
            } иначе {
                вывести "меньше";
            }
        """
        ),
        ["больше"],
        None,
        id="if-then",
    ),
    pytest.param(
        'если (0) то { вывести 1; } иначе { вывести 2; }',
        ["2"],
        None,
        id="zero-is-falsy",
    ),
    pytest.param(
        'если ("") то { вывести 1; } иначе { вывести 2; }',
        ["2"],
        None,
        id="empty-string-is-falsy",
    ),
    pytest.param(
        'если ([]) то { вывести "да"; } иначе { вывести "нет"; }',
        ["нет"],
        None,
        id="empty-array-is-falsy",
    ),
    pytest.param(
        'если ([0]) то { вывести "да"; }',
        ["да"],
        None,
        id="nonempty-array-is-truthy",
    ),
    pytest.param(
        'если (ложь) то { вывести 1; }',
        [],
        None,
        id="if-without-else-skips",
    ),
    pytest.param(
        'если (ложь) то { } иначе если (истина) то { }',
        None,
        ParseError,
        id="else-needs-braces",
    ),
    pytest.param(
        dedent(
            """\
            {
                пусть a = 1;
            }
            вывести a;
        """
        ),
        ["1"],
        None,
        id="blocks-share-scope",
    ),
    pytest.param(
        "пусть a = 1; пусть a = \"x\"; a;",
        ["x"],
        None,
        id="let-redeclares",
    ),
    pytest.param(
        "1 + 1;",
        ["2"],
        None,
        id="expression-statement-prints",
    ),
    pytest.param(
        "вывести 1; вернуть 5; вывести 2;",
        ["1"],
        None,
        id="top-level-return-stops",
    ),
    pytest.param(
        "вывести 1; вернуть; вывести 2;",
        ["1", "2"],
        None,
        id="top-level-empty-return-continues",
    ),
    pytest.param(
        dedent(
            """\
            функция f() {
                вывести "f";
                вернуть истина;
            }
            ложь и f();
        """
        ),
        ["f", "ложь"],
        None,
        id="and-evaluates-both-sides",
    ),
    pytest.param(
        "вывести y;",
        ["Ошибка: Переменная y не определена"],
        None,
        id="undefined-variable",
    ),
    pytest.param(
        "y = 1;",
        ["Ошибка: Переменная y не объявлена"],
        None,
        id="assign-undeclared",
    ),
    pytest.param(
        "ПУСТЬ Икс = 3; ВЫВЕСТИ Икс;",
        ["3"],
        None,
        id="keywords-ignore-case",
    ),
    pytest.param(
        "пусть a = 1; вывести A;",
        ["Ошибка: Переменная A не определена"],
        None,
        id="identifiers-keep-case",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_control_flow(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
