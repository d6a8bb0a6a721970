from __future__ import annotations

import math

import pytest

from karamba.eval.helpers import format_number, parse_number_text


@pytest.mark.parametrize(
    "value, expected",
    [
        pytest.param(0.0, "0", id="zero"),
        pytest.param(-0.0, "0", id="negative-zero"),
        pytest.param(1.0, "1", id="integer"),
        pytest.param(-2.5, "-2.5", id="negative-fraction"),
        pytest.param(123456789012.0, "123456789012", id="wide-integer"),
        pytest.param(1e21, "1e+21", id="exponent-threshold"),
        pytest.param(1.5e300, "1.5e+300", id="huge"),
        pytest.param(0.000001, "0.000001", id="small-fixed"),
        pytest.param(1e-7, "1e-7", id="small-exponent"),
        pytest.param(1.5e-10, "1.5e-10", id="small-fraction-exponent"),
        pytest.param(math.nan, "NaN", id="nan"),
        pytest.param(math.inf, "Infinity", id="infinity"),
        pytest.param(-math.inf, "-Infinity", id="negative-infinity"),
    ],
)
def test_format_number(value: float, expected: str) -> None:
    assert format_number(value) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        pytest.param("42", 42.0, id="integer"),
        pytest.param(" 3.5 ", 3.5, id="padded"),
        pytest.param("", 0.0, id="empty"),
        pytest.param("   ", 0.0, id="blank"),
        pytest.param("-7", -7.0, id="negative"),
        pytest.param("+2", 2.0, id="explicit-plus"),
        pytest.param("1e3", 1000.0, id="exponent"),
        pytest.param(".5", 0.5, id="leading-dot"),
        pytest.param("5.", 5.0, id="trailing-dot"),
        pytest.param("0x1F", 31.0, id="hex"),
        pytest.param("0b101", 5.0, id="binary"),
        pytest.param("0o17", 15.0, id="octal"),
        pytest.param("Infinity", math.inf, id="infinity"),
        pytest.param("-Infinity", -math.inf, id="negative-infinity"),
        pytest.param("abc", None, id="word"),
        pytest.param("12abc", None, id="trailing-garbage"),
        pytest.param("1_000", None, id="underscores"),
        pytest.param("0x", None, id="bare-prefix"),
        pytest.param("0xZZ", None, id="bad-hex-digits"),
        pytest.param("-0x10", None, id="signed-hex"),
        pytest.param("infinity", None, id="lowercase-infinity"),
    ],
)
def test_parse_number_text(text: str, expected) -> None:
    assert parse_number_text(text) == expected
