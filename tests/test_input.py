from __future__ import annotations

import asyncio
from textwrap import dedent
from typing import List

import pytest

from karamba.runner import run, run_async
from tests.support.harness import KarambaInputError, ScriptedInput, run_lines


@pytest.mark.parametrize(
    "source, replies, expected",
    [
        pytest.param("ввести x; вывести x + 1;", ["41"], ["42"], id="numeric-reply"),
        pytest.param("ввести x; вывести x + 1;", ["привет"], ["привет1"], id="text-reply"),
        pytest.param("ввести x; вывести x == 0;", [""], ["истина"], id="empty-reply-is-zero"),
        pytest.param("ввести x; вывести x;", ["0x10"], ["16"], id="hex-reply"),
        pytest.param("ввести x; вывести x;", [" 2.50 "], ["2.5"], id="padded-reply"),
        pytest.param(
            "ввести a; ввести b; вывести a * b;",
            ["6", "7"],
            ["42"],
            id="two-replies",
        ),
        pytest.param(
            dedent(
                """\
                функция f() {
                    ввести y;
                    вернуть y * 2;
                }
                вывести f();
                вывести y;
            """
            ),
            ["4"],
            ["8", "Ошибка: Переменная y не определена"],
            id="input-binds-in-current-frame",
        ),
    ],
)
def test_input_values(source: str, replies: List[str], expected: List[str]) -> None:
    assert run_lines(source, replies).lines == expected


def test_prompt_names_variable() -> None:
    provider = ScriptedInput(["1"])
    run("ввести возраст;", input_provider=provider)
    assert provider.prompts == ["Введите значение для возраст:"]


def test_missing_provider_is_runtime_error() -> None:
    result = run_lines("вывести 1; ввести x; вывести 2;")

    assert result.lines == ["1", "Ошибка: Функция ввода не настроена"]
    assert isinstance(result.error, KarambaInputError)


def test_non_string_reply_is_runtime_error() -> None:
    result = run("ввести x;", input_provider=lambda prompt: 5)
    assert result.lines == ["Ошибка: Источник ввода вернул int вместо строки"]


def test_provider_error_propagates_as_runtime_error() -> None:
    def refuse(prompt: str) -> str:
        raise KarambaInputError("Ввод прерван")

    result = run("вывести 1; ввести x;", input_provider=refuse)
    assert result.lines == ["1", "Ошибка: Ввод прерван"]


def test_provider_failure_becomes_input_error() -> None:
    def broken(prompt: str) -> str:
        raise RuntimeError("нет ввода")

    result = run("вывести 1; ввести x; вывести 2;", input_provider=broken)

    assert result.lines == ["1", "Ошибка: нет ввода"]
    assert isinstance(result.error, KarambaInputError)
    assert isinstance(result.error.__cause__, RuntimeError)


def test_rejecting_awaitable_becomes_input_error() -> None:
    async def provider(prompt: str) -> str:
        raise ValueError("канал закрыт")

    assert run("ввести x;", input_provider=provider).lines == ["Ошибка: канал закрыт"]


def test_rejecting_awaitable_under_run_async() -> None:
    async def provider(prompt: str) -> str:
        await asyncio.sleep(0)
        raise ValueError("канал закрыт")

    result = asyncio.run(run_async("вывести 0; ввести x;", input_provider=provider))

    assert result.lines == ["0", "Ошибка: канал закрыт"]
    assert isinstance(result.error, KarambaInputError)


def test_provider_failure_without_message_names_exception() -> None:
    def broken(prompt: str) -> str:
        raise LookupError()

    assert run("ввести x;", input_provider=broken).lines == ["Ошибка: LookupError"]


def test_output_streams_before_input_is_requested() -> None:
    events: List[str] = []

    def provider(prompt: str) -> str:
        events.append(f"ввод: {prompt}")
        return "3"

    result = run(
        'вывести "до"; ввести n; вывести n * n;',
        input_provider=provider,
        output_sink=events.append,
    )

    assert events == ["до", "ввод: Введите значение для n:", "9"]
    assert result.lines == ["до", "9"]


def test_async_provider_without_running_loop() -> None:
    async def provider(prompt: str) -> str:
        await asyncio.sleep(0)
        return "10"

    assert run("ввести x; вывести x / 4;", input_provider=provider).lines == ["2.5"]


def test_async_provider_inside_running_loop_needs_run_async() -> None:
    async def provider(prompt: str) -> str:
        return "1"

    async def main():
        return run("вывести 0; ввести x;", input_provider=provider)

    result = asyncio.run(main())

    assert result.lines[0] == "0"
    assert result.lines[1].startswith("Ошибка: асинхронный ввод внутри работающего цикла событий")
    assert isinstance(result.error, KarambaInputError)


def test_run_async_resolves_replies_on_the_loop() -> None:
    seen_loops = []

    async def provider(prompt: str) -> str:
        seen_loops.append(asyncio.get_running_loop())
        return "5"

    async def main():
        result = await run_async("ввести x; вывести x + 1;", input_provider=provider)
        return result, asyncio.get_running_loop()

    result, loop = asyncio.run(main())

    assert result.lines == ["6"]
    assert seen_loops == [loop]


def test_run_async_accepts_plain_provider() -> None:
    result = asyncio.run(run_async("ввести x; вывести x;", input_provider=ScriptedInput(["слово"])))
    assert result.lines == ["слово"]


def test_run_async_without_input() -> None:
    result = asyncio.run(run_async("вывести 2 * 21;"))
    assert result.lines == ["42"]
