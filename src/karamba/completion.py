"""Completion candidates for Karamba source: keywords, operators and names found in the code."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .lexer_rd import is_ident_char

@dataclass(frozen=True)
class CompletionItem:
    label: str
    kind: str  # keyword | variable | function | operator | constant
    description: Optional[str] = None
    insert_text: Optional[str] = None

    @property
    def text(self) -> str:
        return self.insert_text if self.insert_text is not None else self.label


KEYWORDS: List[CompletionItem] = [
    CompletionItem('пусть', 'keyword', 'Объявление переменной', 'пусть '),
    CompletionItem('если', 'keyword', 'Условный оператор', 'если () то {\n    \n}'),
    CompletionItem('то', 'keyword', 'Часть условия'),
    CompletionItem('иначе', 'keyword', 'Альтернативная ветка условия', 'иначе {\n    \n}'),
    CompletionItem('пока', 'keyword', 'Цикл while', 'пока () {\n    \n}'),
    CompletionItem('для', 'keyword', 'Цикл for', 'для (пусть i = 0; i < 10; i = i + 1) {\n    \n}'),
    CompletionItem('для_каждого', 'keyword', 'Цикл foreach', 'для_каждого (элемент в массив) {\n    \n}'),
    CompletionItem('функция', 'keyword', 'Объявление функции', 'функция имя() {\n    \n}'),
    CompletionItem('вернуть', 'keyword', 'Возврат значения', 'вернуть '),
    CompletionItem('вывести', 'keyword', 'Вывод значения', 'вывести '),
    CompletionItem('ввести', 'keyword', 'Ввод значения с клавиатуры', 'ввести '),
    CompletionItem('и', 'operator', 'Логическое И'),
    CompletionItem('или', 'operator', 'Логическое ИЛИ'),
    CompletionItem('не', 'operator', 'Логическое НЕ'),
    CompletionItem('истина', 'constant', 'Булево значение true'),
    CompletionItem('ложь', 'constant', 'Булево значение false'),
]

OPERATORS: List[CompletionItem] = [
    CompletionItem('+', 'operator', 'Сложение'),
    CompletionItem('-', 'operator', 'Вычитание'),
    CompletionItem('*', 'operator', 'Умножение'),
    CompletionItem('/', 'operator', 'Деление'),
    CompletionItem('%', 'operator', 'Остаток от деления'),
    CompletionItem('==', 'operator', 'Равенство'),
    CompletionItem('!=', 'operator', 'Неравенство'),
    CompletionItem('<', 'operator', 'Меньше'),
    CompletionItem('>', 'operator', 'Больше'),
    CompletionItem('<=', 'operator', 'Меньше или равно'),
    CompletionItem('>=', 'operator', 'Больше или равно'),
]

_LET_RE = re.compile(r'пусть\s+(\w+)\s*=', re.IGNORECASE)
_FUNC_RE = re.compile(r'функция\s+(\w+)\s*\(', re.IGNORECASE)

def _unique(matches: List[str]) -> List[str]:
    # first occurrence order
    return list(dict.fromkeys(matches))

def extract_variables(code: str) -> List[str]:
    return _unique(_LET_RE.findall(code))

def extract_functions(code: str) -> List[str]:
    return _unique(_FUNC_RE.findall(code))

def current_word(text: str, cursor: int) -> Tuple[str, int, int]:
    """Return (word, start, end) for the identifier run touching `cursor`."""
    start = end = cursor

    while start > 0 and is_ident_char(text[start - 1]):
        start -= 1

    while end < len(text) and is_ident_char(text[end]):
        end += 1

    return text[start:end], start, end

def get_completions(word: str, variables: List[str], functions: List[str]) -> List[CompletionItem]:
    """Case-insensitive prefix match: keywords, then variables, then functions."""
    prefix = word.lower()
    items = [kw for kw in KEYWORDS if kw.label.lower().startswith(prefix)]

    for name in variables:
        if name.lower().startswith(prefix):
            items.append(CompletionItem(name, 'variable', 'Переменная', name))

    for name in functions:
        if name.lower().startswith(prefix):
            items.append(CompletionItem(name, 'function', 'Функция', f"{name}("))

    return items
