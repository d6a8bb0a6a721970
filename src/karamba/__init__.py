"""Karamba: a small teaching language with Russian keywords."""

import logging

from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError, parse_source
from .runner import Karamba, run, run_async
from .runtime import Interpreter
from .types import KarambaRuntimeError, RunResult

logging.getLogger(__name__).addHandler(logging.NullHandler())
