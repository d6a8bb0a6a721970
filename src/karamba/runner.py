from __future__ import annotations

import argparse
import asyncio
import inspect
from concurrent.futures import ThreadPoolExecutor
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from lark import Tree

from .eval.io import wrap_awaitable
from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError, parse_tokens
from .runtime import ERROR_PREFIX, InputProvider, Interpreter, OutputSink
from .token_types import Tok
from .types import KarambaInputError, RunResult
from .utils import configure_logging, debug_py_trace_enabled, large_thread_stack

logger = logging.getLogger(__name__)

class Karamba:
    """
    Front-end for one program: source text in, printed lines out.

    Lex and parse errors raise before anything runs, so a program that does
    not parse prints nothing. Runtime errors never raise; they end up as the
    last line of the returned RunResult.
    """

    def __init__(self, source: str, input_provider: Optional[InputProvider] = None, output_sink: Optional[OutputSink] = None):
        self.source = source
        self.input_provider = input_provider
        self.output_sink = output_sink
        self._tokens: Optional[List[Tok]] = None

    def tokens(self) -> List[Tok]:
        if self._tokens is None:
            self._tokens = tokenize(self.source)
            logger.debug("first tokens: %s", self._tokens[:10])
        return self._tokens

    def compile(self) -> Tree:
        return parse_tokens(self.tokens())

    def run(self) -> RunResult:
        program = self.compile()
        return Interpreter(self.input_provider, self.output_sink).interpret(program)

    async def run_async(self) -> RunResult:
        """
        Run without blocking the caller's event loop. The walk happens in a
        worker thread; awaitable input replies are resolved back on this loop.
        """
        program = self.compile()
        loop = asyncio.get_running_loop()
        provider = self.input_provider

        def threadsafe_provider(prompt: str) -> str:
            reply = provider(prompt)
            if inspect.isawaitable(reply):
                return asyncio.run_coroutine_threadsafe(wrap_awaitable(reply), loop).result()
            return reply

        interp = Interpreter(threadsafe_provider if provider is not None else None, self.output_sink)
        # a deep Karamba call chain needs more C stack than the default worker gets
        with large_thread_stack():
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="karamba")
            future = executor.submit(interp.interpret, program)
        executor.shutdown(wait=False)
        return await asyncio.wrap_future(future)

def run(source: str, input_provider: Optional[InputProvider] = None, output_sink: Optional[OutputSink] = None) -> RunResult:
    """Tokenize, parse and run `source` in a fresh interpreter."""
    return Karamba(source, input_provider, output_sink).run()

async def run_async(source: str, input_provider: Optional[InputProvider] = None, output_sink: Optional[OutputSink] = None) -> RunResult:
    return await Karamba(source, input_provider, output_sink).run_async()

def console_input(prompt: str) -> str:
    try:
        return input(prompt + " ")
    except EOFError:
        raise KarambaInputError("Ввод прерван") from None

def report_runtime_error(result: RunResult) -> None:
    """Extra stderr detail for an absorbed runtime error (position, traceback)."""
    error = result.error
    if error is None:
        return

    if error.line is not None:
        print(f"{ERROR_PREFIX}{error}", file=sys.stderr)

    tb = getattr(error, "krb_py_trace", None)
    if debug_py_trace_enabled() and tb is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(tb)), file=sys.stderr, end="")

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing file => read its contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    try:
        is_file = candidate.is_file()
    except OSError:  # literal code too long to be a path
        is_file = False

    if is_file:
        return candidate.read_text(encoding="utf-8")

    return arg

def _build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="karamba", description="Run Karamba programs")
    ap.add_argument("source", nargs="?", help="path, '-' for stdin, or literal code")
    ap.add_argument("--tokens", action="store_true", help="print the token stream and exit")
    ap.add_argument("--ast", action="store_true", help="print the syntax tree and exit")
    ap.add_argument("--repl", action="store_true", help="start the interactive REPL")
    ap.add_argument("--log-level", default=None, help="logging level (default: $KARAMBA_LOG_LEVEL or WARNING)")
    return ap

def main(argv: Optional[List[str]] = None) -> None:
    args = _build_arg_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.repl or (args.source is None and sys.stdin.isatty()):
        from .repl import repl
        repl()
        return

    source = _load_source(args.source)
    program = Karamba(source, input_provider=console_input, output_sink=print)

    try:
        if args.tokens:
            for tok in program.tokens():
                print(tok)
            return

        if args.ast:
            print(program.compile().pretty())
            return

        result = program.run()
    except (LexError, ParseError) as exc:
        print(f"{ERROR_PREFIX}{exc}", file=sys.stderr)
        raise SystemExit(1) from None

    if result.error is not None:
        report_runtime_error(result)
        raise SystemExit(1)

if __name__ == "__main__":
    main()
