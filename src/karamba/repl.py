"""Interactive REPL for Karamba, powered by prompt_toolkit."""

from __future__ import annotations

import re
import sys
import traceback
from prompt_toolkit import PromptSession, prompt
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .completion import KEYWORDS, OPERATORS, current_word, extract_functions, extract_variables, get_completions
from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError, parse_tokens
from .repl_highlight import KarambaLexer
from .runtime import ERROR_PREFIX, Interpreter
from .token_types import TT
from .types import KarambaInputError, KrbNull, RunResult
from .utils import debug_py_trace_enabled, set_debug_py_trace

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/keywords": ("List language keywords and operators", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Forget all variables and functions", ""),
}

_DEPTH_OPEN = {TT.LPAR, TT.LSQB, TT.LBRACE}
_DEPTH_CLOSE = {TT.RPAR, TT.RSQB, TT.RBRACE}


def is_complete(text: str) -> bool:
    """True when every bracket is closed and no string is left open."""
    try:
        tokens = tokenize(text)
    except LexError:
        return False

    depth = 0
    for tok in tokens:
        if tok.type in _DEPTH_OPEN:
            depth += 1
        elif tok.type in _DEPTH_CLOSE:
            depth -= 1

    # extra closers: submit and let the parser complain
    return depth <= 0


class KarambaCompleter(Completer):
    """Slash commands on an empty prompt, language completions otherwise."""

    def __init__(self, interp: Interpreter):
        self.interp = interp

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if text.startswith("/"):
            for cmd, (desc, hint) in _SLASH_CMDS.items():
                if cmd.startswith(text):
                    yield Completion(cmd, start_position=-len(text), display_meta=desc)
            return

        word, start, _ = current_word(document.text, document.cursor_position)
        if not word:
            return

        variables = list(dict.fromkeys([*self.interp.frame.vars, *extract_variables(document.text)]))
        functions = list(dict.fromkeys([*self.interp.functions, *extract_functions(document.text)]))

        for item in get_completions(word, variables, functions):
            yield Completion(
                item.text,
                start_position=start - document.cursor_position,
                display=item.label,
                display_meta=item.description or "",
            )


def _handle_slash(line: str, interp: Interpreter) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/keywords":
        for item in KEYWORDS + OPERATORS:
            print(f"{item.label:<12} {item.description}")
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            set_debug_py_trace(True)
        elif arg.lower() in ("off", "0", "false", "no"):
            set_debug_py_trace(False)
        elif arg == "":
            set_debug_py_trace(not debug_py_trace_enabled())
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        interp.reset()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def _read_input(text: str) -> str:
    try:
        return prompt(text + " ")
    except (EOFError, KeyboardInterrupt):
        raise KarambaInputError("Ввод прерван") from None


def repl_eval(text: str, interp: Interpreter) -> RunResult:
    """Run one submission against the session's interpreter."""
    program = parse_tokens(tokenize(text))
    # a top-level `вернуть` from an earlier submission must not stop this one
    interp.frame.pending_return = KrbNull()
    return interp.interpret(program)


def _print_traceback(result: RunResult) -> None:
    tb = getattr(result.error, "krb_py_trace", None)
    if debug_py_trace_enabled() and tb is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(tb)), file=sys.stderr, end="")


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    interp = Interpreter(input_provider=_read_input, output_sink=print)

    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        if is_complete(buf.text) or buf.text.lstrip().startswith("/"):
            buf.validate_and_handle()
            return
        buf.insert_text("\n    ")

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=KarambaLexer(),
        completer=KarambaCompleter(interp),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("karamba repl: Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if _handle_slash(text, interp):
            continue

        try:
            result = repl_eval(text, interp)
        except (ParseError, LexError) as exc:
            print(f"{ERROR_PREFIX}{exc}", file=sys.stderr)
            continue

        if result.error is not None:
            _print_traceback(result)
