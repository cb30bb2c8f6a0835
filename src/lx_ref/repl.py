"""Interactive REPL for lx, powered by prompt_toolkit."""

from __future__ import annotations

import logging
import os
import re
import sys
import time
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .lexer_rd import LexError, tokenize
from .runner import Session, report_error
from .token_types import TT
from .types import LxError, LxExit
from .utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled

logger = logging.getLogger(__name__)

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/env": ("Show the root environment", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Release every object and start a fresh environment", ""),
}


def _open_parens(text: str) -> int:
    """Number of unclosed '(' in *text*; the line continues while positive."""
    try:
        tokens = tokenize(text)
    except LexError:
        return 0

    depth = 0
    for tok in tokens:
        if tok.type == TT.LPAR:
            depth += 1
        elif tok.type == TT.RPAR:
            depth = max(depth - 1, 0)

    return depth


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _handle_slash(line: str, session_box: list[Session]) -> bool:
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

    if cmd == "/env":
        print("\n".join(session_box[0].env.dump()))
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            os.environ[DEBUG_PY_TRACE_ENV] = "1"
        elif arg.lower() in ("off", "0", "false", "no"):
            os.environ.pop(DEBUG_PY_TRACE_ENV, None)
        elif arg == "":
            # Toggle.
            if debug_py_trace_enabled():
                os.environ.pop(DEBUG_PY_TRACE_ENV, None)
            else:
                os.environ[DEBUG_PY_TRACE_ENV] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        released = session_box[0].release()
        session_box[0] = Session(repl=True)
        print(f"Environment reset ({released} objects released).")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def eval_line(text: str, session: Session) -> None:
    """Evaluate one REPL entry, printing the result or the error."""
    started = time.perf_counter()
    try:
        ast = session.parse(text)
        parsed = time.perf_counter()
        result = session.eval_tree(ast)
    except LxError as exc:
        report_error(exc)
        return
    except RecursionError:
        report_error(RuntimeError("maximum recursion depth exceeded"))
        return

    done = time.perf_counter()
    logger.info("parsing    %.3fms", (parsed - started) * 1000)
    logger.info("evaluating %.3fms", (done - parsed) * 1000)
    print(result)


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    # Use a mutable box so /reset can swap the session.
    session_box: list[Session] = [Session(repl=True)]

    history = InMemoryHistory()
    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer

        # Keep reading while parentheses are open.
        if not buf.text.startswith("/") and _open_parens(buf.text) > 0:
            buf.insert_text("\n")
            return

        buf.validate_and_handle()

    prompt: PromptSession[str] = PromptSession(
        history=history,
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("lx repl, Ctrl-D to exit, / for commands")

    try:
        while True:
            try:
                text = prompt.prompt("λ> ")
            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                print("KeyboardInterrupt")
                continue

            text = _normalize(text)
            if not text.strip():
                continue

            # Slash command?
            if _handle_slash(text, session_box):
                continue

            try:
                eval_line(text, session_box[0])
            except LxExit as signal:
                sys.exit(signal.code)
    finally:
        session_box[0].release()
