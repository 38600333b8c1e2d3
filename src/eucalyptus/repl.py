"""Interactive REPL for Eucalyptus, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .lexer_rd import LexError, tokenize
from .repl_highlight import EucalyptusLexer
from .runner import format_result, repl_eval
from .scope import Scope
from .token_types import TT
from .types import EucNil, EucalyptusError
from .utils import debug_py_trace_enabled, show_types_enabled

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
    "/scope": ("Show every binding in the environment", ""),
    "/types": ("Toggle printing inferred types", "[on|off]"),
}

_DEPTH_OPEN = {'(', '[', '{'}
_DEPTH_CLOSE = {')', ']', '}'}
_LAYOUT = {TT.EOL, TT.INDENT, TT.EOF}

# A body starts on the next line when one of these ends the line.
_BODY_OPENERS = {'=', '->'}


def _opens_body(line: str) -> bool:
    """Return True if *line* ends with `=` or `->` outside any brackets."""
    try:
        tokens = tokenize(line)
    except LexError:
        return False

    depth = 0
    last_sig = None

    for tok in tokens:
        if tok.type in _LAYOUT:
            continue
        if tok.type == TT.SYMBOL and tok.value in _DEPTH_OPEN:
            depth += 1
        elif tok.type == TT.SYMBOL and tok.value in _DEPTH_CLOSE:
            depth = max(depth - 1, 0)
        last_sig = tok

    if depth != 0 or last_sig is None:
        return False

    return last_sig.type == TT.SYMBOL and last_sig.value in _BODY_OPENERS


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


def _toggle_env(var: str, arg: str, enabled) -> bool:
    """Set, clear or flip an on/off environment flag. False on a bad argument."""
    if arg.lower() in ("on", "1", "true", "yes"):
        os.environ[var] = "1"
    elif arg.lower() in ("off", "0", "false", "no"):
        os.environ.pop(var, None)
    elif arg == "":
        if enabled():
            os.environ.pop(var, None)
        else:
            os.environ[var] = "1"
    else:
        return False

    return True


def _handle_slash(line: str, scope_box: list[Scope]) -> bool:
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

    if cmd == "/py-traceback":
        if not _toggle_env("EUCALYPTUS_DEBUG_PY_TRACE", arg, debug_py_trace_enabled):
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/types":
        if not _toggle_env("EUCALYPTUS_SHOW_TYPES", arg, show_types_enabled):
            print("Usage: /types [on|off]", file=sys.stderr)
            return True

        state = "on" if show_types_enabled() else "off"
        print(f"Show types: {state}")
        return True

    if cmd == "/scope":
        dump = scope_box[0].dump()
        print(dump if dump else "(empty)")
        return True

    if cmd == "/reset":
        scope_box[0] = Scope()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def _compute_indent(text: str) -> str:
    """Compute the auto-indent prefix for the next continuation line."""
    lines = text.split("\n")
    last = lines[-1]

    if _opens_body(last):
        existing = len(last) - len(last.lstrip())
        return " " * (existing + 4)

    # Preserve indent of the last line.
    if last.strip():
        return " " * (len(last) - len(last.lstrip()))

    return ""


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    # Use a mutable box so /reset can swap the scope.
    scope_box: list[Scope] = [Scope()]

    history = InMemoryHistory()
    lexer = EucalyptusLexer()

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
        text = buf.text

        # Single line that does not open a body => accept.
        if "\n" not in text:
            if _opens_body(text):
                buf.insert_text("\n" + _compute_indent(text))
                return

            buf.validate_and_handle()
            return

        # Multiline: if the current (last) line is empty => accept.
        lines = text.split("\n")
        if lines[-1].strip() == "":
            buf.text = "\n".join(lines[:-1])
            buf.cursor_position = len(buf.text)
            buf.validate_and_handle()
            return

        # Still in continuation; user submits with an empty line.
        buf.insert_text("\n" + _compute_indent(text))

    session: PromptSession[str] = PromptSession(
        history=history,
        lexer=lexer,
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("eucalyptus repl - Ctrl-D to exit, / for commands")

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

        if _handle_slash(text, scope_box):
            continue

        try:
            result = repl_eval(text, scope_box[0])
        except EucalyptusError as exc:
            if debug_py_trace_enabled():
                print("Python traceback:", file=sys.stderr)
                print(traceback.format_exc(), file=sys.stderr, end="")
            print(f"Error: {exc}", file=sys.stderr)
            continue

        if not isinstance(result.value, EucNil):
            print(format_result(result, show_types_enabled()))


if __name__ == "__main__":
    repl()
