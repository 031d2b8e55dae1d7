"""Interactive REPL for inspecting parameter expansion ASTs, powered by prompt_toolkit."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.shortcuts import clear

from .parser_rd import ParseError, parse_source
from .repl_highlight import ParamExpLexer
from .runner import report_error, show
from .utils import debug_py_trace_enabled, set_debug_py_trace

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/render": ("Print canonical source instead of the tree", "[on|off]"),
}

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")


@dataclass
class ReplState:
    """Settings toggled by slash commands."""

    render: bool = False


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


def _toggle(arg: str, current: bool) -> bool | None:
    """Resolve an [on|off] argument; empty toggles, junk returns None."""
    arg = arg.lower()
    if arg in _ON:
        return True
    if arg in _OFF:
        return False
    if arg == "":
        return not current
    return None


def _handle_slash(line: str, state: ReplState) -> bool:
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
        enabled = _toggle(arg, debug_py_trace_enabled())
        if enabled is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        set_debug_py_trace(enabled)
        print(f"Python traceback: {'on' if enabled else 'off'}")
        return True

    if cmd == "/render":
        enabled = _toggle(arg, state.render)
        if enabled is None:
            print("Usage: /render [on|off]", file=sys.stderr)
            return True

        state.render = enabled
        print(f"Render: {'on' if enabled else 'off'}")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def eval_line(text: str, state: ReplState) -> None:
    """Parse one REPL entry and print its tree, or the error."""
    try:
        tree = parse_source(text)
    except ParseError as exc:
        report_error(exc)
        return

    print(show(tree, as_source=state.render))


def repl() -> None:
    """Interactive read-parse-print loop with prompt_toolkit."""
    state = ReplState()

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=ParamExpLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
    )

    print("paramexp repl — Ctrl-D to exit, / for commands")

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
        if not text:
            continue

        if _handle_slash(text, state):
            continue

        eval_line(text, state)


if __name__ == "__main__":
    repl()
