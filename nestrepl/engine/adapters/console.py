"""Terminal input, replayed input and the external editor."""

from __future__ import annotations

import os
import shlex
import subprocess
from typing import Callable, Iterable, TextIO

# Enable readline for arrow keys, history navigation, and line editing.
try:
    import readline
except ImportError:
    readline = None  # type: ignore[assignment]  # Windows fallback

from ..types import CommandError
from .base import BaseEditor, BaseInput


class ReadlineInput(BaseInput):
    """Interactive terminal input; lines read here are recorded in history."""

    records_history = True

    def __init__(self, *, completions: Callable[[], Iterable[str]] | None = None) -> None:
        self._completions = completions
        if completions is not None:
            self._setup_completer()

    def _setup_completer(self) -> None:
        """Set up tab completion for command names."""
        if readline is None:
            return

        def completer(text: str, state: int) -> str | None:
            names = sorted(self._completions()) if self._completions else []
            matches = [name for name in names if name.startswith(text)]
            return matches[state] if state < len(matches) else None

        readline.set_completer(completer)
        readline.set_completer_delims(" \t\n")
        readline.parse_and_bind("tab: complete")

    def seed_history(self, lines: Iterable[str]) -> None:
        """Mirror loaded history into readline so up/down arrows can reach it."""
        if readline is None:
            return
        readline.clear_history()
        for line in lines:
            readline.add_history(line)

    def readline(self, prompt: str) -> str:
        return input(prompt)


class StringInput(BaseInput):
    """Feeds a fixed block of text line by line (history replay, `play`)."""

    def __init__(self, text: str, *, echo: TextIO | None = None) -> None:
        self._lines = iter(text.splitlines())
        self._echo = echo

    def readline(self, prompt: str) -> str:
        try:
            line = next(self._lines)
        except StopIteration:
            raise EOFError from None
        if self._echo is not None:
            self._echo.write(f"{prompt}{line}\n")
        return line


class ExternalEditor(BaseEditor):
    def __init__(self, command: str | None = None) -> None:
        self.command = command or os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vi"

    def open_for_edit(self, path: str, line: int = 1) -> None:
        argv = shlex.split(self.command)
        if line and line > 0:
            argv.append(f"+{line}")
        argv.append(path)
        try:
            status = subprocess.call(argv)
        except OSError as exc:
            raise CommandError(f"failed to start editor {self.command!r}: {exc}") from exc
        if status != 0:
            raise CommandError(f"editor {self.command!r} exited with status {status}")
