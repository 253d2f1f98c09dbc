"""Option parsing for commands.

Commands parse their shell-split arguments with argparse; parse failures
become `MalformedCommandArgs` instead of exiting the process.
"""

from __future__ import annotations

import argparse
from typing import Iterable

from nestrepl.engine.dispatch import CommandContext
from nestrepl.engine.types import MalformedCommandArgs


class CommandArgumentParser(argparse.ArgumentParser):
    def __init__(self, prog: str, description: str | None = None, **kwargs) -> None:
        super().__init__(prog=prog, description=description, add_help=False, exit_on_error=False, **kwargs)
        self.add_argument("-h", "--help", action="store_true", help="Show this message.")

    def error(self, message: str):  # type: ignore[override]
        raise MalformedCommandArgs(f"{self.prog}: {message}")

    def parse(self, ctx: CommandContext, args: Iterable[str | None]) -> argparse.Namespace | None:
        """Parse `args`; prints help and returns None for `--help`."""
        try:
            ns = self.parse_args([a for a in args if a is not None])
        except argparse.ArgumentError as exc:
            raise MalformedCommandArgs(f"{self.prog}: {exc}") from exc
        if ns.help:
            ctx.write(self.format_help().rstrip())
            return None
        return ns


def parse_int(value: str | None, *, what: str) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise MalformedCommandArgs(f"{what} must be an integer, got {value!r}") from None
