"""Command dispatch.

A line is offered to the registry before it can reach the expression buffer.
When a command matches, its argument string is split into shell words (or
passed verbatim), reconciled with the declared arity, and the handler runs
with a `CommandContext`. The line is consumed either way: it is never
appended to the buffer.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, TextIO

from .buffer import ExpressionBuffer
from .history import HistoryStore
from .registry import VARIADIC, CommandMatch, CommandRegistry, CommandSpec
from .sessions import Session
from .types import BreakoutSignal, CommandError, MalformedCommandArgs

if TYPE_CHECKING:
    from .repl import SessionEngine

logger = logging.getLogger(__name__)


@dataclass
class CommandContext:
    """Everything a handler may read or mutate."""

    output: TextIO
    buffer: ExpressionBuffer
    history: HistoryStore
    registry: CommandRegistry
    engine: "SessionEngine | None" = None
    session: Session | None = None
    line: str = ""
    command: CommandSpec | None = None

    @property
    def target(self) -> Any:
        return self.session.target if self.session is not None else None

    @property
    def level(self) -> int:
        return self.session.level if self.session is not None else 0

    def write(self, text: str = "") -> None:
        self.output.write(text + "\n")


@dataclass(frozen=True)
class DispatchResult:
    matched: bool
    command: CommandSpec | None = None
    breakout: BreakoutSignal | None = None
    error: Exception | None = None


class CommandDispatcher:
    def __init__(self, registry: CommandRegistry) -> None:
        self.registry = registry

    @staticmethod
    def build_args(spec: CommandSpec, match: CommandMatch) -> list[str | None]:
        args: list[str | None] = list(match.groups)
        if spec.interpolate:
            try:
                args.extend(shlex.split(match.arg_string) if match.arg_string else [])
            except ValueError as exc:
                raise MalformedCommandArgs(f"{spec.name}: {exc}") from exc
        else:
            args.append(match.arg_string)

        if spec.arity == VARIADIC:
            return args
        # Missing trailing arguments become None; handlers decide what absence means.
        return (args + [None] * spec.arity)[: spec.arity]

    def dispatch(self, line: str, ctx: CommandContext) -> DispatchResult:
        found = self.registry.match(line)
        if found is None:
            return DispatchResult(matched=False)

        spec, match = found
        ctx = replace(ctx, line=line, command=spec)
        logger.debug("dispatch %r -> %s", line, spec.name)
        try:
            args = self.build_args(spec, match)
            outcome = spec.handler(ctx, *args)
        except CommandError as exc:
            ctx.write(f"Error: {exc}")
            return DispatchResult(matched=True, command=spec, error=exc)
        except Exception as exc:
            # Unexpected handler failures are reported like command errors.
            logger.debug("command %s failed", spec.name, exc_info=True)
            ctx.write(f"Error: {spec.name}: {type(exc).__name__}: {exc}")
            return DispatchResult(matched=True, command=spec, error=exc)

        breakout = outcome if isinstance(outcome, BreakoutSignal) else None
        return DispatchResult(matched=True, command=spec, breakout=breakout)
