"""Engine value types and error classes.

These types are shared by the engine, the dispatcher and the commands.
They are independent of any particular evaluator or terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class ReplError(RuntimeError):
    pass


class CommandError(ReplError):
    """A command failed in a way the user should see; the loop continues."""


class MalformedCommandArgs(CommandError):
    pass


class AmendOutOfRange(CommandError):
    pass


class PersistenceIOError(ReplError):
    pass


@dataclass(frozen=True)
class BreakoutSignal:
    """Unwinds nested sessions until the session at `target_depth` returns.

    Returned (never raised) up through `step()` and `repl()`.
    """

    target_depth: int

    def __post_init__(self) -> None:
        if self.target_depth < 0:
            raise ValueError(f"target_depth must be >= 0, got {self.target_depth}")


@dataclass(frozen=True)
class EvalResult:
    """Outcome of evaluating one complete expression."""

    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
