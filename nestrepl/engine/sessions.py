"""Nested session stack."""

from __future__ import annotations

import logging
import uuid
import weakref
from dataclasses import dataclass, field
from typing import Any, Iterator

from .buffer import ExpressionBuffer
from .types import BreakoutSignal

logger = logging.getLogger(__name__)


def _new_session_id() -> str:
    return f"sess_{uuid.uuid4().hex[:8]}"


@dataclass(eq=False)
class Session:
    """One running loop. `level` is the stack size when it was pushed (outermost = 0)."""

    level: int
    target: Any
    binding: Any = None
    buffer: ExpressionBuffer = field(default_factory=ExpressionBuffer, repr=False)
    parent_ref: "weakref.ReferenceType[Session] | None" = field(default=None, repr=False)
    id: str = field(default_factory=_new_session_id)

    @property
    def parent(self) -> "Session | None":
        return self.parent_ref() if self.parent_ref is not None else None


class SessionStack:
    def __init__(self) -> None:
        self._sessions: list[Session] = []

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions))

    @property
    def current(self) -> Session | None:
        return self._sessions[-1] if self._sessions else None

    @property
    def level(self) -> int | None:
        """Level of the innermost session, or None when no session is running."""
        return self._sessions[-1].level if self._sessions else None

    def push(self, target: Any, binding: Any = None) -> Session:
        parent = self.current
        session = Session(
            level=len(self._sessions),
            target=target,
            binding=binding,
            parent_ref=weakref.ref(parent) if parent is not None else None,
        )
        self._sessions.append(session)
        logger.debug("push session %s at level %d", session.id, session.level)
        return session

    def pop(self) -> Session:
        if not self._sessions:
            raise IndexError("pop from empty session stack")
        session = self._sessions.pop()
        logger.debug("pop session %s from level %d", session.id, session.level)
        return session

    def breakout(self, target_depth: int) -> BreakoutSignal:
        """Build a signal for `target_depth`, checking it names a live session."""
        level = self.level
        if level is None or not (0 <= target_depth <= level):
            raise ValueError(f"breakout target {target_depth} outside 0..{level}")
        return BreakoutSignal(target_depth=target_depth)
