"""Pending multi-line expression buffer."""

from __future__ import annotations

from .types import AmendOutOfRange

DELETE_SENTINEL = "!"


class ExpressionBuffer:
    """Accumulates input lines until the evaluator reports a complete expression.

    Lines are stored with their trailing newline so `text` is exactly what the
    evaluator sees.
    """

    def __init__(self, text: str = "") -> None:
        self._lines: list[str] = []
        if text:
            self.replace(text)

    def __len__(self) -> int:
        return len(self._lines)

    def __str__(self) -> str:
        return self.text

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def text(self) -> str:
        return "".join(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def append(self, line: str) -> None:
        if not line.endswith("\n"):
            line += "\n"
        self._lines.append(line)

    def clear(self) -> None:
        self._lines.clear()

    def replace(self, text: str) -> None:
        """Replace the whole buffer, e.g. with text read back from an editor."""
        self._lines = text.splitlines(keepends=True)
        if self._lines and not self._lines[-1].endswith("\n"):
            self._lines[-1] += "\n"

    def resolve_range(self, start: int, end: int | None = None) -> tuple[int, int]:
        """Map possibly-negative inclusive indices onto absolute positions."""
        size = len(self._lines)
        if end is None:
            end = start
        lo = start + size if start < 0 else start
        hi = end + size if end < 0 else end
        if not (0 <= lo < size) or not (0 <= hi < size):
            raise AmendOutOfRange(
                f"line range {start}..{end} is outside the input buffer ({size} lines)"
            )
        if lo > hi:
            raise AmendOutOfRange(f"line range {start}..{end} is reversed")
        return lo, hi

    def amend(self, start: int, end: int | None, replacement: str) -> bool:
        """Replace (or delete, for `!`) lines start..end, both 0-based and inclusive.

        Returns False without touching anything when the buffer is empty.
        Raises AmendOutOfRange for indices outside the buffer.
        """
        if self.is_empty:
            return False
        lo, hi = self.resolve_range(start, end)
        if replacement == DELETE_SENTINEL:
            new_lines: list[str] = []
        else:
            new_lines = [replacement.rstrip("\n") + "\n"]
        self._lines[lo : hi + 1] = new_lines
        return True
