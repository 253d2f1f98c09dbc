"""Input history: in-memory log plus append-only file persistence.

The history file may be shared by several independently running processes.
It is therefore only ever opened for append: each process writes the entries
it added since its own last save (tracked by `saved_count`) and never
truncates or rewrites what other processes wrote in the meantime.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Pattern

from .types import MalformedCommandArgs, PersistenceIOError

logger = logging.getLogger(__name__)

_RANGE_RE = re.compile(r"^\s*(-?\d+)\s*(?:(\.\.\.?)\s*(-?\d+))?\s*$")


@dataclass(frozen=True)
class HistoryEntry:
    index: int
    line: str


@dataclass(frozen=True)
class LineRange:
    """`N`, `N..M` (inclusive) or `N...M` (exclusive); negatives count from the end."""

    start: int
    end: int | None = None
    exclusive: bool = False

    def to_slice(self, size: int) -> slice:
        start = self.start + size if self.start < 0 else self.start
        if self.end is None:
            stop = start + 1
        else:
            end = self.end + size if self.end < 0 else self.end
            stop = end if self.exclusive else end + 1
        start = max(0, start)
        stop = min(max(start, stop), size)
        return slice(start, stop)

    def shifted(self, offset: int) -> "LineRange":
        """Shift non-negative bounds, e.g. to turn 1-based display numbers into indices."""
        start = self.start + offset if self.start >= 0 else self.start
        end = self.end
        if end is not None and end >= 0:
            end += offset
        return LineRange(start=start, end=end, exclusive=self.exclusive)


def parse_line_range(text: str | None) -> LineRange:
    if text is None:
        raise MalformedCommandArgs("missing line range")
    m = _RANGE_RE.match(text)
    if not m:
        raise MalformedCommandArgs(f"invalid line range: {text!r} (expected N, N..M or N...M)")
    start = int(m.group(1))
    if m.group(2) is None:
        return LineRange(start=start)
    return LineRange(start=start, end=int(m.group(3)), exclusive=m.group(2) == "...")


class HistoryStore:
    def __init__(self, lines: Iterable[str] | None = None, *, path: Path | str | None = None) -> None:
        self._lines: list[str] = list(lines or [])
        # Number of this process's entries already flushed to the history file.
        self.saved_count = 0
        self.path = Path(path).expanduser() if path is not None else None
        self.persistent = True

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(self._lines)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def entries(self) -> list[HistoryEntry]:
        return self._tag(self._lines, 0)

    @staticmethod
    def _tag(lines: list[str], offset: int) -> list[HistoryEntry]:
        return [HistoryEntry(index=offset + i, line=line) for i, line in enumerate(lines)]

    def append(self, line: str) -> HistoryEntry:
        self._lines.append(line)
        return HistoryEntry(index=len(self._lines) - 1, line=line)

    def clear(self) -> None:
        self._lines.clear()
        self.saved_count = 0

    def grep(self, pattern: str | Pattern[str]) -> list[HistoryEntry]:
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return [e for e in self.entries if regex.search(e.line)]

    def head(self, n: int) -> list[HistoryEntry]:
        return self._tag(self._lines[: max(0, n)], 0)

    def tail(self, n: int) -> list[HistoryEntry]:
        offset = max(0, len(self._lines) - max(0, n))
        return self._tag(self._lines[offset:], offset)

    def select(self, line_range: LineRange) -> list[HistoryEntry]:
        sl = line_range.to_slice(len(self._lines))
        return self._tag(self._lines[sl], sl.start)

    def replay(self, line_range: LineRange) -> str:
        """Text for the caller to push as the next input; nothing is executed here."""
        selected = [e.line for e in self.select(line_range)]
        if not selected:
            return ""
        return "\n".join(selected) + "\n"

    def _resolve_path(self, path: Path | str | None) -> Path:
        if path is not None:
            return Path(path).expanduser()
        if self.path is None:
            raise ValueError("no history file configured")
        return self.path

    def _degrade(self, exc: OSError | UnicodeError, *, action: str, path: Path) -> None:
        # Report once, then keep working in memory only.
        self.persistent = False
        logger.warning("history %s failed for %s: %s (continuing without persistence)", action, path, exc)
        raise PersistenceIOError(f"cannot {action} history file {path}: {exc}") from exc

    def load(self, path: Path | str | None = None) -> int:
        """Seed the store from the history file; loaded lines count as already saved.

        File lines go ahead of any lines this store has not saved yet, which
        stay pending for the next `save`.
        """
        p = self._resolve_path(path)
        self.path = p
        try:
            text = p.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("no history file at %s", p)
            return 0
        except (OSError, UnicodeDecodeError) as exc:
            self._degrade(exc, action="read", path=p)
        loaded = text.splitlines()
        unsaved = self._lines[self.saved_count :]
        self._lines[self.saved_count :] = loaded + unsaved
        self.saved_count += len(loaded)
        logger.debug("loaded %d history lines from %s", len(loaded), p)
        return len(loaded)

    def save(self, path: Path | str | None = None) -> int:
        """Append this process's unsaved entries to the history file.

        Returns the number of lines written.
        """
        p = self._resolve_path(path)
        if not self.persistent:
            logger.debug("history persistence disabled; skipping save to %s", p)
            return 0

        pending = self._lines[self.saved_count :]
        try:
            data = "".join(line + "\n" for line in pending).encode("utf-8")
            p.parent.mkdir(parents=True, exist_ok=True)
            on_disk = p.read_bytes() if p.exists() else b""
            with p.open("ab") as f:
                if data:
                    if on_disk and not on_disk.endswith(b"\n"):
                        f.write(b"\n")
                    f.write(data)
        except (OSError, UnicodeEncodeError) as exc:
            self._degrade(exc, action="write", path=p)

        logger.debug(
            "saved %d history lines to %s (file had %d lines)", len(pending), p, on_disk.count(b"\n")
        )
        self.saved_count = len(self._lines)
        return len(pending)
