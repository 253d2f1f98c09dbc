"""Commands that work on the input buffer and the input history."""

from __future__ import annotations

import argparse
import re
import textwrap
from pathlib import Path

from nestrepl.engine.buffer import DELETE_SENTINEL
from nestrepl.engine.dispatch import CommandContext, CommandDispatcher
from nestrepl.engine.history import HistoryEntry, HistoryStore, parse_line_range
from nestrepl.engine.registry import CommandRegistry
from nestrepl.engine.types import AmendOutOfRange, CommandError, MalformedCommandArgs
from nestrepl.output import number_lines

from .options import CommandArgumentParser, parse_int

commands = CommandRegistry()


def _base_one(ctx: CommandContext) -> bool:
    return ctx.engine.config.base_one if ctx.engine is not None else True


def _require_engine(ctx: CommandContext):
    if ctx.engine is None:
        raise CommandError(f"{ctx.command.name if ctx.command else 'command'} needs a running engine")
    return ctx.engine


def _show_buffer(ctx: CommandContext) -> None:
    start = 1 if _base_one(ctx) else 0
    text = number_lines(enumerate(ctx.buffer.lines, start))
    if text:
        ctx.write(text)


def _show_entries(ctx: CommandContext, entries: list[HistoryEntry]) -> None:
    text = number_lines((e.index, e.line) for e in entries)
    if text:
        ctx.write(text)


@commands.command(
    "!",
    "Clear the input buffer. Useful if parsing goes wrong and you get stuck in the read loop.",
    arity=0,
)
def clear_buffer(ctx: CommandContext) -> None:
    ctx.buffer.clear()
    ctx.write("Input buffer cleared!")


@commands.command("show-input", "Show the current multi-line input buffer without evaluating it.", arity=0)
def show_input(ctx: CommandContext) -> None:
    _show_buffer(ctx)


def _to_index(number: str | None, *, base: int, default: int | None) -> int | None:
    if number is None:
        return default
    n = int(number)
    if n < 0:
        return n
    if n < base:
        raise AmendOutOfRange(f"line numbers start at {base}")
    return n - base


@commands.command(
    "amend-line",
    "Amend a line of input in a multi-line expression. Type `amend-line --help` for more info.",
    pattern=r"amend-line(?:\s*(-?\d+)(?:\.\.(-?\d+))?)?",
    arity=3,
    interpolate=False,
)
def amend_line(ctx: CommandContext, start: str | None, end: str | None, replacement: str | None) -> None:
    if replacement is not None and replacement.strip() in {"-h", "--help"}:
        ctx.write(
            "\n".join(
                [
                    "usage: amend-line [N[..M]] REPLACEMENT",
                    "Replace line N (or lines N..M) of the input buffer with REPLACEMENT.",
                    "Use `!` as REPLACEMENT to delete the lines instead.",
                    "Without N the last line is amended; negative N counts from the end.",
                    "e.g: amend-line 1 x = 10",
                    "     amend-line 2..3 !",
                    "     %-1 print(x)",
                ]
            )
        )
        return
    if ctx.buffer.is_empty:
        ctx.write("Nothing to amend: the input buffer is empty.")
        return
    if replacement is None:
        raise MalformedCommandArgs("amend-line: missing replacement text (use `!` to delete lines)")

    if replacement.strip() == DELETE_SENTINEL:
        replacement = DELETE_SENTINEL

    base = 1 if _base_one(ctx) else 0
    lo = _to_index(start, base=base, default=-1)
    hi = _to_index(end, base=base, default=None)
    try:
        ctx.buffer.amend(lo, hi, replacement)
    except AmendOutOfRange:
        shown = start if end is None else f"{start}..{end}"
        raise AmendOutOfRange(
            f"line {shown} is outside the input buffer ({len(ctx.buffer)} lines)"
        ) from None
    _show_buffer(ctx)


commands.alias("%", "amend-line", pattern=r"%(-?\d+)?(?:\.\.(-?\d+))?")


def _hist_parser() -> CommandArgumentParser:
    p = CommandArgumentParser(
        "hist",
        description="View, search and replay input history. e.g: hist --replay 2..8",
        epilog="RANGE is N, N..M (inclusive) or N...M (exclusive); write --replay=-3..-1 for negative ranges.",
    )
    views = p.add_mutually_exclusive_group()
    views.add_argument("-g", "--grep", metavar="PATTERN", help="Show lines matching PATTERN.")
    views.add_argument("-r", "--replay", metavar="RANGE", help="Replay a line or range of lines.")
    views.add_argument("-c", "--clear", action="store_true", help="Clear the in-memory history.")
    views.add_argument("-H", "--head", metavar="N", nargs="?", const="10", help="Show the first N lines.")
    views.add_argument("-T", "--tail", metavar="N", nargs="?", const="10", help="Show the last N lines.")
    views.add_argument("-s", "--show", metavar="RANGE", help="Show a line or range of lines.")
    p.add_argument("-e", "--exclude", action="store_true", help="Leave out lines that are commands.")
    return p


def _history_view(ctx: CommandContext) -> HistoryStore:
    """History without the `hist` line currently being run."""
    lines = ctx.history.lines
    if lines and lines[-1] == ctx.line:
        lines = lines[:-1]
    return HistoryStore(lines)


def _is_replay(ctx: CommandContext, line: str) -> bool:
    """True for a `hist` line that replays history itself."""
    found = ctx.registry.match(line)
    if found is None or found[0].handler is not hist:
        return False
    spec, match = found
    try:
        opts = _hist_parser().parse_args(
            [a for a in CommandDispatcher.build_args(spec, match) if a is not None]
        )
    except (argparse.ArgumentError, MalformedCommandArgs):
        return False
    return opts.replay is not None


@commands.command("hist", "Show, search and replay input history. Type `hist --help` for more info.")
def hist(ctx: CommandContext, *args: str) -> None:
    opts = _hist_parser().parse(ctx, args)
    if opts is None:
        return

    if opts.clear:
        ctx.history.clear()
        ctx.write("History cleared.")
        return

    view = _history_view(ctx)

    if opts.replay is not None:
        line_range = parse_line_range(opts.replay)
        # A replayed replay would push its own range again without end.
        if any(_is_replay(ctx, e.line) for e in view.select(line_range)):
            raise MalformedCommandArgs("hist: refusing to replay a range that contains `hist --replay`")
        _require_engine(ctx).push_input(view.replay(line_range))
        return

    if opts.grep is not None:
        try:
            entries = view.grep(opts.grep)
        except re.error as exc:
            raise MalformedCommandArgs(f"hist: invalid pattern {opts.grep!r}: {exc}") from exc
    elif opts.head is not None:
        entries = view.head(parse_int(opts.head, what="--head"))
    elif opts.tail is not None:
        entries = view.tail(parse_int(opts.tail, what="--tail"))
    elif opts.show is not None:
        entries = view.select(parse_line_range(opts.show))
    else:
        entries = view.entries

    if opts.exclude:
        # Judged against the commands registered now, not when the line was entered.
        entries = [e for e in entries if not ctx.registry.matches(e.line)]
    _show_entries(ctx, entries)


def _play_parser() -> CommandArgumentParser:
    p = CommandArgumentParser(
        "play",
        description="Play back the source of a method or the lines of a file as input. e.g: play --method my_func --lines 2..3",
    )
    source = p.add_mutually_exclusive_group()
    source.add_argument("-m", "--method", metavar="NAME", help="Play the source of function/method NAME.")
    source.add_argument("-f", "--file", metavar="PATH", help="Play the contents of PATH.")
    p.add_argument("-l", "--lines", metavar="RANGE", help="Only play these lines (numbered from 1).")
    return p


@commands.command("play", "Play back a method's source or a file's lines as input. Type `play --help` for more info.")
def play(ctx: CommandContext, *args: str) -> None:
    opts = _play_parser().parse(ctx, args)
    if opts is None:
        return
    engine = _require_engine(ctx)

    if opts.method:
        binding = ctx.session.binding if ctx.session is not None else None
        try:
            text = engine.evaluator.source_for(opts.method, binding)
        except LookupError as exc:
            raise CommandError(f"play: {exc}") from exc
        text = textwrap.dedent(text)
    elif opts.file:
        try:
            text = Path(opts.file).expanduser().read_text(encoding="utf-8")
        except OSError as exc:
            raise CommandError(f"play: cannot read {opts.file}: {exc}") from exc
    else:
        raise MalformedCommandArgs("play: one of --method or --file is required")

    lines = text.splitlines()
    if opts.lines is not None:
        line_range = parse_line_range(opts.lines).shifted(-1)
        lines = lines[line_range.to_slice(len(lines))]
    if not lines:
        ctx.write("Nothing to play.")
        return
    # Trailing blank line closes any block the played text opens.
    engine.push_input("\n".join(lines) + "\n\n")
