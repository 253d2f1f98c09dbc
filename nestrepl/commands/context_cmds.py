"""Commands that enter, leave and inspect nested sessions."""

from __future__ import annotations

from nestrepl.engine.dispatch import CommandContext
from nestrepl.engine.registry import CommandRegistry
from nestrepl.engine.types import BreakoutSignal, CommandError, MalformedCommandArgs

from .options import parse_int

commands = CommandRegistry()


def _engine(ctx: CommandContext):
    if ctx.engine is None:
        raise CommandError("no running session")
    return ctx.engine


@commands.command(
    "cd",
    "Start a nested session on the value of EXPR. `cd ..` leaves the current session, `cd /` returns to the top level.",
    arity=1,
    interpolate=False,
)
def cd(ctx: CommandContext, expr: str | None) -> BreakoutSignal | None:
    engine = _engine(ctx)
    expr = (expr or "").strip()
    if not expr:
        raise MalformedCommandArgs("usage: cd EXPR | cd .. | cd /")

    if expr == "..":
        if ctx.level == 0:
            ctx.write("Already at the top level.")
            return None
        return engine.stack.breakout(ctx.level)
    if expr == "/":
        if ctx.level == 0:
            ctx.write("Already at the top level.")
            return None
        return engine.stack.breakout(1)

    try:
        target = engine.evaluator.evaluate(expr, ctx.session.binding)
    except Exception as exc:
        raise CommandError(f"cd: {type(exc).__name__}: {exc}") from exc

    outcome = engine.repl(target)
    if isinstance(outcome, BreakoutSignal):
        return outcome
    return None


@commands.command("nesting", "Show nesting information.", arity=0)
def nesting(ctx: CommandContext) -> None:
    engine = _engine(ctx)
    ctx.write("Nesting status:")
    ctx.write("--")
    for session in engine.stack:
        label = engine.evaluator.describe(session.target)
        suffix = " (top level)" if session.level == 0 else ""
        ctx.write(f"{session.level}. {label}{suffix}")


@commands.command(
    "jump-to",
    "Jump to a session further up the stack, exiting all sessions below it.",
    arity=1,
)
def jump_to(ctx: CommandContext, level: str | None) -> BreakoutSignal | None:
    engine = _engine(ctx)
    if level is None:
        raise MalformedCommandArgs("usage: jump-to LEVEL")
    n = parse_int(level, what="jump-to LEVEL")
    current = ctx.level
    if n == current:
        ctx.write(f"Already at nesting level {current}")
        return None
    if not (0 <= n < current):
        raise MalformedCommandArgs(f"Invalid nest level. Must be between 0 and {current}. Got {n}.")
    # The session at level n + 1 returns, so control resumes at level n.
    return engine.stack.breakout(n + 1)


@commands.command("exit", "End the current session. At the top level this ends the program.", arity=0)
def exit_session(ctx: CommandContext) -> BreakoutSignal:
    return _engine(ctx).stack.breakout(ctx.level)


commands.alias("quit", "exit")


@commands.command("exit-all", "End every session and the program.", arity=0)
def exit_all(ctx: CommandContext) -> BreakoutSignal:
    return _engine(ctx).stack.breakout(0)
