import io

import pytest

from nestrepl.engine.buffer import ExpressionBuffer
from nestrepl.engine.dispatch import CommandContext, CommandDispatcher
from nestrepl.engine.history import HistoryStore
from nestrepl.engine.registry import VARIADIC, CommandMatcher, CommandRegistry
from nestrepl.engine.types import BreakoutSignal, CommandError, MalformedCommandArgs


def _ctx(registry):
    return CommandContext(
        output=io.StringIO(),
        buffer=ExpressionBuffer(),
        history=HistoryStore(),
        registry=registry,
    )


def _recording_registry():
    calls = []
    registry = CommandRegistry()

    def record(ctx, *args):
        calls.append((ctx.command.name, args))

    return registry, calls, record


def test_command_name_must_end_at_whitespace():
    matcher = CommandMatcher("play")
    assert matcher.match("play") is not None
    assert matcher.match("play --lines 1..2").arg_string == "--lines 1..2"
    assert matcher.match("players") is None
    assert matcher.match("play.x") is None


def test_unmatched_line_is_not_consumed():
    registry, calls, record = _recording_registry()
    registry.add("play", record)
    result = CommandDispatcher(registry).dispatch("players = 3", _ctx(registry))
    assert result.matched is False
    assert calls == []


def test_first_registered_match_wins():
    registry, calls, record = _recording_registry()
    registry.add("greedy", record, pattern=r"sho\w*")
    registry.add("show", record)
    CommandDispatcher(registry).dispatch("show", _ctx(registry))
    assert calls == [("greedy", ())]


def test_arguments_are_split_like_a_shell():
    registry, calls, record = _recording_registry()
    registry.add("cmd", record)
    CommandDispatcher(registry).dispatch('cmd "a b" c', _ctx(registry))
    assert calls == [("cmd", ("a b", "c"))]


def test_fixed_arity_pads_and_truncates():
    registry, calls, record = _recording_registry()
    registry.add("three", record, arity=3)
    registry.add("one", record, arity=1)
    dispatcher = CommandDispatcher(registry)

    dispatcher.dispatch("three x", _ctx(registry))
    dispatcher.dispatch("one x y z", _ctx(registry))

    assert calls == [("three", ("x", None, None)), ("one", ("x",))]


def test_uninterpolated_commands_get_groups_and_raw_text():
    registry, calls, record = _recording_registry()
    registry.add("sub", record, pattern=r"sub(\d+)?", arity=2, interpolate=False)
    CommandDispatcher(registry).dispatch('sub7 "keep   this"', _ctx(registry))
    assert calls == [("sub", ("7", '"keep   this"'))]


def test_alias_behaves_like_its_target():
    registry, calls, record = _recording_registry()
    registry.add("original", record, arity=VARIADIC)
    spec = registry.alias("o", "original")
    dispatcher = CommandDispatcher(registry)

    dispatcher.dispatch("original a", _ctx(registry))
    dispatcher.dispatch("o a", _ctx(registry))

    assert [args for _, args in calls] == [("a",), ("a",)]
    assert spec.alias_of == "original"
    assert spec.handler is registry.find("original").handler


def test_alias_of_unknown_command_raises():
    with pytest.raises(KeyError):
        CommandRegistry().alias("x", "missing")


def test_unbalanced_quotes_report_malformed_arguments():
    registry, calls, record = _recording_registry()
    registry.add("cmd", record)
    ctx = _ctx(registry)

    result = CommandDispatcher(registry).dispatch('cmd "open', ctx)

    assert result.matched is True
    assert isinstance(result.error, MalformedCommandArgs)
    assert ctx.output.getvalue().startswith("Error: cmd:")
    assert calls == []


def test_command_errors_are_reported_not_raised():
    registry = CommandRegistry()

    def boom(ctx):
        raise CommandError("nope")

    registry.add("boom", boom, arity=0)
    ctx = _ctx(registry)
    result = CommandDispatcher(registry).dispatch("boom", ctx)
    assert ctx.output.getvalue() == "Error: nope\n"
    assert str(result.error) == "nope"


def test_unexpected_handler_failures_are_reported_not_raised():
    registry = CommandRegistry()

    def broken(ctx):
        raise ValueError("boom")

    registry.add("broken", broken, arity=0)
    ctx = _ctx(registry)
    result = CommandDispatcher(registry).dispatch("broken", ctx)
    assert result.matched
    assert ctx.output.getvalue() == "Error: broken: ValueError: boom\n"
    assert isinstance(result.error, ValueError)


def test_breakout_return_value_is_surfaced():
    registry = CommandRegistry()
    registry.add("leave", lambda ctx: BreakoutSignal(target_depth=0), arity=0)
    result = CommandDispatcher(registry).dispatch("leave", _ctx(registry))
    assert result.breakout == BreakoutSignal(0)


def test_handler_sees_the_line_and_spec():
    registry = CommandRegistry()
    seen = {}

    def look(ctx):
        seen["line"] = ctx.line
        seen["name"] = ctx.command.name

    registry.add("look", look, arity=0)
    CommandDispatcher(registry).dispatch("look  ", _ctx(registry))
    assert seen == {"line": "look  ", "name": "look"}


def test_registry_lookup_remove_and_validation():
    registry = CommandRegistry()
    registry.add("amend-line", lambda ctx: None, pattern=r"amend-line(?:\s*(\d+))?")
    assert registry.find("amend-line").name == "amend-line"
    assert registry.find("amend-line 3").name == "amend-line"
    assert registry.find("nope") is None
    assert "amend-line" in registry

    registry.remove("amend-line")
    assert len(registry) == 0

    with pytest.raises(ValueError):
        registry.add("bad", lambda ctx: None, arity=-2)
