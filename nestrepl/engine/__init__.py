# Nestable read-eval-print engine
#
# This package holds the language-agnostic REPL core. The evaluator,
# printer, input source and editor are pluggable via adapters.
#
# Key components:
#   - buffer.py     Multi-line expression buffer (+ amend-line editing)
#   - history.py    In-memory history and append-only file persistence
#   - registry.py   Command specs, matchers and aliases
#   - dispatch.py   Command matching, argument splitting and invocation
#   - sessions.py   Nested session stack
#   - repl.py       The read -> dispatch -> assemble -> evaluate -> print loop
#   - adapters/     Evaluator / printer / input / editor collaborators

from .buffer import ExpressionBuffer
from .dispatch import CommandContext, CommandDispatcher, DispatchResult
from .history import HistoryEntry, HistoryStore
from .registry import VARIADIC, CommandMatcher, CommandRegistry, CommandSpec
from .repl import EngineConfig, EngineContext, SessionEngine
from .sessions import Session, SessionStack
from .types import BreakoutSignal, EvalResult

__all__ = [
    "BreakoutSignal",
    "CommandContext",
    "CommandDispatcher",
    "CommandMatcher",
    "CommandRegistry",
    "CommandSpec",
    "DispatchResult",
    "EngineConfig",
    "EngineContext",
    "EvalResult",
    "ExpressionBuffer",
    "HistoryEntry",
    "HistoryStore",
    "Session",
    "SessionEngine",
    "SessionStack",
    "VARIADIC",
]
