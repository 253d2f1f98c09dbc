"""
nestrepl - a nestable read-eval-print loop engine.

The engine reads lines, assembles them into complete expressions, lets
registered meta-commands intercept lines before evaluation, hands complete
expressions to a pluggable evaluator, and keeps an input history that is
safe to share between processes (the history file is only ever appended to).

Quick Start:
    from nestrepl import SessionEngine

    SessionEngine().start()          # Python REPL with the default commands

Submodules:
    - nestrepl.engine: buffer, history, registry, dispatcher, sessions, engine
    - nestrepl.engine.adapters: evaluator / printer / input / editor collaborators
    - nestrepl.commands: the default command sets
"""

from nestrepl._version import __version__

from nestrepl.commands import default_registry
from nestrepl.engine import (
    BreakoutSignal,
    CommandContext,
    CommandDispatcher,
    CommandRegistry,
    CommandSpec,
    EngineConfig,
    EngineContext,
    EvalResult,
    ExpressionBuffer,
    HistoryEntry,
    HistoryStore,
    Session,
    SessionEngine,
    SessionStack,
    VARIADIC,
)

__all__ = [
    "__version__",
    "BreakoutSignal",
    "CommandContext",
    "CommandDispatcher",
    "CommandRegistry",
    "CommandSpec",
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
    "default_registry",
]
