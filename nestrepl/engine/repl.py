"""Nestable read-eval-print loop.

This module provides the engine that ties the pieces together:
- prompt selection (first line vs continuation)
- command interception before expression assembly
- completeness checks and evaluation through the evaluator adapter
- nested sessions that unwind with `BreakoutSignal` return values
- history load on start and append-only save on exit

It contains no terminal or language specifics beyond the
adapters it is given.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, TextIO

from .adapters.base import BaseEditor, BaseEvaluator, BaseInput, BasePrinter
from .adapters.console import StringInput
from .buffer import ExpressionBuffer
from .dispatch import CommandContext, CommandDispatcher
from .history import HistoryStore
from .registry import CommandRegistry
from .sessions import Session, SessionStack
from .types import BreakoutSignal, EvalResult, PersistenceIOError

logger = logging.getLogger(__name__)

# (description of the session target, nesting level) -> prompt text
Prompt = Callable[[str, int], str]
# (output, session target, engine) -> None
Hook = Callable[[TextIO, Any, "SessionEngine"], None]


def _first_line_prompt(label: str, level: int) -> str:
    if level == 0:
        return f"nestrepl({label})> "
    return f"nestrepl({label}):{level}> "


def _continuation_prompt(label: str, level: int) -> str:
    if level == 0:
        return f"nestrepl({label})* "
    return f"nestrepl({label}):{level}* "


DEFAULT_PROMPTS: tuple[Prompt, Prompt] = (_first_line_prompt, _continuation_prompt)


def _banner_before(output: TextIO, target: Any, engine: "SessionEngine") -> None:
    output.write(f"Beginning session for {engine.evaluator.describe(target)}\n")


def _banner_after(output: TextIO, target: Any, engine: "SessionEngine") -> None:
    output.write(f"Ending session for {engine.evaluator.describe(target)}\n")


BANNER_HOOKS: dict[str, Hook] = {"before_session": _banner_before, "after_session": _banner_after}


@dataclass(frozen=True)
class EngineConfig:
    """Engine-wide settings."""

    history_file: Path | None = None
    history_enabled: bool = True
    # amend-line / show-input number lines from 1 instead of 0.
    base_one: bool = True
    prompts: tuple[Prompt, Prompt] = DEFAULT_PROMPTS
    hooks: Mapping[str, Hook] = field(default_factory=dict)
    record_blank_lines: bool = False
    echo_replayed_input: bool = True


@dataclass
class EngineContext:
    """State shared with evaluated code; overwritten on every evaluation."""

    active_session: Session | None = None
    last_result: Any = None
    last_exception: BaseException | None = None
    # Every evaluated buffer, oldest first (exposed as `_in_`).
    inputs: list[str] = field(default_factory=list)


class SessionEngine:
    def __init__(
        self,
        *,
        evaluator: BaseEvaluator | None = None,
        printer: BasePrinter | None = None,
        input: BaseInput | None = None,
        output: TextIO | None = None,
        registry: CommandRegistry | None = None,
        editor: BaseEditor | None = None,
        history: HistoryStore | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        from .adapters.console import ExternalEditor, ReadlineInput
        from .adapters.python import DefaultPrinter, PythonEvaluator

        if registry is None:
            from nestrepl.commands import default_registry

            registry = default_registry()

        self.config = config or EngineConfig()
        self.evaluator = evaluator or PythonEvaluator()
        self.printer = printer or DefaultPrinter()
        self.output = output if output is not None else sys.stdout
        self.registry = registry
        self.editor = editor or ExternalEditor()
        self.history = history if history is not None else HistoryStore(path=self.config.history_file)
        self.dispatcher = CommandDispatcher(registry)
        self.stack = SessionStack()
        self.context = EngineContext()
        self._inputs: list[BaseInput] = [input or ReadlineInput(completions=registry.names)]

    @property
    def input(self) -> BaseInput:
        return self._inputs[-1]

    @property
    def level(self) -> int | None:
        return self.stack.level

    @property
    def buffer(self) -> ExpressionBuffer | None:
        session = self.stack.current
        return session.buffer if session is not None else None

    def push_input(self, text: str) -> None:
        """Make `text` the next input, ahead of whatever the current source holds."""
        if not text:
            return
        echo = self.output if self.config.echo_replayed_input else None
        self._inputs.append(StringInput(text, echo=echo))

    def _read(self, prompt: str) -> tuple[str, BaseInput]:
        while True:
            source = self._inputs[-1]
            try:
                return source.readline(prompt), source
            except EOFError:
                if len(self._inputs) == 1:
                    raise
                # Pushed text is exhausted; fall back to the source underneath.
                self._inputs.pop()

    def _report(self, exc: Exception) -> None:
        self.output.write(f"Warning: {exc}\n")

    def _run_hook(self, name: str, session: Session) -> None:
        hook = self.config.hooks.get(name)
        if hook is not None:
            hook(self.output, session.target, self)

    def _install_locals(self, session: Session) -> None:
        define = self.evaluator.define
        define(session.binding, "_repl_", self)
        define(session.binding, "_", self.context.last_result)
        define(session.binding, "_ex_", self.context.last_exception)
        define(session.binding, "_in_", self.context.inputs)

    def load_history(self) -> None:
        if not self.config.history_enabled or self.history.path is None:
            return
        try:
            self.history.load()
        except PersistenceIOError as exc:
            self._report(exc)
            return
        seed = getattr(self._inputs[0], "seed_history", None)
        if seed is not None:
            seed(self.history.lines)

    def save_history(self) -> None:
        if not self.config.history_enabled or self.history.path is None:
            return
        try:
            self.history.save()
        except PersistenceIOError as exc:
            self._report(exc)

    def start(self, target: Any = None) -> Any:
        """Run the outermost session with history loaded before and saved after."""
        self.load_history()
        try:
            return self.repl(target)
        finally:
            self.save_history()

    def repl(self, target: Any = None) -> Any:
        """
        Run one (possibly nested) session until a breakout ends it.

        Args:
            target: Receiver of the session; the evaluator binds it.

        Returns:
            `target` when the breakout was aimed at this session, otherwise the
            `BreakoutSignal` itself so the caller can keep unwinding.
        """
        session = self.stack.push(target, self.evaluator.bind(target))
        self.context.active_session = session
        self._install_locals(session)
        self._run_hook("before_session", session)

        signal: BreakoutSignal | None = None
        try:
            while signal is None:
                signal = self.step(session)
        finally:
            self.stack.pop()
            self.context.active_session = self.stack.current
            self._run_hook("after_session", session)

        if signal.target_depth != session.level:
            logger.debug("breakout to %d passes level %d", signal.target_depth, session.level)
            return signal
        return target

    def step(self, session: Session) -> BreakoutSignal | None:
        """Read and handle one line. Returns a signal when the session must end."""
        buffer: ExpressionBuffer = session.buffer
        first_line, continuation = self.config.prompts
        prompt_fn = first_line if buffer.is_empty else continuation
        prompt = prompt_fn(self.evaluator.describe(session.target), session.level)

        try:
            raw, source = self._read(prompt)
        except EOFError:
            self.output.write("\n")
            return BreakoutSignal(target_depth=session.level)
        except KeyboardInterrupt:
            self.output.write("^C\n")
            buffer.clear()
            return None

        line = raw.rstrip("\r\n")
        if source.records_history and (line.strip() or self.config.record_blank_lines):
            self.history.append(line)

        result = self.dispatcher.dispatch(line, self.command_context(session))
        if result.matched:
            return result.breakout

        buffer.append(line)
        self.evaluate_buffer(session)
        return None

    def evaluate_buffer(self, session: Session) -> EvalResult | None:
        """Evaluate, print and clear the session buffer once it is complete."""
        buffer = session.buffer
        if not buffer.text.strip():
            buffer.clear()
            return None
        if not self.evaluator.is_complete(buffer.text):
            return None

        outcome = self.evaluate(buffer.text, session)
        self.printer.print_result(self.output, outcome)
        buffer.clear()
        return outcome

    def evaluate(self, text: str, session: Session) -> EvalResult:
        self.context.inputs.append(text)
        try:
            value = self.evaluator.evaluate(text, session.binding)
        except SystemExit:
            raise
        except (Exception, KeyboardInterrupt) as exc:
            logger.debug("evaluation failed: %s: %s", type(exc).__name__, exc)
            self.context.last_exception = exc
            self.evaluator.define(session.binding, "_ex_", exc)
            return EvalResult(error=exc)

        self.context.last_result = value
        self.context.active_session = session
        self._install_locals(session)
        return EvalResult(value=value)

    def command_context(self, session: Session) -> CommandContext:
        return CommandContext(
            output=self.output,
            buffer=session.buffer,
            history=self.history,
            registry=self.registry,
            engine=self,
            session=session,
        )
