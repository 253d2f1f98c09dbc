"""Base collaborator interfaces for the REPL engine."""

from abc import ABC, abstractmethod
from typing import Any, TextIO

from ..types import EvalResult


class BaseEvaluator(ABC):
    """
    Abstract base class for language evaluators.

    The engine never parses or runs code itself; it asks the evaluator
    whether a buffer is complete and hands complete buffers over.
    """

    @abstractmethod
    def is_complete(self, text: str) -> bool:
        """
        Decide whether `text` is a complete expression.

        Args:
            text: Accumulated buffer, newline terminated.

        Returns:
            True when the buffer should be evaluated now. Buffers with syntax
            errors count as complete so the error can be reported.
        """
        pass

    @abstractmethod
    def evaluate(self, text: str, binding: Any) -> Any:
        """
        Evaluate a complete buffer.

        Args:
            text: The buffer.
            binding: Evaluation context produced by `bind`.

        Returns:
            The value of the expression. Errors are raised, not returned.
        """
        pass

    @abstractmethod
    def bind(self, target: Any) -> Any:
        """
        Build the evaluation context for a session whose receiver is `target`.

        Args:
            target: Object the session operates on (None for top level).
        """
        pass

    @abstractmethod
    def define(self, binding: Any, name: str, value: Any) -> None:
        """Make `name` refer to `value` inside `binding`."""
        pass

    def source_for(self, name: str, binding: Any) -> str:
        """
        Return the source text of the function/method called `name`.

        Default implementation reports that lookups are unsupported.
        """
        raise LookupError(f"source lookup is not supported by {type(self).__name__}")

    def source_location(self, name: str, binding: Any) -> tuple[str, int]:
        """
        Locate the definition of the function/method called `name`.

        Returns:
            (path of the defining file, 1-based line of its first source line).

        Raises:
            LookupError: If `name` cannot be resolved or has no source file.
        """
        raise LookupError(f"source lookup is not supported by {type(self).__name__}")

    def reload_source(self, path: str) -> None:
        """Make edits to the file at `path` visible to running code."""
        raise LookupError(f"reloading is not supported by {type(self).__name__}")

    def describe(self, target: Any) -> str:
        """Short text used in prompts and banners."""
        return repr(target)


class BasePrinter(ABC):
    @abstractmethod
    def print_result(self, output: TextIO, result: EvalResult) -> None:
        pass


class BaseInput(ABC):
    """A source of input lines."""

    # Lines from sources that record history are appended to the HistoryStore.
    records_history: bool = False

    @abstractmethod
    def readline(self, prompt: str) -> str:
        """
        Read one line.

        Raises:
            EOFError: When the source is exhausted.
        """
        pass


class BaseEditor(ABC):
    @abstractmethod
    def open_for_edit(self, path: str, line: int = 1) -> None:
        """Open `path` at `line`; blocks until the editor session ends."""
        pass

    def read_back(self, path: str) -> str:
        with open(path, encoding="utf-8") as f:
            return f.read()
