"""Python evaluator and default printer.

Completeness follows the interactive interpreter: `codeop` decides whether
more lines are needed, so a compound statement ends with a blank line. Text
that `codeop` rejects outright (several statements pasted at once, or a
genuine syntax error) counts as complete and goes to evaluation, which
either runs it or reports the error.
"""

from __future__ import annotations

import ast
import builtins
import codeop
import importlib
import inspect
import os
import reprlib
import sys
import traceback
from typing import Any, TextIO

from ..types import EvalResult
from .base import BaseEvaluator, BasePrinter

_describe = reprlib.Repr()
_describe.maxstring = 30
_describe.maxother = 30


class PythonEvaluator(BaseEvaluator):
    def __init__(self, *, filename: str = "<input>") -> None:
        self.filename = filename

    def is_complete(self, text: str) -> bool:
        # The console hands codeop its lines without the final newline.
        source = text[:-1] if text.endswith("\n") else text
        try:
            code = codeop.compile_command(source, self.filename, "single")
        except (SyntaxError, ValueError, OverflowError):
            return True
        return code is not None

    def evaluate(self, text: str, binding: Any) -> Any:
        tree = ast.parse(text, filename=self.filename, mode="exec")
        last: ast.Expression | None = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            last = ast.Expression(tree.body.pop().value)
        exec(compile(tree, self.filename, "exec"), binding)
        if last is None:
            return None
        return eval(compile(last, self.filename, "eval"), binding)

    def bind(self, target: Any) -> dict[str, Any]:
        if isinstance(target, dict):
            target.setdefault("__builtins__", builtins)
            return target
        namespace: dict[str, Any] = {"__name__": "__main__", "__builtins__": builtins}
        if target is not None:
            namespace["self"] = target
        return namespace

    def define(self, binding: Any, name: str, value: Any) -> None:
        binding[name] = value

    def _resolve(self, name: str, binding: Any) -> Any:
        try:
            return eval(name, binding)
        except Exception as exc:
            raise LookupError(f"cannot resolve {name!r}: {exc}") from exc

    def source_for(self, name: str, binding: Any) -> str:
        obj = self._resolve(name, binding)
        try:
            return inspect.getsource(obj)
        except (OSError, TypeError) as exc:
            raise LookupError(f"no source available for {name!r}: {exc}") from exc

    def source_location(self, name: str, binding: Any) -> tuple[str, int]:
        obj = inspect.unwrap(self._resolve(name, binding))
        try:
            path = inspect.getsourcefile(obj)
            _, start = inspect.getsourcelines(obj)
        except (OSError, TypeError) as exc:
            raise LookupError(f"no source available for {name!r}: {exc}") from exc
        if path is None:
            raise LookupError(f"no source file for {name!r}")
        # Modules report line 0.
        return path, max(1, start)

    def reload_source(self, path: str) -> None:
        target = os.path.realpath(path)
        for module in list(sys.modules.values()):
            module_file = getattr(module, "__file__", None)
            if module_file and os.path.realpath(module_file) == target:
                importlib.reload(module)
                return
        raise LookupError(f"{path} is not the file of an imported module")

    def describe(self, target: Any) -> str:
        if target is None:
            return "main"
        return _describe.repr(target)


class DefaultPrinter(BasePrinter):
    """`=> repr(value)`; errors as `Type: message` plus where they were raised."""

    def print_result(self, output: TextIO, result: EvalResult) -> None:
        if not result.ok:
            exc = result.error
            output.write(f"{type(exc).__name__}: {exc}\n")
            location = _error_location(exc)
            if location:
                output.write(f"from {location}\n")
            return
        if result.value is None:
            return
        output.write(f"=> {result.value!r}\n")


def _error_location(exc: BaseException) -> str | None:
    if isinstance(exc, SyntaxError) and exc.lineno is not None:
        return f"{exc.filename}:{exc.lineno}"
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return None
    frame = frames[-1]
    return f"{frame.filename}:{frame.lineno}:in `{frame.name}'"
