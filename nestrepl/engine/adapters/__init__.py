# REPL collaborators
#
# Each adapter implements one side of the engine boundary:
#   - Evaluator: completeness check, evaluation, bindings, source lookup
#   - Printer:   rendering of evaluation results
#   - Input:     line sources (terminal, replayed text)
#   - Editor:    external text editor integration
#
# The engine only talks to these interfaces.

from .base import BaseEditor, BaseEvaluator, BaseInput, BasePrinter
from .console import ExternalEditor, ReadlineInput, StringInput
from .python import DefaultPrinter, PythonEvaluator

__all__ = [
    "BaseEditor",
    "BaseEvaluator",
    "BaseInput",
    "BasePrinter",
    "DefaultPrinter",
    "ExternalEditor",
    "PythonEvaluator",
    "ReadlineInput",
    "StringInput",
]
