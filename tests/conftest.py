import io
import os
import sys

import pytest


# Ensure the repository root is on sys.path so tests can import local entrypoints
# like apps.cli.main without requiring an editable install.
_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)


from nestrepl.engine.adapters.base import BaseEditor, BaseInput  # noqa: E402
from nestrepl.engine.repl import EngineConfig, SessionEngine  # noqa: E402


class ScriptedInput(BaseInput):
    """Terminal stand-in: hands out scripted lines, then EOF.

    An exception instance in the script is raised instead of returned.
    """

    records_history = True

    def __init__(self, lines):
        self.lines = list(lines)
        self.prompts = []

    def readline(self, prompt):
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        item = self.lines.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class FakeEditor(BaseEditor):
    """Records what it was asked to open and overwrites the file with `replacement`."""

    def __init__(self, replacement=None):
        self.replacement = replacement
        self.calls = []
        self.seen = []

    def open_for_edit(self, path, line=1):
        self.calls.append((path, line))
        if os.path.exists(path):
            with open(path, encoding="utf-8") as f:
                self.seen.append(f.read())
        if self.replacement is not None:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.replacement)


@pytest.fixture
def make_engine():
    """Build an engine over a scripted input; history persistence is off unless asked for."""

    def _make(lines, *, editor=None, **config):
        config.setdefault("history_enabled", False)
        config.setdefault("echo_replayed_input", False)
        output = io.StringIO()
        engine = SessionEngine(
            input=ScriptedInput(lines),
            output=output,
            editor=editor or FakeEditor(),
            config=EngineConfig(**config),
        )
        return engine, output

    return _make


@pytest.fixture
def run_lines(make_engine):
    """Run a whole scripted session and return its output text."""

    def _run(lines, **kwargs):
        engine, output = make_engine(lines, **kwargs)
        engine.start()
        return output.getvalue()

    return _run


@pytest.fixture
def fake_editor():
    return FakeEditor
