import os
import sys

import pytest

GREET_MODULE = "nestrepl_greet_target"


@pytest.fixture
def greet_module(tmp_path, monkeypatch):
    """An importable module whose `greet` starts on line 3."""
    path = tmp_path / f"{GREET_MODULE}.py"
    path.write_text("\"\"\"Greetings.\"\"\"\n\ndef greet():\n    return 'hi'\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setattr(sys, "dont_write_bytecode", True)
    yield path
    sys.modules.pop(GREET_MODULE, None)


def test_help_lists_every_command(run_lines):
    out = run_lines(["help"])
    lines = out.splitlines()
    assert lines[0].split() == ["command", "description"]
    names = {line.split()[0] for line in lines[2:] if line.strip()}
    for name in ["!", "show-input", "amend-line", "%", "hist", "play", "cd", "exit-all", "help", "edit", "show-method", "$", "edit-method"]:
        assert name in names


def test_help_for_one_command(run_lines):
    out = run_lines(["help hist", "help %", "help nope"])
    assert "hist: Show, search and replay input history." in out
    assert "%: Alias for `amend-line`." in out
    assert "No such command: nope." in out


def test_show_command_prints_handler_source(run_lines):
    out = run_lines(["show-command hist"])
    assert "input_cmds.py @ line " in out
    assert "Number of lines: " in out
    assert "def hist(ctx: CommandContext, *args: str) -> None:" in out


def test_show_command_with_line_numbers(run_lines):
    out = run_lines(["show-command -l exit-all"])
    assert ": def exit_all(ctx: CommandContext) -> BreakoutSignal:" in out


def test_show_command_without_a_known_name(run_lines):
    out = run_lines(["show-command", "show-command nope"])
    assert "You must provide a command name." in out
    assert "No such command: nope." in out


def test_edit_empty_buffer_evaluates_the_edited_text(run_lines, fake_editor):
    editor = fake_editor("def f():\n    return 7\n")
    out = run_lines(["edit", "f()"], editor=editor)
    assert editor.seen == [""]
    assert "=> 7" in out
    # The temporary file is gone once the editor returns.
    assert not os.path.exists(editor.calls[0][0])


def test_edit_starts_from_the_pending_buffer(run_lines, fake_editor):
    editor = fake_editor("x = [1, 2]\n")
    out = run_lines(["x = [", "edit", "x"], editor=editor)
    assert editor.seen == ["x = [\n"]
    assert "=> [1, 2]" in out


def test_edit_no_reload_keeps_the_buffer(run_lines, fake_editor):
    editor = fake_editor("junk")
    out = run_lines(["x = [", "edit -n", "3]", "x"], editor=editor)
    assert "=> [3]" in out


def test_edit_previous_input(run_lines, fake_editor):
    editor = fake_editor()
    out = run_lines(["40 + 2", "'other'", "edit -i 0"], editor=editor)
    assert editor.seen == ["40 + 2\n"]
    assert out.count("=> 42") == 2


def test_edit_temp_ignores_the_buffer(run_lines, fake_editor):
    editor = fake_editor()
    run_lines(["x = [", "edit --temp", "!"], editor=editor)
    assert editor.seen == [""]


def test_edit_file_at_line_and_reload(run_lines, fake_editor, tmp_path):
    path = tmp_path / "work.py"
    path.write_text("z = 1\n")
    editor = fake_editor("z = 5\n")
    out = run_lines([f"edit {path}:3", "z", f"edit {path} --reload", "z"], editor=editor)
    assert editor.calls == [(str(path), 3), (str(path), 1)]
    assert "NameError" in out
    assert "=> 5" in out


def test_edit_rejects_conflicting_sources(run_lines):
    out = run_lines(["edit -t -i"])
    assert "Error: Only one of --temp, --in and FILE may be specified" in out


def test_edit_reload_of_a_file_the_editor_never_wrote(run_lines, fake_editor, tmp_path):
    missing = tmp_path / "never_written.py"
    out = run_lines([f"edit {missing} -r", "1 + 1"], editor=fake_editor())
    assert f"Error: edit: cannot read back {missing}" in out
    assert "=> 2" in out


def test_show_method_with_source_line_numbers(run_lines, greet_module):
    out = run_lines([f"import {GREET_MODULE} as mod", "show-method mod.greet -l"])
    assert f"From: {greet_module} @ line 3:" in out
    assert "Number of lines: 2" in out
    assert "3: def greet():\n4:     return 'hi'\n" in out


def test_show_method_numbered_from_one(run_lines, greet_module):
    out = run_lines([f"import {GREET_MODULE} as mod", "show-method -b mod.greet"])
    assert "1: def greet():\n2:     return 'hi'\n" in out


def test_show_method_aliases(run_lines, greet_module):
    out = run_lines([f"import {GREET_MODULE} as mod", "$ mod.greet", "show-source mod.greet"])
    assert out.count("def greet():\n    return 'hi'\n") == 2


def test_show_method_of_the_current_receiver(run_lines, greet_module):
    out = run_lines([f"import {GREET_MODULE} as mod", "cd mod.greet", "show-method"])
    assert "@ line 3:" in out
    assert "def greet():" in out


def test_show_method_without_a_usable_name(run_lines):
    out = run_lines(["show-method", "show-method nope", "len", "show-method len"])
    assert "You must provide a method name." in out
    assert "Invalid method name: nope. Type `show-method --help` for help" in out
    assert "Invalid method name: len. Type `show-method --help` for help" in out


def test_edit_method_opens_the_definition_and_reloads(run_lines, fake_editor, greet_module):
    editor = fake_editor("def greet():\n    return 'bye bye'\n")
    out = run_lines([f"import {GREET_MODULE} as mod", "edit-method mod.greet", "mod.greet()"], editor=editor)
    path, line = editor.calls[0]
    assert os.path.samefile(path, greet_module)
    assert line == 3
    assert "=> 'bye bye'" in out


def test_edit_method_no_reload_and_no_jump(run_lines, fake_editor, greet_module):
    editor = fake_editor("def greet():\n    return 'bye bye'\n")
    out = run_lines(
        [f"import {GREET_MODULE} as mod", "edit-method --no-jump -n mod.greet", "mod.greet()"], editor=editor
    )
    assert editor.calls[0][1] == 0
    assert "=> 'hi'" in out
    assert greet_module.read_text() == "def greet():\n    return 'bye bye'\n"


def test_edit_method_reports_reload_failures(run_lines, fake_editor, greet_module):
    editor = fake_editor("def greet(:\n")
    out = run_lines([f"import {GREET_MODULE} as mod", "edit-method mod.greet", "mod.greet()"], editor=editor)
    assert "Error: edit-method: reloading" in out
    assert "SyntaxError" in out
    assert "=> 'hi'" in out


def test_edit_method_with_an_unknown_name(run_lines, fake_editor):
    editor = fake_editor()
    out = run_lines(["edit-method", "edit-method nope"], editor=editor)
    assert "You must provide a method name." in out
    assert "Invalid method name: nope." in out
    assert editor.calls == []
