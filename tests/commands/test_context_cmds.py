def test_cd_binds_self_to_the_new_target(run_lines):
    out = run_lines(["cd 'abc'", "self.upper()"])
    assert "=> 'ABC'" in out


def test_cd_dotdot_and_slash(run_lines):
    out = run_lines(["cd 1", "cd 2", "cd 3", "cd ..", "_repl_.level", "cd /", "_repl_.level"])
    assert "=> 2\n=> 0\n" in out


def test_cd_at_top_level(run_lines):
    out = run_lines(["cd ..", "cd /"])
    assert out.count("Already at the top level.") == 2


def test_cd_reports_bad_expressions(run_lines):
    out = run_lines(["cd undefined_name", "cd", "_repl_.level"])
    assert "Error: cd: NameError: name 'undefined_name' is not defined" in out
    assert "Error: usage: cd EXPR" in out
    assert "=> 0" in out


def test_nesting_lists_sessions(run_lines):
    out = run_lines(["cd 5", "cd 'x'", "nesting"])
    assert "Nesting status:\n--\n0. main (top level)\n1. 5\n2. 'x'\n" in out


def test_jump_to(run_lines):
    out = run_lines(["cd 1", "cd 2", "cd 3", "jump-to 1", "self", "_repl_.level"])
    assert "=> 1\n=> 1\n" in out


def test_jump_to_rejects_bad_levels(run_lines):
    out = run_lines(["cd 1", "jump-to 1", "jump-to 4", "jump-to x", "jump-to"])
    assert "Already at nesting level 1" in out
    assert "Error: Invalid nest level. Must be between 0 and 1. Got 4." in out
    assert "Error: jump-to LEVEL must be an integer, got 'x'" in out
    assert "Error: usage: jump-to LEVEL" in out


def test_exit_and_quit_leave_one_session(run_lines):
    out = run_lines(["cd 1", "cd 2", "exit", "_repl_.level", "quit", "_repl_.level"])
    assert "=> 1\n=> 0\n" in out


def test_exit_at_top_level_ends_the_loop(make_engine):
    engine, _ = make_engine(["exit", "1"])
    assert engine.start("target") == "target"
    assert engine.input.lines == ["1"]


def test_exit_all_from_deep_nesting(make_engine):
    engine, _ = make_engine(["cd 1", "cd 2", "cd 3", "exit-all", "1"])
    assert engine.start() is None
    assert engine.input.lines == ["1"]
    assert engine.stack.level is None
