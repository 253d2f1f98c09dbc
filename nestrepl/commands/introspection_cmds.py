"""Commands that show source (of commands and of methods) and the editor commands."""

from __future__ import annotations

import inspect
import os
import re
import tempfile

from nestrepl.engine.dispatch import CommandContext
from nestrepl.engine.registry import CommandRegistry
from nestrepl.engine.types import CommandError, MalformedCommandArgs
from nestrepl.output import format_table, number_lines

from .options import CommandArgumentParser

commands = CommandRegistry()

_FILE_LINE_RE = re.compile(r"^(.*):(\d+)$")


@commands.command("help", "Show a list of commands, or help for one command. e.g: help hist", arity=1)
def help_command(ctx: CommandContext, name: str | None) -> None:
    if name:
        spec = ctx.registry.find(name)
        if spec is None:
            ctx.write(f"No such command: {name}.")
            return
        ctx.write(f"{spec.name}: {spec.help}")
        return
    rows = [(spec.name, spec.help) for spec in ctx.registry]
    ctx.write(format_table(["command", "description"], rows))


def _show_command_parser() -> CommandArgumentParser:
    p = CommandArgumentParser(
        "show-command",
        description="Show the source for command CMD. e.g: show-command hist",
    )
    p.add_argument("name", nargs="?", metavar="CMD")
    p.add_argument("-l", "--line-numbers", action="store_true", help="Show line numbers.")
    return p


@commands.command("show-command", "Show the source for CMD. Type `show-command --help` for more info.")
def show_command(ctx: CommandContext, *args: str) -> None:
    opts = _show_command_parser().parse(ctx, args)
    if opts is None:
        return
    if not opts.name:
        ctx.write("You must provide a command name.")
        return
    spec = ctx.registry.find(opts.name)
    if spec is None:
        ctx.write(f"No such command: {opts.name}.")
        return

    try:
        lines, start = inspect.getsourcelines(spec.handler)
        source_file = inspect.getsourcefile(spec.handler)
    except (OSError, TypeError) as exc:
        raise CommandError(f"show-command: no source for {spec.name}: {exc}") from exc

    ctx.write(f"From: {source_file} @ line {start}:")
    ctx.write(f"Number of lines: {len(lines)}")
    ctx.write()
    if opts.line_numbers:
        ctx.write(number_lines(enumerate(lines, start)))
    else:
        ctx.write("".join(lines).rstrip("\n"))


def _require_session(ctx: CommandContext, command: str):
    if ctx.engine is None or ctx.session is None:
        raise CommandError(f"{command} needs a running session")
    return ctx.engine, ctx.session


def _method_names(ctx: CommandContext, names: list[str]) -> list[str]:
    # Without a name, the receiver of the current session is shown.
    if names:
        return names
    return ["self"] if ctx.target is not None else []


def _show_method_parser() -> CommandArgumentParser:
    p = CommandArgumentParser(
        "show-method",
        description=(
            "Show the source for METH. When no METH is given, shows the source "
            "of the current receiver. e.g: show-method json.dumps"
        ),
    )
    p.add_argument("names", nargs="*", metavar="METH")
    numbering = p.add_mutually_exclusive_group()
    numbering.add_argument("-l", "--line-numbers", action="store_true", help="Show line numbers.")
    numbering.add_argument(
        "-b", "--base-one", action="store_true", help="Show line numbers but start numbering at 1."
    )
    return p


@commands.command("show-method", "Show the source for METH. Type `show-method --help` for more info.")
def show_method(ctx: CommandContext, *args: str) -> None:
    opts = _show_method_parser().parse(ctx, args)
    if opts is None:
        return
    engine, session = _require_session(ctx, "show-method")
    names = _method_names(ctx, opts.names)
    if not names:
        ctx.write("You must provide a method name.")
        return

    for name in names:
        try:
            source = engine.evaluator.source_for(name, session.binding)
            path, start = engine.evaluator.source_location(name, session.binding)
        except LookupError:
            ctx.write(f"Invalid method name: {name}. Type `show-method --help` for help")
            continue
        lines = source.splitlines()
        ctx.write(f"From: {path} @ line {start}:")
        ctx.write(f"Number of lines: {len(lines)}")
        ctx.write()
        if opts.line_numbers:
            ctx.write(number_lines(enumerate(lines, start)))
        elif opts.base_one:
            ctx.write(number_lines(enumerate(lines, 1)))
        else:
            ctx.write(source.rstrip("\n"))


commands.alias("show-source", "show-method")
commands.alias("$", "show-method")


def _edit_method_parser() -> CommandArgumentParser:
    p = CommandArgumentParser(
        "edit-method",
        description=(
            "Edit the file that defines METH (or the current receiver), then "
            "reload it. e.g: edit-method mymodule.handler"
        ),
    )
    p.add_argument("name", nargs="?", metavar="METH")
    p.add_argument("-n", "--no-reload", action="store_true", help="Don't reload the edited file.")
    p.add_argument("--no-jump", action="store_true", help="Don't jump to the first line of METH.")
    return p


@commands.command("edit-method", "Edit the source of METH. Type `edit-method --help` for more info.")
def edit_method(ctx: CommandContext, *args: str) -> None:
    opts = _edit_method_parser().parse(ctx, args)
    if opts is None:
        return
    engine, session = _require_session(ctx, "edit-method")
    names = _method_names(ctx, [opts.name] if opts.name else [])
    if not names:
        ctx.write("You must provide a method name.")
        return
    name = names[0]

    try:
        path, line = engine.evaluator.source_location(name, session.binding)
    except LookupError:
        ctx.write(f"Invalid method name: {name}.")
        return

    # Line 0 opens the file without jumping.
    engine.editor.open_for_edit(path, 0 if opts.no_jump else line)
    if opts.no_reload:
        return
    try:
        engine.evaluator.reload_source(path)
    except Exception as exc:
        raise CommandError(f"edit-method: reloading {path} failed: {type(exc).__name__}: {exc}") from exc


def _edit_parser() -> CommandArgumentParser:
    p = CommandArgumentParser(
        "edit",
        description=(
            "Open a text editor. When no FILE is given, edits the input buffer "
            "(or the last input when the buffer is empty)."
        ),
    )
    p.add_argument("file", nargs="?", metavar="FILE[:LINE]")
    p.add_argument("-t", "--temp", action="store_true", help="Open an empty temporary file.")
    p.add_argument(
        "-i", "--in", dest="input_index", nargs="?", const="-1", metavar="N",
        help="Open a temporary file containing input N (default: the last one).",
    )
    p.add_argument("-l", "--line", type=int, help="Jump to this line in the opened file.")
    p.add_argument("-n", "--no-reload", action="store_true", help="Don't load the edited text back.")
    p.add_argument("-r", "--reload", action="store_true", help="Evaluate FILE after editing it.")
    return p


def _as_input(text: str) -> str:
    """Edited text, closed with a blank line so a trailing block is complete."""
    if not text.strip():
        return ""
    return text.rstrip("\n") + "\n\n"


def _read_back(engine, path: str) -> str:
    try:
        return engine.editor.read_back(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise CommandError(f"edit: cannot read back {path}: {exc}") from exc


def _last_input(inputs: list[str]) -> str:
    for text in reversed(inputs):
        if text.strip():
            return text
    return ""


@commands.command("edit", "Invoke the default editor on a file or the input buffer. Type `edit --help` for more info.")
def edit(ctx: CommandContext, *args: str) -> None:
    opts = _edit_parser().parse(ctx, args)
    if opts is None:
        return
    if ctx.engine is None:
        raise CommandError("edit needs a running engine")
    engine = ctx.engine

    chosen = [bool(opts.temp), opts.input_index is not None, opts.file is not None]
    if sum(chosen) > 1:
        raise MalformedCommandArgs("Only one of --temp, --in and FILE may be specified")

    if opts.file is not None:
        path, line = opts.file, 1
        m = _FILE_LINE_RE.match(path)
        if m:
            path, line = m.group(1), int(m.group(2))
        if opts.line is not None:
            line = opts.line
        path = os.path.expanduser(path)
        engine.editor.open_for_edit(path, line)
        if opts.reload and not opts.no_reload:
            ctx.buffer.replace(_as_input(_read_back(engine, path)))
            engine.evaluate_buffer(ctx.session)
        return

    inputs = engine.context.inputs
    if opts.temp:
        content = ""
    elif opts.input_index is not None:
        index = int(opts.input_index) if opts.input_index.lstrip("-").isdigit() else None
        if index is None:
            raise MalformedCommandArgs(f"edit: --in expects an integer, got {opts.input_index!r}")
        try:
            content = inputs[index]
        except IndexError:
            content = ""
    elif not ctx.buffer.is_empty:
        content = ctx.buffer.text
    else:
        content = _last_input(inputs)

    line = opts.line if opts.line is not None else max(1, len(content.splitlines()))
    try:
        fd, path = tempfile.mkstemp(prefix="nestrepl_", suffix=".py")
    except OSError as exc:
        raise CommandError(f"edit: cannot create a temporary file: {exc}") from exc
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
        except (OSError, UnicodeEncodeError) as exc:
            raise CommandError(f"edit: cannot write {path}: {exc}") from exc
        engine.editor.open_for_edit(path, line)
        if not opts.no_reload:
            ctx.buffer.replace(_as_input(_read_back(engine, path)))
    finally:
        try:
            os.unlink(path)
        except OSError:
            pass

    if not opts.no_reload:
        engine.evaluate_buffer(ctx.session)
