# Default command sets
#
#   - input_cmds.py          !, show-input, amend-line / %, hist, play
#   - context_cmds.py        cd, nesting, jump-to, exit / quit, exit-all
#   - introspection_cmds.py  help, show-command, show-method / show-source / $,
#                            edit-method, edit
#
# Each module builds its own CommandRegistry; default_registry() merges
# fresh copies so callers can add or remove commands freely.

from nestrepl.engine.registry import CommandRegistry

from . import context_cmds, input_cmds, introspection_cmds


def default_registry() -> CommandRegistry:
    registry = CommandRegistry()
    for command_set in (input_cmds.commands, context_cmds.commands, introspection_cmds.commands):
        registry.update(command_set)
    return registry


__all__ = ["default_registry"]
