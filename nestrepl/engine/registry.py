"""Command registry.

Maps command names to their specs (matcher, help text, declared arity,
argument handling and handler).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator

# Declared arity meaning "pass every argument".
VARIADIC = -1

Handler = Callable[..., Any]


@dataclass(frozen=True)
class CommandMatch:
    """What a matcher recognized in a line."""

    name: str
    groups: tuple[str | None, ...]
    arg_string: str | None


class CommandMatcher:
    """Recognizes `NAME`, optionally followed by whitespace and an argument string.

    NAME must not be directly followed by a non-space character, so a command
    named `play` does not claim the line `players`. `pattern` replaces the
    escaped name with a regular expression whose capture groups are handed to
    the command as leading arguments.
    """

    def __init__(self, name: str, pattern: str | None = None) -> None:
        self.name = name
        self.pattern = pattern
        body = pattern if pattern is not None else re.escape(name)
        self._regex = re.compile(rf"^(?:{body})(?!\S)(?:\s(?P<__args>.*))?$", re.DOTALL)

    def __repr__(self) -> str:
        return f"CommandMatcher(name={self.name!r}, pattern={self.pattern!r})"

    def match(self, line: str) -> CommandMatch | None:
        m = self._regex.match(line)
        if m is None:
            return None
        return CommandMatch(name=self.name, groups=m.groups()[:-1], arg_string=m.group("__args"))


@dataclass(frozen=True)
class CommandSpec:
    matcher: CommandMatcher
    handler: Handler
    help: str = ""
    arity: int = VARIADIC
    # Split the argument string into shell words; otherwise pass it verbatim.
    interpolate: bool = True
    alias_of: str | None = None

    @property
    def name(self) -> str:
        return self.matcher.name


class CommandRegistry:
    def __init__(self) -> None:
        self._specs: dict[str, CommandSpec] = {}

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(list(self._specs.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def names(self) -> list[str]:
        return list(self._specs.keys())

    def register(self, spec: CommandSpec) -> CommandSpec:
        if spec.arity < VARIADIC:
            raise ValueError(f"invalid arity {spec.arity} for command {spec.name!r}")
        self._specs[spec.name] = spec
        return spec

    def add(
        self,
        name: str,
        handler: Handler,
        help: str = "",
        *,
        pattern: str | None = None,
        arity: int = VARIADIC,
        interpolate: bool = True,
    ) -> CommandSpec:
        return self.register(
            CommandSpec(
                matcher=CommandMatcher(name, pattern),
                handler=handler,
                help=help,
                arity=arity,
                interpolate=interpolate,
            )
        )

    def command(
        self,
        name: str,
        help: str = "",
        *,
        pattern: str | None = None,
        arity: int = VARIADIC,
        interpolate: bool = True,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of `add`."""

        def decorator(fn: Handler) -> Handler:
            self.add(name, fn, help, pattern=pattern, arity=arity, interpolate=interpolate)
            return fn

        return decorator

    def alias(self, name: str, target: str, *, pattern: str | None = None, help: str | None = None) -> CommandSpec:
        """
        Register `name` as another way to invoke `target`.

        Args:
            name: Listing name of the alias.
            target: Name of an already registered command.
            pattern: Optional regex matcher for the alias (defaults to `name`).
            help: Help text (defaults to a pointer at the target).

        Raises:
            KeyError: If `target` is not registered.
        """
        if target not in self._specs:
            raise KeyError(f"Unknown command: {target!r}. Available: {', '.join(self._specs)}")
        original = self._specs[target]
        spec = replace(
            original,
            matcher=CommandMatcher(name, pattern),
            help=help if help is not None else f"Alias for `{target}`.",
            alias_of=target,
        )
        return self.register(spec)

    def remove(self, name: str) -> CommandSpec:
        return self._specs.pop(name)

    def update(self, other: "CommandRegistry") -> None:
        for spec in other:
            self.register(spec)

    def match(self, line: str) -> tuple[CommandSpec, CommandMatch] | None:
        """First spec in registration order whose matcher recognizes `line`."""
        for spec in self._specs.values():
            m = spec.matcher.match(line)
            if m is not None:
                return spec, m
        return None

    def matches(self, line: str) -> bool:
        return self.match(line) is not None

    def find(self, name: str) -> CommandSpec | None:
        """Look a command up by listing name, falling back to matching `name` as a line."""
        spec = self._specs.get(name)
        if spec is not None:
            return spec
        found = self.match(name)
        return found[0] if found else None
