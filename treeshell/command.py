# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""command.py

Defines the Command class for Treeshell.

A Command is one node of the command tree. It has a name and optional aliases,
its own `FlagRegistry`, child commands, and optionally:

- a `run` callable (sync or async) receiving a `Context`
- a custom `completer` that replaces the default suggestions for its arguments
- a `flags_config` callable that declares the command's flags
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from rich.console import Console
from rich.markup import escape

from treeshell.commands import Commands
from treeshell.console import console
from treeshell.context import Context
from treeshell.exceptions import InvalidCommandError
from treeshell.flags import FlagRegistry

CompleterFunction = Callable[[str, list[str]], list[str]]


class Command(BaseModel):
    """
    Represents a command in a Treeshell command tree.

    Attributes:
        name (str): The word that invokes the command.
        help (str): One line description shown in command listings.
        aliases (list[str]): Alternate words for the command.
        long_help (str): Extended help shown by `help <command>`.
        usage (str): Usage hint for positional arguments (e.g. `<interface>`).
        hidden (bool): Hide the command from help listings.
        run (Callable | None): Executed with a `Context` when the command is
            invoked. Commands without `run` print their help.
        completer (Callable | None): Called as `completer(prefix, args)` and
            returns the full words to suggest.
        flags_config (Callable | None): Called once with the command's
            `FlagRegistry` to declare its flags.
    """

    name: str
    help: str
    aliases: list[str] = Field(default_factory=list)
    long_help: str = ""
    usage: str = ""
    hidden: bool = False
    run: Callable[[Context], Any] | Callable[[Context], Awaitable[Any]] | None = None
    completer: CompleterFunction | None = None
    flags_config: Callable[[FlagRegistry], None] | None = None

    _flags: FlagRegistry = PrivateAttr(default_factory=FlagRegistry)
    _commands: Commands = PrivateAttr(default_factory=Commands)
    _parent: Command | None = PrivateAttr(default=None)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def model_post_init(self, __context: Any) -> None:
        """Validate names and declare flags."""
        if not self.name or any(char.isspace() for char in self.name):
            raise InvalidCommandError(f"invalid command name: '{self.name}'")
        if not self.help:
            raise InvalidCommandError(f"empty help message for command: '{self.name}'")
        for alias in self.aliases:
            if not alias or any(char.isspace() for char in alias):
                raise InvalidCommandError(
                    f"invalid alias '{alias}' for command: '{self.name}'"
                )
        if self.flags_config:
            self.flags_config(self._flags)

    @property
    def flags(self) -> FlagRegistry:
        return self._flags

    @property
    def commands(self) -> Commands:
        return self._commands

    @property
    def parent(self) -> Command | None:
        return self._parent

    def add_command(self, command: Command) -> Command:
        """Attach a child command."""
        self._commands.add(command)
        command._parent = self
        return command

    def path(self) -> str:
        """Return the words that invoke this command from the root, e.g. `ip route`."""
        words = []
        node: Command | None = self
        while node is not None:
            words.append(node.name)
            node = node.parent
        return " ".join(reversed(words))

    def get_usage(self) -> str:
        usage = self.path()
        if len(self._flags):
            usage = f"{usage} [flags]"
        if len(self._commands):
            usage = f"{usage} <command>"
        if self.usage:
            usage = f"{usage} {self.usage}"
        return usage

    def render_help(self, console: Console = console) -> None:
        """Print usage, description, sub-commands and flags using Rich output."""
        usage = escape(self.get_usage())
        console.print(f"[bold]usage: {usage}[/bold]\n", highlight=False)
        console.print(self.long_help or self.help)
        if self.aliases:
            console.print(f"\n[bold]aliases:[/bold] {', '.join(self.aliases)}")
        visible = [command for command in self._commands.sorted() if not command.hidden]
        if visible:
            console.print("\n[bold]commands:[/bold]")
            for command in visible:
                console.print(f"  [command]{command.name:<30}[/command] {command.help}")
        if len(self._flags):
            console.print()
            self._flags.render_help(console)

    def __str__(self) -> str:
        return (
            f"Command(name='{self.name}', aliases={self.aliases}, "
            f"flags={len(self._flags)}, commands={len(self._commands)})"
        )
