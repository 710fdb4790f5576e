# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines `Commands`, the ordered set of commands at one level of a command tree.

`Commands.find_command()` is the lookup used both when executing a line and when
completing one: it walks down the tree one word at a time for as long as each
word names a command (or one of its aliases) at the current level.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, Sequence

from treeshell.exceptions import CommandAlreadyExistsError
from treeshell.logger import logger

if TYPE_CHECKING:
    from treeshell.command import Command


class Commands:
    """Ordered collection of sibling commands, addressable by name or alias."""

    def __init__(self) -> None:
        self._list: list[Command] = []

    def add(self, command: Command) -> Command:
        """
        Add a command at this level.

        Raises:
            CommandAlreadyExistsError: If the command's name or one of its aliases
                is already used by a sibling.
        """
        taken = set()
        for existing in self._list:
            taken.add(existing.name)
            taken.update(existing.aliases)
        for word in (command.name, *command.aliases):
            if word in taken:
                raise CommandAlreadyExistsError(
                    f"Command '{command.name}': '{word}' is already in use"
                )
        self._list.append(command)
        return command

    def remove(self, name: str) -> Command | None:
        command = self.get(name)
        if command is not None:
            self._list.remove(command)
        return command

    def get(self, word: str) -> Command | None:
        """Return the command named `word`, falling back to alias matches."""
        for command in self._list:
            if command.name == word:
                return command
        for command in self._list:
            if word in command.aliases:
                return command
        return None

    def find_command(self, words: Sequence[str]) -> tuple[Command | None, list[str]]:
        """
        Resolve a word sequence to the deepest matching command.

        Returns:
            tuple[Command | None, list[str]]: The matched command (None if the
            first word is not a command) and the words that were not consumed.
        """
        command: Command | None = None
        level: Commands = self
        remaining = list(words)
        while remaining:
            child = level.get(remaining[0])
            if child is None:
                break
            command = child
            remaining = remaining[1:]
            level = child.commands
        logger.debug(
            "find_command(%s) -> %s, rest=%s",
            list(words),
            command.name if command else None,
            remaining,
        )
        return command, remaining

    def sorted(self) -> list[Command]:
        """Return the commands ordered by name."""
        return sorted(self._list, key=lambda command: command.name)

    def __iter__(self) -> Iterator[Command]:
        return iter(list(self._list))

    def __len__(self) -> int:
        return len(self._list)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.get(word) is not None

    def __str__(self) -> str:
        names = ", ".join(command.name for command in self._list)
        return f"Commands([{names}])"

    def __repr__(self) -> str:
        return str(self)
