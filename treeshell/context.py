# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines `Context`, the object handed to a command's `run` callable.

A context is built fresh for every executed line. It carries the resolved
command, its parsed flags, the positional arguments left after flag parsing,
and whether the line was prefixed with the shell's negation keyword
(`no shutdown`).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from treeshell.flags import FlagMap

if TYPE_CHECKING:
    from treeshell.command import Command
    from treeshell.shell import Shell


@dataclass
class Context:
    """
    Execution context for a single command invocation.

    Attributes:
        shell (Shell): The shell that dispatched the command.
        command (Command): The resolved command.
        flags (FlagMap): Parsed flag values, defaults included.
        args (list[str]): Positional arguments left after flag parsing.
        negated (bool): True when the line started with the negation keyword.
        line (str): The raw input line.
    """

    shell: Shell
    command: Command
    flags: FlagMap = field(default_factory=FlagMap)
    args: list[str] = field(default_factory=list)
    negated: bool = False
    line: str = ""

    def __str__(self) -> str:
        return (
            f"Context(command='{self.command.name}', args={self.args}, "
            f"flags={self.flags.explicit()}, negated={self.negated})"
        )
