# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Provides `ShellCompleter`, the tab-completion engine for Treeshell command trees.

Given the text of the input line and the cursor position, the completer walks the
command tree with the words typed so far and suggests what may come next:

- Sub-command names and aliases at the resolved level
- Flag names (long and short form) of the resolved command
- Whatever a command's custom completer returns, verbatim

Suggestions are returned as the text still to be inserted (the typed prefix is
stripped) with a trailing space, together with the length of the prefix they
complete. `ShellCompleter` is also a Prompt Toolkit `Completer`, so it can be
passed straight to a `PromptSession`.

Completion never raises: lines that cannot be tokenized fall back to whitespace
splitting, and anything that does not resolve yields no suggestions.
"""
from __future__ import annotations

from typing import Iterable, Iterator

from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

from treeshell.command import Command
from treeshell.commands import Commands
from treeshell.exceptions import FlagParseError
from treeshell.flags import FlagRegistry
from treeshell.logger import logger
from treeshell.utils import split_line


class ShellCompleter(Completer):
    """
    Completion engine for a Treeshell command tree.

    Args:
        commands (Commands): Root level of the command tree.
        help_keyword (str): Leading word dropped before lookup, so that
            `help <partial>` completes like `<partial>`.
        negation_keyword (str): Leading word dropped the same way (`no <partial>`).
            A flag with this long name is never suggested.
    """

    def __init__(
        self,
        commands: Commands,
        help_keyword: str = "help",
        negation_keyword: str = "no",
    ) -> None:
        self.commands = commands
        self.help_keyword = help_keyword
        self.negation_keyword = negation_keyword

    def complete(
        self, line: str, cursor_pos: int | None = None
    ) -> tuple[list[str], int]:
        """
        Compute suggestions for `line` with the cursor at `cursor_pos`.

        Args:
            line (str): The raw input line.
            cursor_pos (int | None): Cursor offset into `line`. Defaults to the end.

        Returns:
            tuple[list[str], int]: The suggestions and the length of the prefix
            they complete.
        """
        suggestions, prefix = self._complete(line, cursor_pos)
        return suggestions, len(prefix)

    def _complete(self, line: str, cursor_pos: int | None) -> tuple[list[str], str]:
        if cursor_pos is None:
            cursor_pos = len(line)
        text = line[:cursor_pos]
        try:
            words = split_line(text)
        except ValueError:
            logger.debug("Falling back to whitespace split for %r", text)
            words = text.split()

        prefix = ""
        if words and not text[-1:].isspace():
            prefix = words.pop()

        if words and words[0] == self.help_keyword:
            words = words[1:]
        if words and self.negation_keyword and words[0] == self.negation_keyword:
            words = words[1:]

        commands = self.commands
        flags: FlagRegistry | None = None
        typed = {word.lstrip("-").partition("=")[0] for word in words}
        if words:
            command, rest = self.commands.find_command(words)
            if command is None:
                return [], prefix

            if command.completer is not None:
                return self._run_custom_completer(command, prefix, rest), prefix

            if rest:
                explicit = self._parse_typed_flags(command, rest)
                if explicit is None:
                    return [], prefix
                typed.update(explicit)

            commands = command.commands
            flags = command.flags

        if prefix:
            candidates = self._suggest_for_prefix(prefix, commands, flags)
        else:
            candidates = self._suggest_all(commands, flags, typed)
        return [f"{candidate} " for candidate in dict.fromkeys(candidates)], prefix

    def _run_custom_completer(
        self, command: Command, prefix: str, rest: list[str]
    ) -> list[str]:
        assert command.completer is not None
        try:
            words = command.completer(prefix, rest)
        except Exception as error:
            logger.debug("Completer for '%s' failed: %s", command.name, error)
            return []
        return [word.removeprefix(prefix) for word in words]

    def _parse_typed_flags(self, command: Command, rest: list[str]) -> set[str] | None:
        """
        Check that the words after a command are all flags of that command.

        Returns:
            set[str] | None: The long names given explicitly, or None when the
            words contain anything other than complete flags.
        """
        try:
            values, leftover = command.flags.parse_args(rest)
        except FlagParseError:
            return None
        if leftover:
            return None
        return set(values.explicit())

    def _suggest_for_prefix(
        self, prefix: str, commands: Commands, flags: FlagRegistry | None
    ) -> Iterator[str]:
        for command in commands:
            if command.name.startswith(prefix):
                yield command.name.removeprefix(prefix)
            for alias in command.aliases:
                if alias.startswith(prefix):
                    yield alias.removeprefix(prefix)

        if flags is None:
            return
        for spec in flags:
            if spec.short and len(prefix) < len(spec.short):
                if spec.short.startswith(prefix):
                    yield spec.short.removeprefix(prefix)
            if (
                len(prefix) < len(spec.long)
                and spec.long.startswith(prefix)
                and spec.long != self.negation_keyword
            ):
                yield spec.long.removeprefix(prefix)

    def _suggest_all(
        self, commands: Commands, flags: FlagRegistry | None, typed: set[str]
    ) -> Iterator[str]:
        for command in commands:
            yield command.name

        if flags is None:
            return
        for spec in flags:
            if spec.long != self.negation_keyword and spec.long not in typed:
                yield spec.long
            if spec.short:
                yield spec.short

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        """
        Yield Prompt Toolkit completions for the current input buffer.

        Each completion inserts the remaining text at the cursor and is displayed
        as the full word.
        """
        suggestions, prefix = self._complete(document.text, document.cursor_position)
        for suggestion in suggestions:
            display = f"{prefix}{suggestion}".strip() or suggestion
            yield Completion(suggestion, start_position=0, display=display)
