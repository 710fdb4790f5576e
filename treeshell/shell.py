# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Main class for building and running Treeshell interactive shells.

A `Shell` owns the root of a command tree and drives it either one line at a
time (`run_line`, `run`) or as an interactive Prompt Toolkit loop with
tab-completion (`loop`). Each executed line is:

1. split into shell-like words
2. stripped of a leading negation keyword (`no shutdown`)
3. resolved to a command with `Commands.find_command()`
4. flag-parsed by the command's `FlagRegistry`
5. handed to the command's `run` callable as a `Context`

Built-in `help` and `exit` commands are added by default.
"""
from __future__ import annotations

from difflib import get_close_matches
from pathlib import Path
from typing import Any, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, History, InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import CompleteStyle
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from treeshell.command import Command
from treeshell.commands import Commands
from treeshell.completer import ShellCompleter
from treeshell.console import console
from treeshell.context import Context
from treeshell.exceptions import CommandNotFoundError, TreeshellError
from treeshell.logger import logger
from treeshell.signals import QuitSignal
from treeshell.utils import ensure_async, split_line


class Shell:
    """
    Interactive shell for a tree of commands with typed flags.

    Args:
        name (str): Program name, used as the help title and history file name.
        prompt (str): Prompt text displayed for each input line.
        description (str): Text shown above the command listing in help.
        welcome_message (str): Printed when the interactive loop starts.
        help_keyword (str): Name of the built-in help command. Also skipped by
            the completer so `help <partial>` completes command names.
        negation_keyword (str): Leading word that marks a line as negated.
        include_help_command (bool): Whether to add the built-in help command.
        include_exit_command (bool): Whether to add the built-in exit command.
        history_path (Path | None): File to persist prompt history in.
        console (Console): Rich console used for output.
    """

    def __init__(
        self,
        name: str = "treeshell",
        *,
        prompt: str = "> ",
        description: str = "",
        welcome_message: str = "",
        help_keyword: str = "help",
        negation_keyword: str = "no",
        include_help_command: bool = True,
        include_exit_command: bool = True,
        history_path: Path | None = None,
        console: Console = console,
    ) -> None:
        self.name: str = name
        self.prompt: str = prompt
        self.description: str = description
        self.welcome_message: str = welcome_message
        self.help_keyword: str = help_keyword
        self.negation_keyword: str = negation_keyword
        self.history_path: Path | None = history_path
        self.console: Console = console
        self.commands: Commands = Commands()
        self._prompt_session: PromptSession | None = None
        if include_help_command:
            self.commands.add(self._get_help_command())
        if include_exit_command:
            self.commands.add(self._get_exit_command())

    def _get_help_command(self) -> Command:
        return Command(
            name=self.help_keyword,
            help="Show the command list or help for one command.",
            usage="[command ...]",
            run=self._render_help,
        )

    def _get_exit_command(self) -> Command:
        def quit_shell(_: Context) -> None:
            raise QuitSignal()

        return Command(
            name="exit",
            aliases=["quit"],
            help="Exit the shell.",
            run=quit_shell,
        )

    def add_command(self, command: Command | None = None, **kwargs: Any) -> Command:
        """
        Add a top level command, either built or from `Command` keyword arguments.

        Raises:
            CommandAlreadyExistsError: If the name or an alias is already taken.
        """
        if command is None:
            command = Command(**kwargs)
        self.commands.add(command)
        self._invalidate_prompt_session_cache()
        return command

    def add_commands(self, commands: Sequence[Command]) -> None:
        for command in commands:
            self.add_command(command)

    @property
    def completer(self) -> ShellCompleter:
        return ShellCompleter(
            self.commands,
            help_keyword=self.help_keyword,
            negation_keyword=self.negation_keyword,
        )

    def _get_history(self) -> History:
        if self.history_path is not None:
            return FileHistory(str(self.history_path))
        return InMemoryHistory()

    @property
    def prompt_session(self) -> PromptSession:
        """Returns the prompt session for the shell."""
        if self._prompt_session is None:
            self._prompt_session = PromptSession(
                message=self.prompt,
                history=self._get_history(),
                multiline=False,
                completer=self.completer,
                complete_style=CompleteStyle.COLUMN,
                interrupt_exception=QuitSignal,
                eof_exception=QuitSignal,
            )
        return self._prompt_session

    def _invalidate_prompt_session_cache(self) -> None:
        """Forces the prompt session to be recreated on the next access."""
        self._prompt_session = None

    def _unknown_command(self, word: str, level: Commands) -> CommandNotFoundError:
        words = []
        for command in level:
            words.append(command.name)
            words.extend(command.aliases)
        matches = get_close_matches(word, words, n=3, cutoff=0.7)
        message = f"unknown command: '{word}'"
        if matches:
            message = f"{message}. Did you mean: {', '.join(matches)}?"
        return CommandNotFoundError(message)

    def resolve(self, words: Sequence[str]) -> tuple[Context, bool]:
        """
        Resolve words to a command and parse its flags.

        Returns:
            tuple[Context, bool]: The context for the command and whether it
            can be run (False for a command without a `run` callable).

        Raises:
            CommandNotFoundError: If the first word is not a command.
            FlagParseError: If the flags after the command cannot be parsed.
        """
        words = list(words)
        negated = False
        negation = self.negation_keyword
        if len(words) > 1 and negation and words[0] == negation:
            negated = True
            words = words[1:]

        command, rest = self.commands.find_command(words)
        if command is None:
            raise self._unknown_command(words[0], self.commands)

        flags, args = command.flags.parse_args(rest)
        context = Context(
            shell=self,
            command=command,
            flags=flags,
            args=args,
            negated=negated,
            line=" ".join(words),
        )
        return context, command.run is not None

    async def execute(self, words: Sequence[str], line: str = "") -> Any:
        """Run the command named by `words`, returning whatever its action returns."""
        if not words:
            return None
        context, runnable = self.resolve(words)
        if line:
            context.line = line
        if not runnable:
            context.command.render_help(self.console)
            return None
        assert context.command.run is not None
        logger.info("Running command '%s'", context.command.path())
        logger.debug("%s", context)
        return await ensure_async(context.command.run)(context)

    async def run_line(self, line: str) -> Any:
        """
        Parse and run one input line.

        Raises:
            TreeshellError: If the line cannot be split, the command is unknown,
                or its flags are invalid.
        """
        try:
            words = split_line(line)
        except ValueError as error:
            raise TreeshellError(f"invalid input: {error}") from error
        return await self.execute(words, line)

    async def loop(self) -> None:
        """Runs the interactive shell until `exit`, Ctrl-C or Ctrl-D."""
        logger.info("Starting shell: %s", self.name)
        if self.welcome_message:
            self.console.print(self.welcome_message)
        try:
            while True:
                try:
                    with patch_stdout(raw=True):
                        line = await self.prompt_session.prompt_async()
                    await self.run_line(line)
                except (EOFError, KeyboardInterrupt):
                    logger.info("EOF or KeyboardInterrupt. Exiting shell.")
                    break
                except QuitSignal:
                    logger.info("[QuitSignal]. <- Exiting shell.")
                    break
                except TreeshellError as error:
                    logger.debug("Input rejected: %s", error)
                    self.console.print(f"[error]error:[/error] {escape(str(error))}")
                except Exception as error:
                    logger.exception("Command failed: %s", error)
                    self.console.print(f"[error]error:[/error] {escape(str(error))}")
        finally:
            logger.info("Exiting shell: %s", self.name)

    async def run(self, argv: Sequence[str] | None = None) -> Any:
        """
        Run a single command given as argv words, or the interactive loop.
        """
        if argv:
            try:
                return await self.execute(argv, " ".join(argv))
            except QuitSignal:
                return None
        await self.loop()
        return None

    def build_command_table(self) -> Table:
        table = Table(show_header=False, box=box.SIMPLE)
        for command in self.commands.sorted():
            if command.hidden:
                continue
            aliases = ", ".join(command.aliases)
            table.add_row(f"[command]{command.name}[/command]", aliases, command.help)
        return table

    def render_help(self) -> None:
        """Print the top level command listing."""
        self.console.print(f"[bold]{escape(self.name)}[/bold]")
        if self.description:
            self.console.print(self.description)
        self.console.print(self.build_command_table())
        self.console.print(
            f"[hint]Type '{self.help_keyword} <command>' for command details.[/hint]"
        )

    def _render_help(self, context: Context) -> None:
        if not context.args:
            self.render_help()
            return
        command, rest = self.commands.find_command(context.args)
        if command is None:
            raise self._unknown_command(context.args[0], self.commands)
        if rest:
            raise self._unknown_command(rest[0], command.commands)
        command.render_help(self.console)

    def __str__(self) -> str:
        return f"Shell(name='{self.name}', commands={len(self.commands)})"
