# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""config.py
Configuration loader for Treeshell command trees.

A shell can be declared in YAML or TOML:

    name: netctl
    prompt: "netctl> "
    commands:
      - name: interface
        help: Configure an interface
        aliases: [int]
        action: netctl.handlers.interface
        flags:
          - {long: mtu, kind: int, default: 1500, help: MTU size, short: m}
          - {long: address, kind: ip, help: Interface address}
        commands:
          - name: shutdown
            help: Disable the interface
            action: netctl.handlers.shutdown

`action` and `completer` are dotted import paths to callables.
"""
from __future__ import annotations

import importlib
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable

import toml
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from treeshell.command import Command
from treeshell.exceptions import (
    CommandAlreadyExistsError,
    ConfigError,
    FlagConfigurationError,
    InvalidCommandError,
)
from treeshell.flags import FlagKind, FlagRegistry
from treeshell.logger import logger
from treeshell.shell import Shell

KIND_ZERO_VALUES: dict[FlagKind, Any] = {
    FlagKind.STRING: "",
    FlagKind.BOOL: False,
    FlagKind.INT: 0,
    FlagKind.INT64: 0,
    FlagKind.UINT: 0,
    FlagKind.UINT64: 0,
    FlagKind.FLOAT64: 0.0,
    FlagKind.DURATION: timedelta(0),
    FlagKind.IP_MASK: None,
}


def import_action(dotted_path: str) -> Callable[..., Any]:
    """Dynamically imports a callable from a dotted path like 'my.module.func'."""
    module_path, _, attr = dotted_path.rpartition(".")
    if not module_path:
        raise ConfigError(f"Invalid action path: '{dotted_path}'")
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as error:
        logger.error("Failed to import module '%s': %s", module_path, error)
        raise ConfigError(
            f"Could not import '{dotted_path}': {error}. Ensure the module is "
            "installed and discoverable via PYTHONPATH."
        ) from error
    try:
        action = getattr(module, attr)
    except AttributeError as error:
        logger.error(
            "Module '%s' does not have attribute '%s': %s", module_path, attr, error
        )
        raise ConfigError(
            f"Module '{module_path}' has no attribute '{attr}'"
        ) from error
    if not callable(action):
        raise ConfigError(f"'{dotted_path}' is not callable")
    return action


class RawFlag(BaseModel):
    """Raw flag model for Treeshell configuration."""

    long: str
    help: str
    kind: FlagKind = FlagKind.STRING
    default: Any = None
    short: str = ""

    @field_validator("kind", mode="before")
    @classmethod
    def validate_kind(cls, value: Any) -> FlagKind:
        if isinstance(value, FlagKind):
            return value
        return FlagKind(value)

    def get_default(self) -> Any:
        if self.default is None:
            return KIND_ZERO_VALUES[self.kind]
        return self.default


class RawCommand(BaseModel):
    """Raw command model for Treeshell configuration."""

    name: str
    help: str
    aliases: list[str] = Field(default_factory=list)
    long_help: str = ""
    usage: str = ""
    hidden: bool = False
    action: str | None = None
    completer: str | None = None
    flags: list[RawFlag] = Field(default_factory=list)
    commands: list[RawCommand] = Field(default_factory=list)


class RawShell(BaseModel):
    """Top level model of a Treeshell configuration file."""

    name: str = "treeshell"
    prompt: str = "> "
    description: str = ""
    welcome_message: str = ""
    commands: list[RawCommand] = Field(default_factory=list)


def convert_command(raw_command: RawCommand) -> Command:
    """Build a `Command` (and its sub-commands) from its raw model."""

    def flags_config(registry: FlagRegistry) -> None:
        for flag in raw_command.flags:
            registry.add_flag(
                flag.kind, flag.long, flag.get_default(), flag.help, short=flag.short
            )

    command = Command(
        name=raw_command.name,
        help=raw_command.help,
        aliases=raw_command.aliases,
        long_help=raw_command.long_help,
        usage=raw_command.usage,
        hidden=raw_command.hidden,
        run=import_action(raw_command.action) if raw_command.action else None,
        completer=(
            import_action(raw_command.completer) if raw_command.completer else None
        ),
        flags_config=flags_config,
    )
    for child in raw_command.commands:
        command.add_command(convert_command(child))
    return command


def read_config(path: Path) -> dict[str, Any]:
    """Read a YAML or TOML file into a dictionary."""
    suffix = path.suffix.lower()
    try:
        with path.open("r", encoding="UTF-8") as config_file:
            if suffix in (".yaml", ".yml"):
                raw_config = yaml.safe_load(config_file)
            elif suffix == ".toml":
                raw_config = toml.load(config_file)
            else:
                raise ConfigError(f"Unsupported config format: {suffix}")
    except (yaml.YAMLError, toml.TomlDecodeError) as error:
        raise ConfigError(f"Could not parse {path}: {error}") from error
    if raw_config is None:
        return {}
    if not isinstance(raw_config, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    return raw_config


def loader(file_path: Path | str) -> Shell:
    """
    Load a Treeshell shell from a YAML or TOML configuration file.

    Raises:
        ConfigError: If the file is missing, malformed, or declares invalid
            commands or flags.
    """
    path = Path(file_path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    raw_config = read_config(path)
    try:
        raw_shell = RawShell(**raw_config)
    except ValidationError as error:
        raise ConfigError(f"Invalid configuration in {path}:\n{error}") from error

    shell = Shell(
        raw_shell.name,
        prompt=raw_shell.prompt,
        description=raw_shell.description,
        welcome_message=raw_shell.welcome_message,
    )
    try:
        for raw_command in raw_shell.commands:
            shell.add_command(convert_command(raw_command))
    except (
        CommandAlreadyExistsError,
        FlagConfigurationError,
        InvalidCommandError,
    ) as error:
        raise ConfigError(f"Invalid command definition in {path}: {error}") from error
    logger.debug("Loaded %d commands from %s", len(raw_shell.commands), path)
    return shell
