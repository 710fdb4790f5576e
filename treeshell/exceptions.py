# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines all custom exception classes used in the Treeshell CLI framework.

Configuration errors (`FlagConfigurationError`, `InvalidCommandError`,
`CommandAlreadyExistsError`) are programmer errors raised while the command tree
is being built and are expected to abort startup. Parse errors are raised per
input line and are reported back to the user.

Exception Hierarchy:
- TreeshellError
    ├── FlagConfigurationError
    ├── FlagParseError
    │   └── AmbiguousFlagError
    ├── FlagNotFoundError
    ├── FlagTypeError
    ├── CommandAlreadyExistsError
    ├── InvalidCommandError
    ├── CommandNotFoundError
    └── ConfigError
"""


class TreeshellError(Exception):
    """Base exception for the Treeshell framework."""


class FlagConfigurationError(TreeshellError):
    """Raised when a flag is registered with an invalid definition."""


class FlagParseError(TreeshellError):
    """Raised when command line tokens cannot be bound to the registered flags."""


class AmbiguousFlagError(FlagParseError):
    """Raised when an abbreviated flag matches more than one long flag name."""

    def __init__(self, token: str, first: str, second: str):
        super().__init__(
            f"Ambiguous command flags: {token} could mean {first} or {second}."
        )
        self.token = token
        self.candidates = (first, second)


class FlagNotFoundError(TreeshellError, KeyError):
    """Raised when a parsed flag map is asked for a flag it does not hold."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class FlagTypeError(TreeshellError, TypeError):
    """Raised when a flag value is read back as the wrong kind."""


class CommandAlreadyExistsError(TreeshellError):
    """Raised when a command name or alias is already taken at the same level."""


class InvalidCommandError(TreeshellError):
    """Raised when a command is defined with an invalid name or help text."""


class CommandNotFoundError(TreeshellError):
    """Raised when an input line does not resolve to a known command."""


class ConfigError(TreeshellError):
    """Raised when a declarative command configuration cannot be loaded."""
