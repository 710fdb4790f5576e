"""
Treeshell CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

from .command import Command
from .commands import Commands
from .completer import ShellCompleter
from .context import Context
from .flags import FlagKind, FlagMap, FlagRegistry, FlagValue, IPAndMask
from .logger import logger
from .shell import Shell

__all__ = [
    "Command",
    "Commands",
    "Context",
    "FlagKind",
    "FlagMap",
    "FlagRegistry",
    "FlagValue",
    "IPAndMask",
    "Shell",
    "ShellCompleter",
    "logger",
]
