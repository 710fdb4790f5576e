"""
Treeshell CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

from .flag import FlagMap, FlagSpec, FlagValue
from .flag_kind import FlagKind
from .flag_registry import FlagRegistry
from .values import IPAndMask, format_duration, parse_duration

__all__ = [
    "FlagKind",
    "FlagMap",
    "FlagRegistry",
    "FlagSpec",
    "FlagValue",
    "IPAndMask",
    "format_duration",
    "parse_duration",
]
