# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the data structures produced and consumed by `FlagRegistry`.

- `FlagSpec`: the immutable declaration of one flag.
- `FlagValue`: a tagged value stored for one flag after parsing.
- `FlagMap`: the per-parse mapping of long flag names to `FlagValue`, with typed
  accessors that fail loudly when a flag is read back as the wrong kind.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from treeshell.exceptions import FlagNotFoundError, FlagTypeError
from treeshell.flags.flag_kind import FlagKind
from treeshell.flags.values import IPAndMask, format_duration


@dataclass(frozen=True)
class FlagSpec:
    """
    Represents one declared flag.

    Attributes:
        short (str): Empty, or a single character alias of the flag.
        long (str): The canonical flag name, used as the key in parse results.
        help (str): Help text shown in the flag listing.
        help_args (str): Hint for the value the flag takes (e.g. `int`).
        help_show_default (bool): Whether the default is printed in help.
        default (Any): The value stored when the flag is not given.
        kind (FlagKind): The value kind of the flag.
    """

    short: str
    long: str
    help: str
    help_args: str
    help_show_default: bool
    default: Any
    kind: FlagKind = FlagKind.STRING

    def get_flag_text(self) -> str:
        """Get the `-n, --name string` column used in help output."""
        flags = f"--{self.long}"
        if self.short:
            flags = f"-{self.short}, {flags}"
        if self.help_args:
            flags = f"{flags} {self.help_args}"
        return flags

    def get_default_text(self) -> str:
        if self.default is None:
            return ""
        if isinstance(self.default, timedelta):
            return format_duration(self.default)
        if self.kind is FlagKind.STRING and not self.default:
            return ""
        return str(self.default)


@dataclass(frozen=True)
class FlagValue:
    """The value bound to one flag, tagged with its kind."""

    kind: FlagKind
    value: Any
    is_default: bool = False


class FlagMap(dict):
    """
    Mapping of long flag names to `FlagValue` for a single parse.

    Plain `dict` access returns the `FlagValue`; the `get_<kind>` accessors
    return the unwrapped value and check its kind.
    """

    def _get(self, name: str, *kinds: FlagKind) -> Any:
        try:
            item: FlagValue = self[name]
        except KeyError:
            raise FlagNotFoundError(f"missing flag value: {name}") from None
        if item.kind not in kinds:
            expected = " or ".join(str(kind) for kind in kinds)
            raise FlagTypeError(f"flag '{name}' is a {item.kind} flag, not {expected}")
        return item.value

    def get_value(self, name: str) -> Any:
        """Return the raw value of a flag regardless of its kind."""
        try:
            return self[name].value
        except KeyError:
            raise FlagNotFoundError(f"missing flag value: {name}") from None

    def is_default(self, name: str) -> bool:
        try:
            return self[name].is_default
        except KeyError:
            raise FlagNotFoundError(f"missing flag value: {name}") from None

    def get_string(self, name: str) -> str:
        return self._get(name, FlagKind.STRING)

    def get_bool(self, name: str) -> bool:
        return self._get(name, FlagKind.BOOL)

    def get_int(self, name: str) -> int:
        return self._get(name, FlagKind.INT)

    def get_int64(self, name: str) -> int:
        return self._get(name, FlagKind.INT64)

    def get_uint(self, name: str) -> int:
        return self._get(name, FlagKind.UINT)

    def get_uint64(self, name: str) -> int:
        return self._get(name, FlagKind.UINT64)

    def get_float64(self, name: str) -> float:
        return self._get(name, FlagKind.FLOAT64)

    def get_duration(self, name: str) -> timedelta:
        return self._get(name, FlagKind.DURATION)

    def get_ip_mask(self, name: str) -> IPAndMask | None:
        return self._get(name, FlagKind.IP_MASK)

    def explicit(self) -> dict[str, Any]:
        """Return the unwrapped values of the flags given on the command line."""
        return {name: item.value for name, item in self.items() if not item.is_default}

    def to_dict(self) -> dict[str, Any]:
        return {name: item.value for name, item in self.items()}
