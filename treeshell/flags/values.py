# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Contains value coercion utilities for Treeshell flag parsing.

This module converts raw string tokens into the typed values stored for each
`FlagKind`. Parsing is deliberately strict: booleans only accept a fixed set of
literals, integers must be plain base-10 digits within 64-bit range, and
durations follow the `1h30m` / `250ms` syntax.

Functions:
- coerce_bool / coerce_int / coerce_uint / coerce_float: scalar conversions.
- parse_duration / format_duration: duration strings to and from `timedelta`.
- parse_cidr / parse_mask / parse_ip_and_mask: address and netmask parsing.
- coerce_value: dispatch a single token to the converter for a kind.
- normalize_default: check and normalize a default value at registration time.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from ipaddress import (
    IPv4Address,
    IPv4Network,
    IPv6Address,
    IPv6Network,
    ip_address,
    ip_interface,
    ip_network,
)
from typing import Any, Callable

from treeshell.flags.flag_kind import FlagKind

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_UINT_PATTERN = re.compile(r"[0-9]+")
_DURATION_PART = re.compile(r"([0-9]*(?:\.[0-9]*)?)(ns|us|µs|μs|ms|s|m|h)")

# microseconds per unit
_DURATION_UNITS: dict[str, Decimal] = {
    "ns": Decimal("0.001"),
    "us": Decimal(1),
    "µs": Decimal(1),
    "μs": Decimal(1),
    "ms": Decimal(1_000),
    "s": Decimal(1_000_000),
    "m": Decimal(60_000_000),
    "h": Decimal(3_600_000_000),
}

_TRUE_LITERALS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_LITERALS = {"0", "f", "F", "FALSE", "false", "False"}


@dataclass(frozen=True)
class IPAndMask:
    """
    An address paired with its netmask.

    Attributes:
        ip (IPv4Address | IPv6Address): The host address as typed by the user.
        mask (IPv4Address | IPv6Address): The netmask, always contiguous.
    """

    ip: IPv4Address | IPv6Address
    mask: IPv4Address | IPv6Address

    @property
    def prefixlen(self) -> int:
        host_bits = int(self.mask) ^ ((1 << self.mask.max_prefixlen) - 1)
        return self.mask.max_prefixlen - host_bits.bit_length()

    @property
    def network(self) -> IPv4Network | IPv6Network:
        return ip_network((self.ip, self.prefixlen), strict=False)

    def __str__(self) -> str:
        return f"{self.ip}/{self.prefixlen}"


def coerce_bool(value: str) -> bool:
    """
    Convert a string to a boolean.

    Only `1 t T TRUE true True` and `0 f F FALSE false False` are accepted.

    Raises:
        ValueError: For any other literal.
    """
    if value in _TRUE_LITERALS:
        return True
    if value in _FALSE_LITERALS:
        return False
    raise ValueError(f"invalid boolean literal: {value!r}")


def coerce_int(value: str) -> int:
    """Convert a base-10 string to a signed 64-bit integer."""
    if not _INT_PATTERN.fullmatch(value):
        raise ValueError(f"invalid integer literal: {value!r}")
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise ValueError(f"integer out of range: {value!r}")
    return number


def coerce_uint(value: str) -> int:
    """Convert a base-10 string to an unsigned 64-bit integer. Signs are rejected."""
    if not _UINT_PATTERN.fullmatch(value):
        raise ValueError(f"invalid unsigned integer literal: {value!r}")
    number = int(value)
    if number > UINT64_MAX:
        raise ValueError(f"unsigned integer out of range: {value!r}")
    return number


def coerce_float(value: str) -> float:
    if not value or value != value.strip() or "_" in value:
        raise ValueError(f"invalid float literal: {value!r}")
    return float(value)


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration string such as `300ms`, `-1.5h` or `2h45m`.

    A duration is an optionally signed sequence of decimal numbers, each with a
    unit suffix. Valid units are `ns`, `us` (or `µs`), `ms`, `s`, `m`, `h`.
    A bare `0` is allowed. Precision below one microsecond is truncated.

    Raises:
        ValueError: If the string does not follow the duration syntax.
    """
    text = value
    negative = False
    if text and text[0] in "+-":
        negative = text[0] == "-"
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration: {value!r}")

    total = Decimal(0)
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if not match or match.group(1) in ("", "."):
            raise ValueError(f"invalid duration: {value!r}")
        try:
            total += Decimal(match.group(1)) * _DURATION_UNITS[match.group(2)]
        except InvalidOperation as error:
            raise ValueError(f"invalid duration: {value!r}") from error
        position = match.end()

    if negative:
        total = -total
    try:
        return timedelta(microseconds=int(total))
    except OverflowError as error:
        raise ValueError(f"duration out of range: {value!r}") from error


def _trim_decimal(value: Decimal) -> str:
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_duration(value: timedelta) -> str:
    """Render a `timedelta` in the syntax `parse_duration` reads, e.g. `1h2m3.5s`."""
    micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    if micros == 0:
        return "0s"
    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        return f"{sign}{_trim_decimal(Decimal(micros) / 1_000)}ms"

    hours, remainder = divmod(micros, 3_600_000_000)
    minutes, remainder = divmod(remainder, 60_000_000)
    seconds = _trim_decimal(Decimal(remainder) / 1_000_000)
    text = f"{seconds}s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return f"{sign}{text}"


def parse_cidr(value: str) -> IPAndMask:
    """Parse `addr/prefix` notation, keeping the host address as typed."""
    if "/" not in value:
        raise ValueError(f"missing prefix in cidr: {value!r}")
    interface = ip_interface(value)
    return IPAndMask(ip=interface.ip, mask=interface.netmask)


def parse_mask(value: str) -> IPv4Address:
    """
    Parse a dotted-decimal IPv4 netmask such as `255.255.255.0`.

    Raises:
        ValueError: If the value is not an IPv4 address or its bits are not contiguous.
    """
    mask = ip_address(value)
    if not isinstance(mask, IPv4Address):
        raise ValueError(f"netmask must be dotted-decimal IPv4: {value!r}")
    host_bits = int(mask) ^ 0xFFFFFFFF
    if host_bits & (host_bits + 1):
        raise ValueError(f"netmask is not contiguous: {value!r}")
    return mask


def parse_ip_and_mask(value: str) -> IPAndMask:
    """
    Parse an address and mask from one string.

    Accepts `10.0.0.1/24` or `10.0.0.1 255.255.255.0`. Used for defaults loaded
    from configuration files, where the value is always a single string.
    """
    parts = value.split()
    if len(parts) == 1:
        return parse_cidr(parts[0])
    if len(parts) == 2:
        if "/" in parts[1]:
            return parse_cidr(parts[0] + parts[1])
        address = ip_address(parts[0])
        mask = parse_mask(parts[1])
        if address.version != mask.version:
            raise ValueError(f"netmask does not match address family: {value!r}")
        return IPAndMask(ip=address, mask=mask)
    raise ValueError(f"invalid address and mask: {value!r}")


_CONVERTERS: dict[FlagKind, Callable[[str], Any]] = {
    FlagKind.STRING: str,
    FlagKind.BOOL: coerce_bool,
    FlagKind.INT: coerce_int,
    FlagKind.INT64: coerce_int,
    FlagKind.UINT: coerce_uint,
    FlagKind.UINT64: coerce_uint,
    FlagKind.FLOAT64: coerce_float,
    FlagKind.DURATION: parse_duration,
    FlagKind.IP_MASK: parse_ip_and_mask,
}


def coerce_value(value: str, kind: FlagKind) -> Any:
    """
    Convert a single string token to the value type of `kind`.

    Raises:
        ValueError: If the token is not a valid literal for the kind.
    """
    return _CONVERTERS[kind](value)


def is_kind_value(value: Any, kind: FlagKind) -> bool:
    """Check whether an already-typed value can be stored under `kind`."""
    if kind is FlagKind.STRING:
        return isinstance(value, str)
    if kind is FlagKind.BOOL:
        return isinstance(value, bool)
    if kind in (FlagKind.INT, FlagKind.INT64):
        return (
            isinstance(value, int)
            and not isinstance(value, bool)
            and INT64_MIN <= value <= INT64_MAX
        )
    if kind in (FlagKind.UINT, FlagKind.UINT64):
        return (
            isinstance(value, int)
            and not isinstance(value, bool)
            and 0 <= value <= UINT64_MAX
        )
    if kind is FlagKind.FLOAT64:
        return isinstance(value, float)
    if kind is FlagKind.DURATION:
        return isinstance(value, timedelta)
    return value is None or isinstance(value, IPAndMask)


def normalize_default(value: Any, kind: FlagKind) -> Any:
    """
    Normalize a registration-time default for `kind`.

    Strings are coerced for every non-string kind, so configuration files can
    spell durations and addresses as text. Integers are widened to floats for
    FLOAT64.

    Raises:
        ValueError: If the value cannot be stored under `kind`.
    """
    if isinstance(value, str) and kind is not FlagKind.STRING:
        value = coerce_value(value, kind)
    elif (
        kind is FlagKind.FLOAT64
        and isinstance(value, int)
        and not isinstance(value, bool)
    ):
        value = float(value)
    if not is_kind_value(value, kind):
        raise ValueError(f"{value!r} is not a valid {kind} value")
    return value
