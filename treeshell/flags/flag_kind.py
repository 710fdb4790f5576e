# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines `FlagKind`, the enum of value kinds a flag can carry.

Every kind knows the hint shown next to the flag in help output, whether the
flag's default is printed there, and the Python type its values are stored as.
`FlagKind` is the tag of `FlagValue`, so typed accessors on a parsed `FlagMap`
can refuse to hand back a value of the wrong kind.

Example:
    FlagKind("int")     → FlagKind.INT
    FlagKind("float")   → FlagKind.FLOAT64 (via alias)
    FlagKind("ip")      → FlagKind.IP_MASK (via alias)
"""
from __future__ import annotations

from enum import Enum


class FlagKind(Enum):
    """
    Value kinds supported by `FlagRegistry`.

    Members:
        STRING: Free text.
        BOOL: Boolean switch; a bare flag means `True`.
        INT: Signed 64-bit integer.
        INT64: Signed 64-bit integer, kept distinct from INT for typed access.
        UINT: Unsigned 64-bit integer.
        UINT64: Unsigned 64-bit integer, kept distinct from UINT for typed access.
        FLOAT64: Floating point number.
        DURATION: `datetime.timedelta` parsed from strings like `1h30m`.
        IP_MASK: Address plus netmask, see `IPAndMask`.

    Aliases:
        - "str" → "string"
        - "float" → "float64"
        - "ip" / "ipn" → "ip_mask"
    """

    STRING = "string"
    BOOL = "bool"
    INT = "int"
    INT64 = "int64"
    UINT = "uint"
    UINT64 = "uint64"
    FLOAT64 = "float64"
    DURATION = "duration"
    IP_MASK = "ip_mask"

    @classmethod
    def _get_alias(cls, value: str) -> str:
        aliases = {
            "str": "string",
            "float": "float64",
            "ip": "ip_mask",
            "ipn": "ip_mask",
        }
        return aliases.get(value, value)

    @classmethod
    def _missing_(cls, value: object) -> FlagKind:
        if isinstance(value, str):
            name = cls._get_alias(value.strip().lower())
            for member in cls:
                if member.value == name:
                    return member
        kinds = ", ".join(member.value for member in cls)
        raise ValueError(f"unknown flag kind {value!r}, expected one of: {kinds}")

    @property
    def help_args(self) -> str:
        """Hint printed after the flag name in help output."""
        return {
            FlagKind.STRING: "string",
            FlagKind.BOOL: "",
            FlagKind.INT: "int",
            FlagKind.INT64: "int",
            FlagKind.UINT: "uint",
            FlagKind.UINT64: "uint",
            FlagKind.FLOAT64: "float",
            FlagKind.DURATION: "duration",
            FlagKind.IP_MASK: "ip",
        }[self]

    @property
    def help_show_default(self) -> bool:
        return self is not FlagKind.BOOL

    def __str__(self) -> str:
        """Return the string representation of the flag kind."""
        return self.value
