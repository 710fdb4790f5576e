# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
This module implements `FlagRegistry`, the per-command set of typed flags and the
parser that binds command line tokens to them.

Every command in a Treeshell tree owns one registry. Flags are declared once while
the tree is built and the registry is read-only afterwards, so parses against it
can run concurrently.

Key Features:
- One generic registration path (`add_flag`) with per-kind shorthands
  (`add_string`, `add_bool`, `add_int`, `add_int64`, `add_uint`, `add_uint64`,
  `add_float64`, `add_duration`, `add_ip_mask`)
- Abbreviated flag names (`verb` → `verbose`) with ambiguity detection
- `--name value`, `--name=value`, `-n value` and bare `name value` spellings
- Two-pass parse: explicit values first, then defaults for everything else
- Address + netmask flags taking either CIDR or `addr mask` tokens
- Rich-powered flag listing for help output

Example Usage:
    flags = FlagRegistry()
    flags.add_string("name", "", "Name of the interface", short="n")
    flags.add_int("mtu", 1500, "Maximum transmission unit")

    values, rest = flags.parse_args(["--name", "eth0", "mtu=9000", "up"])

    # values.get_string("name") == "eth0"
    # values.get_int("mtu") == 9000
    # rest == ["up"]
"""
from __future__ import annotations

from datetime import timedelta
from ipaddress import ip_address
from typing import Any, Callable, Iterator, Sequence

from rich.console import Console
from rich.markup import escape

from treeshell.console import console
from treeshell.exceptions import (
    AmbiguousFlagError,
    FlagConfigurationError,
    FlagParseError,
)
from treeshell.flags.flag import FlagMap, FlagSpec, FlagValue
from treeshell.flags.flag_kind import FlagKind
from treeshell.flags.values import (
    IPAndMask,
    coerce_value,
    normalize_default,
    parse_cidr,
    parse_mask,
)
from treeshell.logger import logger

ParseFunction = Callable[[str, str, list[str], FlagMap], tuple[list[str], bool]]
DefaultSetter = Callable[[FlagMap], None]


def trim_quotes(value: str) -> str:
    """Strip one pair of surrounding double quotes."""
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


class FlagRegistry:
    """
    Holds the flags registered for one command level.

    Flags are kept in registration order together with one parse function each
    and a default-setter keyed by the long name. Parse functions are tried in
    registration order; the first one that claims a flag name consumes its value
    tokens.

    Registration is closed as soon as the registry has been used to parse, and
    any later `register` call raises `FlagConfigurationError`.
    """

    def __init__(self, console: Console = console) -> None:
        self.console: Console = console
        self._flags: list[FlagSpec] = []
        self._parsers: list[ParseFunction] = []
        self._defaults: dict[str, DefaultSetter] = {}
        self._sealed: bool = False

    def register(
        self,
        spec: FlagSpec,
        default_setter: DefaultSetter,
        parse_function: ParseFunction,
    ) -> None:
        """
        Register a flag with its default-setter and parse function.

        Raises:
            FlagConfigurationError: If the flag definition is invalid, its names
                are already taken, or the registry has already been used.
        """
        short, long = spec.short, spec.long
        if self._sealed:
            raise FlagConfigurationError(
                f"cannot register flag '{long}': registry is already in use"
            )
        if len(short) > 1:
            raise FlagConfigurationError(
                f"invalid short flag: '{short}': must be a single character"
            )
        if short.startswith("-"):
            raise FlagConfigurationError(
                f"invalid short flag: '{short}': must not start with a '-'"
            )
        if not long:
            raise FlagConfigurationError(f"empty long flag: short='{short}'")
        if long.startswith("-"):
            raise FlagConfigurationError(
                f"invalid long flag: '{long}': must not start with a '-'"
            )
        if not spec.help:
            raise FlagConfigurationError(f"empty flag help message for flag: '{long}'")
        if long in self._defaults:
            raise FlagConfigurationError(f"duplicate long flag: '{long}'")
        if short and any(flag.short == short for flag in self._flags):
            raise FlagConfigurationError(
                f"duplicate short flag: '{short}' for flag '{long}'"
            )

        self._flags.append(spec)
        self._defaults[long] = default_setter
        self._parsers.append(parse_function)
        logger.debug("Registered %s flag '%s'", spec.kind, long)

    def add_flag(
        self,
        kind: FlagKind | str,
        long: str,
        default: Any,
        help: str,
        short: str = "",
    ) -> FlagSpec:
        """
        Register a flag of the given kind.

        Args:
            kind (FlagKind | str): Value kind of the flag.
            long (str): Long name, without leading dashes.
            default (Any): Default value. Strings are coerced for non-string kinds.
            help (str): Help text. Must not be empty.
            short (str): Optional single character alias.

        Returns:
            FlagSpec: The registered flag.
        """
        if not isinstance(kind, FlagKind):
            try:
                kind = FlagKind(kind)
            except ValueError as error:
                raise FlagConfigurationError(str(error)) from None
        try:
            default = normalize_default(default, kind)
        except ValueError as error:
            raise FlagConfigurationError(
                f"invalid default for flag '{long}': {error}"
            ) from error

        spec = FlagSpec(
            short=short,
            long=long,
            help=help,
            help_args=kind.help_args,
            help_show_default=kind.help_show_default,
            default=default,
            kind=kind,
        )

        def set_default(result: FlagMap) -> None:
            result[long] = FlagValue(kind, default, is_default=True)

        self.register(spec, set_default, self._build_parser(spec))
        return spec

    def add_string(
        self, long: str, default: str, help: str, *, short: str = ""
    ) -> FlagSpec:
        return self.add_flag(FlagKind.STRING, long, default, help, short=short)

    def add_bool(
        self, long: str, default: bool, help: str, *, short: str = ""
    ) -> FlagSpec:
        return self.add_flag(FlagKind.BOOL, long, default, help, short=short)

    def add_int(
        self, long: str, default: int, help: str, *, short: str = ""
    ) -> FlagSpec:
        return self.add_flag(FlagKind.INT, long, default, help, short=short)

    def add_int64(
        self, long: str, default: int, help: str, *, short: str = ""
    ) -> FlagSpec:
        return self.add_flag(FlagKind.INT64, long, default, help, short=short)

    def add_uint(
        self, long: str, default: int, help: str, *, short: str = ""
    ) -> FlagSpec:
        return self.add_flag(FlagKind.UINT, long, default, help, short=short)

    def add_uint64(
        self, long: str, default: int, help: str, *, short: str = ""
    ) -> FlagSpec:
        return self.add_flag(FlagKind.UINT64, long, default, help, short=short)

    def add_float64(
        self, long: str, default: float, help: str, *, short: str = ""
    ) -> FlagSpec:
        return self.add_flag(FlagKind.FLOAT64, long, default, help, short=short)

    def add_duration(
        self, long: str, default: timedelta | str, help: str, *, short: str = ""
    ) -> FlagSpec:
        return self.add_flag(FlagKind.DURATION, long, default, help, short=short)

    def add_ip_mask(
        self,
        long: str,
        default: IPAndMask | str | None,
        help: str,
        *,
        short: str = "",
    ) -> FlagSpec:
        return self.add_flag(FlagKind.IP_MASK, long, default, help, short=short)

    def _match(self, name: str, spec: FlagSpec) -> bool:
        return bool(spec.long) and name == spec.long

    def _build_parser(self, spec: FlagSpec) -> ParseFunction:
        if spec.kind is FlagKind.BOOL:
            return self._bool_parser(spec)
        if spec.kind is FlagKind.IP_MASK:
            return self._ip_mask_parser(spec)
        return self._value_parser(spec)

    def _value_parser(self, spec: FlagSpec) -> ParseFunction:
        def parse(
            name: str, inline: str, args: list[str], result: FlagMap
        ) -> tuple[list[str], bool]:
            if not self._match(name, spec):
                return args, False
            if inline:
                text = inline
            elif args:
                text, args = args[0], args[1:]
            else:
                raise FlagParseError(
                    f"missing {spec.kind.help_args} value for flag: {name}"
                )
            try:
                value = coerce_value(text, spec.kind)
            except ValueError as error:
                raise FlagParseError(
                    f"invalid {spec.kind.help_args} value for flag: {name}"
                ) from error
            result[spec.long] = FlagValue(spec.kind, value)
            return args, True

        return parse

    def _bool_parser(self, spec: FlagSpec) -> ParseFunction:
        def parse(
            name: str, inline: str, args: list[str], result: FlagMap
        ) -> tuple[list[str], bool]:
            if not self._match(name, spec):
                return args, False
            value = True
            if inline:
                try:
                    value = coerce_value(inline, FlagKind.BOOL)
                except ValueError as error:
                    raise FlagParseError(
                        f"invalid boolean value for flag: {name}"
                    ) from error
            result[spec.long] = FlagValue(FlagKind.BOOL, value)
            return args, True

        return parse

    def _ip_mask_parser(self, spec: FlagSpec) -> ParseFunction:
        def parse(
            name: str, inline: str, args: list[str], result: FlagMap
        ) -> tuple[list[str], bool]:
            if not self._match(name, spec):
                return args, False
            if inline:
                value, leftover = self._consume_ip_and_mask(name, inline.split())
                if leftover:
                    raise FlagParseError(f"bad ip value for {name}")
            else:
                value, args = self._consume_ip_and_mask(name, args)
            result[spec.long] = FlagValue(FlagKind.IP_MASK, value)
            return args, True

        return parse

    def _consume_ip_and_mask(
        self, name: str, args: list[str]
    ) -> tuple[IPAndMask, list[str]]:
        """
        Read an address and mask from the front of `args`.

        Accepts `addr/prefix`, `addr /prefix` (joined and read as CIDR), or
        `addr mask` with a dotted-decimal mask. Nothing is stored on failure.
        """
        if not args:
            raise FlagParseError(f"missing ip value for {name}")

        first = args[0]
        if "/" in first:
            try:
                return parse_cidr(first), args[1:]
            except ValueError as error:
                raise FlagParseError(f"bad cidr value for {name}") from error

        try:
            address = ip_address(first)
        except ValueError as error:
            raise FlagParseError(f"bad ip value for {name}") from error

        if len(args) < 2:
            raise FlagParseError(f"missing mask value for {name}")

        if "/" in args[1]:
            try:
                return parse_cidr(first + args[1]), args[2:]
            except ValueError as error:
                raise FlagParseError(f"bad cidr value for {name}") from error

        try:
            mask = parse_mask(args[1])
        except ValueError as error:
            raise FlagParseError(f"bad mask value for {name}") from error
        if mask.version != address.version:
            raise FlagParseError(f"bad mask value for {name}")
        return IPAndMask(ip=address, mask=mask), args[2:]

    def _split_token(self, token: str) -> tuple[str, str, str]:
        """Split a token into (flag text, bare flag name, inline value)."""
        flag_text, _, inline = token.partition("=")
        if flag_text.startswith("--"):
            name = flag_text[2:]
        elif flag_text.startswith("-"):
            name = flag_text[1:]
        else:
            name = flag_text
        return flag_text, name, trim_quotes(inline)

    def resolve(self, name: str, token: str | None = None) -> str | None:
        """
        Expand a possibly abbreviated flag name to its long name.

        A single character equal to a short flag resolves to that flag. An exact
        long name wins over abbreviations. Otherwise the name must be a prefix
        of exactly one long name.

        Returns:
            str | None: The long name, or None if no flag matches.

        Raises:
            AmbiguousFlagError: If the name abbreviates more than one flag.
        """
        if not name:
            return None
        if len(name) == 1:
            for spec in self._flags:
                if spec.short == name:
                    return spec.long
        for spec in self._flags:
            if spec.long == name:
                return spec.long

        candidate: str | None = None
        for spec in self._flags:
            if len(name) <= len(spec.long) and spec.long.startswith(name):
                if candidate is not None:
                    logger.debug(
                        "Ambiguous flag %r: %s, %s", name, candidate, spec.long
                    )
                    raise AmbiguousFlagError(token or name, candidate, spec.long)
                candidate = spec.long
        return candidate

    def parse(self, args: Sequence[str], result: FlagMap | None = None) -> list[str]:
        """
        Bind leading flag tokens in `args` to their flags.

        Flags are read until a token does not name a flag; that token and
        everything after it is returned. All flags not given are then filled
        in from their defaults.

        Args:
            args (Sequence[str]): Tokens following the command name. Not mutated.
            result (FlagMap | None): Mapping to fill. Values committed by earlier
                flags stay in it when a later flag fails.

        Returns:
            list[str]: The positional arguments left over.

        Raises:
            FlagParseError: On an ambiguous abbreviation or a bad flag value.
        """
        self._sealed = True
        if result is None:
            result = FlagMap()
        remaining = list(args)

        while remaining:
            flag_text, name, inline = self._split_token(remaining[0])
            long = self.resolve(name, flag_text)
            if long is None:
                break
            remaining = remaining[1:]

            for parse_function in self._parsers:
                remaining, parsed = parse_function(long, inline, remaining, result)
                if parsed:
                    break
            else:
                raise FlagParseError(f"invalid flag: {long}")

        for spec in self._flags:
            if spec.long in result:
                continue
            set_default = self._defaults.get(spec.long)
            if set_default is None:
                raise FlagParseError(
                    f"invalid flag: missing default function: {spec.long}"
                )
            set_default(result)

        return remaining

    def parse_args(self, args: Sequence[str]) -> tuple[FlagMap, list[str]]:
        """Parse `args` into a fresh `FlagMap`, returning it with the leftovers."""
        result = FlagMap()
        remaining = self.parse(args, result)
        return result, remaining

    def get(self, long: str) -> FlagSpec | None:
        for spec in self._flags:
            if spec.long == long:
                return spec
        return None

    def sorted_flags(self) -> list[FlagSpec]:
        """Return the flags ordered by long name."""
        return sorted(self._flags, key=lambda spec: spec.long)

    def get_help_lines(self) -> list[tuple[str, str]]:
        """Return `(flags, help)` rows for every flag, ordered by long name."""
        lines = []
        for spec in self.sorted_flags():
            help_text = spec.help
            default_text = spec.get_default_text()
            if spec.help_show_default and default_text:
                help_text = f"{help_text} (default: {default_text})"
            lines.append((spec.get_flag_text(), help_text))
        return lines

    def render_help(self, console: Console | None = None) -> None:
        """Print the flag listing using Rich output."""
        if not self._flags:
            return
        console = console or self.console
        console.print("[bold]flags:[/bold]")
        for flags, help_text in self.get_help_lines():
            flag_line = f"  {flags:<30} "
            if len(flags) > 30:
                help_text = f"\n{'':<33}{help_text}"
            console.print(
                f"[flag]{flag_line}[/flag]{escape(help_text)}", highlight=False
            )

    def __iter__(self) -> Iterator[FlagSpec]:
        return iter(list(self._flags))

    def __len__(self) -> int:
        return len(self._flags)

    def __contains__(self, long: object) -> bool:
        return any(spec.long == long for spec in self._flags)

    def __str__(self) -> str:
        return f"FlagRegistry(flags={len(self._flags)}, sealed={self._sealed})"

    def __repr__(self) -> str:
        return str(self)
