from datetime import timedelta
from io import StringIO

import pytest
from rich.console import Console

from treeshell.exceptions import FlagNotFoundError, FlagTypeError
from treeshell.flags import FlagKind, FlagMap, FlagRegistry, FlagValue
from treeshell.themes import get_one_theme


@pytest.fixture
def values():
    return FlagMap(
        mtu=FlagValue(FlagKind.INT, 9000),
        offset=FlagValue(FlagKind.INT64, 5, is_default=True),
        name=FlagValue(FlagKind.STRING, "eth0"),
        force=FlagValue(FlagKind.BOOL, False, is_default=True),
    )


def test_typed_accessors(values):
    assert values.get_int("mtu") == 9000
    assert values.get_int64("offset") == 5
    assert values.get_string("name") == "eth0"
    assert values.get_bool("force") is False
    assert values.get_value("mtu") == 9000


def test_wrong_kind_raises(values):
    with pytest.raises(FlagTypeError, match="'offset' is a int64 flag, not int"):
        values.get_int("offset")
    with pytest.raises(TypeError):
        values.get_string("mtu")


def test_missing_flag_raises(values):
    with pytest.raises(FlagNotFoundError, match="missing flag value: speed"):
        values.get_uint("speed")
    with pytest.raises(KeyError):
        values.get_value("speed")
    with pytest.raises(FlagNotFoundError):
        values.is_default("speed")


def test_explicit_and_to_dict(values):
    assert values.explicit() == {"mtu": 9000, "name": "eth0"}
    assert values.to_dict() == {
        "mtu": 9000,
        "offset": 5,
        "name": "eth0",
        "force": False,
    }
    assert values.is_default("offset")
    assert not values.is_default("mtu")


@pytest.fixture
def help_registry():
    flags = FlagRegistry()
    flags.add_string("zeta", "", "Zeta value")
    flags.add_string("alpha", "first", "Alpha value", short="a")
    flags.add_bool("verbose", False, "Verbose output", short="v")
    flags.add_duration("timeout", timedelta(seconds=90), "Timeout")
    flags.add_ip_mask("net", None, "Network")
    flags.add_int("count", 0, "Count")
    return flags


def test_help_lines(help_registry):
    lines = dict(help_registry.get_help_lines())
    assert list(lines) == [
        "-a, --alpha string",
        "--count int",
        "--net ip",
        "--timeout duration",
        "-v, --verbose",
        "--zeta string",
    ]
    assert lines["-a, --alpha string"] == "Alpha value (default: first)"
    assert lines["--count int"] == "Count (default: 0)"
    assert lines["--net ip"] == "Network"
    assert lines["--timeout duration"] == "Timeout (default: 1m30s)"
    assert lines["-v, --verbose"] == "Verbose output"
    assert lines["--zeta string"] == "Zeta value"


def test_render_help(help_registry):
    output = StringIO()
    help_registry.render_help(Console(file=output, width=120, theme=get_one_theme()))
    text = output.getvalue()
    assert "flags:" in text
    assert "--timeout duration" in text
    assert "(default: 1m30s)" in text


def test_render_help_without_flags():
    output = StringIO()
    FlagRegistry().render_help(Console(file=output, theme=get_one_theme()))
    assert output.getvalue() == ""
