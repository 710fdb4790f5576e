from ipaddress import IPv4Address, ip_address, ip_network

import pytest

from treeshell.exceptions import FlagParseError
from treeshell.flags import FlagMap, FlagRegistry, IPAndMask


@pytest.fixture
def registry():
    flags = FlagRegistry()
    flags.add_ip_mask("net", None, "Network address")
    flags.add_string("name", "", "Name")
    return flags


def test_cidr_token(registry):
    values, rest = registry.parse_args(["--net", "10.0.0.0/24"])
    net = values.get_ip_mask("net")
    assert net.ip == IPv4Address("10.0.0.0")
    assert net.mask == IPv4Address("255.255.255.0")
    assert net.prefixlen == 24
    assert rest == []


def test_address_and_dotted_mask(registry):
    values, rest = registry.parse_args(["--net", "10.0.0.0", "255.255.255.0", "up"])
    net = values.get_ip_mask("net")
    assert net.prefixlen == 24
    assert rest == ["up"]


def test_address_followed_by_prefix_token(registry):
    values, _ = registry.parse_args(["--net", "10.0.0.5", "/24"])
    net = values.get_ip_mask("net")
    assert net.ip == IPv4Address("10.0.0.5")
    assert net.prefixlen == 24


def test_host_address_is_kept(registry):
    values, _ = registry.parse_args(["--net", "192.168.1.17/16"])
    net = values.get_ip_mask("net")
    assert str(net) == "192.168.1.17/16"
    assert net.network == ip_network("192.168.0.0/16")


def test_ipv6_cidr(registry):
    values, _ = registry.parse_args(["--net", "2001:db8::1/64"])
    net = values.get_ip_mask("net")
    assert net.ip == ip_address("2001:db8::1")
    assert net.prefixlen == 64


@pytest.mark.parametrize(
    "args, message",
    [
        (["--net"], "missing ip value for net"),
        (["--net", "badvalue"], "bad ip value for net"),
        (["--net", "10.0.0.0"], "missing mask value for net"),
        (["--net", "10.0.0.0", "255.0.255.0"], "bad mask value for net"),
        (["--net", "10.0.0.0", "nonsense"], "bad mask value for net"),
        (["--net", "10.0.0.0/33"], "bad cidr value for net"),
        (["--net", "10.0.0.0", "/40"], "bad cidr value for net"),
        (["--net", "2001:db8::1", "255.255.255.0"], "bad mask value for net"),
    ],
)
def test_ip_mask_errors(registry, args, message):
    with pytest.raises(FlagParseError, match=message):
        registry.parse_args(args)


def test_inline_cidr(registry):
    values, rest = registry.parse_args(["--net=10.1.0.0/16", "rest"])
    assert str(values.get_ip_mask("net")) == "10.1.0.0/16"
    assert rest == ["rest"]


def test_inline_quoted_address_and_mask(registry):
    values, _ = registry.parse_args(['net="10.0.0.1 255.255.0.0"'])
    net = values.get_ip_mask("net")
    assert net.ip == IPv4Address("10.0.0.1")
    assert net.prefixlen == 16


def test_inline_with_extra_tokens_rejected(registry):
    with pytest.raises(FlagParseError, match="bad ip value for net"):
        registry.parse_args(['net="10.0.0.1 255.255.0.0 extra"'])


def test_unset_ip_mask_defaults_to_none(registry):
    values, _ = registry.parse_args(["--name", "x"])
    assert values.get_ip_mask("net") is None
    assert values.is_default("net")


def test_failure_stores_nothing(registry):
    result = FlagMap()
    with pytest.raises(FlagParseError):
        registry.parse(["--name", "x", "--net", "10.0.0.0"], result)
    assert "net" not in result
    assert result.get_string("name") == "x"


def test_ip_and_mask_value_object():
    value = IPAndMask(ip=IPv4Address("10.2.3.4"), mask=IPv4Address("255.255.255.252"))
    assert value.prefixlen == 30
    assert value.network == ip_network("10.2.3.4/30")
    assert str(value) == "10.2.3.4/30"
