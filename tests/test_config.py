from datetime import timedelta
from textwrap import dedent

import pytest

from treeshell.config import import_action, loader
from treeshell.exceptions import ConfigError
from treeshell.shell import Shell

HANDLERS = '''
def interface(context):
    return context.flags.to_dict()


def ping(context):
    return context.args


def complete_hosts(prefix, args):
    return [host for host in ["alpha", "beta"] if host.startswith(prefix)]


not_callable = 42
'''

YAML_CONFIG = """
name: netctl
prompt: "netctl> "
description: Network control
commands:
  - name: interface
    help: Configure an interface
    aliases: [int]
    action: netctl_handlers.interface
    flags:
      - {long: mtu, kind: int, default: 1500, help: MTU size, short: m}
      - {long: address, kind: ip, help: Interface address}
      - {long: timeout, kind: duration, default: 30s, help: Link timeout}
      - {long: description, help: Free text}
      - {long: enabled, kind: bool, help: Enable the link}
    commands:
      - name: ip
        help: IP settings
  - name: ping
    help: Ping a host
    action: netctl_handlers.ping
    completer: netctl_handlers.complete_hosts
"""

TOML_CONFIG = """
name = "netctl"

[[commands]]
name = "interface"
help = "Configure an interface"
action = "netctl_handlers.interface"

[[commands.flags]]
long = "mtu"
kind = "int"
default = 1500
help = "MTU size"
"""


@pytest.fixture
def handlers(tmp_path, monkeypatch):
    (tmp_path / "netctl_handlers.py").write_text(HANDLERS)
    monkeypatch.syspath_prepend(str(tmp_path))
    return tmp_path


def write(path, text):
    path.write_text(dedent(text))
    return path


@pytest.mark.asyncio
async def test_load_yaml(handlers):
    shell = loader(write(handlers / "netctl.yaml", YAML_CONFIG))
    assert isinstance(shell, Shell)
    assert shell.name == "netctl"
    assert shell.prompt == "netctl> "
    assert "int" in shell.commands

    values = await shell.run_line("int mtu 9000 address 10.0.0.1/24")
    assert values["mtu"] == 9000
    assert str(values["address"]) == "10.0.0.1/24"
    assert values["timeout"] == timedelta(seconds=30)
    assert values["description"] == ""
    assert values["enabled"] is False

    assert await shell.run_line("ping a b") == ["a", "b"]
    assert shell.completer.complete("ping al") == (["pha"], 2)
    assert shell.commands.get("interface").commands.get("ip") is not None


@pytest.mark.asyncio
async def test_load_toml(handlers):
    shell = loader(write(handlers / "netctl.toml", TOML_CONFIG))
    assert await shell.run_line("interface") == {"mtu": 1500}


def test_empty_file_gives_bare_shell(tmp_path):
    shell = loader(write(tmp_path / "empty.yaml", ""))
    assert shell.name == "treeshell"
    assert "help" in shell.commands


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        loader(tmp_path / "missing.yaml")


def test_unsupported_format(tmp_path):
    with pytest.raises(ConfigError, match="Unsupported config format"):
        loader(write(tmp_path / "shell.json", "{}"))


def test_malformed_yaml(tmp_path):
    with pytest.raises(ConfigError, match="Could not parse"):
        loader(write(tmp_path / "bad.yaml", "commands: [unclosed"))


def test_top_level_must_be_mapping(tmp_path):
    with pytest.raises(ConfigError, match="must be a mapping"):
        loader(write(tmp_path / "list.yaml", "- name: x\n"))


def test_unknown_flag_kind(tmp_path):
    config = """
    commands:
      - name: show
        help: Show things
        flags:
          - {long: level, kind: complex, help: Level}
    """
    with pytest.raises(ConfigError, match="Invalid configuration"):
        loader(write(tmp_path / "kind.yaml", config))


def test_duplicate_flag(tmp_path):
    config = """
    commands:
      - name: show
        help: Show things
        flags:
          - {long: level, help: Level}
          - {long: level, kind: int, help: Level again}
    """
    with pytest.raises(ConfigError, match="duplicate long flag"):
        loader(write(tmp_path / "dup.yaml", config))


def test_duplicate_command(tmp_path):
    config = """
    commands:
      - {name: show, help: Show things}
      - {name: show, help: Show again}
    """
    with pytest.raises(ConfigError, match="already in use"):
        loader(write(tmp_path / "dup.yaml", config))


def test_bad_default(tmp_path):
    config = """
    commands:
      - name: show
        help: Show things
        flags:
          - {long: count, kind: int, default: lots, help: Count}
    """
    with pytest.raises(ConfigError, match="invalid default"):
        loader(write(tmp_path / "default.yaml", config))


def test_import_action(handlers):
    assert import_action("netctl_handlers.ping").__name__ == "ping"
    with pytest.raises(ConfigError, match="Invalid action path"):
        import_action("ping")
    with pytest.raises(ConfigError, match="Could not import"):
        import_action("no_such_module_here.ping")
    with pytest.raises(ConfigError, match="has no attribute"):
        import_action("netctl_handlers.missing")
    with pytest.raises(ConfigError, match="is not callable"):
        import_action("netctl_handlers.not_callable")
