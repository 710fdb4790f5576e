import pytest

from treeshell.command import Command
from treeshell.commands import Commands
from treeshell.completer import ShellCompleter

HOSTS = ["host-a", "host-b", "other"]


def configure_interface(flags):
    flags.add_string("description", "", "Interface description", short="d")
    flags.add_int("mtu", 1500, "MTU size")
    flags.add_bool("no", False, "Negate")
    flags.add_bool("shutdown", False, "Disable the interface")


@pytest.fixture
def calls():
    return []


@pytest.fixture
def completer(calls):
    def complete_hosts(prefix, args):
        calls.append((prefix, args))
        return [host for host in HOSTS if host.startswith(prefix)]

    commands = Commands()
    commands.add(Command(name="status", help="Show status"))
    commands.add(Command(name="start", help="Start a service"))
    interface = Command(
        name="interface",
        help="Configure an interface",
        aliases=["int"],
        flags_config=configure_interface,
    )
    interface.add_command(Command(name="ip", help="IP settings"))
    commands.add(interface)
    ping = Command(
        name="ping",
        help="Ping a host",
        completer=complete_hosts,
        flags_config=lambda flags: flags.add_int("count", 4, "Packets to send"),
    )
    ping.add_command(Command(name="stats", help="Ping statistics"))
    commands.add(ping)
    return ShellCompleter(commands)


def test_root_prefix(completer):
    suggestions, length = completer.complete("st")
    assert sorted(suggestions) == ["art ", "atus "]
    assert length == 2


def test_empty_line_lists_root_commands(completer):
    suggestions, length = completer.complete("")
    assert suggestions == ["status ", "start ", "interface ", "ping "]
    assert length == 0


def test_alias_prefix(completer):
    suggestions, _ = completer.complete("in")
    assert suggestions == ["terface ", "t "]


def test_complete_word_gets_trailing_space(completer):
    assert completer.complete("ping") == ([" "], 4)


def test_subcommands_and_flags_after_command(completer):
    suggestions, length = completer.complete("int ")
    assert suggestions == ["ip ", "description ", "d ", "mtu ", "shutdown "]
    assert length == 0


def test_flag_prefix(completer):
    assert completer.complete("int m") == (["tu "], 1)
    assert completer.complete("interface s") == (["hutdown "], 1)


def test_negation_flag_never_suggested(completer):
    suggestions, _ = completer.complete("int no")
    assert suggestions == []


def test_given_flags_are_not_suggested_again(completer):
    suggestions, _ = completer.complete("int mtu 9000 ")
    assert suggestions == ["ip ", "description ", "d ", "shutdown "]


def test_flag_prefix_after_flags(completer):
    assert completer.complete("int mtu=9000 desc") == (["ription "], 4)


def test_positional_argument_stops_suggestions(completer):
    assert completer.complete("int bogus ") == ([], 0)


def test_incomplete_flag_stops_suggestions(completer):
    assert completer.complete("int mtu ") == ([], 0)
    assert completer.complete("int mtu=abc ") == ([], 0)


def test_unknown_command(completer):
    assert completer.complete("bogus ") == ([], 0)
    assert completer.complete("bogus x") == ([], 1)


def test_custom_completer_bypasses_defaults(completer, calls):
    suggestions, length = completer.complete("ping ")
    assert suggestions == HOSTS
    assert length == 0
    assert "count " not in suggestions
    assert "stats " not in suggestions
    assert calls == [("", [])]


def test_custom_completer_strips_prefix(completer, calls):
    assert completer.complete("ping ho") == (["st-a", "st-b"], 2)
    assert calls == [("ho", [])]


def test_custom_completer_receives_args(completer, calls):
    completer.complete("ping host-a ot")
    assert calls == [("ot", ["host-a"])]


def test_failing_custom_completer_yields_nothing():
    def broken(prefix, args):
        raise RuntimeError("backend down")

    commands = Commands()
    commands.add(Command(name="ping", help="Ping a host", completer=broken))
    assert ShellCompleter(commands).complete("ping ") == ([], 0)


def test_help_keyword_is_skipped(completer):
    assert completer.complete("help st") == completer.complete("st")
    assert completer.complete("help int m") == (["tu "], 1)


def test_negation_keyword_is_skipped(completer):
    assert completer.complete("no int s") == (["hutdown "], 1)
    assert completer.complete("help no st") == completer.complete("st")


def test_custom_keywords():
    commands = Commands()
    commands.add(Command(name="status", help="Show status"))
    completer = ShellCompleter(commands, help_keyword="?", negation_keyword="undo")
    assert completer.complete("? undo st") == (["atus "], 2)
    assert completer.complete("help st") == ([], 2)


def test_cursor_position_limits_text(completer):
    assert completer.complete("st extra", 2) == completer.complete("st")
    assert completer.complete("int mtu 9000", 5) == (["tu "], 1)


def test_unbalanced_quotes_fall_back_to_whitespace(completer):
    suggestions, length = completer.complete('int description "x m')
    assert suggestions == ["tu "]
    assert length == 1


def test_duplicates_are_removed():
    commands = Commands()
    commands.add(
        Command(
            name="show",
            help="Show things",
            flags_config=lambda flags: flags.add_bool("s", False, "Short", short="s"),
        )
    )
    suggestions, _ = ShellCompleter(commands).complete("show ")
    assert suggestions == ["s "]
