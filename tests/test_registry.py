import pytest

from octo.ext.commands import (
    Command,
    CommandRegistrationError,
    CommandRegistry,
    GrammarError,
    command,
)


async def noop(ctx):
    pass


def make(name, aliases=(), **kwargs):
    return Command(noop, name=name, aliases=list(aliases), **kwargs)


def test_lookup_by_name_then_alias_case_insensitive():
    registry = CommandRegistry()
    ping = registry.add(make("Ping", ["P"]))

    assert ping.name == "ping"
    assert registry.get("PING") is ping
    assert registry.get("p") is ping
    assert registry.get("pong") is None
    assert registry.get("") is None


def test_reregistering_releases_previous_aliases():
    registry = CommandRegistry()
    registry.add(make("ping", ["p", "pong"]))
    replacement = registry.add(make("ping", ["pp"]))

    assert registry.get("ping") is replacement
    assert registry.get("pp") is replacement
    assert registry.get("p") is None
    assert registry.get("pong") is None
    assert len(registry) == 1


def test_alias_moves_to_later_command():
    registry = CommandRegistry()
    first = registry.add(make("first", ["x"]))
    second = registry.add(make("second", ["x"]))

    assert registry.get("x") is second
    assert "x" not in first.aliases


def test_alias_equal_to_command_name_is_rejected():
    registry = CommandRegistry()
    registry.add(make("ping"))
    with pytest.raises(CommandRegistrationError):
        registry.add(make("pong", ["ping"]))
    assert registry.get("pong") is None


def test_remove():
    registry = CommandRegistry()
    registry.add(make("ping", ["p"]))
    removed = registry.remove("PING")
    assert removed is not None
    assert registry.get("p") is None
    assert registry.remove("ping") is None


def test_categories_sorted_by_name():
    registry = CommandRegistry()
    registry.add(make("zeta"))
    registry.add(make("alpha"))
    registry.add(make("ban", category="Moderation"))
    grouped = registry.categories()
    assert [c.name for c in grouped["General"]] == ["alpha", "zeta"]
    assert [c.name for c in grouped["Moderation"]] == ["ban"]


def test_bad_usage_aborts_registration(bot):
    before = len(bot.registry)
    with pytest.raises(GrammarError):

        @bot.command(usage="[a:string] <b:string>")
        async def broken(ctx):
            pass

    assert len(bot.registry) == before
    assert bot.get_command("broken") is None


def test_command_defaults_and_decorator():
    @command(aliases=["Hi"], cooldown=3, permissions="ban_members")
    async def hello(ctx):
        """Says hello.

        Longer text.
        """

    assert hello.name == "hello"
    assert hello.aliases == ["hi"]
    assert hello.description.startswith("Says hello.")
    assert hello.short_doc == "Says hello."
    assert hello.permissions == 1 << 2
    assert hello.editable and hello.override and hello.enabled
    assert make("x").description == "Mysterious command."


def test_callback_must_be_coroutine():
    def sync(ctx):
        pass

    with pytest.raises(TypeError):
        Command(sync)


def test_copy_is_independent():
    original = make("ping", ["p"])
    clone = original.copy()
    clone.disable()
    clone.aliases.append("q")
    assert original.enabled
    assert original.aliases == ["p"]
