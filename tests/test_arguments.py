import pytest

from conftest import AUTHOR_ID, CHANNEL_ID, GUILD_ID, TARGET, TARGET_ID, guild_payload, make_message
from octo.errors import Forbidden
from octo.models import Channel, Member, Role, User
from octo.ext.commands import (
    ENGLISH,
    Argument,
    ArgumentKind,
    ArgumentSpec,
    CastError,
    Context,
    cast_argument,
)


def make_ctx(bot, content="!cmd", **kwargs):
    message = make_message(bot, content, **kwargs)
    return Context(bot=bot, message=message, locale=ENGLISH)


def spec(type_name, name="value"):
    return ArgumentSpec(name=name, type_name=type_name)


@pytest.mark.asyncio
@pytest.mark.parametrize("type_name", [kind.value for kind in ArgumentKind] + ["nonsense"])
async def test_empty_token_is_not_provided(bot, type_name):
    argument = await cast_argument(make_ctx(bot), spec(type_name), "")
    assert argument.provided is False
    assert argument.value is None


@pytest.mark.asyncio
async def test_int_and_float(bot):
    ctx = make_ctx(bot)
    assert (await cast_argument(ctx, spec("int"), "-42")).as_int() == -42
    assert (await cast_argument(ctx, spec("num"), "+7")).as_int() == 7
    assert (await cast_argument(ctx, spec("float"), "2.5")).as_float() == 2.5

    with pytest.raises(CastError) as info:
        await cast_argument(ctx, spec("int", "amount"), "4.2")
    assert "amount" in str(info.value)

    with pytest.raises(CastError):
        await cast_argument(ctx, spec("float"), "lots")


@pytest.mark.asyncio
async def test_bool(bot):
    ctx = make_ctx(bot)
    assert (await cast_argument(ctx, spec("bool"), "YES")).as_bool() is True
    assert (await cast_argument(ctx, spec("bool"), "off")).as_bool() is False
    with pytest.raises(CastError):
        await cast_argument(ctx, spec("bool"), "maybe")


@pytest.mark.asyncio
async def test_user_fetched_once_then_cached(bot, http):
    http.users[TARGET_ID] = TARGET
    ctx = make_ctx(bot)

    first = await cast_argument(ctx, spec("user"), f"<@!{TARGET_ID}>")
    second = await cast_argument(ctx, spec("user"), f"<@!{TARGET_ID}>")

    assert isinstance(first.as_user(), User)
    assert first.value == second.value
    assert first.as_user().id == TARGET_ID
    assert http.user_fetches == [TARGET_ID]


@pytest.mark.asyncio
async def test_user_bare_id_and_not_found(bot):
    ctx = make_ctx(bot)
    with pytest.raises(CastError) as info:
        await cast_argument(ctx, spec("user", "target"), TARGET_ID)
    assert "cannot be found" in str(info.value)

    with pytest.raises(CastError):
        await cast_argument(ctx, spec("user"), "not-a-mention")


@pytest.mark.asyncio
async def test_previous_author_resolves_message_before_invocation(bot, http):
    http.users[TARGET_ID] = TARGET
    http.history[CHANNEL_ID] = [{"id": "1", "channel_id": CHANNEL_ID, "author": TARGET, "content": "hi"}]
    ctx = make_ctx(bot)

    argument = await cast_argument(ctx, spec("user"), "^")

    assert argument.as_user().id == TARGET_ID
    assert http.history_queries == [
        {"channel_id": CHANNEL_ID, "limit": 1, "before": ctx.message.id, "after": None}
    ]


@pytest.mark.asyncio
async def test_previous_author_with_empty_channel(bot):
    with pytest.raises(CastError):
        await cast_argument(make_ctx(bot), spec("user"), "^")


@pytest.mark.asyncio
async def test_member_requires_guild(bot):
    ctx = make_ctx(bot, guild_id=None)
    with pytest.raises(CastError) as info:
        await cast_argument(ctx, spec("member", "who"), f"<@{TARGET_ID}>")
    assert "server" in str(info.value)


@pytest.mark.asyncio
async def test_member_from_guild_cache(bot):
    await bot.dispatch_event("GUILD_CREATE", guild_payload(members=[{"user": TARGET, "roles": []}]))
    argument = await cast_argument(make_ctx(bot), spec("member"), f"<@{TARGET_ID}>")
    assert isinstance(argument.as_member(), Member)
    assert argument.as_member().id == TARGET_ID


@pytest.mark.asyncio
async def test_channel_is_cache_only(bot):
    ctx = make_ctx(bot)
    with pytest.raises(CastError):
        await cast_argument(ctx, spec("channel"), f"<#{CHANNEL_ID}>")

    await bot.dispatch_event("CHANNEL_CREATE", {"id": CHANNEL_ID, "name": "general", "guild_id": GUILD_ID})
    argument = await cast_argument(ctx, spec("channel"), f"<#{CHANNEL_ID}>")
    assert isinstance(argument.as_channel(), Channel)
    assert argument.as_channel().name == "general"


@pytest.mark.asyncio
async def test_role_by_mention_id_or_name(bot):
    role_id = "777777777777777777"
    await bot.dispatch_event(
        "GUILD_CREATE",
        guild_payload(roles=[{"id": role_id, "name": "Moderators", "permissions": "4"}]),
    )
    ctx = make_ctx(bot)

    for raw in (f"<@&{role_id}>", role_id, "moderators"):
        argument = await cast_argument(ctx, spec("role"), raw)
        assert isinstance(argument.as_role(), Role)
        assert argument.as_role().id == role_id

    with pytest.raises(CastError):
        await cast_argument(ctx, spec("role"), "admins")


@pytest.mark.asyncio
async def test_literal_is_case_sensitive(bot):
    ctx = make_ctx(bot)
    assert (await cast_argument(ctx, spec("literal", "add"), "add")).as_string() == "add"
    with pytest.raises(CastError):
        await cast_argument(ctx, spec("literal", "add"), "ADD")


@pytest.mark.asyncio
async def test_unknown_type_fails_at_cast_time(bot):
    with pytest.raises(CastError) as info:
        await cast_argument(make_ctx(bot), spec("wat"), "x")
    assert "wat" in str(info.value)


def test_accessor_type_mismatch_raises_type_error():
    argument = Argument(value="12")
    assert argument.as_string() == "12"
    with pytest.raises(TypeError):
        argument.as_int()
    with pytest.raises(TypeError):
        Argument(value=True).as_int()
    with pytest.raises(TypeError):
        Argument(value=AUTHOR_ID).as_user()


@pytest.mark.asyncio
async def test_member_fetch_refused_is_a_cast_error(bot, http):
    async def refuse(guild_id, user_id):
        raise Forbidden(403, "Missing Access", None)

    http.get_guild_member = refuse
    with pytest.raises(CastError) as info:
        await cast_argument(make_ctx(bot), spec("member", "who"), f"<@{TARGET_ID}>")
    assert "cannot be found in this server" in str(info.value)
