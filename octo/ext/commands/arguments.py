from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional

from ...errors import HTTPException
from ...models import Channel, Member, Role, User
from ...utils import find
from .errors import CastError
from .usage import ArgumentKind, ArgumentSpec

if TYPE_CHECKING:
    from .context import Context


@dataclass
class Argument:
    """A typed argument value.

    Accessors assume the value already matches the declared kind (casting
    enforced that), so a mismatch is a bug in the command and raises
    ``TypeError``. Check :attr:`provided` before reading optional arguments.
    """

    value: Any = None
    provided: bool = True

    def _expect(self, kind: type | tuple[type, ...]) -> Any:
        if not isinstance(self.value, kind):
            raise TypeError(f"argument holds {type(self.value).__name__}, not {kind}")
        return self.value

    def as_string(self) -> str:
        return self._expect(str)

    def as_int(self) -> int:
        if isinstance(self.value, bool):
            raise TypeError("argument holds bool, not int")
        return self._expect(int)

    def as_float(self) -> float:
        return self._expect(float)

    def as_bool(self) -> bool:
        return self._expect(bool)

    def as_user(self) -> User:
        return self._expect(User)

    def as_member(self) -> Member:
        return self._expect(Member)

    def as_channel(self) -> Channel:
        return self._expect(Channel)

    def as_role(self) -> Role:
        return self._expect(Role)

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)


MENTION_RE = re.compile(r"^(?:<@!?)?(\d{17,19})>?$")
CHANNEL_MENTION_RE = re.compile(r"^(?:<#)?(\d{17,19})>?$")
ROLE_MENTION_RE = re.compile(r"^(?:<@&)?(\d{17,19})>?$")
_INT_RE = re.compile(r"^[+-]?\d+$")

# Resolves to the author of the message just before the invocation.
PREVIOUS_AUTHOR = "^"

_TRUE = frozenset({"yes", "y", "true", "t", "on", "1", "enable"})
_FALSE = frozenset({"no", "n", "false", "f", "off", "0", "disable"})

Caster = Callable[["Context", ArgumentSpec, str], Awaitable[Any]]


async def _cast_string(ctx: "Context", spec: ArgumentSpec, raw: str) -> str:
    return raw


async def _cast_int(ctx: "Context", spec: ArgumentSpec, raw: str) -> int:
    if not _INT_RE.match(raw):
        raise CastError(ctx.localize("ARGUMENT_INVALID_INT", spec.name))
    return int(raw, 10)


async def _cast_float(ctx: "Context", spec: ArgumentSpec, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise CastError(ctx.localize("ARGUMENT_INVALID_FLOAT", spec.name)) from None


async def _cast_bool(ctx: "Context", spec: ArgumentSpec, raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise CastError(ctx.localize("ARGUMENT_INVALID_BOOL", spec.name))


async def _previous_author_id(ctx: "Context", spec: ArgumentSpec) -> str:
    messages = await ctx.bot.history(ctx.channel_id, limit=1, before=ctx.message.id)
    if not messages or messages[0].author is None:
        raise CastError(ctx.localize("ARGUMENT_NO_PREVIOUS_MESSAGE", spec.name))
    return messages[0].author.id


async def _cast_user(ctx: "Context", spec: ArgumentSpec, raw: str) -> User:
    if raw == PREVIOUS_AUTHOR:
        user_id = await _previous_author_id(ctx, spec)
    else:
        match = MENTION_RE.match(raw)
        if not match:
            raise CastError(ctx.localize("ARGUMENT_INVALID_USER", spec.name))
        user_id = match.group(1)

    user = ctx.bot.get_user(user_id)
    if user is not None:
        return user
    try:
        return await ctx.bot.fetch_user(user_id)
    except HTTPException:
        raise CastError(ctx.localize("ARGUMENT_USER_NOT_FOUND", spec.name)) from None


async def _cast_member(ctx: "Context", spec: ArgumentSpec, raw: str) -> Member:
    if not ctx.guild_id:
        raise CastError(ctx.localize("ARGUMENT_GUILD_ONLY", spec.name))
    if raw == PREVIOUS_AUTHOR:
        user_id = await _previous_author_id(ctx, spec)
    else:
        match = MENTION_RE.match(raw)
        if not match:
            raise CastError(ctx.localize("ARGUMENT_INVALID_MEMBER", spec.name))
        user_id = match.group(1)

    member = ctx.bot.get_member(ctx.guild_id, user_id)
    if member is not None:
        return member
    try:
        return await ctx.bot.fetch_member(ctx.guild_id, user_id)
    except HTTPException:
        raise CastError(ctx.localize("ARGUMENT_MEMBER_NOT_FOUND", spec.name)) from None


async def _cast_channel(ctx: "Context", spec: ArgumentSpec, raw: str) -> Channel:
    match = CHANNEL_MENTION_RE.match(raw)
    if not match:
        raise CastError(ctx.localize("ARGUMENT_INVALID_CHANNEL", spec.name))
    channel = ctx.bot.get_channel(match.group(1))
    if channel is None:
        raise CastError(ctx.localize("ARGUMENT_CHANNEL_NOT_FOUND", spec.name))
    return channel


async def _cast_role(ctx: "Context", spec: ArgumentSpec, raw: str) -> Role:
    if not ctx.guild_id:
        raise CastError(ctx.localize("ARGUMENT_GUILD_ONLY", spec.name))
    guild = ctx.bot.get_guild(ctx.guild_id)
    if guild is None:
        try:
            guild = await ctx.bot.fetch_guild(ctx.guild_id)
        except HTTPException:
            raise CastError(ctx.localize("ARGUMENT_ROLE_NOT_FOUND", spec.name)) from None

    match = ROLE_MENTION_RE.match(raw)
    if match:
        role = guild.roles.get(match.group(1))
    else:
        lowered = raw.lower()
        role = find(lambda r: (r.name or "").lower() == lowered, guild.roles.values())
    if role is None:
        raise CastError(ctx.localize("ARGUMENT_ROLE_NOT_FOUND", spec.name))
    return role


async def _cast_literal(ctx: "Context", spec: ArgumentSpec, raw: str) -> str:
    if raw != spec.name:
        raise CastError(ctx.localize("ARGUMENT_INVALID_LITERAL", spec.name))
    return raw


CASTERS: Dict[ArgumentKind, Caster] = {
    ArgumentKind.STRING: _cast_string,
    ArgumentKind.INT: _cast_int,
    ArgumentKind.FLOAT: _cast_float,
    ArgumentKind.BOOL: _cast_bool,
    ArgumentKind.USER: _cast_user,
    ArgumentKind.MEMBER: _cast_member,
    ArgumentKind.CHANNEL: _cast_channel,
    ArgumentKind.ROLE: _cast_role,
    ArgumentKind.LITERAL: _cast_literal,
}


async def cast_argument(ctx: "Context", spec: ArgumentSpec, raw: Optional[str]) -> Argument:
    """Turn one raw token into an :class:`Argument` for ``spec``.

    An empty token is never an error here; whether it was required is the
    caller's concern.
    """
    if not raw:
        return Argument(value=None, provided=False)
    caster = CASTERS.get(spec.kind) if spec.kind is not None else None
    if caster is None:
        raise CastError(ctx.localize("ARGUMENT_INVALID_TYPE", spec.type_name))
    return Argument(value=await caster(ctx, spec, raw), provided=True)
