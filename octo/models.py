from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .embeds import Embed
from .enums import ChannelType


def _snowflake(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return str(value) if value is not None else None


@dataclass
class User:
    id: str
    username: Optional[str] = None
    discriminator: Optional[str] = None
    avatar: Optional[str] = None
    bot: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "User":
        if not data:
            return cls(id="0")
        return cls(
            id=str(data.get("id")),
            username=data.get("username"),
            discriminator=data.get("discriminator"),
            avatar=data.get("avatar"),
            bot=bool(data.get("bot")),
        )

    @property
    def avatar_url(self) -> Optional[str]:
        if not self.avatar:
            return None
        return f"https://cdn.discordapp.com/avatars/{self.id}/{self.avatar}.png?size=256"

    def __str__(self) -> str:
        if self.discriminator and self.discriminator != "0":
            return f"{self.username}#{self.discriminator}"
        return self.username or self.id


@dataclass
class Role:
    id: str
    name: Optional[str] = None
    permissions: int = 0
    position: int = 0
    guild_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], guild_id: Optional[str] = None) -> "Role":
        # Permission bitfields arrive as decimal strings.
        try:
            permissions = int(data.get("permissions") or 0)
        except (TypeError, ValueError):
            permissions = 0
        return cls(
            id=str(data.get("id")),
            name=data.get("name"),
            permissions=permissions,
            position=int(data.get("position") or 0),
            guild_id=guild_id or _snowflake(data, "guild_id"),
        )


@dataclass
class Member:
    user: User
    guild_id: str
    roles: List[str] = field(default_factory=list)
    nick: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], guild_id: str, user: Optional[User] = None) -> "Member":
        return cls(
            user=user or User.from_dict(data.get("user")),
            guild_id=str(guild_id),
            roles=[str(role_id) for role_id in data.get("roles") or []],
            nick=data.get("nick"),
        )

    @property
    def id(self) -> str:
        return self.user.id

    def __str__(self) -> str:
        return self.nick or str(self.user)


@dataclass
class Guild:
    id: str
    name: Optional[str] = None
    owner_id: Optional[str] = None
    roles: Dict[str, Role] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Guild":
        guild_id = str(data.get("id"))
        roles = [Role.from_dict(item, guild_id=guild_id) for item in data.get("roles") or []]
        return cls(
            id=guild_id,
            name=data.get("name"),
            owner_id=_snowflake(data, "owner_id"),
            roles={role.id: role for role in roles},
        )


@dataclass
class Channel:
    id: str
    type: int = ChannelType.text
    name: Optional[str] = None
    guild_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Channel":
        return cls(
            id=str(data.get("id")),
            type=int(data.get("type") or 0),
            name=data.get("name"),
            guild_id=_snowflake(data, "guild_id"),
        )


@dataclass
class Message:
    id: str
    channel_id: str
    content: str = ""
    guild_id: Optional[str] = None
    author: Optional[User] = None
    webhook_id: Optional[str] = None
    mentions: List[User] = field(default_factory=list)
    embeds: List[Embed] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        author = data.get("author")
        return cls(
            id=str(data.get("id")),
            channel_id=str(data.get("channel_id")),
            content=data.get("content") or "",
            guild_id=_snowflake(data, "guild_id"),
            author=User.from_dict(author) if author else None,
            webhook_id=_snowflake(data, "webhook_id"),
            mentions=[User.from_dict(item) for item in data.get("mentions") or []],
            embeds=[Embed.from_dict(item) for item in data.get("embeds") or []],
        )


@dataclass
class Emoji:
    id: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Emoji":
        return cls(id=_snowflake(data, "id"), name=data.get("name"))

    def __str__(self) -> str:
        if self.id:
            return f"{self.name}:{self.id}"
        return self.name or ""


@dataclass
class Reaction:
    """A single ``MESSAGE_REACTION_ADD`` event."""

    message_id: Optional[str] = None
    channel_id: Optional[str] = None
    guild_id: Optional[str] = None
    user_id: Optional[str] = None
    emoji: Optional[Emoji] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reaction":
        return cls(
            message_id=_snowflake(data, "message_id"),
            channel_id=_snowflake(data, "channel_id"),
            guild_id=_snowflake(data, "guild_id"),
            user_id=_snowflake(data, "user_id"),
            emoji=Emoji.from_dict(data["emoji"]) if data.get("emoji") else None,
        )
