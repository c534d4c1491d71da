import asyncio
from typing import Any, Dict, List, Optional

import pytest

from octo.errors import Forbidden, NotFound
from octo.ext import commands
from octo.models import Message, User

BOT_ID = "333333333333333333"
OWNER_ID = "222222222222222222"
AUTHOR_ID = "111111111111111111"
TARGET_ID = "444444444444444444"
GUILD_ID = "555555555555555555"
CHANNEL_ID = "666666666666666666"

BOT_USER = {"id": BOT_ID, "username": "octo", "bot": True}
AUTHOR = {"id": AUTHOR_ID, "username": "alice"}
OWNER = {"id": OWNER_ID, "username": "owner"}
TARGET = {"id": TARGET_ID, "username": "mallory"}


class FakeHTTP:
    """Records every outbound call and serves entities from dicts."""

    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.edits: List[Dict[str, Any]] = []
        self.deleted: List[str] = []
        self.reactions: List[str] = []
        self.removed_reactions: List[tuple] = []
        self.cleared: List[str] = []
        self.typing: List[str] = []
        self.history_queries: List[Dict[str, Any]] = []
        self.user_fetches: List[str] = []
        self.users: Dict[str, Dict[str, Any]] = {}
        self.members: Dict[tuple, Dict[str, Any]] = {}
        self.guilds: Dict[str, Dict[str, Any]] = {}
        self.channels: Dict[str, Dict[str, Any]] = {}
        self.history: Dict[str, List[Dict[str, Any]]] = {}
        self.forbid: set = set()
        self._next_id = 900000000000000000

    def _snowflake(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    def _check(self, name: str) -> None:
        if name in self.forbid:
            raise Forbidden(403, "Forbidden", None)

    async def start(self) -> None:
        pass

    async def close(self) -> None:
        pass

    def set_token(self, token: str) -> None:
        pass

    async def create_message(self, channel_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._check("create_message")
        data = {
            "id": self._snowflake(),
            "channel_id": channel_id,
            "content": payload.get("content", ""),
            "embeds": payload.get("embeds", []),
            "author": BOT_USER,
        }
        self.sent.append(data)
        return data

    async def edit_message(self, channel_id: str, message_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._check("edit_message")
        data = {
            "id": message_id,
            "channel_id": channel_id,
            "content": payload.get("content", ""),
            "embeds": payload.get("embeds", []),
            "author": BOT_USER,
        }
        self.edits.append(data)
        return data

    async def get_message(self, channel_id: str, message_id: str) -> Dict[str, Any]:
        raise NotFound(404, "Unknown Message", None)

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        self._check("delete_message")
        self.deleted.append(message_id)

    async def list_channel_messages(
        self,
        channel_id: str,
        limit: Optional[int] = None,
        before: Optional[str] = None,
        after: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        self.history_queries.append({"channel_id": channel_id, "limit": limit, "before": before, "after": after})
        return list(self.history.get(channel_id, []))[: limit or 50]

    async def trigger_typing(self, channel_id: str) -> None:
        self._check("trigger_typing")
        self.typing.append(channel_id)

    async def add_reaction(self, channel_id: str, message_id: str, emoji: str) -> None:
        self._check("add_reaction")
        self.reactions.append(emoji)

    async def remove_reaction(self, channel_id: str, message_id: str, emoji: str, user_id: str = "@me") -> None:
        self._check("remove_reaction")
        self.removed_reactions.append((emoji, user_id))

    async def clear_reactions(self, channel_id: str, message_id: str) -> None:
        self._check("clear_reactions")
        self.cleared.append(message_id)

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        self.user_fetches.append(user_id)
        if user_id == "@me":
            return BOT_USER
        if user_id not in self.users:
            raise NotFound(404, "Unknown User", None)
        return self.users[user_id]

    async def get_channel(self, channel_id: str) -> Dict[str, Any]:
        if channel_id not in self.channels:
            raise NotFound(404, "Unknown Channel", None)
        return self.channels[channel_id]

    async def get_guild(self, guild_id: str) -> Dict[str, Any]:
        if guild_id not in self.guilds:
            raise NotFound(404, "Unknown Guild", None)
        return self.guilds[guild_id]

    async def get_guild_member(self, guild_id: str, user_id: str) -> Dict[str, Any]:
        if (guild_id, user_id) not in self.members:
            raise NotFound(404, "Unknown Member", None)
        return self.members[(guild_id, user_id)]


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def http() -> FakeHTTP:
    return FakeHTTP()


@pytest.fixture
def bot(http: FakeHTTP) -> commands.Bot:
    instance = commands.Bot("!", owner_id=OWNER_ID, http=http)
    instance.user = User.from_dict(BOT_USER)
    return instance


_message_ids = iter(range(700000000000000000, 800000000000000000))


def make_message(
    bot: commands.Bot,
    content: str,
    *,
    author: Optional[Dict[str, Any]] = None,
    guild_id: Optional[str] = GUILD_ID,
    channel_id: str = CHANNEL_ID,
    message_id: Optional[str] = None,
    **extra: Any,
) -> Message:
    data: Dict[str, Any] = {
        "id": message_id or str(next(_message_ids)),
        "channel_id": channel_id,
        "content": content,
        "author": author or AUTHOR,
    }
    if guild_id is not None:
        data["guild_id"] = guild_id
    data.update(extra)
    return Message.from_dict(data)


def guild_payload(*, roles: Optional[List[Dict[str, Any]]] = None, members: Optional[List[Dict[str, Any]]] = None):
    return {
        "id": GUILD_ID,
        "name": "Test Guild",
        "owner_id": OWNER_ID,
        "roles": [{"id": GUILD_ID, "name": "@everyone", "permissions": "0"}] + list(roles or []),
        "members": list(members or []),
        "channels": [{"id": CHANNEL_ID, "name": "general", "type": 0}],
    }


async def drain(bot: commands.Bot) -> None:
    """Wait for every detached monitor task the bot has spawned."""
    for _ in range(50):
        pending = list(bot._tasks)
        if not pending:
            return
        await asyncio.gather(*pending)
