import asyncio
import logging
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .embeds import Embed
from .errors import ClientException, HTTPException, LoginFailure
from .http import RESTClient
from .models import Channel, Guild, Member, Message, Reaction, Role, User
from .utils import MISSING, maybe_await


EventHandler = Callable[..., Awaitable[None]]
LOGGER = logging.getLogger("octo")

_EVENT_HANDLERS = {
    "READY": "_handle_ready",
    "MESSAGE_CREATE": "_handle_message_create",
    "MESSAGE_UPDATE": "_handle_message_update",
    "MESSAGE_REACTION_ADD": "_handle_reaction_add",
    "CHANNEL_CREATE": "_handle_channel_event",
    "CHANNEL_UPDATE": "_handle_channel_event",
    "CHANNEL_DELETE": "_handle_channel_event",
    "GUILD_CREATE": "_handle_guild_event",
    "GUILD_UPDATE": "_handle_guild_event",
    "GUILD_DELETE": "_handle_guild_event",
    "GUILD_MEMBER_ADD": "_handle_member_event",
    "GUILD_MEMBER_UPDATE": "_handle_member_event",
    "GUILD_ROLE_CREATE": "_handle_role_event",
    "GUILD_ROLE_UPDATE": "_handle_role_event",
    "GUILD_ROLE_DELETE": "_handle_role_event",
}


def _content_payload(content: Any, embed: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if content is not MISSING:
        payload["content"] = content if content is not None else ""
    if embed is not MISSING:
        if embed is None:
            payload["embeds"] = []
        elif isinstance(embed, Embed):
            payload["embeds"] = [embed.to_dict()]
        else:
            payload["embeds"] = [embed]
    return payload


class Client:
    def __init__(
        self,
        *,
        token: Optional[str] = None,
        base_url: str = "https://discord.com/api",
        api_version: str = "10",
        token_prefix: str = "Bot ",
        http: Optional[RESTClient] = None,
        message_cache_size: int = 1000,
    ) -> None:
        self.token = token
        self.http = http or RESTClient(
            token=token,
            base_url=base_url,
            api_version=api_version,
            token_prefix=token_prefix,
        )

        self._listeners: Dict[str, EventHandler] = {}
        self.user: Optional[User] = None
        self._message_cache: "OrderedDict[str, Message]" = OrderedDict()
        self._message_cache_max = message_cache_size
        self._user_cache: Dict[str, User] = {}
        self._member_cache: Dict[Tuple[str, str], Member] = {}
        self._channel_cache: Dict[str, Channel] = {}
        self._guild_cache: Dict[str, Guild] = {}
        self._waiters: Dict[str, list[tuple[asyncio.Future, Optional[Callable[..., Any]]]]] = {}

    def event(self, coro: EventHandler) -> EventHandler:
        self._listeners[coro.__name__] = coro
        return coro

    def listen(self, name: Optional[str] = None):
        def decorator(coro: EventHandler) -> EventHandler:
            self.add_listener(coro, name=name)
            return coro

        return decorator

    def add_listener(self, coro: EventHandler, name: Optional[str] = None) -> None:
        self._listeners[name or coro.__name__] = coro

    def remove_listener(self, name: str) -> None:
        self._listeners.pop(name, None)

    # Cache

    def _set_user(self, user_payload: Any) -> None:
        if isinstance(user_payload, dict):
            self.user = User.from_dict(user_payload)
            self._cache_user(self.user)
        else:
            self.user = None

    def _cache_message(self, message: Message) -> None:
        if not message or not message.id:
            return
        self._message_cache[message.id] = message
        self._message_cache.move_to_end(message.id)
        while len(self._message_cache) > self._message_cache_max:
            self._message_cache.popitem(last=False)

    def _cache_user(self, user: User) -> None:
        if user and user.id and user.id != "0":
            self._user_cache[user.id] = user

    def _cache_member(self, member: Member) -> None:
        self._cache_user(member.user)
        self._member_cache[(member.guild_id, member.id)] = member

    def _cache_channel(self, channel: Channel) -> None:
        if channel and channel.id:
            self._channel_cache[channel.id] = channel

    def _cache_guild(self, guild: Guild) -> None:
        if guild and guild.id:
            self._guild_cache[guild.id] = guild

    @property
    def users(self) -> List[User]:
        return list(self._user_cache.values())

    @property
    def guilds(self) -> List[Guild]:
        return list(self._guild_cache.values())

    @property
    def channels(self) -> List[Channel]:
        return list(self._channel_cache.values())

    def get_user(self, user_id: str) -> Optional[User]:
        return self._user_cache.get(str(user_id))

    def get_member(self, guild_id: str, user_id: str) -> Optional[Member]:
        return self._member_cache.get((str(guild_id), str(user_id)))

    def get_channel(self, channel_id: str) -> Optional[Channel]:
        return self._channel_cache.get(str(channel_id))

    def get_guild(self, guild_id: str) -> Optional[Guild]:
        return self._guild_cache.get(str(guild_id))

    def get_message(self, message_id: str) -> Optional[Message]:
        return self._message_cache.get(str(message_id))

    # Events

    async def dispatch_event(self, event_name: str, data: Any) -> None:
        """Feed one platform event (``READY``, ``MESSAGE_CREATE``...) into the client."""
        handler_name = _EVENT_HANDLERS.get(event_name)
        if handler_name is not None:
            await getattr(self, handler_name)(event_name, data)
        await self._dispatch("on_raw_event", event_name, data)

    async def _handle_ready(self, _: str, data: Any) -> None:
        self._set_user(data.get("user"))
        if self.user:
            LOGGER.info("Logged in as %s (%s)", self.user, self.user.id)
        await self._dispatch("on_ready")

    def _ingest_message(self, data: Dict[str, Any]) -> Message:
        msg = Message.from_dict(data)
        if msg.author:
            self._cache_user(msg.author)
            member_payload = data.get("member")
            if msg.guild_id and isinstance(member_payload, dict):
                self._cache_member(
                    Member.from_dict(member_payload, msg.guild_id, user=msg.author)
                )
        for user in msg.mentions:
            self._cache_user(user)
        self._cache_message(msg)
        return msg

    async def _handle_message_create(self, _: str, data: Any) -> None:
        msg = self._ingest_message(data)
        await self._dispatch("on_message", msg)

    async def _handle_message_update(self, _: str, data: Any) -> None:
        before = self.get_message(str(data.get("id")))
        if before is not None and "author" not in data:
            # Partial updates (embed unfurls) carry no author; skip them.
            return
        after = self._ingest_message(data)
        await self._dispatch("on_message_edit", before, after)

    async def _handle_reaction_add(self, _: str, data: Any) -> None:
        await self._dispatch("on_reaction_add", Reaction.from_dict(data))

    async def _handle_channel_event(self, event: str, data: Any) -> None:
        channel = Channel.from_dict(data)
        if event == "CHANNEL_DELETE":
            self._channel_cache.pop(channel.id, None)
            await self._dispatch("on_channel_delete", channel)
            return
        self._cache_channel(channel)
        await self._dispatch("on_channel_create" if event == "CHANNEL_CREATE" else "on_channel_update", channel)

    async def _handle_guild_event(self, event: str, data: Any) -> None:
        if event == "GUILD_DELETE":
            guild = self._guild_cache.pop(str(data.get("id")), None)
            await self._dispatch("on_guild_remove", guild or data)
            return
        guild = Guild.from_dict(data)
        self._cache_guild(guild)
        for item in data.get("channels") or []:
            item = dict(item)
            item.setdefault("guild_id", guild.id)
            self._cache_channel(Channel.from_dict(item))
        for item in data.get("members") or []:
            self._cache_member(Member.from_dict(item, guild.id))
        await self._dispatch("on_guild_join" if event == "GUILD_CREATE" else "on_guild_update", guild)

    async def _handle_member_event(self, event: str, data: Any) -> None:
        guild_id = data.get("guild_id")
        if not guild_id:
            return
        member = Member.from_dict(data, str(guild_id))
        self._cache_member(member)
        await self._dispatch("on_member_join" if event == "GUILD_MEMBER_ADD" else "on_member_update", member)

    async def _handle_role_event(self, event: str, data: Any) -> None:
        guild = self.get_guild(str(data.get("guild_id")))
        if event == "GUILD_ROLE_DELETE":
            if guild is not None:
                guild.roles.pop(str(data.get("role_id")), None)
            return
        role = Role.from_dict(data.get("role") or {}, guild_id=data.get("guild_id"))
        if guild is not None:
            guild.roles[role.id] = role
        await self._dispatch("on_guild_role_update", role)

    async def _wake_waiters(self, name: str, args: Tuple[Any, ...]) -> None:
        waiters = self._waiters.pop(name, None)
        if not waiters:
            return
        payload = args[0] if len(args) == 1 else args
        pending = []
        for future, check in waiters:
            if future.done():
                continue
            try:
                matched = check is None or await maybe_await(check(*args))
            except Exception as exc:
                future.set_exception(exc)
                continue
            if matched:
                future.set_result(payload)
            else:
                pending.append((future, check))
        # Waiters registered while a check was awaiting.
        pending.extend(self._waiters.pop(name, []))
        if pending:
            self._waiters[name] = pending

    async def _dispatch(self, name: str, *args: Any) -> None:
        await self._wake_waiters(name, args)
        listener = self._listeners.get(name)
        if listener is None:
            return
        try:
            await listener(*args)
        except Exception:
            LOGGER.exception("Error in event handler %s", name)

    async def wait_for(
        self,
        event: str,
        *,
        check: Optional[Callable[..., Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        name = event if event.startswith("on_") else f"on_{event}"
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._waiters.setdefault(name, []).append((future, check))
        return await asyncio.wait_for(future, timeout=timeout)

    # Transport capabilities

    async def send_message(
        self,
        channel_id: str,
        content: Optional[str] = None,
        *,
        embed: Optional[Embed] = None,
    ) -> Message:
        payload = _content_payload(MISSING if content is None else content, MISSING if embed is None else embed)
        if not payload:
            raise ClientException("Cannot send an empty message")
        data = await self.http.create_message(str(channel_id), payload)
        return self._ingest_message(data)

    async def edit_message(
        self,
        channel_id: str,
        message_id: str,
        *,
        content: Any = MISSING,
        embed: Any = MISSING,
    ) -> Message:
        data = await self.http.edit_message(str(channel_id), str(message_id), _content_payload(content, embed))
        return self._ingest_message(data)

    async def fetch_message(self, channel_id: str, message_id: str) -> Message:
        data = await self.http.get_message(str(channel_id), str(message_id))
        return self._ingest_message(data)

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        await self.http.delete_message(str(channel_id), str(message_id))
        self._message_cache.pop(str(message_id), None)

    async def history(
        self,
        channel_id: str,
        *,
        limit: int = 50,
        before: Optional[str] = None,
        after: Optional[str] = None,
    ) -> List[Message]:
        data = await self.http.list_channel_messages(str(channel_id), limit=limit, before=before, after=after)
        return [Message.from_dict(item) for item in data or []]

    async def trigger_typing(self, channel_id: str) -> None:
        await self.http.trigger_typing(str(channel_id))

    async def add_reaction(self, channel_id: str, message_id: str, emoji: str) -> None:
        await self.http.add_reaction(str(channel_id), str(message_id), emoji)

    async def remove_reaction(
        self,
        channel_id: str,
        message_id: str,
        emoji: str,
        *,
        user_id: Optional[str] = None,
    ) -> None:
        await self.http.remove_reaction(str(channel_id), str(message_id), emoji, str(user_id or "@me"))

    async def clear_reactions(self, channel_id: str, message_id: str) -> None:
        await self.http.clear_reactions(str(channel_id), str(message_id))

    async def fetch_user(self, user_id: str) -> User:
        data = await self.http.get_user(str(user_id))
        user = User.from_dict(data)
        self._cache_user(user)
        return user

    async def fetch_member(self, guild_id: str, user_id: str) -> Member:
        data = await self.http.get_guild_member(str(guild_id), str(user_id))
        member = Member.from_dict(data, str(guild_id))
        self._cache_member(member)
        return member

    async def fetch_channel(self, channel_id: str) -> Channel:
        data = await self.http.get_channel(str(channel_id))
        channel = Channel.from_dict(data)
        self._cache_channel(channel)
        return channel

    async def fetch_guild(self, guild_id: str) -> Guild:
        data = await self.http.get_guild(str(guild_id))
        guild = Guild.from_dict(data)
        self._cache_guild(guild)
        return guild

    # Lifecycle

    async def login(self, token: str) -> None:
        self.token = token
        self.http.set_token(token)

    async def start(self, token: Optional[str] = None) -> None:
        if token:
            await self.login(token)
        if not self.token:
            raise LoginFailure("Token is required to start the client")

        LOGGER.info("Starting octo client")
        await self.http.start()
        try:
            self._set_user(await self.http.get_user("@me"))
        except HTTPException as exc:
            await self.close()
            if exc.status in (401, 403):
                raise LoginFailure("Invalid token") from exc
            raise

    async def close(self) -> None:
        LOGGER.info("Closing octo client")
        await self.http.close()
