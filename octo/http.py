import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from .errors import Forbidden, HTTPException, NotFound


LOGGER = logging.getLogger("octo")

_STATUS_ERRORS = {403: Forbidden, 404: NotFound}


def _emoji_path(emoji: str) -> str:
    return quote(emoji, safe="")


def _message_path(channel_id: str, message_id: Optional[str] = None) -> str:
    path = f"/channels/{channel_id}/messages"
    return f"{path}/{message_id}" if message_id else path


class RESTClient:
    """Thin aiohttp wrapper over the platform's REST API.

    Every method returns decoded JSON (``None`` on 204). Error statuses
    raise :class:`~octo.HTTPException` or one of its subclasses.
    """

    def __init__(
        self,
        token: Optional[str],
        base_url: str = "https://discord.com/api",
        api_version: str = "10",
        token_prefix: str = "Bot ",
        user_agent: str = "octo.py (command framework)",
    ) -> None:
        self.token = token
        self.token_prefix = token_prefix
        self.user_agent = user_agent
        self.root = f"{base_url.rstrip('/')}/v{str(api_version).lstrip('v')}"
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"User-Agent": self.user_agent})

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    def set_token(self, token: str) -> None:
        self.token = token

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("RESTClient has not been started")
        return self._session

    def _auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"{self.token_prefix}{self.token}"}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = self.root + path
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        LOGGER.debug("%s %s", method, url)
        async with self.session.request(method, url, headers=self._auth_headers(), params=params, json=json) as resp:
            if resp.status == 204:
                return None
            try:
                body = await resp.json(content_type=None)
            except (aiohttp.ContentTypeError, ValueError):
                body = await resp.text()
            if resp.status >= 400:
                error = _STATUS_ERRORS.get(resp.status, HTTPException)
                raise error(resp.status, resp.reason, body)
            return body

    # Messages

    async def create_message(self, channel_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", _message_path(channel_id), json=payload)

    async def edit_message(self, channel_id: str, message_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("PATCH", _message_path(channel_id, message_id), json=payload)

    async def get_message(self, channel_id: str, message_id: str) -> Dict[str, Any]:
        return await self.request("GET", _message_path(channel_id, message_id))

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        await self.request("DELETE", _message_path(channel_id, message_id))

    async def list_channel_messages(
        self,
        channel_id: str,
        limit: Optional[int] = None,
        before: Optional[str] = None,
        after: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {"limit": limit, "before": before, "after": after}
        return await self.request("GET", _message_path(channel_id), params=params)

    async def trigger_typing(self, channel_id: str) -> None:
        await self.request("POST", f"/channels/{channel_id}/typing")

    # Reactions

    async def add_reaction(self, channel_id: str, message_id: str, emoji: str) -> None:
        path = f"{_message_path(channel_id, message_id)}/reactions/{_emoji_path(emoji)}/@me"
        await self.request("PUT", path)

    async def remove_reaction(self, channel_id: str, message_id: str, emoji: str, user_id: str = "@me") -> None:
        path = f"{_message_path(channel_id, message_id)}/reactions/{_emoji_path(emoji)}/{user_id}"
        await self.request("DELETE", path)

    async def clear_reactions(self, channel_id: str, message_id: str) -> None:
        await self.request("DELETE", f"{_message_path(channel_id, message_id)}/reactions")

    # Entities

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/users/{user_id}")

    async def get_channel(self, channel_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/channels/{channel_id}")

    async def get_guild(self, guild_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/guilds/{guild_id}")

    async def get_guild_member(self, guild_id: str, user_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/guilds/{guild_id}/members/{user_id}")
