from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ...embeds import Embed
from ...models import Channel, Guild, Message, User
from ...utils import MISSING
from .arguments import Argument
from .errors import CommandError, CommandInvokeError
from .locale import Language

if TYPE_CHECKING:
    from .bot import Bot
    from .core import Command


@dataclass
class Context:
    """Everything a command handler knows about its invocation.

    Replies go through the bot's reply cache keyed by the invoking message,
    so re-running a command from an edited message updates the earlier
    response instead of posting a new one.
    """

    bot: "Bot"
    message: Message
    command: Optional["Command"] = None
    prefix: str = ""
    invoked_with: str = ""
    raw_args: List[str] = field(default_factory=list)
    args: List[Argument] = field(default_factory=list)
    flags: Dict[str, str] = field(default_factory=dict)
    guild: Optional[Guild] = None
    channel: Optional[Channel] = None
    locale: Optional[Language] = None

    @property
    def author(self) -> Optional[User]:
        return self.message.author

    @property
    def channel_id(self) -> str:
        return self.message.channel_id

    @property
    def guild_id(self) -> Optional[str]:
        return self.message.guild_id

    @property
    def cache_key(self) -> str:
        return self.message.id

    @property
    def valid(self) -> bool:
        return self.command is not None

    # Localization

    def localize(self, key: str, *args: Any) -> str:
        for language in (self.locale, self.bot.default_language):
            if language is None:
                continue
            text = language.get(key, *args)
            if text is not None:
                return text
        return self.bot.default_language.get_default("LOCALE_NO_KEY", key, key)

    # Replies

    def _editable(self) -> bool:
        return self.command is None or self.command.editable

    def _appends(self) -> bool:
        return self.command is not None and not self.command.override

    async def _respond(
        self, *, content: Any = MISSING, embed: Any = MISSING, editable: bool = True, append: bool = False
    ) -> Message:
        cache = self.bot.reply_cache
        if editable:
            cached = cache.get(self.cache_key)
            if cached is not None:
                # Only text replies stack; an embed reply always clears the content.
                if append and cached.content:
                    content = f"{cached.content}\n{content}"
                reply = await self.bot.edit_message(self.channel_id, cached.id, content=content, embed=embed)
                cache.set(self.cache_key, reply)
                return reply

        reply = await self.bot.send_message(
            self.channel_id,
            None if content is MISSING else content,
            embed=None if embed is MISSING else embed,
        )
        if editable:
            cache.set(self.cache_key, reply)
        return reply

    async def reply(self, content: str, *args: Any) -> Message:
        if args:
            content = content.format(*args)
        return await self._respond(content=content, embed=None, editable=self._editable(), append=self._appends())

    async def reply_no_edit(self, content: str, *args: Any) -> Message:
        if args:
            content = content.format(*args)
        return await self._respond(content=content, embed=None, editable=False)

    async def reply_embed(self, embed: Embed) -> Message:
        return await self._respond(content="", embed=embed, editable=self._editable())

    async def reply_embed_no_edit(self, embed: Embed) -> Message:
        return await self._respond(embed=embed, editable=False)

    async def reply_locale(self, key: str, *args: Any) -> Message:
        return await self.reply(self.localize(key, *args))

    async def send(self, content: Optional[str] = None, *, embed: Optional[Embed] = None) -> Message:
        return await self.bot.send_message(self.channel_id, content, embed=embed)

    async def error(self, err: Any, *args: Any) -> Optional[Message]:
        """Report a failure from inside a handler.

        The location recorded is the line that called this method.
        """
        if isinstance(err, str):
            err = CommandError(err.format(*args) if args else err)
        frame = sys._getframe(1)
        failure = CommandInvokeError(err, self, filename=frame.f_code.co_filename, lineno=frame.f_lineno)
        return await self.bot.report_error(self, failure)

    # Arguments and flags

    def arg(self, index: int) -> Argument:
        if 0 <= index < len(self.args):
            return self.args[index]
        return Argument(value=None, provided=False)

    def rest(self, index: int) -> List[Argument]:
        return [arg for arg in self.args[index:] if arg.provided]

    @property
    def has_args(self) -> bool:
        return bool(self.raw_args)

    def joined_args(self, start: int = 0) -> str:
        return " ".join(self.raw_args[start:])

    def flag(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.flags.get(name, default)

    def has_flag(self, name: str) -> bool:
        return name in self.flags

    # Misc

    @staticmethod
    def code_block(content: str, language: str = "") -> str:
        return f"```{language}\n{content}\n```"

    async def react(self, emoji: str) -> None:
        await self.bot.add_reaction(self.channel_id, self.message.id, emoji)

    async def typing(self) -> None:
        await self.bot.trigger_typing(self.channel_id)
