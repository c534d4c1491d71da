from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Coroutine, Dict, Iterable, List, Optional, Sequence, Tuple

from ...client import Client
from ...errors import HTTPException
from ...models import Message, User
from ...permissions import Permissions, describe_permissions
from ...utils import maybe_await, oauth_url, utcnow
from ..tasks import Loop
from .context import Context
from .core import Command, CommandFunc, CommandRegistry
from .errors import CastError, CommandError, CommandInvokeError, MissingRequiredArgument
from .flags import parse_flags
from .locale import ENGLISH, Language
from .monitors import Monitor, command_handler_monitor
from .state import CooldownStore, ReplyCache

LOGGER = logging.getLogger("octo")

COLOR = 0x7F139E

PrefixType = Any
ListHandler = Callable[["Bot", Message], Any]
LocaleHandler = Callable[["Bot", Message], Any]
BotErrorHandler = Callable[["Bot", Any], Any]


async def default_error_handler(bot: "Bot", error: Any) -> None:
    original = getattr(error, "original", error)
    location = f" at {error.location}" if isinstance(error, CommandInvokeError) else ""
    exc_info = None
    if isinstance(original, BaseException):
        exc_info = (type(original), original, original.__traceback__)
    LOGGER.error("Unhandled error%s: %s", location, original, exc_info=exc_info)


def _admit_all(bot: "Bot", message: Message) -> bool:
    return False


class Bot(Client):
    """A :class:`~octo.Client` that turns messages into command invocations.

    Every inbound message (and every edit) runs through the registered
    monitors; the built-in ``commandHandler`` monitor feeds
    :meth:`process_commands`.

    ``list_handler(bot, message)`` returning true drops a message before
    any parsing. ``locale_handler(bot, message)`` names the language used
    for replies; by default that is ``default_locale``.
    """

    def __init__(
        self,
        command_prefix: PrefixType = "!",
        *,
        mention_prefix: bool = True,
        owner_id: Optional[str | int] = None,
        owner_ids: Optional[Iterable[str | int]] = None,
        list_handler: Optional[ListHandler] = None,
        locale_handler: Optional[LocaleHandler] = None,
        default_locale: str = ENGLISH.name,
        error_handler: Optional[BotErrorHandler] = None,
        command_typing: bool = True,
        invite_permissions: int = 3072,
        color: int = COLOR,
        sweep_interval: float = 7200.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.command_prefix = command_prefix
        self.mention_prefix = mention_prefix
        self.owner_ids: set[str] = set()
        if owner_id is not None:
            self.owner_ids.add(str(owner_id))
        if owner_ids:
            self.owner_ids.update(str(item) for item in owner_ids)
        self.list_handler: ListHandler = list_handler or _admit_all
        self.locale_handler: Optional[LocaleHandler] = locale_handler
        self.error_handler: BotErrorHandler = error_handler or default_error_handler
        self.command_typing = command_typing
        self.invite_permissions = invite_permissions
        self.color = color
        self.sweep_interval = sweep_interval

        self.registry = CommandRegistry()
        self.cooldowns = CooldownStore()
        self.reply_cache = ReplyCache()
        self.commands_ran = 0
        self.uptime = None
        self.languages: Dict[str, Language] = {}
        self.default_language: Language = ENGLISH
        self.monitors: Dict[str, Monitor] = {}
        self._tasks: set[asyncio.Task] = set()
        self._sweep_loop = Loop(self._sweep_tick, seconds=sweep_interval, wait_first=True)

        self.add_language(ENGLISH)
        self.set_default_locale(default_locale)
        self.add_monitor(command_handler_monitor())

    # Configuration

    def set_prefix(self, prefix: PrefixType) -> "Bot":
        self.command_prefix = prefix
        return self

    def set_mention_prefix(self, toggle: bool) -> "Bot":
        self.mention_prefix = toggle
        return self

    def set_invite_permissions(self, bits: int) -> "Bot":
        self.invite_permissions = bits
        return self

    def set_error_handler(self, handler: BotErrorHandler) -> "Bot":
        self.error_handler = handler
        return self

    def set_list_handler(self, handler: ListHandler) -> "Bot":
        self.list_handler = handler
        return self

    def set_locale_handler(self, handler: LocaleHandler) -> "Bot":
        self.locale_handler = handler
        return self

    def set_command_typing(self, toggle: bool) -> "Bot":
        self.command_typing = toggle
        return self

    def add_language(self, language: Language) -> "Bot":
        self.languages[language.name] = language
        return self

    def set_default_locale(self, name: str) -> "Bot":
        language = self.languages.get(name)
        if language is None:
            raise ValueError(f"The language {name!r} cannot be found")
        self.default_language = language
        return self

    def add_monitor(self, monitor: Monitor) -> "Bot":
        self.monitors[monitor.name] = monitor
        return self

    def remove_monitor(self, name: str) -> Optional[Monitor]:
        return self.monitors.pop(name, None)

    def is_owner(self, user: Optional[User]) -> bool:
        if user is None or not user.id:
            return False
        return str(user.id) in self.owner_ids

    def invite_url(self) -> str:
        if self.user is None:
            raise RuntimeError("The bot user is not known before READY")
        return oauth_url(self.user.id, permissions=self.invite_permissions)

    # Commands

    @property
    def commands(self) -> Dict[str, Command]:
        return self.registry.commands

    def add_command(self, command: Command) -> Command:
        return self.registry.add(command)

    def get_command(self, name: str) -> Optional[Command]:
        return self.registry.get(name)

    def remove_command(self, name: str) -> Optional[Command]:
        return self.registry.remove(name)

    def command(
        self,
        name: Optional[str] = None,
        *,
        aliases: Optional[Sequence[str]] = None,
        **attrs: Any,
    ):
        def decorator(func: CommandFunc) -> Command:
            return self.add_command(Command(func, name=name, aliases=aliases, **attrs))

        return decorator

    def load_builtins(self) -> "Bot":
        from .builtins import load_builtins

        load_builtins(self)
        return self

    # Lifecycle

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _sweep_tick(self) -> None:
        cooldowns, replies = self.sweep()
        LOGGER.debug("Swept %d cooldown entries and %d cached replies", cooldowns, replies)

    def sweep(self) -> Tuple[int, int]:
        return self.cooldowns.clear(), self.reply_cache.clear()

    async def close(self) -> None:
        self._sweep_loop.cancel()
        for task in list(self._tasks):
            task.cancel()
        await super().close()

    async def _dispatch(self, name: str, *args: Any) -> None:
        if name == "on_ready":
            self.uptime = utcnow()
            if self.sweep_interval > 0 and not self._sweep_loop.is_running():
                self._sweep_loop.start()
        elif name == "on_message" and args:
            self.run_monitors(args[0], edit=False)
        elif name == "on_message_edit" and len(args) == 2:
            self.run_monitors(args[1], edit=True)
        await super()._dispatch(name, *args)

    # Monitors

    def run_monitors(self, message: Message, *, edit: bool) -> List[asyncio.Task]:
        if message.author is None:
            return []
        self_id = self.user.id if self.user else None
        tasks = []
        for monitor in list(self.monitors.values()):
            if monitor.should_run(message, self_id=self_id, edit=edit):
                tasks.append(self._spawn(self._run_monitor(monitor, message)))
        return tasks

    async def _run_monitor(self, monitor: Monitor, message: Message) -> None:
        try:
            await monitor.callback(self, message)
        except Exception as exc:
            LOGGER.debug("Monitor %s raised %r", monitor.name, exc)
            await self.call_error_handler(exc)

    async def call_error_handler(self, error: Any) -> None:
        try:
            await maybe_await(self.error_handler(self, error))
        except Exception:
            LOGGER.exception("Error handler raised while handling %r", error)

    # Pipeline

    async def get_prefix(self, message: Message) -> List[str]:
        prefix = self.command_prefix
        if callable(prefix):
            value = prefix(self, message)
            if inspect.isawaitable(value):
                value = await value
        else:
            value = prefix
        if isinstance(value, str):
            return [value]
        if isinstance(value, Iterable):
            return list(value)
        raise ValueError("Invalid command_prefix")

    async def match_prefix(self, message: Message) -> Optional[str]:
        content = message.content or ""
        for prefix in await self.get_prefix(message):
            if prefix and content.startswith(prefix):
                return prefix
        if self.mention_prefix and self.user is not None:
            for prefix in (f"<@{self.user.id}> ", f"<@!{self.user.id}> "):
                if content.startswith(prefix):
                    return prefix
        return None

    async def get_context(self, message: Message) -> Context:
        ctx = Context(bot=self, message=message, channel=self.get_channel(message.channel_id))
        if message.guild_id:
            ctx.guild = self.get_guild(message.guild_id)
        if not message.content:
            return ctx

        prefix = await self.match_prefix(message)
        if prefix is None:
            return ctx

        content, flags = parse_flags(message.content[len(prefix):])
        tokens = content.split()
        if not tokens:
            return ctx

        ctx.prefix = prefix
        ctx.invoked_with = tokens[0].lower()
        ctx.raw_args = tokens[1:]
        ctx.flags = flags
        ctx.command = self.registry.get(ctx.invoked_with)
        return ctx

    async def resolve_locale(self, message: Message) -> Optional[Language]:
        if self.locale_handler is None:
            return self.default_language
        name = await maybe_await(self.locale_handler(self, message))
        language = self.languages.get(name)
        if language is None:
            LOGGER.warning("locale_handler returned unknown language %r; command aborted", name)
        return language

    async def process_commands(self, message: Message) -> None:
        if message.author is None:
            return
        if await maybe_await(self.list_handler(self, message)):
            LOGGER.debug("Message %s rejected by list_handler", message.id)
            return

        ctx = await self.get_context(message)
        if not ctx.valid:
            return

        ctx.locale = await self.resolve_locale(message)
        if ctx.locale is None:
            return
        await self.invoke(ctx)

    async def member_permissions(self, ctx: Context) -> Permissions:
        """Permissions of the invoking author in the invoking guild.

        Outside a guild nobody holds any permission.
        """
        if not ctx.guild_id or ctx.author is None:
            return Permissions.none()
        guild = ctx.guild or self.get_guild(ctx.guild_id)
        try:
            if guild is None:
                guild = await self.fetch_guild(ctx.guild_id)
            if guild.owner_id and str(guild.owner_id) == str(ctx.author.id):
                return Permissions.all()
            member = self.get_member(guild.id, ctx.author.id)
            if member is None:
                member = await self.fetch_member(guild.id, ctx.author.id)
        except HTTPException as exc:
            LOGGER.debug("Could not resolve permissions for %s: %s", ctx.author.id, exc)
            return Permissions.none()
        return Permissions.for_member(guild, member)

    async def invoke(self, ctx: Context) -> None:
        command = ctx.command
        if command is None:
            return

        if not command.enabled:
            LOGGER.debug("Command %s is disabled", command.name)
            return

        if command.owner_only and not self.is_owner(ctx.author):
            LOGGER.debug("Command %s is owner only", command.name)
            return

        if command.permissions:
            held = await self.member_permissions(ctx)
            if not held.has(command.permissions):
                missing = command.permissions & ~int(held)
                await ctx.reply_locale("COMMAND_MISSING_PERMS", describe_permissions(missing))
                return

        if command.guild_only and not ctx.guild_id:
            await ctx.reply_locale("COMMAND_GUILD_ONLY")
            return

        try:
            ctx.args = await command.parse_arguments(ctx)
        except MissingRequiredArgument as exc:
            await ctx.reply_locale("COMMAND_MISSING_ARG", exc.name)
            return
        except CastError as exc:
            await ctx.reply(str(exc))
            return

        if self.command_typing:
            try:
                await self.trigger_typing(ctx.channel_id)
            except HTTPException as exc:
                LOGGER.debug("Typing indicator failed: %s", exc)

        allowed, retry_after = self.cooldowns.check(ctx.author.id, command.name, command.cooldown)
        if not allowed:
            await ctx.reply_locale("COMMAND_COOLDOWN", retry_after)
            return

        self.commands_ran += 1
        try:
            await command.invoke(ctx)
        except Exception as exc:
            await self.report_error(ctx, CommandInvokeError.from_exception(exc, ctx))
        finally:
            if command.delete_after:
                try:
                    await self.delete_message(ctx.channel_id, ctx.message.id)
                except HTTPException as exc:
                    LOGGER.debug("delete_after failed for %s: %s", ctx.message.id, exc)

    async def report_error(self, ctx: Context, error: CommandError) -> Optional[Message]:
        """Hand ``error`` to the command's handler, or the bot's, then tell the user."""
        command = ctx.command
        if command is not None and command.error_handler is not None:
            try:
                await command.error_handler(ctx, error)
            except Exception:
                LOGGER.exception("Error handler of %s raised", command.name)
        else:
            await self.call_error_handler(error)

        try:
            return await ctx.reply_locale("COMMAND_ERROR")
        except HTTPException as exc:
            LOGGER.debug("Could not report error to channel %s: %s", ctx.channel_id, exc)
            return None
