from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from ...models import Message

if TYPE_CHECKING:
    from .bot import Bot

MonitorFunc = Callable[["Bot", Message], Awaitable[Any]]


@dataclass
class Monitor:
    """A listener run for every message that passes its filters.

    By default a monitor skips bots, the bot's own messages, webhooks and
    edits. The ``allow_*`` methods return the monitor so they can be chained.
    """

    name: str
    callback: MonitorFunc
    enabled: bool = True
    guild_only: bool = False
    ignore_bots: bool = True
    ignore_self: bool = True
    ignore_webhooks: bool = True
    ignore_edits: bool = True

    def allow_bots(self) -> "Monitor":
        self.ignore_bots = False
        return self

    def allow_self(self) -> "Monitor":
        self.ignore_self = False
        return self

    def allow_webhooks(self) -> "Monitor":
        self.ignore_webhooks = False
        return self

    def allow_edits(self) -> "Monitor":
        self.ignore_edits = False
        return self

    def set_guild_only(self, toggle: bool = True) -> "Monitor":
        self.guild_only = toggle
        return self

    def should_run(self, message: Message, *, self_id: Optional[str], edit: bool) -> bool:
        if not self.enabled or message.author is None:
            return False
        if edit and self.ignore_edits:
            return False
        if self.guild_only and not message.guild_id:
            return False
        if self.ignore_self and self_id is not None and message.author.id == self_id:
            return False
        if self.ignore_bots and message.author.bot:
            return False
        if self.ignore_webhooks and message.webhook_id:
            return False
        return True


def monitor(name: Optional[str] = None):
    def decorator(func: MonitorFunc) -> Monitor:
        return Monitor(name=name or func.__name__, callback=func)

    return decorator


async def _run_command_handler(bot: "Bot", message: Message) -> None:
    await bot.process_commands(message)


def command_handler_monitor() -> Monitor:
    """The monitor that feeds messages into the command pipeline.

    It also runs on edits so correcting a typo re-runs the command.
    """
    return Monitor(name="commandHandler", callback=_run_command_handler).allow_edits()
