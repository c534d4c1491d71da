from __future__ import annotations

import asyncio
import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Coroutine, List, Optional, Sequence

from ...embeds import Embed
from ...errors import HTTPException
from ...models import Message, Reaction
from ...utils import as_chunks

if TYPE_CHECKING:
    from ...client import Client
    from .context import Context

LOGGER = logging.getLogger("octo")

EMOJI_FIRST = "\u23ea"
EMOJI_LEFT = "\u25c0\ufe0f"
EMOJI_STOP = "\u23f9\ufe0f"
EMOJI_RIGHT = "\u25b6\ufe0f"
EMOJI_LAST = "\u23e9"
CONTROLS = (EMOJI_FIRST, EMOJI_LEFT, EMOJI_STOP, EMOJI_RIGHT, EMOJI_LAST)


def _glyph(name: Optional[str]) -> str:
    # Clients disagree on sending the emoji variation selector.
    return (name or "").replace("\ufe0f", "")


_CONTROL_GLYPHS = frozenset(_glyph(emoji) for emoji in CONTROLS)


class Paginator:
    """Reaction-driven pages over a single embed message.

    Build pages with :meth:`add_page` or :meth:`add_page_string`, then
    ``await run()``. The session ends when the timeout elapses (controls are
    cleared) or when :meth:`stop` is called (the message is deleted).
    Usually started detached from the command::

        paginator = Paginator.for_context(ctx)
        for chunk in chunks:
            paginator.add_page_string(chunk)
        asyncio.create_task(paginator.run())
    """

    retract_delay = 0.25

    def __init__(
        self,
        bot: "Client",
        channel_id: str,
        author_id: Optional[str] = None,
        *,
        timeout: float = 300.0,
        extra: str = "",
        template: Optional[Callable[[], Embed]] = None,
    ) -> None:
        self.bot = bot
        self.channel_id = str(channel_id)
        self.author_id = str(author_id) if author_id else None
        self.timeout = timeout
        self.extra = extra
        self.template: Callable[[], Embed] = template or Embed
        self.pages: List[Embed] = []
        self.message: Optional[Message] = None
        self.running = False
        self._index = 0
        self._lock = threading.Lock()
        self._stop_event = asyncio.Event()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    def for_context(cls, ctx: "Context", **kwargs: Any) -> "Paginator":
        author_id = ctx.author.id if ctx.author else None
        return cls(ctx.bot, ctx.channel_id, author_id, **kwargs)

    @property
    def index(self) -> int:
        with self._lock:
            return self._index

    def set_template(self, template: Callable[[], Embed]) -> None:
        self.template = template

    def set_extra(self, extra: str) -> None:
        self.extra = extra

    def add_page(self, fn: Callable[[Embed], Optional[Embed]]) -> Embed:
        embed = self.template()
        page = fn(embed)
        if page is None:
            page = embed
        self.pages.append(page)
        return page

    def add_page_string(self, text: str) -> Embed:
        return self.add_page(lambda embed: embed.set_description(text))

    def add_lines(self, lines: Sequence[str], *, per_page: int = 10) -> None:
        for chunk in as_chunks(lines, size=per_page):
            self.add_page_string("\n".join(chunk))

    def stamp_footers(self) -> None:
        total = len(self.pages)
        for number, page in enumerate(self.pages, start=1):
            page.set_footer(text=f"Page {number}/{total} {self.extra}".rstrip())

    # Navigation

    def _next_index(self) -> int:
        with self._lock:
            return 0 if self._index >= len(self.pages) - 1 else self._index + 1

    def _previous_index(self) -> int:
        with self._lock:
            return len(self.pages) - 1 if self._index == 0 else self._index - 1

    async def goto(self, index: int) -> None:
        if not 0 <= index < len(self.pages):
            raise IndexError(f"page {index} out of range for {len(self.pages)} pages")
        with self._lock:
            self._index = index
        if self.message is not None:
            await self.bot.edit_message(self.channel_id, self.message.id, embed=self.pages[index])

    async def next_page(self) -> None:
        await self.goto(self._next_index())

    async def previous_page(self) -> None:
        await self.goto(self._previous_index())

    async def first_page(self) -> None:
        await self.goto(0)

    async def last_page(self) -> None:
        await self.goto(len(self.pages) - 1)

    def stop(self) -> None:
        self._stop_event.set()

    # Session

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _owned(self, reaction: Reaction) -> bool:
        if self.message is None or reaction.message_id != self.message.id or reaction.emoji is None:
            return False
        me = getattr(self.bot, "user", None)
        if me is not None and reaction.user_id == me.id:
            return False
        return self.author_id is None or reaction.user_id == self.author_id

    def _collect(self, reaction: Reaction) -> bool:
        if self._owned(reaction):
            self._queue.put_nowait(reaction)
        # Never resolves, so one waiter feeds the queue for the whole session.
        return False

    async def _add_controls(self) -> None:
        for emoji in CONTROLS:
            await self.bot.add_reaction(self.channel_id, self.message.id, emoji)

    async def _apply(self, reaction: Reaction) -> None:
        glyph = _glyph(reaction.emoji.name)
        try:
            if glyph == _glyph(EMOJI_STOP):
                self.stop()
            elif glyph == _glyph(EMOJI_RIGHT):
                await self.next_page()
            elif glyph == _glyph(EMOJI_LEFT):
                await self.previous_page()
            elif glyph == _glyph(EMOJI_FIRST):
                await self.first_page()
            elif glyph == _glyph(EMOJI_LAST):
                await self.last_page()
        except HTTPException as exc:
            LOGGER.debug("Page switch failed: %s", exc)

    async def _retract(self, reaction: Reaction) -> None:
        await asyncio.sleep(self.retract_delay)
        try:
            await self.bot.remove_reaction(
                self.channel_id, self.message.id, str(reaction.emoji), user_id=reaction.user_id
            )
        except HTTPException as exc:
            LOGGER.debug("Could not retract reaction: %s", exc)

    async def _on_timeout(self) -> None:
        try:
            await self.bot.clear_reactions(self.channel_id, self.message.id)
            return
        except HTTPException as exc:
            LOGGER.debug("Could not clear reactions, removing own instead: %s", exc)
        for emoji in CONTROLS:
            try:
                await self.bot.remove_reaction(self.channel_id, self.message.id, emoji)
            except HTTPException:
                continue

    async def _on_stop(self) -> None:
        try:
            await self.bot.delete_message(self.channel_id, self.message.id)
        except HTTPException as exc:
            LOGGER.debug("Could not delete paginator message: %s", exc)

    async def run(self) -> None:
        if self.running or not self.pages:
            return
        self.running = True
        collector: Optional[asyncio.Future] = None
        try:
            self.stamp_footers()
            self.message = await self.bot.send_message(self.channel_id, embed=self.pages[self.index])
            collector = asyncio.ensure_future(self.bot.wait_for("reaction_add", check=self._collect))
            if len(self.pages) > 1:
                await self._add_controls()
            await self._loop()
        finally:
            if collector is not None:
                collector.cancel()
            self.running = False

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        stop_waiter = asyncio.ensure_future(self._stop_event.wait())
        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    await self._on_timeout()
                    return
                getter = asyncio.ensure_future(self._queue.get())
                done, _ = await asyncio.wait(
                    {getter, stop_waiter},
                    timeout=remaining,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if stop_waiter in done:
                    getter.cancel()
                    await self._on_stop()
                    return
                if getter in done:
                    reaction = getter.result()
                    if _glyph(reaction.emoji.name) in _CONTROL_GLYPHS:
                        self._spawn(self._apply(reaction))
                    self._spawn(self._retract(reaction))
                    continue
                getter.cancel()
                await self._on_timeout()
                return
        finally:
            stop_waiter.cancel()
