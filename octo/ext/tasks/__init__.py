from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional


LOGGER = logging.getLogger("octo")

ErrorHook = Callable[[Exception], Awaitable[None]]


class Loop:
    """Calls a coroutine on a fixed interval in a background task.

    ``wait_first`` sleeps one interval before the first call. ``stop()``
    ends the loop after the current call and cuts a pending sleep short;
    ``cancel()`` kills the task outright.
    """

    def __init__(
        self,
        coro: Callable[..., Awaitable[Any]],
        *,
        seconds: float = 0.0,
        minutes: float = 0.0,
        hours: float = 0.0,
        count: Optional[int] = None,
        reconnect: bool = True,
        wait_first: bool = False,
    ) -> None:
        if not inspect.iscoroutinefunction(coro):
            raise TypeError("Loop function must be a coroutine")
        self.coro = coro
        self.interval = hours * 3600.0 + minutes * 60.0 + seconds
        self.count = count
        self.reconnect = reconnect
        self.wait_first = wait_first
        self._task: Optional[asyncio.Task] = None
        self._halt = asyncio.Event()
        self._on_error: Optional[ErrorHook] = None
        self._iterations = 0
        self._args: tuple[Any, ...] = ()

    def __repr__(self) -> str:
        name = getattr(self.coro, "__name__", "?")
        return f"<Loop coro={name} interval={self.interval} running={self.is_running()}>"

    @property
    def current_loop(self) -> int:
        return self._iterations

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, *args: Any) -> asyncio.Task:
        if self.is_running():
            return self._task
        self._halt = asyncio.Event()
        self._args = args
        self._iterations = 0
        self._task = asyncio.create_task(self._runner())
        return self._task

    def stop(self) -> None:
        self._halt.set()

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()

    def error(self, coro: ErrorHook) -> ErrorHook:
        self._on_error = coro
        return coro

    def _exhausted(self) -> bool:
        return self.count is not None and self._iterations >= self.count

    async def _pause(self) -> None:
        try:
            await asyncio.wait_for(self._halt.wait(), timeout=max(self.interval, 0))
        except asyncio.TimeoutError:
            pass

    async def _call_once(self) -> None:
        try:
            await self.coro(*self._args)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if self._on_error is not None:
                await self._on_error(exc)
            else:
                LOGGER.exception("Unhandled exception in loop %r", self)
            if not self.reconnect:
                raise

    async def _runner(self) -> None:
        if self.wait_first:
            await self._pause()
        while not self._halt.is_set():
            await self._call_once()
            self._iterations += 1
            if self._exhausted():
                return
            await self._pause()


def loop(
    *,
    seconds: float = 0.0,
    minutes: float = 0.0,
    hours: float = 0.0,
    count: Optional[int] = None,
    reconnect: bool = True,
    wait_first: bool = False,
) -> Callable[[Callable[..., Awaitable[Any]]], Loop]:
    """Decorator form of :class:`Loop`."""

    def decorator(coro: Callable[..., Awaitable[Any]]) -> Loop:
        return Loop(
            coro,
            seconds=seconds,
            minutes=minutes,
            hours=hours,
            count=count,
            reconnect=reconnect,
            wait_first=wait_first,
        )

    return decorator


__all__ = ["Loop", "loop"]
