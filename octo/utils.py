from __future__ import annotations

import inspect
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence, TypeVar
from urllib.parse import urlencode


class _MissingSentinel:
    __slots__ = ()

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _MissingSentinel()

T = TypeVar("T")

AUTHORIZE_URL = "https://discord.com/oauth2/authorize"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def find(predicate: Callable[[T], bool], iterable: Iterable[T]) -> Optional[T]:
    return next((item for item in iterable if predicate(item)), None)


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def oauth_url(
    client_id: int | str,
    *,
    permissions: Optional[Any] = None,
    scopes: Optional[Sequence[str]] = ("bot",),
    authorize_url: str = AUTHORIZE_URL,
) -> str:
    query = {"client_id": str(client_id)}
    if permissions is not None:
        query["permissions"] = str(int(permissions))
    if scopes:
        query["scope"] = " ".join(scopes)
    return f"{authorize_url}?{urlencode(query)}"


def as_chunks(sequence: Sequence[T], *, size: int) -> Iterator[list[T]]:
    if size <= 0:
        raise ValueError("size must be > 0")
    items = list(sequence)
    for start in range(0, len(items), size):
        yield items[start:start + size]


def human_timedelta(seconds: float) -> str:
    remaining = int(seconds)
    parts = []
    for suffix, unit in (("d", 86400), ("h", 3600), ("m", 60)):
        amount, remaining = divmod(remaining, unit)
        if amount:
            parts.append(f"{amount}{suffix}")
    parts.append(f"{remaining}s")
    return " ".join(parts)
