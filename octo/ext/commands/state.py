from __future__ import annotations

import math
import threading
import time
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

if TYPE_CHECKING:
    from ...models import Message


class CooldownStore:
    """Per-user, per-command timestamp ledger.

    ``check`` both tests and stamps, so callers must only call it once the
    invocation is otherwise allowed to run.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._ledger: Dict[str, Dict[str, float]] = {}

    def check(self, user_id: str, command: str, seconds: float) -> Tuple[bool, int]:
        if seconds <= 0:
            return True, 0

        now = self._clock()
        with self._lock:
            per_user = self._ledger.setdefault(str(user_id), {})
            last = per_user.get(command)
            if last is None or now >= last + seconds:
                per_user[command] = now
                return True, 0
            return False, math.ceil(last + seconds - now)

    def reset(self, user_id: str, command: Optional[str] = None) -> None:
        with self._lock:
            if command is None:
                self._ledger.pop(str(user_id), None)
                return
            per_user = self._ledger.get(str(user_id))
            if per_user is not None:
                per_user.pop(command, None)

    def clear(self) -> int:
        with self._lock:
            count = sum(len(per_user) for per_user in self._ledger.values())
            self._ledger.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return sum(len(per_user) for per_user in self._ledger.values())


class ReplyCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._replies: Dict[str, "Message"] = {}

    def get(self, message_id: str) -> Optional["Message"]:
        with self._lock:
            return self._replies.get(str(message_id))

    def set(self, message_id: str, reply: "Message") -> None:
        with self._lock:
            self._replies[str(message_id)] = reply

    def pop(self, message_id: str) -> Optional["Message"]:
        with self._lock:
            return self._replies.pop(str(message_id), None)

    def clear(self) -> int:
        with self._lock:
            count = len(self._replies)
            self._replies.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._replies)

    def __contains__(self, message_id: object) -> bool:
        with self._lock:
            return str(message_id) in self._replies
