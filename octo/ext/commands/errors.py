from __future__ import annotations

import traceback
from typing import TYPE_CHECKING, Any, Optional

from ...errors import OctoError

if TYPE_CHECKING:
    from .context import Context


class CommandError(OctoError):
    pass


class GrammarError(CommandError):
    def __init__(self, usage: str, reason: str) -> None:
        super().__init__(f"Invalid usage {usage!r}: {reason}")
        self.usage = usage
        self.reason = reason


class CastError(CommandError):
    """A user-supplied argument does not fit its declared kind.

    The message is user-facing and is replied verbatim.
    """


class MissingRequiredArgument(CastError):
    def __init__(self, name: str) -> None:
        super().__init__(f"The argument {name} is required.")
        self.name = name


class CommandRegistrationError(CommandError):
    def __init__(self, name: str, *, alias_conflict: bool = False) -> None:
        kind = "alias" if alias_conflict else "command"
        super().__init__(f"The {kind} {name!r} is already registered as a command name")
        self.name = name
        self.alias_conflict = alias_conflict


class CommandInvokeError(CommandError):
    """A command handler failed.

    Carries the original failure payload, the invocation context and the
    source location where the failure was raised.
    """

    def __init__(
        self,
        original: Any,
        context: "Context",
        *,
        filename: Optional[str] = None,
        lineno: Optional[int] = None,
    ) -> None:
        super().__init__(str(original))
        self.original = original
        self.context = context
        self.filename = filename
        self.lineno = lineno

    @classmethod
    def from_exception(cls, exc: BaseException, context: "Context") -> "CommandInvokeError":
        frames = traceback.extract_tb(exc.__traceback__)
        if frames:
            last = frames[-1]
            return cls(exc, context, filename=last.filename, lineno=last.lineno)
        return cls(exc, context)

    @property
    def location(self) -> str:
        if self.filename is None:
            return "<unknown>"
        return f"{self.filename}:{self.lineno}"
