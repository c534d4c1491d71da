from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .errors import GrammarError


class ArgumentKind(str, Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    USER = "user"
    MEMBER = "member"
    CHANNEL = "channel"
    ROLE = "role"
    LITERAL = "literal"

    @classmethod
    def from_name(cls, name: str) -> Optional["ArgumentKind"]:
        name = _KIND_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            return None


_KIND_ALIASES = {
    "str": "string",
    "num": "int",
    "number": "int",
    "integer": "int",
    "boolean": "bool",
    "chan": "channel",
}

# Longest sigil first: "@@" must win over "@".
_SIGILS = (
    ("@@", ArgumentKind.MEMBER),
    ("@", ArgumentKind.USER),
    ("#", ArgumentKind.CHANNEL),
)

_REST_MARKER = "..."
_PAIRS = {"<": ">", "[": "]"}


@dataclass(frozen=True)
class ArgumentSpec:
    name: str
    type_name: str
    required: bool = True
    rest: bool = False

    @property
    def kind(self) -> Optional[ArgumentKind]:
        return ArgumentKind.from_name(self.type_name)

    def __str__(self) -> str:
        rest = _REST_MARKER if self.rest else ""
        if self.required:
            return f"<{self.name}:{self.type_name}{rest}>"
        return f"[{self.name}:{self.type_name}{rest}]"


def _build_spec(usage: str, name: str, type_name: str, *, required: bool) -> ArgumentSpec:
    rest = False
    if type_name.endswith(_REST_MARKER):
        type_name = type_name[: -len(_REST_MARKER)]
        rest = True
    if not type_name:
        for sigil, kind in _SIGILS:
            if name.startswith(sigil):
                name = name[len(sigil):]
                type_name = kind.value
                break
        else:
            type_name = ArgumentKind.LITERAL.value
    if not name:
        raise GrammarError(usage, "every tag needs a name")
    return ArgumentSpec(name=name, type_name=type_name, required=required, rest=rest)


def parse_usage(usage: str) -> List[ArgumentSpec]:
    """Compile a usage string into argument specs.

    ``<name:type>`` is required and ``[name:type]`` optional. Without a type,
    a ``@@``, ``@`` or ``#`` sigil on the name selects member, user or
    channel, and anything else is a literal keyword. A trailing ``...`` on
    the type makes the last tag collect every remaining token.
    """
    specs: List[ArgumentSpec] = []
    opened: Optional[str] = None
    name = ""
    type_name = ""
    type_mode = False
    seen_optional = False

    for char in usage:
        if char in _PAIRS:
            if opened is not None:
                raise GrammarError(usage, "cannot open a tag inside another tag")
            if char == "<" and seen_optional:
                raise GrammarError(usage, "cannot open a required tag after an optional one")
            opened = char
            name = ""
            type_name = ""
            type_mode = False
        elif char in (">", "]"):
            if opened is None:
                raise GrammarError(usage, f"{char!r} closes a tag that was never opened")
            if _PAIRS[opened] != char:
                raise GrammarError(usage, f"tag opened with {opened!r} closed with {char!r}")
            specs.append(_build_spec(usage, name, type_name, required=opened == "<"))
            if opened == "[":
                seen_optional = True
            opened = None
        elif char.isspace():
            continue
        elif opened is None:
            raise GrammarError(usage, f"unexpected {char!r} outside of a tag")
        elif char == ":" and not type_mode:
            type_mode = True
        elif type_mode:
            type_name += char
        else:
            name += char

    if opened is not None:
        raise GrammarError(usage, "unclosed tag")

    for index, spec in enumerate(specs):
        if spec.rest and index != len(specs) - 1:
            raise GrammarError(usage, "rest parameters can only appear last")
    return specs


_HUMANIZE_RE = re.compile(r"(<|\[)(\w+):[^.]+?(\.\.\.)?(>|\])")


def humanize_usage(usage: str) -> str:
    """``<user:user> [words:string...]`` -> ``<user> [words...]``."""
    return _HUMANIZE_RE.sub(r"\1\2\3\4", usage)
