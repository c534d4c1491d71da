from __future__ import annotations

import re
from typing import Dict, Tuple

FLAG_RE = re.compile(
    r"(?:--|\u2014)(\w[\w-]+)"
    r"(?:=(?:"
    r'"((?:[^"\\]|\\.)*)"'
    r"|'((?:[^'\\]|\\.)*)'"
    r"|[\u201c\u201d]((?:[^\u201c\u201d\\]|\\.)*)[\u201c\u201d]"
    r"|[\u2018\u2019]((?:[^\u2018\u2019\\]|\\.)*)[\u2018\u2019]"
    r"|([\w-]+)"
    r"))?"
)
_WHITESPACE_RUN_RE = re.compile(r"(\s)\s+")


def parse_flags(content: str) -> Tuple[str, Dict[str, str]]:
    """Pull ``--name`` / ``--name=value`` flags out of ``content``.

    Returns the remaining content, whitespace-collapsed and stripped, and the
    flags. A flag given without a value maps to its own name, so
    ``--force`` reads back as ``{"force": "force"}``.
    """
    flags: Dict[str, str] = {}
    for match in FLAG_RE.finditer(content):
        name = match.group(1)
        value = next((group for group in match.groups()[1:] if group is not None), None)
        flags[name] = name if value is None else value

    remaining = FLAG_RE.sub("", content)
    remaining = _WHITESPACE_RUN_RE.sub(r"\1", remaining).strip()
    return remaining, flags
