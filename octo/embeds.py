from __future__ import annotations

from typing import Any, Dict, List, Optional


LIMIT_TITLE = 256
LIMIT_DESCRIPTION = 4096
LIMIT_FIELD_NAME = 256
LIMIT_FIELD_VALUE = 1024
LIMIT_FIELDS = 25
LIMIT_FOOTER = 2048


def _clip(text: Optional[str], limit: int) -> Optional[str]:
    return None if text is None else text[:limit]


class Embed:
    """Rich message body. Setters return ``self`` so calls chain.

    Text is clipped to the platform limits instead of being rejected, and
    fields past the 25th are dropped.
    """

    def __init__(
        self,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        url: Optional[str] = None,
        color: Optional[int] = None,
    ) -> None:
        self.title = _clip(title, LIMIT_TITLE)
        self.description = _clip(description, LIMIT_DESCRIPTION)
        self.url = url
        self.color = color
        self._sections: Dict[str, Dict[str, Any]] = {}
        self._fields: List[Dict[str, Any]] = []

    def __repr__(self) -> str:
        return f"<Embed title={self.title!r} fields={len(self._fields)}>"

    @property
    def footer(self) -> Optional[str]:
        return self._sections.get("footer", {}).get("text")

    def set_title(self, title: str) -> "Embed":
        self.title = _clip(title, LIMIT_TITLE)
        return self

    def set_description(self, description: str) -> "Embed":
        self.description = _clip(description, LIMIT_DESCRIPTION)
        return self

    def set_footer(self, *, text: str, icon_url: Optional[str] = None) -> "Embed":
        footer = {"text": _clip(text, LIMIT_FOOTER)}
        if icon_url:
            footer["icon_url"] = icon_url
        self._sections["footer"] = footer
        return self

    def set_author(self, *, name: str, icon_url: Optional[str] = None) -> "Embed":
        author = {"name": _clip(name, LIMIT_TITLE)}
        if icon_url:
            author["icon_url"] = icon_url
        self._sections["author"] = author
        return self

    def add_field(self, *, name: str, value: str, inline: bool = False) -> "Embed":
        if len(self._fields) < LIMIT_FIELDS:
            self._fields.append(
                {
                    "name": _clip(name, LIMIT_FIELD_NAME),
                    "value": _clip(value, LIMIT_FIELD_VALUE),
                    "inline": inline,
                }
            )
        return self

    def inline_all_fields(self) -> "Embed":
        for item in self._fields:
            item["inline"] = True
        return self

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            key: value
            for key, value in (
                ("title", self.title),
                ("description", self.description),
                ("url", self.url),
                ("color", self.color),
            )
            if value is not None
        }
        for key, section in self._sections.items():
            payload[key] = dict(section)
        if self._fields:
            payload["fields"] = [dict(item) for item in self._fields]
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Embed":
        embed = cls(
            title=data.get("title"),
            description=data.get("description"),
            url=data.get("url"),
            color=data.get("color"),
        )
        for key in ("footer", "author"):
            if data.get(key):
                embed._sections[key] = dict(data[key])
        embed._fields = [dict(item) for item in data.get("fields") or []]
        return embed
