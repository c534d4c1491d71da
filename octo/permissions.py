from __future__ import annotations

from typing import Any, Dict, List, Optional


PERMISSIONS: Dict[str, int] = {
    "create_instant_invite": 1 << 0,
    "kick_members": 1 << 1,
    "ban_members": 1 << 2,
    "administrator": 1 << 3,
    "manage_channels": 1 << 4,
    "manage_guild": 1 << 5,
    "add_reactions": 1 << 6,
    "view_audit_log": 1 << 7,
    "priority_speaker": 1 << 8,
    "stream": 1 << 9,
    "view_channel": 1 << 10,
    "send_messages": 1 << 11,
    "send_tts_messages": 1 << 12,
    "manage_messages": 1 << 13,
    "embed_links": 1 << 14,
    "attach_files": 1 << 15,
    "read_message_history": 1 << 16,
    "mention_everyone": 1 << 17,
    "use_external_emojis": 1 << 18,
    "view_guild_insights": 1 << 19,
    "connect": 1 << 20,
    "speak": 1 << 21,
    "mute_members": 1 << 22,
    "deafen_members": 1 << 23,
    "move_members": 1 << 24,
    "use_vad": 1 << 25,
    "change_nickname": 1 << 26,
    "manage_nicknames": 1 << 27,
    "manage_roles": 1 << 28,
    "manage_webhooks": 1 << 29,
    "manage_emojis": 1 << 30,
}

# Display order for missing-permission reports.
PERMISSION_LABELS: Dict[str, str] = {
    "administrator": "Administrator",
    "view_audit_log": "View Audit Log",
    "manage_guild": "Manage Server",
    "manage_roles": "Manage Roles",
    "manage_channels": "Manage Channels",
    "kick_members": "Kick Members",
    "ban_members": "Ban Members",
    "create_instant_invite": "Create Instant Invite",
    "change_nickname": "Change Nickname",
    "manage_nicknames": "Manage Nicknames",
    "manage_emojis": "Manage Emojis",
    "manage_webhooks": "Manage Webhooks",
    "view_channel": "View Channels",
    "send_messages": "Send Messages",
    "send_tts_messages": "Send TTS Messages",
    "manage_messages": "Manage Messages",
    "embed_links": "Embed Links",
    "attach_files": "Attach Files",
    "read_message_history": "Read Message History",
    "mention_everyone": "Mention Everyone",
    "use_external_emojis": "Use External Emojis",
    "add_reactions": "Add Reactions",
    "connect": "Voice Connect",
    "speak": "Voice Speak",
    "mute_members": "Voice Mute Members",
    "deafen_members": "Voice Deafen Members",
    "move_members": "Voice Move Members",
    "use_vad": "Voice Use Voice Activity",
    "priority_speaker": "Priority Speaker",
    "stream": "Video",
    "view_guild_insights": "View Server Insights",
}


ALL_PERMISSIONS = 0
for _bit in PERMISSIONS.values():
    ALL_PERMISSIONS |= _bit
del _bit


class Permissions:
    """A permission bitfield with one boolean attribute per named bit."""

    __slots__ = ("value",)

    def __init__(self, value: int = 0, **names: bool) -> None:
        object.__setattr__(self, "value", int(value))
        self.update(**names)

    def __repr__(self) -> str:
        return f"<Permissions value={self.value} names={permission_names(self.value)}>"

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Permissions) and other.value == self.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __int__(self) -> int:
        return self.value

    def __getattr__(self, name: str) -> bool:
        try:
            return self.value & PERMISSIONS[name] != 0
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, enabled: bool) -> None:
        self.update(**{name: enabled})

    def update(self, **names: bool) -> None:
        value = self.value
        for name, enabled in names.items():
            if name not in PERMISSIONS:
                raise AttributeError(name)
            value = value | PERMISSIONS[name] if enabled else value & ~PERMISSIONS[name]
        object.__setattr__(self, "value", value)

    def has(self, bits: int | "Permissions") -> bool:
        bits = int(bits)
        return self.value & bits == bits

    @classmethod
    def none(cls) -> "Permissions":
        return cls(0)

    @classmethod
    def all(cls) -> "Permissions":
        return cls(ALL_PERMISSIONS)

    @classmethod
    def for_member(cls, guild: Any, member: Any) -> "Permissions":
        """Union of the member's role bitmasks.

        The guild owner and holders of ``administrator`` get every
        permission. The ``@everyone`` role (id equal to the guild id) is
        always included.
        """
        if guild is None or member is None:
            return cls.none()
        if guild.owner_id and str(member.id) == str(guild.owner_id):
            return cls.all()
        bits = 0
        for role_id in [str(guild.id), *member.roles]:
            role = guild.roles.get(str(role_id))
            if role is not None:
                bits |= role.permissions
        if bits & PERMISSIONS["administrator"]:
            return cls.all()
        return cls(bits)


def resolve_permissions(value: Optional[int | str | Permissions] = None, **names: bool) -> int:
    """Bitmask from a name, an int or :class:`Permissions`, plus keyword toggles."""
    if isinstance(value, str):
        value = PERMISSIONS[value]
    return int(Permissions(int(value or 0), **names))


def permission_names(bits: int) -> List[str]:
    return [label for name, label in PERMISSION_LABELS.items() if bits & PERMISSIONS[name]]


def describe_permissions(bits: int) -> str:
    return ", ".join(permission_names(bits)) or "/"
