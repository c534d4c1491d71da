from __future__ import annotations

from typing import Any, Dict, Optional


class Language:
    """A named table of ``str.format`` templates keyed by message id."""

    def __init__(self, name: str, strings: Dict[str, str]) -> None:
        self.name = name
        self.strings = dict(strings)

    def __repr__(self) -> str:
        return f"<Language name={self.name!r} keys={len(self.strings)}>"

    def get(self, key: str, *args: Any) -> Optional[str]:
        template = self.strings.get(key)
        if template is None:
            return None
        if args:
            return template.format(*args)
        return template

    def get_default(self, key: str, default: str, *args: Any) -> str:
        value = self.get(key, *args)
        return default if value is None else value


ENGLISH = Language(
    "en-US",
    {
        "LOCALE_NO_KEY": 'No localization found for the key "{0}". Please report this to the developers.',
        "COMMAND_ERROR": "Something went wrong, please try again later.",
        "COMMAND_MISSING_PERMS": "You do not have enough permissions to run this command. Missing: **{0}**",
        "COMMAND_GUILD_ONLY": "This command can only be used in a server.",
        "COMMAND_COOLDOWN": "You are being rate limited, wait **{0}** more second(s) before using this command again.",
        "COMMAND_MISSING_ARG": "The argument **{0}** is required.",
        "COMMAND_NOT_FOUND": "The command **{0}** does not exist.",
        "COMMAND_ENABLE_ALREADY": "That command is already enabled.",
        "COMMAND_ENABLE_SUCCESS": "Successfully enabled **{0}**.",
        "COMMAND_DISABLE_ALREADY": "That command is already disabled.",
        "COMMAND_DISABLE_SUCCESS": "Successfully disabled **{0}**.",
        "COMMAND_PING": "Ping?",
        "COMMAND_PING_PONG": "Pong! Took: {0} (HTTP: {1})",
        "COMMAND_INVITE": "Invite me to your server: <{0}>",
        "COMMAND_SWEEP": "Cleared **{0}** cooldown entries and **{1}** cached replies.",
        "ARGUMENT_INVALID_TYPE": "The argument type '{0}' is invalid.",
        "ARGUMENT_INVALID_INT": "**{0}** must be a whole number.",
        "ARGUMENT_INVALID_FLOAT": "**{0}** must be a number.",
        "ARGUMENT_INVALID_BOOL": "**{0}** must be yes or no.",
        "ARGUMENT_INVALID_USER": "**{0}** must be a valid user mention or ID.",
        "ARGUMENT_INVALID_MEMBER": "**{0}** must be a valid member mention or ID.",
        "ARGUMENT_INVALID_CHANNEL": "**{0}** must be a valid channel mention or ID.",
        "ARGUMENT_INVALID_LITERAL": "Literal argument must be **{0}**.",
        "ARGUMENT_USER_NOT_FOUND": "The user given for **{0}** cannot be found.",
        "ARGUMENT_MEMBER_NOT_FOUND": "The member given for **{0}** cannot be found in this server.",
        "ARGUMENT_CHANNEL_NOT_FOUND": "The channel given for **{0}** cannot be found.",
        "ARGUMENT_ROLE_NOT_FOUND": "The role given for **{0}** cannot be found.",
        "ARGUMENT_NO_PREVIOUS_MESSAGE": "There is no message before yours to take **{0}** from.",
        "ARGUMENT_GUILD_ONLY": "**{0}** can only be resolved inside a server.",
    },
)
