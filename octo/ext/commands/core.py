from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Iterator, List, Optional, Sequence

from ...permissions import resolve_permissions
from .arguments import Argument, cast_argument
from .errors import CommandError, CommandRegistrationError, MissingRequiredArgument
from .usage import ArgumentSpec, humanize_usage, parse_usage

if TYPE_CHECKING:
    from .context import Context

CommandFunc = Callable[..., Awaitable[Any]]
ErrorHandler = Callable[["Context", CommandError], Awaitable[None]]
LOGGER = logging.getLogger("octo")


class Command:
    def __init__(
        self,
        func: CommandFunc,
        *,
        name: Optional[str] = None,
        aliases: Optional[Sequence[str]] = None,
        description: Optional[str] = None,
        category: str = "General",
        usage: str = "",
        cooldown: float = 0,
        permissions: Any = 0,
        owner_only: bool = False,
        guild_only: bool = False,
        delete_after: bool = False,
        editable: bool = True,
        override: bool = True,
        enabled: bool = True,
        flags_help: str = "",
    ) -> None:
        if not inspect.iscoroutinefunction(func):
            raise TypeError("Command callback must be a coroutine function")
        self.callback = func
        self.name = (name or func.__name__).lower()
        self.aliases = [alias.lower() for alias in aliases or []]
        self.description = description or inspect.getdoc(func) or "Mysterious command."
        self.category = category
        self.usage = usage
        # Raises GrammarError, which aborts registration.
        self.specs: List[ArgumentSpec] = parse_usage(usage)
        self.cooldown = cooldown
        self.permissions = resolve_permissions(permissions)
        self.owner_only = owner_only
        self.guild_only = guild_only
        self.delete_after = delete_after
        self.editable = editable
        self.override = override
        self.enabled = enabled
        self.flags_help = flags_help
        self.error_handler: Optional[ErrorHandler] = None

    def __repr__(self) -> str:
        return f"<Command name={self.name!r} aliases={self.aliases!r} enabled={self.enabled}>"

    @property
    def humanized_usage(self) -> str:
        return humanize_usage(self.usage)

    @property
    def short_doc(self) -> str:
        return self.description.splitlines()[0] if self.description else ""

    def copy(self) -> "Command":
        cmd = Command(
            self.callback,
            name=self.name,
            aliases=self.aliases,
            description=self.description,
            category=self.category,
            usage=self.usage,
            cooldown=self.cooldown,
            permissions=self.permissions,
            owner_only=self.owner_only,
            guild_only=self.guild_only,
            delete_after=self.delete_after,
            editable=self.editable,
            override=self.override,
            enabled=self.enabled,
            flags_help=self.flags_help,
        )
        cmd.error_handler = self.error_handler
        return cmd

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def error(self, coro: ErrorHandler) -> ErrorHandler:
        self.error_handler = coro
        return coro

    async def parse_arguments(self, ctx: "Context") -> List[Argument]:
        """Cast ``ctx.raw_args`` against this command's specs.

        A rest spec produces one entry per remaining token. Tokens beyond the
        declared specs stay available through ``ctx.raw_args``.
        """
        tokens = ctx.raw_args
        parsed: List[Argument] = []
        for index, spec in enumerate(self.specs):
            if spec.rest:
                remaining = tokens[index:]
                if not remaining:
                    if spec.required:
                        raise MissingRequiredArgument(spec.name)
                    parsed.append(Argument(value=None, provided=False))
                for raw in remaining:
                    parsed.append(await cast_argument(ctx, spec, raw))
                break

            raw = tokens[index] if index < len(tokens) else ""
            argument = await cast_argument(ctx, spec, raw)
            if not argument.provided and spec.required:
                raise MissingRequiredArgument(spec.name)
            parsed.append(argument)
        return parsed

    async def invoke(self, ctx: "Context") -> Any:
        return await self.callback(ctx)


class CommandRegistry:
    """Commands by name plus an alias index.

    Looking up a name checks commands first, then aliases.
    """

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}
        self._aliases: Dict[str, str] = {}

    @property
    def commands(self) -> Dict[str, Command]:
        return dict(self._commands)

    def __iter__(self) -> Iterator[Command]:
        return iter(list(self._commands.values()))

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def add(self, command: Command) -> Command:
        for alias in command.aliases:
            owner = self._commands.get(alias)
            if owner is not None and owner.name != command.name:
                raise CommandRegistrationError(alias, alias_conflict=True)
        if command.name in self._aliases and self._aliases[command.name] != command.name:
            # A new command name shadows an older alias; the name wins.
            LOGGER.warning("Command %r takes over the alias used by %r", command.name, self._aliases[command.name])
            self._release_alias(command.name)

        previous = self._commands.get(command.name)
        if previous is not None:
            for alias in previous.aliases:
                if self._aliases.get(alias) == previous.name:
                    del self._aliases[alias]

        for alias in command.aliases:
            holder = self._aliases.get(alias)
            if holder is not None and holder != command.name:
                LOGGER.warning("Alias %r moved from %r to %r", alias, holder, command.name)
                self._release_alias(alias)
            self._aliases[alias] = command.name

        self._commands[command.name] = command
        LOGGER.debug("Registered command %s", command.name)
        return command

    def _release_alias(self, alias: str) -> None:
        holder = self._aliases.pop(alias, None)
        if holder is not None:
            command = self._commands.get(holder)
            if command is not None and alias in command.aliases:
                command.aliases.remove(alias)

    def get(self, name: str) -> Optional[Command]:
        if not name:
            return None
        key = name.lower()
        command = self._commands.get(key)
        if command is not None:
            return command
        target = self._aliases.get(key)
        return self._commands.get(target) if target is not None else None

    def remove(self, name: str) -> Optional[Command]:
        command = self._commands.pop(name.lower(), None)
        if command is None:
            return None
        for alias in command.aliases:
            if self._aliases.get(alias) == command.name:
                del self._aliases[alias]
        return command

    def categories(self) -> Dict[str, List[Command]]:
        grouped: Dict[str, List[Command]] = {}
        for command in sorted(self._commands.values(), key=lambda c: c.name):
            grouped.setdefault(command.category, []).append(command)
        return grouped


def command(
    name: Optional[str] = None,
    *,
    aliases: Optional[Sequence[str]] = None,
    description: Optional[str] = None,
    category: str = "General",
    usage: str = "",
    cooldown: float = 0,
    permissions: Any = 0,
    owner_only: bool = False,
    guild_only: bool = False,
    delete_after: bool = False,
    editable: bool = True,
    override: bool = True,
    enabled: bool = True,
    flags_help: str = "",
):
    def decorator(func: CommandFunc) -> Command:
        return Command(
            func,
            name=name,
            aliases=aliases,
            description=description,
            category=category,
            usage=usage,
            cooldown=cooldown,
            permissions=permissions,
            owner_only=owner_only,
            guild_only=guild_only,
            delete_after=delete_after,
            editable=editable,
            override=override,
            enabled=enabled,
            flags_help=flags_help,
        )

    return decorator
