from .arguments import Argument, cast_argument
from .bot import Bot, default_error_handler
from .builtins import load_builtins
from .context import Context
from .core import Command, CommandRegistry, command
from .errors import (
    CastError,
    CommandError,
    CommandInvokeError,
    CommandRegistrationError,
    GrammarError,
    MissingRequiredArgument,
)
from .flags import parse_flags
from .locale import ENGLISH, Language
from .monitors import Monitor, command_handler_monitor, monitor
from .paginator import Paginator
from .state import CooldownStore, ReplyCache
from .usage import ArgumentKind, ArgumentSpec, humanize_usage, parse_usage

__all__ = [
    "Argument",
    "ArgumentKind",
    "ArgumentSpec",
    "Bot",
    "CastError",
    "Command",
    "CommandError",
    "CommandInvokeError",
    "CommandRegistrationError",
    "CommandRegistry",
    "Context",
    "CooldownStore",
    "ENGLISH",
    "GrammarError",
    "Language",
    "MissingRequiredArgument",
    "Monitor",
    "Paginator",
    "ReplyCache",
    "cast_argument",
    "command",
    "command_handler_monitor",
    "default_error_handler",
    "humanize_usage",
    "load_builtins",
    "monitor",
    "parse_flags",
    "parse_usage",
]
