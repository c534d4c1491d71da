from __future__ import annotations

import gc
import platform
import sys
import time
from typing import TYPE_CHECKING

from ...embeds import Embed
from ...utils import human_timedelta, utcnow
from .context import Context
from .core import command

if TYPE_CHECKING:
    from .bot import Bot


@command(description="Pong! Responds with bot latency.")
async def ping(ctx: Context) -> None:
    started = time.perf_counter()
    message = await ctx.reply_locale("COMMAND_PING")
    taken = f"{(time.perf_counter() - started) * 1000:.0f}ms"

    started = time.perf_counter()
    await ctx.bot.edit_message(message.channel_id, message.id, content=ctx.localize("COMMAND_PING_PONG", taken, "..."))
    http = f"{(time.perf_counter() - started) * 1000:.0f}ms"
    await ctx.bot.edit_message(message.channel_id, message.id, content=ctx.localize("COMMAND_PING_PONG", taken, http))


@command(
    "help",
    aliases=["h", "cmds", "commands"],
    usage="[command:string]",
    description="Shows a list of all commands.",
)
async def help_command(ctx: Context) -> None:
    bot = ctx.bot
    if ctx.arg(0).provided:
        target = bot.get_command(ctx.arg(0).as_string())
        if target is None or (target.owner_only and not bot.is_owner(ctx.author)):
            await ctx.reply_locale("COMMAND_NOT_FOUND", ctx.arg(0).as_string())
            return
        lines = [
            f"**Name:** {target.name}",
            f"**Description:** {target.description}",
            f"**Category:** {target.category}",
            f"**Aliases:** {', '.join(target.aliases) or 'None'}",
            f"**Usage:** {ctx.prefix}{target.name} {target.humanized_usage}".rstrip(),
        ]
        if target.flags_help:
            lines.append(f"**Flags:** {target.flags_help}")
        embed = Embed(title="Command Help", description="\n".join(lines), color=bot.color)
        await ctx.reply_embed(embed)
        return

    embed = Embed(title="Commands", color=bot.color)
    embed.set_footer(text=f"For more info on a command use: {ctx.prefix}help <command>")
    if ctx.author is not None:
        embed.set_author(name=ctx.author.username or str(ctx.author), icon_url=ctx.author.avatar_url)
    for category, commands in bot.registry.categories().items():
        visible = [c.name for c in commands if not c.owner_only or bot.is_owner(ctx.author)]
        if visible:
            embed.add_field(name=category, value=", ".join(visible), inline=True)
    await ctx.reply_embed(embed)


@command(aliases=["botstats", "info"], description="Stats for nerds.")
async def stats(ctx: Context) -> None:
    bot = ctx.bot
    uptime = human_timedelta((utcnow() - bot.uptime).total_seconds()) if bot.uptime else "n/a"
    embed = Embed(title="Stats", color=bot.color)
    if bot.user is not None:
        embed.set_author(name=bot.user.username or str(bot.user), icon_url=bot.user.avatar_url)
    embed.add_field(name="**Python Version**", value=platform.python_version())
    embed.add_field(
        name="**Command Stats**",
        value=f"Total Commands: {len(bot.registry)}\nCommands Ran: {bot.commands_ran}",
    )
    embed.add_field(
        name="**Bot Stats**",
        value=(
            f"Guilds: {len(bot.guilds)}\n"
            f"Channels: {len(bot.channels)}\n"
            f"Users: {len(bot.users)}\n"
            f"Uptime: {uptime}"
        ),
    )
    embed.add_field(
        name="**Runtime Stats**",
        value=f"GC Counts: {gc.get_count()}\nTracked Objects: {len(gc.get_objects())}",
    )
    embed.add_field(
        name="**Technical Info**",
        value=f"Implementation: {platform.python_implementation()}\nOS/Arch: {sys.platform}/{platform.machine()}",
    )
    await ctx.reply_embed(embed.inline_all_fields())


@command(aliases=["inv"], description="Invite me to your server!")
async def invite(ctx: Context) -> None:
    await ctx.reply_locale("COMMAND_INVITE", ctx.bot.invite_url())


@command(category="Owner", owner_only=True, usage="<command:string>", description="Enables a disabled command.")
async def enable(ctx: Context) -> None:
    name = ctx.arg(0).as_string()
    target = ctx.bot.get_command(name)
    if target is None:
        await ctx.reply_locale("COMMAND_NOT_FOUND", name)
        return
    if target.enabled:
        await ctx.reply_locale("COMMAND_ENABLE_ALREADY")
        return
    target.enable()
    await ctx.reply_locale("COMMAND_ENABLE_SUCCESS", target.name)


@command(category="Owner", owner_only=True, usage="<command:string>", description="Disables an enabled command.")
async def disable(ctx: Context) -> None:
    name = ctx.arg(0).as_string()
    target = ctx.bot.get_command(name)
    if target is None:
        await ctx.reply_locale("COMMAND_NOT_FOUND", name)
        return
    if not target.enabled:
        await ctx.reply_locale("COMMAND_DISABLE_ALREADY")
        return
    target.disable()
    await ctx.reply_locale("COMMAND_DISABLE_SUCCESS", target.name)


@command(
    category="Owner",
    owner_only=True,
    aliases=["gc"],
    description="Clears the cooldown ledger and reply cache, then runs a garbage collection.",
)
async def sweep(ctx: Context) -> None:
    cooldowns, replies = ctx.bot.sweep()
    gc.collect()
    await ctx.reply_locale("COMMAND_SWEEP", cooldowns, replies)


BUILTINS = (ping, help_command, stats, invite, enable, disable, sweep)


def load_builtins(bot: "Bot") -> None:
    for builtin in BUILTINS:
        bot.add_command(builtin.copy())
