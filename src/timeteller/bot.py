from __future__ import annotations

import inspect
import logging
import subprocess
from pathlib import Path

import discord
from discord import app_commands
from discord.ext import commands

from timeteller import __version__
from timeteller.config import Config
from timeteller.exceptions import FeatureDisabledError

LOGGER = logging.getLogger(__name__)


def _get_repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _get_git_commit_short() -> str:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=_get_repo_root(),
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip() or "unknown"
    except (OSError, subprocess.SubprocessError):
        return "unknown"


def _iter_command_paths(
    command: app_commands.Command | app_commands.Group,
) -> list[str]:
    """Return executable command paths for a command or command group."""
    if isinstance(command, app_commands.Group):
        paths: list[str] = []
        for child in command.commands:
            paths.extend(_iter_command_paths(child))
        return paths or [command.qualified_name]
    return [command.qualified_name]


async def _sync_commands(bot: commands.Bot, config: Config) -> None:
    """Sync app commands, avoiding global+guild duplicates in target guild mode."""
    target_guild_id = config.active_guild_id

    if target_guild_id is not None:
        guild = discord.Object(id=target_guild_id)
        bot.tree.copy_global_to(guild=guild)
        synced = await bot.tree.sync(guild=guild)
        LOGGER.info("Synced %d app commands to guild %s", len(synced), target_guild_id)

        bot.tree.clear_commands(guild=None)
        cleared = await bot.tree.sync()
        LOGGER.info("Cleared global app commands (remaining: %d)", len(cleared))
    else:
        synced = await bot.tree.sync()
        LOGGER.info("Synced %d global app commands", len(synced))

    paths: list[str] = []
    for command in bot.tree.get_commands():
        paths.extend(_iter_command_paths(command))
    LOGGER.info("Registered app command paths (%d): %s", len(paths), ", ".join(sorted(paths)))


async def _on_app_command_error(
    interaction: discord.Interaction,
    error: app_commands.AppCommandError,
) -> None:
    if isinstance(error, FeatureDisabledError):
        message = f"❌ {error}"
    else:
        LOGGER.error("App command failed", exc_info=error)
        message = "❌ Something went wrong. Please try again."

    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


def create_bot(config: Config) -> commands.Bot:
    intents = discord.Intents.default()
    intents.message_content = True
    # The member directory is built from the guild member cache
    intents.members = True

    bot = commands.Bot(command_prefix=config.command_prefix, intents=intents)
    bot.timeteller_config = config  # type: ignore[attr-defined]
    bot._commands_synced = False  # type: ignore[attr-defined]
    bot.tree.on_error = _on_app_command_error

    @bot.event
    async def on_ready() -> None:
        env_label = "TEST" if config.is_test else "PRODUCTION"
        LOGGER.info(
            "[%s] Logged in as %s (%s)",
            env_label,
            bot.user,
            bot.user.id if bot.user else "?",
        )
        LOGGER.info(
            "[%s] Build fingerprint: version=%s git=%s",
            env_label,
            __version__,
            _get_git_commit_short(),
        )

        if bot._commands_synced:  # type: ignore[attr-defined]
            return

        try:
            await _sync_commands(bot, config)
            bot._commands_synced = True  # type: ignore[attr-defined]
        except Exception:
            LOGGER.exception("Failed to sync app commands")

    @bot.event
    async def setup_hook() -> None:
        from timeteller.firestore_client import init_firestore

        bot.timeteller_firestore = init_firestore(config)  # type: ignore[attr-defined]

        await bot.add_cog(_load_core_cog(bot))
        await bot.add_cog(_load_time_teller_cog(bot))

    original_close = bot.close

    @bot.event
    async def close() -> None:
        firestore_client = getattr(bot, "timeteller_firestore", None)
        if firestore_client is not None:
            close_fn = getattr(firestore_client, "close", None)
            if callable(close_fn):
                result = close_fn()
                if inspect.isawaitable(result):
                    await result

        await original_close()

    return bot


def _load_core_cog(bot: commands.Bot) -> commands.Cog:
    from timeteller.cogs.core import CoreCog

    return CoreCog(bot)


def _load_time_teller_cog(bot: commands.Bot) -> commands.Cog:
    from timeteller.modules.time_teller.cog import TimeTellerCog

    return TimeTellerCog(bot)
