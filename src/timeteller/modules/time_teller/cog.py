from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, available_timezones

import discord
from discord import app_commands
from discord.ext import commands

from timeteller.exceptions import FeatureDisabledError
from timeteller.modules.time_teller import repo
from timeteller.modules.time_teller.config import (
    DEFAULT_REPLY_USERNAME,
    TimeTellerConfig,
)
from timeteller.modules.time_teller.handler import handle_message
from timeteller.modules.time_teller.models import (
    InboundMessage,
    UserTimezone,
    WorkspaceMember,
)
from timeteller.store import FirestoreStore, KeyValueStore, MemoryStore

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient

LOGGER = logging.getLogger(__name__)

_MSG_DB_UNAVAILABLE = "Database not available."

# Cache available timezones for autocomplete
_TIMEZONES: list[str] = sorted(available_timezones())

# Shown first in autocomplete
_COMMON_TIMEZONES = [
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "America/Sao_Paulo",
    "Europe/London",
    "Europe/Paris",
    "Europe/Berlin",
    "Asia/Kolkata",
    "Asia/Tokyo",
    "Asia/Singapore",
    "Australia/Sydney",
    "Pacific/Auckland",
    "UTC",
]

WEBHOOK_NAME = "TimeTeller"
WEBHOOKS_COLLECTION = "time_teller_webhooks"


async def timezone_autocomplete(  # NOSONAR - discord.py requires async
    interaction: discord.Interaction,
    current: str,
) -> list[app_commands.Choice[str]]:
    """Autocomplete handler for timezone parameter."""
    needle = current.lower()
    if not needle:
        return [app_commands.Choice(name=tz, value=tz) for tz in _COMMON_TIMEZONES]

    matches = [tz for tz in _COMMON_TIMEZONES if needle in tz.lower()]
    for tz in _TIMEZONES:
        if len(matches) >= 25:
            break
        if tz not in matches and needle in tz.lower():
            matches.append(tz)

    return [app_commands.Choice(name=tz, value=tz) for tz in matches[:25]]


def member_from_timezone(
    user_id: int,
    timezone_id: str,
    now: datetime | None = None,
) -> WorkspaceMember:
    """Snapshot a member's current UTC offset and abbreviation."""
    local = (now or datetime.now(timezone.utc)).astimezone(ZoneInfo(timezone_id))
    offset = local.utcoffset()
    return WorkspaceMember(
        id=user_id,
        utc_offset_minutes=int(offset.total_seconds() // 60) if offset else 0,
        timezone_label=local.tzname() or timezone_id,
        timezone_id=timezone_id,
    )


def render_icon(icon_id: str) -> str:
    """Turn a ``:clockN:`` shortcode into the matching clock-face character."""
    hour = int(icon_id.strip(":").removeprefix("clock"))
    return chr(0x1F550 + hour - 1)


class GuildMemberDirectory:
    """Guild members that have saved a timezone."""

    def __init__(self, firestore: FirestoreClient, guild: discord.Guild) -> None:
        self.firestore = firestore
        self.guild = guild

    async def lookup(self, workspace_id: int) -> Sequence[WorkspaceMember]:
        user_ids = [member.id for member in self.guild.members if not member.bot]
        saved = await asyncio.to_thread(repo.get_user_timezones, self.firestore, user_ids)

        now = datetime.now(timezone.utc)
        members: list[WorkspaceMember] = []
        for user_id in user_ids:
            record = saved.get(user_id)
            if record is None:
                continue
            try:
                members.append(member_from_timezone(user_id, record.timezone, now))
            except (ValueError, KeyError):
                LOGGER.warning(
                    "Skipping user %s with unknown timezone %r", user_id, record.timezone
                )
        LOGGER.debug(
            "Directory for guild %s: %d of %d members have a timezone",
            workspace_id,
            len(members),
            len(user_ids),
        )
        return members


class WebhookMessageSender:
    """Posts replies through a bot-owned webhook in each channel."""

    def __init__(self, bot: commands.Bot, store: KeyValueStore) -> None:
        self.bot = bot
        self.store = store
        self._lock = asyncio.Lock()
        self._webhooks: dict[int, discord.Webhook] = {}

    async def send(
        self, channel_id: int, text: str, display_name: str, icon_id: str
    ) -> None:
        webhook = await self._get_webhook(channel_id)
        try:
            await webhook.send(
                content=f"{render_icon(icon_id)} {text}",
                username=display_name,
                allowed_mentions=discord.AllowedMentions.none(),
            )
        except discord.NotFound:
            # Deleted since it was cached; the next message recreates it
            self._webhooks.pop(channel_id, None)
            await asyncio.to_thread(self.store.delete, str(channel_id))
            raise

    async def _get_webhook(self, channel_id: int) -> discord.Webhook:
        # Concurrent fan-out sends must not each create a webhook
        async with self._lock:
            webhook = self._webhooks.get(channel_id)
            if webhook is not None:
                return webhook

            key = str(channel_id)
            cached_id = await asyncio.to_thread(self.store.get, key)
            if cached_id is not None:
                try:
                    webhook = await self.bot.fetch_webhook(int(cached_id))
                    self._webhooks[channel_id] = webhook
                    return webhook
                except discord.NotFound:
                    LOGGER.info("Cached webhook %s for channel %s is gone", cached_id, channel_id)
                    await asyncio.to_thread(self.store.delete, key)

            channel = self.bot.get_channel(channel_id)
            if not isinstance(channel, discord.TextChannel):
                raise LookupError(f"Channel {channel_id} is not a text channel")

            webhook = await _find_or_create_webhook(channel, self.bot.user)
            await asyncio.to_thread(self.store.put, key, webhook.id)
            self._webhooks[channel_id] = webhook
            return webhook


async def _find_or_create_webhook(
    channel: discord.TextChannel,
    bot_user: discord.User | discord.ClientUser | None,
) -> discord.Webhook:
    for webhook in await channel.webhooks():
        if (
            bot_user is not None
            and webhook.user is not None
            and webhook.user.id == bot_user.id
            and webhook.name == WEBHOOK_NAME
        ):
            return webhook
    return await channel.create_webhook(name=WEBHOOK_NAME)


# --- Feature Check ---


async def _check_time_teller_enabled(interaction: discord.Interaction) -> bool:  # NOSONAR
    """Check that time teller is enabled for this guild."""
    if not interaction.guild:
        return False
    cog = interaction.client.get_cog("TimeTellerCog")
    if not cog or not cog.firestore:
        return False
    config = await cog._guild_config(interaction.guild.id)
    if not config.enabled:
        raise FeatureDisabledError("Time Teller")
    return True


class TimeTellerCog(commands.Cog):
    """Replies to times in chat with every member's local time."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot
        self._configs: dict[int, TimeTellerConfig] = {}
        self._sender: WebhookMessageSender | None = None

    async def cog_load(self) -> None:
        """Called when the cog is loaded."""
        store: KeyValueStore
        if self.firestore is not None:
            store = FirestoreStore(self.firestore, WEBHOOKS_COLLECTION)
        else:
            store = MemoryStore()
        self._sender = WebhookMessageSender(self.bot, store)
        LOGGER.info("Time Teller cog loaded")

    @property
    def firestore(self) -> FirestoreClient | None:
        """Access Firestore client from bot instance."""
        return getattr(self.bot, "timeteller_firestore", None)

    @property
    def default_reply_username(self) -> str:
        config = getattr(self.bot, "timeteller_config", None)
        return getattr(config, "reply_username", None) or DEFAULT_REPLY_USERNAME

    async def _guild_config(self, guild_id: int) -> TimeTellerConfig:
        config = self._configs.get(guild_id)
        if config is None:
            config = await asyncio.to_thread(repo.get_config, self.firestore, guild_id)
            if config is None:
                config = TimeTellerConfig(
                    guild_id=guild_id, reply_username=self.default_reply_username
                )
            self._configs[guild_id] = config
        return config

    async def _save_guild_config(self, config: TimeTellerConfig) -> None:
        await asyncio.to_thread(repo.save_config, self.firestore, config)
        self._configs[config.guild_id] = config

    # --- Message Listener ---

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        # Our own replies are webhook posts and contain times
        if message.author.bot or message.webhook_id is not None:
            return
        if message.guild is None or not isinstance(message.channel, discord.TextChannel):
            return
        if self.firestore is None or self._sender is None:
            return

        config = await self._guild_config(message.guild.id)
        if not config.enabled:
            return

        event = InboundMessage(
            sender_id=message.author.id,
            channel_id=message.channel.id,
            workspace_id=message.guild.id,
            text=message.content,
            bot_id=self.bot.user.id if self.bot.user else None,
        )
        try:
            sent = await handle_message(
                event,
                GuildMemberDirectory(self.firestore, message.guild),
                self._sender,
                display_name=config.reply_username,
            )
        except Exception:
            LOGGER.exception("Failed to handle message %s", message.id)
            return
        if sent:
            LOGGER.debug("Sent %d timezone replies for message %s", sent, message.id)

    # --- User Commands ---

    tz_group = app_commands.Group(name="tz", description="Timezone commands")

    @tz_group.command(name="set", description="Set your timezone")
    @app_commands.describe(timezone="Your timezone (e.g., America/New_York)")
    @app_commands.autocomplete(timezone=timezone_autocomplete)
    @app_commands.check(_check_time_teller_enabled)
    async def set_timezone(
        self,
        interaction: discord.Interaction,
        timezone: str,
    ) -> None:
        """Set the user's timezone."""
        if not self.firestore:
            await interaction.response.send_message(
                _MSG_DB_UNAVAILABLE, ephemeral=True
            )
            return

        if timezone not in _TIMEZONES:
            await interaction.response.send_message(
                f"Invalid timezone: `{timezone}`. Please select from the autocomplete suggestions.",
                ephemeral=True,
            )
            return

        user_tz = UserTimezone(user_id=interaction.user.id, timezone=timezone)
        await asyncio.to_thread(repo.save_user_timezone, self.firestore, user_tz)

        await interaction.response.send_message(
            f"Timezone set to **{timezone}**.", ephemeral=True, delete_after=5
        )

    @tz_group.command(name="clear", description="Clear your saved timezone")
    @app_commands.check(_check_time_teller_enabled)
    async def clear_timezone(
        self,
        interaction: discord.Interaction,
    ) -> None:
        """Clear the user's saved timezone."""
        if not self.firestore:
            await interaction.response.send_message(
                _MSG_DB_UNAVAILABLE, ephemeral=True
            )
            return

        await asyncio.to_thread(
            repo.delete_user_timezone, self.firestore, interaction.user.id
        )
        await interaction.response.send_message(
            "Timezone cleared.", ephemeral=True, delete_after=5
        )

    @tz_group.command(name="show", description="Show your saved timezone")
    @app_commands.check(_check_time_teller_enabled)
    async def show_timezone(self, interaction: discord.Interaction) -> None:
        if not self.firestore:
            await interaction.response.send_message(
                _MSG_DB_UNAVAILABLE, ephemeral=True
            )
            return

        record = await asyncio.to_thread(
            repo.get_user_timezone, self.firestore, interaction.user.id
        )
        if record is None:
            await interaction.response.send_message(
                "You have no saved timezone. Use `/tz set` to add one.",
                ephemeral=True,
            )
            return

        snapshot = member_from_timezone(interaction.user.id, record.timezone)
        hours = snapshot.utc_offset_minutes / 60
        await interaction.response.send_message(
            f"Your timezone is **{record.timezone}** ({snapshot.timezone_label}, UTC{hours:+g}).",
            ephemeral=True,
        )

    # --- Admin Commands ---

    admin_group = app_commands.Group(
        name="timeteller",
        description="Configure timezone replies",
        default_permissions=discord.Permissions(manage_guild=True),
        guild_only=True,
    )

    @admin_group.command(name="enable", description="Reply to times with local times")
    @app_commands.describe(username="Name shown on replies")
    async def enable(
        self,
        interaction: discord.Interaction,
        username: str | None = None,
    ) -> None:
        if not self.firestore or not interaction.guild:
            await interaction.response.send_message(
                _MSG_DB_UNAVAILABLE, ephemeral=True
            )
            return

        current = await self._guild_config(interaction.guild.id)
        config = replace(
            current,
            enabled=True,
            reply_username=username[:80] if username else current.reply_username,
        )
        await self._save_guild_config(config)

        await interaction.response.send_message(
            f"✅ Time Teller enabled. Replies are posted as **{config.reply_username}**.",
            ephemeral=True,
        )

    @admin_group.command(name="disable", description="Stop replying to times")
    async def disable(self, interaction: discord.Interaction) -> None:
        if not self.firestore or not interaction.guild:
            await interaction.response.send_message(
                _MSG_DB_UNAVAILABLE, ephemeral=True
            )
            return

        current = await self._guild_config(interaction.guild.id)
        await self._save_guild_config(replace(current, enabled=False))
        await interaction.response.send_message(
            "Time Teller disabled.", ephemeral=True
        )

    @admin_group.command(name="status", description="Show Time Teller settings")
    async def status(self, interaction: discord.Interaction) -> None:
        if not self.firestore or not interaction.guild:
            await interaction.response.send_message(
                _MSG_DB_UNAVAILABLE, ephemeral=True
            )
            return

        config = await self._guild_config(interaction.guild.id)
        state = "enabled" if config.enabled else "disabled"
        await interaction.response.send_message(
            f"Time Teller is **{state}**. Reply name: **{config.reply_username}**.",
            ephemeral=True,
        )
