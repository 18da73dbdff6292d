from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from timeteller import __version__


class CoreCog(commands.Cog):
    """Core bot commands."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    @commands.command(name="ping")
    async def ping_prefix(self, ctx: commands.Context) -> None:
        await ctx.reply("pong")

    @app_commands.command(name="ping", description="Health check")
    async def ping_slash(self, interaction: discord.Interaction) -> None:
        latency_ms = round(self.bot.latency * 1000)
        await interaction.response.send_message(
            f"pong ({latency_ms} ms, v{__version__})", ephemeral=True
        )
