from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

from timeteller.modules.time_teller.config import DEFAULT_REPLY_USERNAME

LOGGER = logging.getLogger(__name__)

BotEnv = Literal["production", "test"]


def _parse_int_env(name: str) -> int | None:
    """Parse an optional integer environment variable."""
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer")


def _parse_bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Config:
    bot_env: BotEnv
    discord_token: str | None
    guild_id: int | None
    test_guild_id: int | None
    command_prefix: str
    log_level: str
    reply_username: str
    firebase_enabled: bool
    firebase_credentials_path: str | None
    firebase_project_id: str | None

    @property
    def is_test(self) -> bool:
        """Whether the bot is running in test mode."""
        return self.bot_env == "test"

    @property
    def active_guild_id(self) -> int | None:
        """The guild ID the bot should target for command sync.

        In test mode, returns test_guild_id (falling back to guild_id).
        In production, returns guild_id.
        """
        if self.is_test:
            return self.test_guild_id or self.guild_id
        return self.guild_id


def _load_env_files(bot_env: BotEnv) -> None:
    """Load the .env files for the bot environment.

    Earlier files win: test loads .env.test then .env, production only .env.
    """
    if bot_env == "test":
        test_env = Path.cwd() / ".env.test"
        if test_env.is_file():
            load_dotenv(test_env, override=False)
            LOGGER.info("Loaded environment from %s", test_env)
        else:
            LOGGER.warning("BOT_ENV=test but .env.test not found, using .env")
    load_dotenv(override=False)


def load_config() -> Config:
    # BOT_ENV may come from the shell before any .env file is read
    bot_env_raw = os.getenv("BOT_ENV", "production").strip().lower()
    if bot_env_raw not in ("production", "test"):
        raise ValueError("BOT_ENV must be 'production' or 'test'")
    bot_env: BotEnv = bot_env_raw  # type: ignore[assignment]

    _load_env_files(bot_env)

    test_guild_id = _parse_int_env("TEST_GUILD_ID")

    LOGGER.info("Bot environment: %s", bot_env)
    if bot_env == "test" and test_guild_id:
        LOGGER.info("Test guild ID: %s", test_guild_id)

    return Config(
        bot_env=bot_env,
        discord_token=os.getenv("DISCORD_TOKEN") or None,
        guild_id=_parse_int_env("GUILD_ID"),
        test_guild_id=test_guild_id,
        command_prefix=os.getenv("COMMAND_PREFIX", "!"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        reply_username=os.getenv("REPLY_USERNAME") or DEFAULT_REPLY_USERNAME,
        firebase_enabled=_parse_bool_env("FIREBASE_ENABLED"),
        firebase_credentials_path=os.getenv("FIREBASE_CREDENTIALS_PATH") or None,
        firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
    )
