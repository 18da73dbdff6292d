from __future__ import annotations

import sys

from timeteller.bot import create_bot
from timeteller.config import load_config
from timeteller.logging_config import configure_logging


def main() -> int:
    config = load_config()
    configure_logging(config.log_level)

    if not config.discord_token:
        print(
            "Missing DISCORD_TOKEN. Create a .env file (see .env.example) and set DISCORD_TOKEN.",
            file=sys.stderr,
        )
        return 2

    bot = create_bot(config)
    # Logging is already configured; stop discord.py from adding its own handler
    bot.run(config.discord_token, log_handler=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
