import os
import sys
import asyncio
import logging
from logging.handlers import RotatingFileHandler

import discord
from dotenv import load_dotenv

from serverstatus.bot import Bot
from serverstatus.config import load_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "config.json"


# Set up logging for the complete application
def setup_logging(log_filename: str, level: int) -> None:

    # Rotating file
    discord.utils.setup_logging(
        handler=RotatingFileHandler(
            filename=log_filename,
            mode="w",
            maxBytes=10 * 1024 * 1024,
            backupCount=10,
        )
    )
    # Console
    discord.utils.setup_logging(handler=logging.StreamHandler())
    # Level
    logging.getLogger().setLevel(level)


def main(config_filename: str = DEFAULT_CONFIG_FILENAME) -> None:

    # Load env variables
    # (From the documentation: "By default, load_dotenv doesn't override existing environment variables.")
    load_dotenv(override=True)
    discord_token = os.getenv("DISCORD_TOKEN")
    if discord_token == None:
        raise ValueError("DISCORD_TOKEN has not been found in the environment")

    # Read the configuration
    config = load_config(config_filename, discord_token)
    setup_logging(config.log_filename, config.logging_level)

    # Create the bot and block here
    bot = Bot(config)
    asyncio.run(bot.loop())


def run() -> None:
    main(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONFIG_FILENAME)


if __name__ == "__main__":
    run()
