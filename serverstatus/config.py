import json
import logging
from dataclasses import dataclass

import discord

logger = logging.getLogger(__name__)

# Discord refuses messages with more embeds than this
MAX_EMBEDS_PER_MESSAGE = 10

# Verbosity levels understood by the bot and the logging level they map to.
# Level 0 silences everything, level 1 keeps errors, level 2 adds every request
LOG_LEVELS = {
    0: logging.CRITICAL + 1,
    1: logging.ERROR,
    2: logging.DEBUG,
}


@dataclass(frozen=True)
class Config:
    token: str
    guild: str
    channel: str
    interval: float = 60
    server_id: int = 1
    api_version: int = 10
    embed_color: int = discord.Color.from_rgb(255, 165, 0).value
    log_level: int = 1
    log_filename: str = "serverstatus.log"
    database_filename: str = "serverstatus.db"
    server_name: str = "Server Information: "
    author_icon_url: str = "https://i.imgur.com/eYX4Vr2.png"
    footer_icon_url: str = "https://i.imgur.com/E41l0Pk.png"
    footer_text: str = ""
    utc_offset_hours: float = 3
    query_host: str = "127.0.0.1"
    query_port: int = 27015
    query_timeout_secs: float = 2.0
    address: str | None = None

    def __post_init__(self):
        if not self.token:
            raise ValueError("The bot token is empty")
        if not self.channel:
            raise ValueError("The channel id is empty")
        if self.interval <= 0:
            raise ValueError(f"Interval must be positive, got {self.interval}")
        if not 1 <= self.server_id <= MAX_EMBEDS_PER_MESSAGE:
            raise ValueError(
                f"Server id must be between 1 and {MAX_EMBEDS_PER_MESSAGE}, got {self.server_id}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of 0, 1 or 2, got {self.log_level}")

    # Logging level corresponding to the configured verbosity
    @property
    def logging_level(self) -> int:
        return LOG_LEVELS[self.log_level]

    # Address shown in the author line of the embed
    @property
    def display_address(self) -> str:
        if self.address:
            return self.address
        return f"{self.query_host}:{self.query_port}"

    @classmethod
    def from_dict(cls, data: dict, token: str):

        known = {name for name in cls.__dataclass_fields__ if name != "token"}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(sorted(unknown))}")
        values = {key: value for key, value in data.items() if key in known}
        # Guild and channel ids are snowflakes, keep them as strings
        for key in ("guild", "channel"):
            if key in values:
                values[key] = str(values[key])
        if "embed_color" in values:
            values["embed_color"] = parse_color(values["embed_color"])
        return cls(token=token, **values)


# Accepts a color as an integer, a "#rrggbb" string or a [r, g, b] list
def parse_color(value) -> int:

    if isinstance(value, bool):
        raise ValueError(f"Invalid embed color {value}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return discord.Color.from_str(value).value
    if isinstance(value, (list, tuple)) and len(value) == 3:
        return discord.Color.from_rgb(*value).value
    raise ValueError(f"Invalid embed color {value}")


def load_config(filename: str, token: str) -> Config:

    with open(filename) as config_file:
        data = json.load(config_file)
    return Config.from_dict(data, token)
