import discord
import logging

from serverstatus.host import PlayerInfo, Snapshot

logger = logging.getLogger(__name__)

# Discord rejects field values longer than this
FIELD_VALUE_LIMIT = 1024


# Formats a duration in seconds as MM:SS, or HH:MM:SS past the hour
def format_time(seconds: float | None) -> str:

    if not seconds or seconds <= 0:
        return "00:00"
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = seconds // 60 % 60
    seconds = seconds % 60
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def player_line(player: PlayerInfo) -> str:
    if player.duration is None:
        return player.name
    return f"{player.name}: {format_time(player.duration)}"


def code(value) -> str:
    return f"`{value}`"


def players_list(players: list[PlayerInfo]) -> str:

    lines = "\n".join(player_line(player) for player in players)
    value = f"```\n{lines}\n```"
    if len(value) > FIELD_VALUE_LIMIT:
        logger.debug(f"Players list too long ({len(value)} chars), truncating")
        # Keep the closing fence
        lines = lines[: FIELD_VALUE_LIMIT - len("```\n\n...```")]
        value = f"```\n{lines}\n...```"
    return value


def footer_text(text: str, last_update: str) -> str:
    if text:
        return f"{text} ● Last updated {last_update}"
    return f"Last updated {last_update}"


# Builds the embed describing one server
def server_embed(
    config,
    snapshot: Snapshot,
    daily_record: int,
    all_time_record: int,
    last_update: str,
) -> dict:

    embed = discord.Embed(color=config.embed_color)
    embed.set_author(
        name=config.server_name + snapshot.address, icon_url=config.author_icon_url
    )
    embed.add_field(name="Name", value=code(snapshot.host_name), inline=True)
    embed.add_field(name="Gamemode", value=code(snapshot.gamemode), inline=True)
    embed.add_field(name="Map", value=code(snapshot.map_name), inline=True)
    embed.add_field(
        name="Current online",
        value=code(f"{snapshot.player_count}/{snapshot.max_players}"),
        inline=True,
    )
    embed.add_field(name="Record online for today", value=code(daily_record), inline=True)
    embed.add_field(name="All-time record", value=code(all_time_record), inline=True)
    embed.add_field(
        name="Players List", value=players_list(snapshot.players), inline=True
    )
    embed.set_footer(
        text=footer_text(config.footer_text, last_update),
        icon_url=config.footer_icon_url,
    )
    return embed.to_dict()


# Stands in for a server that has not reported its status yet
def placeholder_embed(server_id: int) -> dict:
    embed = discord.Embed(
        title=f"Server {server_id}", description="Waiting for status..."
    )
    return embed.to_dict()


# Puts the embed in the slot of the server, leaving the rest untouched.
# Slots are numbered from 1
def place_in_slot(embeds: list | None, server_id: int, embed: dict) -> list:

    embeds = list(embeds or [])
    index = server_id - 1
    while len(embeds) < index:
        embeds.append(placeholder_embed(len(embeds) + 1))
    if index < len(embeds):
        embeds[index] = embed
    else:
        embeds.append(embed)
    return embeds
