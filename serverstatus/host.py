import asyncio
import logging
from dataclasses import dataclass, field

import a2s

logger = logging.getLogger(__name__)


# A human connected to the server
@dataclass(frozen=True)
class PlayerInfo:
    name: str
    # Seconds since the player joined, if the server reports it
    duration: float | None = None


# Everything the embed needs to know about the server at a point in time
@dataclass(frozen=True)
class Snapshot:
    host_name: str
    gamemode: str
    map_name: str
    max_players: int
    address: str
    players: list[PlayerInfo] = field(default_factory=list)

    @property
    def player_count(self) -> int:
        return len(self.players)


# Queries a Source engine server through A2S to learn its live state
class A2SHost:

    def __init__(self, host: str, port: int, timeout: float = 2.0, address: str | None = None):

        self.query_address = (host, port)
        self.timeout = timeout
        # Address shown to the users, which may differ from the one queried
        self.address = address or f"{host}:{port}"

    async def snapshot(self) -> Snapshot | None:

        try:
            info = await a2s.ainfo(self.query_address, timeout=self.timeout)
            players = await a2s.aplayers(self.query_address, timeout=self.timeout)
        except (
            OSError,
            asyncio.TimeoutError,
            a2s.BrokenMessageError,
            a2s.BufferExhaustedError,
        ) as error:
            logger.error(
                f"Query failed for {self.query_address[0]}:{self.query_address[1]}: {error}"
            )
            return None

        # Bots and players still connecting come without a name
        humans = [
            PlayerInfo(player.name, player.duration)
            for player in players
            if player.name.strip()
        ]
        logger.debug(f"Server {info.server_name} has {len(humans)} players online")
        return Snapshot(
            host_name=info.server_name,
            gamemode=info.game,
            map_name=info.map_name,
            max_players=info.max_players,
            address=self.address,
            players=humans,
        )
