import logging
from enum import Enum, auto

import serverstatus.message_formatter as mft
from serverstatus.database import MESSAGE_ID_KEY

logger = logging.getLogger(__name__)


# Where the reconciler stands with respect to the message it maintains.
# Between ticks it is always NO_REFERENCE or HAS_REFERENCE, the other two
# only exist while a tick is running
class State(Enum):
    NO_REFERENCE = auto()
    HAS_REFERENCE = auto()
    RECOVERING = auto()
    RESOLVED = auto()


# What a tick ended up doing
class Outcome(Enum):
    EDITED = auto()
    RECOVERED = auto()
    CREATED = auto()
    ABORTED = auto()


# Keeps one Discord message in sync with the status of the server.
# Each call to step is a tick: it edits the message the bot is responsible for,
# recovers it from the channel history when the stored reference no longer
# works, or creates a new one. Any failure ends the tick, the next tick is
# the only retry
class Reconciler:

    def __init__(self, config, api, store, records, host):

        self.config = config
        self.api = api
        self.store = store
        self.records = records
        self.host = host
        # The bot's own user, fetched in the background at startup
        self.me: dict | None = None
        self.message_id: str | None = self.load_message_id()
        self.state: State = self.resting_state()

    def load_message_id(self) -> str | None:

        if not self.store.exists(MESSAGE_ID_KEY):
            logger.info("No message reference stored yet")
            return None
        value = self.store.read(MESSAGE_ID_KEY)
        try:
            message_id = value.decode("utf-8").strip()
        except (AttributeError, UnicodeDecodeError):
            logger.error(f"Stored message reference {value!r} is not valid")
            return None
        if not message_id:
            return None
        logger.info(f"Using stored message reference {message_id}")
        return message_id

    def resting_state(self) -> State:
        return State.HAS_REFERENCE if self.message_id else State.NO_REFERENCE

    # Asks Discord who the bot is. Safe to call more than once
    async def fetch_me(self) -> dict | None:

        response = await self.api.me()
        if isinstance(response.data, dict) and "id" in response.data:
            self.me = response.data
            logger.info(f"Logged in as {self.me.get('username')} ({self.me['id']})")
        return self.me

    async def own_id(self) -> str | None:

        if self.me is None:
            logger.info("Own user is not known yet, asking for it")
            await self.fetch_me()
        return self.me["id"] if self.me else None

    # A single tick. Whatever happens, the next one starts from the stored reference
    async def step(self) -> Outcome:

        try:
            outcome = await self._run()
        finally:
            self.state = self.resting_state()
        logger.debug(f"Tick finished: {outcome.name}")
        return outcome

    async def _run(self) -> Outcome:

        channel = self.config.channel
        message = None
        recovered = False
        while True:
            match self.state:
                case State.HAS_REFERENCE:
                    response = await self.api.get_message(
                        channel, self.message_id, silent=True
                    )
                    if response.status is None:
                        return Outcome.ABORTED
                    if isinstance(response.data, dict):
                        message = response.data
                        self.state = State.RESOLVED
                    else:
                        logger.info(
                            f"Message {self.message_id} is not available ({response.status}), searching the channel"
                        )
                        self.state = State.RECOVERING

                case State.NO_REFERENCE:
                    self.state = State.RECOVERING

                case State.RECOVERING:
                    response = await self.api.get_messages(channel, silent=True)
                    if response.data is None:
                        if response.status is not None:
                            logger.error(
                                f"Could not list the messages of channel {channel} ({response.status})"
                            )
                        return Outcome.ABORTED
                    if not isinstance(response.data, list):
                        logger.error(f"Unexpected list of messages for channel {channel}")
                        return Outcome.ABORTED
                    found = await self.find_own_message(response.data)
                    if found is False:
                        return Outcome.ABORTED
                    if found is None:
                        return await self.create_message(channel)
                    message = found
                    self.message_id = str(message["id"])
                    logger.info(f"Found own message {self.message_id}, keeping it")
                    self.store.write(MESSAGE_ID_KEY, self.message_id.encode("utf-8"))
                    recovered = True
                    self.state = State.RESOLVED

                case State.RESOLVED:
                    if not await self.edit_message(channel, message):
                        return Outcome.ABORTED
                    return Outcome.RECOVERED if recovered else Outcome.EDITED

    # Looks for the first message written by the bot, in the order given.
    # Returns None if there is none, False if the messages cannot be trusted
    async def find_own_message(self, messages: list):

        if len(messages) == 0:
            return None
        own_id = await self.own_id()
        if own_id is None:
            logger.warning("Own user is unknown, cannot look for the message")
            return False
        for message in messages:
            try:
                author_id = message["author"]["id"]
                message["id"]
            except (KeyError, TypeError):
                logger.error("Found a malformed message in the channel history")
                return False
            if author_id == own_id:
                return message
        return None

    # Computes this server's embed and places it among the ones already present.
    # None if the server could not be queried
    async def build_embeds(self, embeds: list | None = None) -> list | None:

        snapshot = await self.host.snapshot()
        if snapshot is None:
            logger.warning("Server status not available, skipping update")
            return None
        self.records.update(snapshot.player_count)
        embed = mft.server_embed(
            self.config,
            snapshot,
            self.records.daily_record,
            self.records.all_time_record,
            self.records.timestamp(),
        )
        return mft.place_in_slot(embeds, self.config.server_id, embed)

    async def edit_message(self, channel: str, message: dict) -> bool:

        embeds = await self.build_embeds(message.get("embeds"))
        if embeds is None:
            return False
        response = await self.api.edit_message(
            channel, self.message_id, {"embeds": embeds}
        )
        return response.data is not None

    # The id of the new message is not stored here: it will be found
    # in the channel history on the next tick and stored then
    async def create_message(self, channel: str) -> Outcome:

        logger.info(f"No message of mine in channel {channel}, creating one")
        embeds = await self.build_embeds()
        if embeds is None:
            return Outcome.ABORTED
        response = await self.api.send_message(channel, {"embeds": embeds})
        if response.data is None:
            return Outcome.ABORTED
        return Outcome.CREATED
