import asyncio
import logging

from serverstatus.config import Config
from serverstatus.database import Store
from serverstatus.discord_api import DiscordApi
from serverstatus.driver import PeriodicDriver
from serverstatus.host import A2SHost
from serverstatus.reconciler import Reconciler
from serverstatus.records import RecordTracker

logger = logging.getLogger(__name__)


# The bot: keeps the status message of one server up to date.
# Every collaborator can be provided, otherwise it is built from the config
class Bot:

    def __init__(
        self,
        config: Config,
        api: DiscordApi | None = None,
        store: Store | None = None,
        host=None,
        records: RecordTracker | None = None,
    ):

        self.config = config
        self.api = api or DiscordApi(config.token, config.api_version)
        self.store = store or Store(config.database_filename)
        self.host = host or A2SHost(
            config.query_host,
            config.query_port,
            config.query_timeout_secs,
            config.display_address,
        )
        self.records = records or RecordTracker(self.store, config.utc_offset_hours)
        self.reconciler = Reconciler(
            config, self.api, self.store, self.records, self.host
        )
        self.driver = PeriodicDriver(
            f"DiscordBotStatus{config.server_id}",
            config.interval,
            self.reconciler.step,
        )

    # Starts everything and blocks for as long as the driver runs
    async def loop(self):

        logger.info(
            f"Updating server {self.config.server_id} in channel {self.config.channel} of guild {self.config.guild}"
        )
        # The own user is not needed until the channel history has to be searched
        me_task = asyncio.create_task(self.reconciler.fetch_me())
        driver_task = self.driver.start()
        await asyncio.gather(me_task, driver_task)
