import logging
import time
from datetime import datetime, timedelta, timezone

from serverstatus.database import ALL_TIME_RECORD_KEY

logger = logging.getLogger(__name__)


# Keeps the highest number of players seen today and ever.
# The all time record survives restarts through the store, the daily one
# lives in memory and starts again every day of the configured time zone.
# Moving the clock backwards over midnight can reset the daily record early
# or skip a reset, which is accepted
class RecordTracker:

    def __init__(self, store, utc_offset_hours: float = 3, clock=time.time):

        self.store = store
        self.timezone = timezone(timedelta(hours=utc_offset_hours))
        self.clock = clock
        self.daily_record: int = 0
        self.current_day: int = self.today()
        self.all_time_record: int = self.load_all_time_record()

    def now(self) -> datetime:
        return datetime.fromtimestamp(self.clock(), tz=self.timezone)

    # Day of the month in the configured time zone
    def today(self) -> int:
        return self.now().day

    # Time of the last update, as shown in the footer of the embed
    def timestamp(self) -> str:
        return self.now().strftime("%Y-%m-%d %H:%M:%S")

    def load_all_time_record(self) -> int:

        if not self.store.exists(ALL_TIME_RECORD_KEY):
            logger.info("No all time record stored yet")
            return 0
        value = self.store.read(ALL_TIME_RECORD_KEY)
        try:
            record = int(value.decode("utf-8").strip())
        except (AttributeError, UnicodeDecodeError, ValueError):
            logger.error(f"Stored all time record {value!r} is not valid, using 0")
            return 0
        if record < 0:
            logger.error(f"Stored all time record {record} is negative, using 0")
            return 0
        logger.info(f"All time record loaded: {record}")
        return record

    # Accounts for the players currently online
    def update(self, player_count: int) -> None:

        day = self.today()
        if day != self.current_day:
            logger.info(f"Day changed, resetting daily record {self.daily_record}")
            self.current_day = day
            self.daily_record = 0
        self.daily_record = max(self.daily_record, player_count)

        candidate = max(self.all_time_record, player_count)
        if candidate > self.all_time_record:
            logger.info(f"New all time record: {candidate}")
            self.all_time_record = candidate
            self.store.write(ALL_TIME_RECORD_KEY, str(candidate).encode("utf-8"))
