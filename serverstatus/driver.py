import asyncio
import logging

logger = logging.getLogger(__name__)


# Runs a coroutine function forever, once right away and then every interval.
# A tick only starts once the previous one has returned, so ticks never overlap
class PeriodicDriver:

    def __init__(self, name: str, interval: float, callback):

        self.name = name
        self.interval = interval
        self.callback = callback
        self.task: asyncio.Task | None = None
        self.ticks = 0

    def start(self) -> asyncio.Task:

        if self.task is not None and not self.task.done():
            logger.warning(f"Driver {self.name} is already running")
            return self.task
        logger.info(f"Starting driver {self.name} every {self.interval} seconds")
        self.task = asyncio.create_task(self.loop(), name=self.name)
        self.task.add_done_callback(self._on_done)
        return self.task

    def stop(self) -> None:
        if self.task is not None:
            self.task.cancel()

    async def loop(self):

        while True:
            await self.tick()
            await asyncio.sleep(self.interval)

    async def tick(self):

        self.ticks += 1
        try:
            await self.callback()
        except Exception:
            logger.exception(f"ERROR in tick {self.ticks} of driver {self.name}")

    # Updates stop for good if the loop ever ends; nothing restarts it
    def _on_done(self, task: asyncio.Task):

        if task.cancelled():
            logger.info(f"Driver {self.name} stopped")
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"ERROR driver {self.name} terminated, no more updates until restart: {error!r}"
            )
