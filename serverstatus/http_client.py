import asyncio
import logging
from typing import Callable, NamedTuple

import aiohttp

logger = logging.getLogger(__name__)

# Every request gives up after this many seconds
REQUEST_TIMEOUT_SECS = 5


# What the client hands back once the transport is done with a request.
# On failure, body holds the reason and status and headers are None
class Result(NamedTuple):
    ok: bool
    body: str
    status: int | None = None
    headers: dict | None = None


SuccessCallback = Callable[[int, str, dict], None]
FailedCallback = Callable[[str], None]


# Callback based transport: fires the request in the background and
# reports back through exactly one of the callbacks provided
class AiohttpTransport:

    def __init__(self):
        # Keep references to the requests in flight so they are not collected
        self.pending: set[asyncio.Task] = set()

    def fetch(
        self,
        method: str,
        url: str,
        headers: dict | None,
        body: str | None,
        timeout: float,
        success: SuccessCallback,
        failed: FailedCallback,
    ) -> None:

        task = asyncio.ensure_future(
            self._perform(method, url, headers, body, timeout, success, failed)
        )
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)

    async def _perform(self, method, url, headers, body, timeout, success, failed):

        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=timeout)
            ) as session:
                async with session.request(
                    method, url, headers=headers, data=body
                ) as response:
                    text = await response.text(errors="replace")
                    status = response.status
                    response_headers = dict(response.headers)
        except asyncio.TimeoutError:
            failed(f"Timed out after {timeout} seconds")
            return
        except aiohttp.ClientError as error:
            failed(str(error) or error.__class__.__name__)
            return
        except Exception as error:
            # Whatever goes wrong, the caller is waiting for one of the callbacks
            logger.error(f"Unexpected error in request {method} {url}: {error!r}")
            failed(repr(error))
            return
        success(status, text, response_headers)


# Lets a task write a request as a single await even though the transport
# underneath only knows about callbacks. The future is resolved by whichever
# callback fires first, any later callback (or one arriving after the caller
# went away) is logged and dropped
class HttpClient:

    def __init__(self, transport=None, timeout: float = REQUEST_TIMEOUT_SECS):
        self.transport = transport if transport is not None else AiohttpTransport()
        self.timeout = timeout

    async def request(
        self,
        method: str,
        url: str,
        headers: dict | None = None,
        body: str | None = None,
    ) -> Result:

        future = asyncio.get_running_loop().create_future()

        def resume(result: Result):
            if future.done():
                logger.error(f"Could not resume request {method} {url}: {result.body}")
                return
            future.set_result(result)

        def on_success(status: int, response_body: str, response_headers: dict):
            resume(Result(True, response_body, status, response_headers))

        def on_failed(reason: str):
            resume(Result(False, reason))

        self.transport.fetch(
            method, url, headers, body, self.timeout, on_success, on_failed
        )
        return await future
