import json
import logging
from enum import Enum
from typing import NamedTuple

from serverstatus.http_client import HttpClient

logger = logging.getLogger(__name__)

BASE_URL = "https://discord.com/api/v{version}"
USER_AGENT = "serverstatus/1.0.0"


# Responses provided by the Discord API
class ResponseStatus(Enum):
    OK = 200
    NO_CONTENT = 204
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    RATE_LIMITED = 429
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504


messages = {
    ResponseStatus.OK: "OK",
    ResponseStatus.NO_CONTENT: "No content",
    ResponseStatus.BAD_REQUEST: "Bad request",
    ResponseStatus.UNAUTHORIZED: "Unauthorized",
    ResponseStatus.FORBIDDEN: "Forbidden",
    ResponseStatus.NOT_FOUND: "Not found",
    ResponseStatus.METHOD_NOT_ALLOWED: "Method not allowed",
    ResponseStatus.RATE_LIMITED: "Rate limited",
    ResponseStatus.INTERNAL_SERVER_ERROR: "Internal server error",
    ResponseStatus.BAD_GATEWAY: "Bad gateway",
    ResponseStatus.SERVICE_UNAVAILABLE: "Service unavailable",
    ResponseStatus.GATEWAY_TIMEOUT: "Gateway timeout",
}


def describe(status: int) -> str:
    try:
        return messages[ResponseStatus(status)]
    except ValueError:
        return "Unknown status"


# Routes inside the Discord API used by the bot
class Endpoint(Enum):
    MESSAGE = "/channels/{channel_id}/messages/{message_id}"
    MESSAGES = "/channels/{channel_id}/messages"
    ME = "/users/@me"


class UnknownEndpointError(KeyError):
    pass


# Builds the full url of an endpoint. The endpoint may be given by member or by name
def endpoint_url(version: int, endpoint, **arguments) -> str:

    if not isinstance(endpoint, Endpoint):
        try:
            endpoint = Endpoint[str(endpoint).upper()]
        except KeyError:
            raise UnknownEndpointError(f"Unknown endpoint {endpoint}") from None
    return BASE_URL.format(version=version) + endpoint.value.format(**arguments)


# What a request to the API produces. Data is None whenever the request failed,
# and status is None when the request did not even reach Discord
class Response(NamedTuple):
    data: dict | list | None
    status: int | None
    headers: dict | None


class DiscordApi:

    def __init__(self, token: str, version: int = 10, client: HttpClient | None = None):
        self.token = token
        self.version = version
        self.client = client if client is not None else HttpClient()

    # Make a request to the API. Errors are never raised: a response without
    # data is the signal that something went wrong
    async def request(
        self, method: str, url: str, payload=None, silent: bool = False
    ) -> Response:

        body = None
        if payload is not None:
            body = json.dumps(payload, separators=(",", ":"))
            logger.debug(f"request {method} {url} - {body}")
        else:
            logger.debug(f"request {method} {url}")

        result = await self.client.request(
            method, url, self._build_headers(body), body
        )

        if not result.ok:
            logger.error(f"ERROR {result.body} : {method} {url}")
            return Response(None, None, None)

        if result.status != ResponseStatus.OK.value:
            if not silent:
                logger.error(
                    f"ERROR {result.status} ({describe(result.status)}) - {result.body} : {method} {url}"
                )
            return Response(None, result.status, result.headers)

        try:
            data = json.loads(result.body)
        except ValueError:
            logger.error(f"ERROR could not decode response body : {method} {url}")
            return Response(None, result.status, result.headers)
        return Response(data, result.status, result.headers)

    # Return a header that includes the bot token
    def _build_headers(self, body: str | None) -> dict:

        headers = {
            "Authorization": f"Bot {self.token}",
            "User-Agent": USER_AGENT,
            "X-RateLimit-Precision": "millisecond",
        }
        if body is not None:
            headers["Content-Type"] = "application/json"
        return headers

    def _url(self, endpoint: Endpoint, **arguments) -> str:
        return endpoint_url(self.version, endpoint, **arguments)

    # Retrieves the latest messages of a channel
    async def get_messages(self, channel_id: str, silent: bool = False) -> Response:
        return await self.request(
            "GET", self._url(Endpoint.MESSAGES, channel_id=channel_id), silent=silent
        )

    # Retrieves a single message of a channel
    async def get_message(
        self, channel_id: str, message_id: str, silent: bool = False
    ) -> Response:
        return await self.request(
            "GET",
            self._url(Endpoint.MESSAGE, channel_id=channel_id, message_id=message_id),
            silent=silent,
        )

    # Sends a new message to a channel
    async def send_message(
        self, channel_id: str, payload: dict, silent: bool = False
    ) -> Response:
        return await self.request(
            "POST",
            self._url(Endpoint.MESSAGES, channel_id=channel_id),
            payload,
            silent,
        )

    # Replaces the content of an existing message
    async def edit_message(
        self, channel_id: str, message_id: str, payload: dict, silent: bool = False
    ) -> Response:
        return await self.request(
            "PATCH",
            self._url(Endpoint.MESSAGE, channel_id=channel_id, message_id=message_id),
            payload,
            silent,
        )

    # Retrieves the user behind the token, that is, the bot itself
    async def me(self, silent: bool = False) -> Response:
        return await self.request("GET", self._url(Endpoint.ME), silent=silent)
