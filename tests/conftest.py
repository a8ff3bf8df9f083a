import json
from datetime import datetime, timezone

import pytest

from serverstatus.config import Config
from serverstatus.discord_api import DiscordApi
from serverstatus.host import PlayerInfo, Snapshot
from serverstatus.http_client import HttpClient
from serverstatus.records import RecordTracker

CHANNEL = "42"
BOT_ID = "1000"


# Key-value store kept in memory
class MemoryStore:

    def __init__(self, values: dict | None = None):
        self.values = dict(values or {})
        self.writes = []

    def exists(self, name):
        return name in self.values

    def read(self, name):
        return self.values.get(name)

    def write(self, name, value):
        self.writes.append((name, value))
        self.values[name] = value
        return True


# Transport answering from a table of routes, immediately and in place.
# A route maps (method, path) to (status, body), or to a string when the
# request has to fail with that reason
class FakeTransport:

    def __init__(self):
        self.routes = {}
        self.requests = []

    def route(self, method, path, status=200, body=None, fail=None):
        if fail is not None:
            self.routes[(method, path)] = fail
        else:
            self.routes[(method, path)] = (status, json.dumps(body))

    def fetch(self, method, url, headers, body, timeout, success, failed):
        path = url.split("/api/v10", 1)[1]
        self.requests.append((method, path, headers, body))
        answer = self.routes.get((method, path), (404, '{"message": "Unknown"}'))
        if isinstance(answer, str):
            failed(answer)
        else:
            success(answer[0], answer[1], {})

    # Requests made, without headers nor bodies
    def calls(self):
        return [(method, path) for method, path, _, _ in self.requests]

    def payload(self, index):
        return json.loads(self.requests[index][3])


class FakeHost:

    def __init__(self, players=None, available=True):
        self.players = players if players is not None else [PlayerInfo("alice", 65)]
        self.available = available

    async def snapshot(self):
        if not self.available:
            return None
        return Snapshot(
            host_name="My Server",
            gamemode="Sandbox",
            map_name="gm_construct",
            max_players=16,
            address="127.0.0.1:27015",
            players=list(self.players),
        )


# Clock that only moves when told to
class FakeClock:

    def __init__(self, when: datetime):
        self.now = when.timestamp()

    def __call__(self):
        return self.now

    def set(self, when: datetime):
        self.now = when.timestamp()


@pytest.fixture
def config():
    return Config(
        token="secret",
        guild="7",
        channel=CHANNEL,
        server_id=1,
        footer_text="Join us",
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def api(transport):
    return DiscordApi("secret", 10, HttpClient(transport))


@pytest.fixture
def clock():
    # Noon in UTC, 15:00 at the default offset of three hours
    return FakeClock(datetime(2024, 12, 14, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def records(store, clock):
    return RecordTracker(store, 3, clock)


@pytest.fixture
def host():
    return FakeHost()
