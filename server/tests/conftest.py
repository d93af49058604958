import json
from typing import Any

import httpx
import pytest
from sqlmodel import Session, SQLModel

from app.component.database import build_engine
from app.component.discord_client import DiscordDirectoryClient
from app.component.environment import AppConfig, AuthConfig, DiscordConfig, reset_config, set_config
from app.model.user.discord_integration import DiscordIntegration  # noqa: F401

GUILD_ID = "guild-1"
APPLICATION_ID = "app-42"
TEST_SECRET = "whalebuddy-test-secret-0123456789abcdef"
VIEW = 0x400
SEND = 0x800
MANAGE = 0x10


class FakeDiscord:
    """In-memory stand-in for the Discord HTTP API, served via ``httpx.MockTransport``."""

    def __init__(self, guild_id: str = GUILD_ID):
        self.guild: dict[str, Any] | None = {"id": guild_id, "name": "WhaleBuddy"}
        self.channels: dict[str, dict[str, Any]] = {}
        self.permissions: dict[str, Any] = {}
        self.messages: list[tuple[str, dict]] = []
        self.requests: list[tuple[str, str]] = []
        self.fail_paths: dict[str, httpx.Response] = {}
        self.network_error = False
        self.reject_messages: httpx.Response | None = None

    def add_channel(self, channel_id: str, name: str, type: int = 0, *, guild_id: str = GUILD_ID, permissions: int = VIEW | SEND):
        self.channels[channel_id] = {"id": channel_id, "name": name, "type": type, "guild_id": guild_id}
        self.permissions[channel_id] = str(permissions)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api/v10")
        self.requests.append((request.method, path))
        if self.network_error:
            raise httpx.ConnectError("connection refused", request=request)
        if path in self.fail_paths:
            return self.fail_paths[path]

        parts = path.strip("/").split("/")
        if parts[0] == "guilds":
            if self.guild is None or parts[1] != self.guild["id"]:
                return httpx.Response(404, json={"message": "Unknown Guild", "code": 10004})
            if len(parts) == 2:
                return httpx.Response(200, json=self.guild)
            return httpx.Response(200, json=list(self.channels.values()))

        if parts[0] == "channels":
            channel = self.channels.get(parts[1])
            if channel is None:
                return httpx.Response(404, json={"message": "Unknown Channel", "code": 10003})
            if len(parts) == 2:
                return httpx.Response(200, json=channel)
            if parts[2] == "permissions":
                return httpx.Response(200, json={"permissions": self.permissions[parts[1]]})
            if parts[2] == "messages" and request.method == "POST":
                if self.reject_messages is not None:
                    return self.reject_messages
                self.messages.append((parts[1], json.loads(request.content)))
                return httpx.Response(200, json={"id": "msg-1"})

        return httpx.Response(404, json={"message": "404: Not Found"})


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_discord():
    return FakeDiscord()


@pytest.fixture
async def discord_client(fake_discord):
    client = DiscordDirectoryClient(
        bot_token="bot-token",
        guild_id=GUILD_ID,
        base_url="https://discord.test/api/v10",
        transport=httpx.MockTransport(fake_discord.handler),
    )
    yield client
    await client.close()


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def app_config():
    config = AppConfig(
        discord=DiscordConfig(
            bot_token="bot-token",
            api_url="https://discord.test/api/v10",
            guild_id=GUILD_ID,
            application_id=APPLICATION_ID,
        ),
        auth=AuthConfig(secret_key=TEST_SECRET),
    )
    set_config(config)
    yield config
    reset_config()
