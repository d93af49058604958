# ========= Copyright 2025-2026 @ Hanggent.AI All Rights Reserved. =========
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ========= Copyright 2025-2026 @ Hanggent.AI All Rights Reserved. =========


"""
Discord directory client — typed, bot-authenticated access to the handful of
Discord HTTP API endpoints the channel integration needs.

Every method performs exactly one HTTP request per remote lookup and never
retries; retry policy belongs to the caller.  Failures are classified into
:class:`RemoteUnavailable`, :class:`RemoteNotFound` and
:class:`RemoteRejected` with the upstream status and body attached.
"""

import logging
from enum import IntEnum, IntFlag
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from app.component.environment import DISCORD_API_BASE_URL, DiscordConfig
from app.exception.exception import RemoteNotFound, RemoteRejected, RemoteUnavailable

logger = logging.getLogger(__name__)

# Discord permission values are 64-bit unsigned integers sent as decimal strings.
PERMISSION_MAX = (1 << 64) - 1


class ChannelType(IntEnum):
    GUILD_TEXT = 0
    DM = 1
    GUILD_VOICE = 2
    GROUP_DM = 3
    GUILD_CATEGORY = 4
    GUILD_ANNOUNCEMENT = 5
    GUILD_STAGE_VOICE = 13
    GUILD_FORUM = 15


TEXT_CHANNEL_TYPES = frozenset({ChannelType.GUILD_TEXT})


class DiscordPermission(IntFlag):
    CREATE_INSTANT_INVITE = 1 << 0
    KICK_MEMBERS = 1 << 1
    BAN_MEMBERS = 1 << 2
    ADMINISTRATOR = 1 << 3
    MANAGE_CHANNELS = 1 << 4
    MANAGE_GUILD = 1 << 5
    VIEW_CHANNEL = 1 << 10
    SEND_MESSAGES = 1 << 11
    MANAGE_MESSAGES = 1 << 13
    EMBED_LINKS = 1 << 14
    READ_MESSAGE_HISTORY = 1 << 16


class DiscordGuild(BaseModel):
    id: str
    name: str = ""


class DiscordChannel(BaseModel):
    id: str
    name: str = ""
    type: int
    guild_id: str | None = None

    @property
    def is_text(self) -> bool:
        return self.type in TEXT_CHANNEL_TYPES


def _preview(body: str, limit: int = 200) -> str:
    return body.strip().replace("\n", " ")[:limit]


class DiscordDirectoryClient:
    def __init__(
        self,
        *,
        bot_token: str,
        guild_id: str,
        base_url: str = DISCORD_API_BASE_URL,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.guild_id = guild_id
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Authorization": f"Bot {bot_token}",
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_config(
        cls, config: DiscordConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> "DiscordDirectoryClient":
        return cls(
            bot_token=config.bot_token,
            guild_id=config.guild_id,
            base_url=config.api_url,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "DiscordDirectoryClient":
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.close()

    # ── transport ──────────────────────────────────────────────────────────

    async def _send(self, method: str, path: str, *, payload: dict[str, Any] | None = None) -> httpx.Response:
        try:
            return await self._client.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning(
                "Discord network error on %s %s: %s",
                method,
                path,
                type(exc).__name__,
            )
            raise RemoteUnavailable(f"Discord API network error for {method} {path}: {exc}") from exc

    async def _get_json(self, path: str) -> Any:
        """GET *path*; 403/404 become :class:`RemoteNotFound`."""
        response = await self._send("GET", path)
        status_code = response.status_code
        if not response.is_success:
            body = response.text or ""
            logger.warning(
                "Discord API error",
                extra={"path": path, "status": status_code, "body": _preview(body)},
            )
            if status_code in (403, 404):
                raise RemoteNotFound(
                    f"Discord resource not found or not visible: GET {path} status={status_code}",
                    status=status_code,
                    body=body,
                )
            raise RemoteUnavailable(
                f"Discord API request failed for GET {path}: status={status_code} body={_preview(body)!r}",
                status=status_code,
                body=body,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteUnavailable(
                f"Discord API returned non-JSON success response for GET {path}",
                status=status_code,
                body=response.text,
            ) from exc

    @staticmethod
    def _parse(model: type[BaseModel], payload: Any, path: str) -> Any:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise RemoteUnavailable(f"Discord API returned malformed data for GET {path}: {exc}") from exc

    # ── directory ──────────────────────────────────────────────────────────

    async def get_guild(self) -> DiscordGuild | None:
        """Fetch the configured guild, or ``None`` when the bot is not a member."""
        path = f"/guilds/{quote(self.guild_id, safe='')}"
        try:
            payload = await self._get_json(path)
        except RemoteNotFound:
            logger.info("Bot is not a member of the configured guild", extra={"guild_id": self.guild_id})
            return None
        return self._parse(DiscordGuild, payload, path)

    async def list_channels(self, guild: DiscordGuild | None = None) -> list[DiscordChannel]:
        """Text channels of the configured guild, sorted by name.

        Pass an already-fetched *guild* to skip the membership lookup.
        """
        if guild is None:
            guild = await self.get_guild()
            if guild is None:
                return []

        path = f"/guilds/{quote(guild.id, safe='')}/channels"
        payload = await self._get_json(path)
        if not isinstance(payload, list):
            raise RemoteUnavailable(f"Discord API returned malformed data for GET {path}: expected a list")

        channels: list[DiscordChannel] = []
        for item in payload:
            if not isinstance(item, dict) or not isinstance(item.get("type"), int):
                continue
            if item["type"] not in TEXT_CHANNEL_TYPES:
                continue
            channel = self._parse(DiscordChannel, {**item, "guild_id": item.get("guild_id") or guild.id}, path)
            channels.append(channel)
        channels.sort(key=lambda c: c.name.casefold())
        return channels

    async def get_channel(self, channel_id: str) -> DiscordChannel:
        path = f"/channels/{quote(channel_id, safe='')}"
        payload = await self._get_json(path)
        return self._parse(DiscordChannel, payload, path)

    async def get_channel_permissions(self, channel_id: str) -> DiscordPermission:
        """The bot's effective permissions in *channel_id*."""
        path = f"/channels/{quote(channel_id, safe='')}/permissions/@me"
        payload = await self._get_json(path)
        raw = payload.get("permissions") if isinstance(payload, dict) else None
        try:
            value = int(str(raw))
        except ValueError as exc:
            raise RemoteUnavailable(f"Discord API returned malformed permissions for GET {path}: {raw!r}") from exc
        if not 0 <= value <= PERMISSION_MAX:
            raise RemoteUnavailable(f"Discord API returned out-of-range permissions for GET {path}: {raw!r}")
        return DiscordPermission(value)

    async def post_message(self, channel_id: str, content: str) -> None:
        path = f"/channels/{quote(channel_id, safe='')}/messages"
        response = await self._send("POST", path, payload={"content": content})
        if not response.is_success:
            body = response.text or ""
            logger.warning(
                "Discord rejected message",
                extra={"channel_id": channel_id, "status": response.status_code, "body": _preview(body)},
            )
            raise RemoteRejected(
                f"Discord rejected message for POST {path}: status={response.status_code} body={_preview(body)!r}",
                status=response.status_code,
                body=body,
            )
