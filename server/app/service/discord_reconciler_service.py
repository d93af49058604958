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
Discord integration reconciler — the operations behind the integration page.

State per user is either ``disconnected`` (no row, or a row flagged
disconnected) or ``connected``.  A channel is only ever written after it
exists, belongs to the configured guild, is a text channel and passes the
permission check; a failure at any of those steps leaves the store untouched.
Remote errors from the directory client propagate unchanged.
"""

import logging
from urllib.parse import urlencode

from pydantic import BaseModel, Field
from sqlmodel import Session

from app.component.discord_client import DiscordDirectoryClient, DiscordGuild
from app.exception.exception import NotConfigured, ValidationFailed, ValidationReason
from app.model.user.discord_integration import (
    DisconnectOut,
    IntegrationStatus,
    IntegrationStatusOut,
    SaveChannelOut,
    SendTestOut,
)
from app.service import discord_integration_service
from app.service.discord_permission_service import REQUIRED_PERMISSIONS, DiscordPermissionValidator

logger = logging.getLogger(__name__)

TEST_MESSAGE = (
    "🐋 **WhaleBuddy Test Message**\n\n"
    "Hello! This is a test message from WhaleBuddy.\n"
    "Your integration is working correctly! ✅"
)

DISCORD_OAUTH2_AUTHORIZE_URL = "https://discord.com/oauth2/authorize"


class ChannelCandidate(BaseModel):
    id: str
    name: str
    guildId: str
    guildName: str = ""


class ChannelCandidates(BaseModel):
    botPresent: bool
    guild: DiscordGuild | None = None
    channels: list[ChannelCandidate] = Field(default_factory=list)
    inviteUrl: str | None = None


class InviteOut(BaseModel):
    inviteUrl: str | None = None


class DiscordIntegrationReconciler:
    def __init__(
        self,
        client: DiscordDirectoryClient,
        validator: DiscordPermissionValidator | None = None,
        *,
        guild_id: str | None = None,
        application_id: str = "",
    ) -> None:
        self._client = client
        self._validator = validator or DiscordPermissionValidator(client)
        self.guild_id = guild_id or client.guild_id
        self.application_id = application_id

    # ── reads ──────────────────────────────────────────────────────────────

    def get_status(self, user_id: str, *, s: Session) -> IntegrationStatusOut:
        record = discord_integration_service.get_integration(user_id, s=s)
        return IntegrationStatusOut.from_record(record)

    async def get_guild(self) -> DiscordGuild | None:
        return await self._client.get_guild()

    def invite_url(self) -> str | None:
        """OAuth2 link that adds the bot to the configured guild with view + send.

        ``None`` when no application id is configured.
        """
        if not self.application_id:
            return None
        query = urlencode(
            {
                "client_id": self.application_id,
                "scope": "bot",
                "permissions": int(REQUIRED_PERMISSIONS),
                "guild_id": self.guild_id,
            }
        )
        return f"{DISCORD_OAUTH2_AUTHORIZE_URL}?{query}"

    async def list_candidates(self) -> ChannelCandidates:
        """Text channels the user may pick.

        When the bot is not in the guild the list is empty and ``botPresent``
        is false, so the caller can prompt for a bot invite.
        """
        guild = await self._client.get_guild()
        if guild is None:
            return ChannelCandidates(botPresent=False, inviteUrl=self.invite_url())
        channels = await self._client.list_channels(guild)
        return ChannelCandidates(
            botPresent=True,
            guild=guild,
            channels=[
                ChannelCandidate(
                    id=channel.id,
                    name=channel.name,
                    guildId=channel.guild_id or guild.id,
                    guildName=guild.name,
                )
                for channel in channels
            ],
        )

    # ── writes ─────────────────────────────────────────────────────────────

    async def save_channel(self, user_id: str, channel_id: str, channel_name: str, *, s: Session) -> SaveChannelOut:
        channel = await self._client.get_channel(channel_id)

        if channel.guild_id != self.guild_id:
            raise ValidationFailed(
                ValidationReason.wrong_guild,
                f"Channel {channel_id} belongs to guild {channel.guild_id}, expected {self.guild_id}",
            )
        if not channel.is_text:
            raise ValidationFailed(
                ValidationReason.not_text_channel,
                f"Channel {channel_id} has type {channel.type}",
            )
        if not await self._validator.validate(channel_id):
            raise ValidationFailed(
                ValidationReason.missing_permissions,
                f"Bot lacks view/send permissions in channel {channel_id}",
            )

        discord_integration_service.upsert_integration(
            user_id,
            guild_id=self.guild_id,
            channel_id=channel_id,
            channel_name=channel_name,
            s=s,
        )
        return SaveChannelOut(channelId=channel_id, channelName=channel_name)

    def disconnect(self, user_id: str, *, s: Session) -> DisconnectOut:
        changed = discord_integration_service.set_disconnected(user_id, s=s)
        return DisconnectOut(changed=changed)

    async def send_test_message(self, user_id: str, *, s: Session) -> SendTestOut:
        record = discord_integration_service.get_integration(user_id, s=s)
        if record is None or record.status != IntegrationStatus.connected:
            raise NotConfigured(f"User {user_id} has no connected Discord integration")

        await self._client.post_message(record.channel_id, TEST_MESSAGE)
        logger.info(
            "Discord test message sent",
            extra={"user_id": user_id, "channel_id": record.channel_id},
        )
        return SendTestOut()
