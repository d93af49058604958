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
Discord Integration Controller — lets a signed-in user link one text channel
of the WhaleBuddy Discord guild for notifications.

Routes:
  GET  /integration/discord/status     — current integration state
  GET  /integration/discord/guild      — configured guild, or null if the bot is absent
  GET  /integration/discord/channels   — candidate text channels
  GET  /integration/discord/invite     — OAuth2 link that adds the bot to the guild
  POST /integration/discord/channel    — validate and save a channel
  POST /integration/discord/test       — post a test message to the saved channel
  POST /integration/discord/disconnect — unlink (keeps the row, flips status)
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from app.component import code
from app.component.auth import Auth, auth_must
from app.component.database import session
from app.component.discord_client import DiscordGuild
from app.component.environment import get_config
from app.exception.exception import UserException
from app.model.user.discord_integration import (
    DisconnectOut,
    IntegrationStatusOut,
    SaveChannelIn,
    SaveChannelOut,
    SendTestOut,
)
from app.service.discord_reconciler_service import ChannelCandidates, DiscordIntegrationReconciler, InviteOut

logger = logging.getLogger("server_discord_integration_controller")

router = APIRouter(prefix="/integration/discord", tags=["Discord Integration"])


def reconciler(request: Request) -> DiscordIntegrationReconciler:
    return request.app.state.discord_reconciler


def remote_reconciler(rec: DiscordIntegrationReconciler = Depends(reconciler)) -> DiscordIntegrationReconciler:
    """The reconciler, for routes that talk to Discord."""
    if not get_config().discord.is_configured:
        raise UserException(code.config_error, "Discord integration is not configured")
    return rec


@router.get("/status", name="discord integration status", response_model=IntegrationStatusOut)
def get_status(
    auth: Auth = Depends(auth_must),
    s: Session = Depends(session),
    rec: DiscordIntegrationReconciler = Depends(reconciler),
):
    """Current integration of the signed-in user; ``disconnected`` when none."""
    return rec.get_status(auth.id, s=s)


@router.get("/guild", name="discord guild", response_model=DiscordGuild | None)
async def get_guild(
    auth: Auth = Depends(auth_must),
    rec: DiscordIntegrationReconciler = Depends(remote_reconciler),
):
    return await rec.get_guild()


@router.get("/channels", name="discord channels", response_model=ChannelCandidates)
async def list_channels(
    auth: Auth = Depends(auth_must),
    rec: DiscordIntegrationReconciler = Depends(remote_reconciler),
):
    return await rec.list_candidates()


@router.get("/invite", name="discord bot invite url", response_model=InviteOut)
def get_invite_url(
    auth: Auth = Depends(auth_must),
    rec: DiscordIntegrationReconciler = Depends(reconciler),
):
    """Invite link for the bot with view + send permissions; null when no application id is set."""
    return InviteOut(inviteUrl=rec.invite_url())


@router.post("/channel", name="save discord channel", response_model=SaveChannelOut)
async def save_channel(
    data: SaveChannelIn,
    auth: Auth = Depends(auth_must),
    s: Session = Depends(session),
    rec: DiscordIntegrationReconciler = Depends(remote_reconciler),
):
    result = await rec.save_channel(auth.id, data.channelId, data.channelName, s=s)
    logger.info("Discord channel registered", extra={"user_id": auth.id, "channel_id": data.channelId})
    return result


@router.post("/test", name="send discord test message", response_model=SendTestOut)
async def send_test_message(
    auth: Auth = Depends(auth_must),
    s: Session = Depends(session),
    rec: DiscordIntegrationReconciler = Depends(remote_reconciler),
):
    return await rec.send_test_message(auth.id, s=s)


@router.post("/disconnect", name="disconnect discord integration", response_model=DisconnectOut)
def disconnect(
    auth: Auth = Depends(auth_must),
    s: Session = Depends(session),
    rec: DiscordIntegrationReconciler = Depends(reconciler),
):
    return rec.disconnect(auth.id, s=s)
