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
Per-user Discord channel integration.

Each WhaleBuddy user may link exactly one text channel of the configured
Discord guild.  The row is created on the first successful channel save and
updated in place afterwards; disconnecting flips ``status`` rather than
deleting the row.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy import String, UniqueConstraint
from sqlalchemy_utils import ChoiceType
from sqlmodel import Column, Field

from app.model.abstract.model import AbstractModel, DefaultTimes


class IntegrationStatus(str, Enum):
    disconnected = "disconnected"
    connected = "connected"


class DiscordIntegration(AbstractModel, DefaultTimes, table=True):
    """A user's linked Discord channel.

    Unique constraint: ``user_id`` — one integration per user.  The constraint
    is what makes :func:`upsert_integration` atomic.
    """

    __tablename__ = "discord_integration"
    __table_args__ = (UniqueConstraint("user_id", name="uq_discord_integration_user"),)

    id: int = Field(default=None, primary_key=True)

    user_id: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Owning account identifier, as issued by the auth provider",
    )

    guild_id: str = Field(
        sa_column=Column(String(32), nullable=False),
        description="Discord guild (server) snowflake",
    )

    channel_id: str = Field(
        sa_column=Column(String(32), nullable=False),
        description="Discord text channel snowflake",
    )

    channel_name: str = Field(
        default="",
        sa_column=Column(String(100), nullable=False, server_default=""),
        description="Display label cached at save time; may go stale",
    )

    status: IntegrationStatus = Field(
        default=IntegrationStatus.connected,
        sa_column=Column(ChoiceType(IntegrationStatus, String(16)), nullable=False),
    )


# ---- Pydantic schemas ----


class IntegrationStatusOut(BaseModel):
    status: IntegrationStatus = IntegrationStatus.disconnected
    guildId: str | None = None
    channelId: str | None = None
    channelName: str | None = None
    updatedAt: datetime | None = None

    @classmethod
    def from_record(cls, record: DiscordIntegration | None) -> "IntegrationStatusOut":
        if record is None:
            return cls()
        return cls(
            status=record.status,
            guildId=record.guild_id,
            channelId=record.channel_id,
            channelName=record.channel_name,
            updatedAt=record.updated_at,
        )


class SaveChannelIn(BaseModel):
    channelId: str = PydanticField(min_length=1, description="Discord channel ID")
    channelName: str = PydanticField(min_length=1, max_length=100, description="Channel display name")


class SaveChannelOut(BaseModel):
    success: bool = True
    channelId: str
    channelName: str


class DisconnectOut(BaseModel):
    success: bool = True
    changed: bool = False


class SendTestOut(BaseModel):
    success: bool = True
