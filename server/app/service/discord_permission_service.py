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
Permission check — may the bot operate in a given Discord channel?

The verdict is a plain ``bool``: remote faults while checking are logged and
count as a failed check instead of surfacing as their own error kind.
"""

import logging

from app.component.discord_client import DiscordDirectoryClient, DiscordPermission

logger = logging.getLogger(__name__)

REQUIRED_PERMISSIONS = DiscordPermission.VIEW_CHANNEL | DiscordPermission.SEND_MESSAGES


def has_required_permissions(actual: int, required: int = REQUIRED_PERMISSIONS) -> bool:
    """Exact-match test: every required bit must be set, other bits are ignored."""
    return (int(actual) & int(required)) == int(required)


class DiscordPermissionValidator:
    def __init__(self, client: DiscordDirectoryClient, required: DiscordPermission = REQUIRED_PERMISSIONS) -> None:
        self._client = client
        self.required = required

    async def validate(self, channel_id: str) -> bool:
        try:
            channel = await self._client.get_channel(channel_id)
            if not channel.is_text:
                logger.info(
                    "Channel failed permission check: not a text channel",
                    extra={"channel_id": channel_id, "channel_type": channel.type},
                )
                return False
            permissions = await self._client.get_channel_permissions(channel_id)
        except Exception as e:
            logger.warning(
                "Error validating channel permissions",
                extra={"channel_id": channel_id, "error": str(e), "status": getattr(e, "status", None)},
            )
            return False

        allowed = has_required_permissions(permissions, self.required)
        if not allowed:
            logger.info(
                "Bot lacks required permissions",
                extra={
                    "channel_id": channel_id,
                    "permissions": int(permissions),
                    "missing": int(self.required) & ~int(permissions),
                },
            )
        return allowed
