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


from enum import Enum

from app.component import code


class UserException(Exception):
    """An error whose description is safe to show to the end user."""

    def __init__(self, code: int, description: str):
        super().__init__(description)
        self.code = code
        self.description = description


class DiscordError(Exception):
    """Base for failures of the Discord channel integration.

    ``status`` and ``body`` carry the upstream HTTP response, when there was
    one, for logging.  They are never rendered to the end user.
    """

    error_code: int = code.error
    http_status: int = 500
    user_message: str = "Discord integration error"

    def __init__(self, message: str, *, status: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class RemoteUnavailable(DiscordError):
    """Transport failure or unclassified non-success response from Discord."""

    error_code = code.remote_unavailable
    http_status = 502
    user_message = "Discord is unavailable right now. Please try again."


class RemoteNotFound(DiscordError):
    """The guild or channel does not exist or the bot cannot see it."""

    error_code = code.remote_not_found
    http_status = 404
    user_message = "Channel not found on Discord."


class RemoteRejected(DiscordError):
    """Discord understood the request but refused the action."""

    error_code = code.remote_rejected
    http_status = 502
    user_message = "Discord rejected the message."


class ValidationReason(str, Enum):
    wrong_guild = "wrong_guild"
    not_text_channel = "not_text_channel"
    missing_permissions = "missing_permissions"


_VALIDATION_MESSAGES = {
    ValidationReason.wrong_guild: "This channel does not belong to the expected server.",
    ValidationReason.not_text_channel: "Only text channels are supported.",
    ValidationReason.missing_permissions: (
        "The bot is not allowed to send messages in this channel. Check the bot permissions."
    ),
}


class ValidationFailed(DiscordError):
    """The channel failed the guild, text-type or permission check."""

    error_code = code.validation_failed
    http_status = 400

    def __init__(self, reason: ValidationReason, message: str | None = None) -> None:
        super().__init__(message or f"Channel validation failed: {reason.value}")
        self.reason = reason
        if reason is ValidationReason.missing_permissions:
            self.http_status = 403

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return _VALIDATION_MESSAGES[self.reason]


class NotConfigured(DiscordError):
    """No connected integration exists for the user."""

    error_code = code.not_configured
    http_status = 404
    user_message = "No integration found. Configure a channel first."
