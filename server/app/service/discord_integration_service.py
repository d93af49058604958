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
Discord Integration Service — data access for per-user Discord integrations.

Writes are single statements keyed on the ``user_id`` unique constraint, so
two concurrent saves for one user can never produce two rows; the last
commit wins.  Atomic upserts are supported on PostgreSQL, SQLite, MySQL and
MariaDB; any other database is a configuration error.
"""

import logging

from sqlalchemy import func, update
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlmodel import Session, select

from app.component import code
from app.exception.exception import UserException
from app.model.abstract.model import utcnow
from app.model.user.discord_integration import DiscordIntegration, IntegrationStatus

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def get_integration(user_id: str, *, s: Session) -> DiscordIntegration | None:
    """Return the user's integration row, or ``None`` if they never saved one."""
    return s.exec(select(DiscordIntegration).where(DiscordIntegration.user_id == user_id)).first()


def count_integrations(user_id: str, *, s: Session) -> int:
    return s.exec(
        select(func.count()).select_from(DiscordIntegration).where(DiscordIntegration.user_id == user_id)
    ).one()


def _upsert_statement(dialect: str, values: dict, changes: dict):
    table = DiscordIntegration.__table__
    if dialect in _DIALECT_INSERTS:
        stmt = _DIALECT_INSERTS[dialect](table).values(**values)
        return stmt.on_conflict_do_update(index_elements=[table.c.user_id], set_=changes)
    if dialect in ("mysql", "mariadb"):
        stmt = mysql.insert(table).values(**values)
        return stmt.on_duplicate_key_update(**changes)
    raise UserException(code.config_error, f"Atomic upsert is not supported on database dialect {dialect!r}")


def upsert_integration(
    user_id: str,
    *,
    guild_id: str,
    channel_id: str,
    channel_name: str,
    s: Session,
) -> DiscordIntegration:
    """Insert or update the user's integration and mark it connected.

    An existing row keeps its ``id`` and ``created_at``; only the channel
    fields, ``status`` and ``updated_at`` change.
    """
    now = utcnow()
    changes = {
        "guild_id": guild_id,
        "channel_id": channel_id,
        "channel_name": channel_name,
        "status": IntegrationStatus.connected,
        "updated_at": now,
    }
    values = {"user_id": user_id, "created_at": now, **changes}

    s.connection().execute(_upsert_statement(s.get_bind().dialect.name, values, changes))
    s.commit()

    record = get_integration(user_id, s=s)
    logger.info(
        "Discord integration saved",
        extra={"user_id": user_id, "guild_id": guild_id, "channel_id": channel_id},
    )
    return record


def set_disconnected(user_id: str, *, s: Session) -> bool:
    """Flip the user's integration to ``disconnected``.

    Returns whether a row existed.  Without a row this is a successful no-op.
    """
    result = s.connection().execute(
        update(DiscordIntegration.__table__)
        .where(DiscordIntegration.__table__.c.user_id == user_id)
        .values(status=IntegrationStatus.disconnected, updated_at=utcnow())
    )
    s.commit()
    changed = result.rowcount > 0
    if changed:
        logger.info("Discord integration disconnected", extra={"user_id": user_id})
    return changed
