# reminderbot - Discord Reminder Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Bot State Storage

Key-value blob storage for the bot's persisted state. The reminder engine
only needs get/set of a single string value per key.
"""

import logging
from typing import Optional, Protocol

import asyncpg

logger = logging.getLogger("reminderbot.reminders.state")


class StateStore(Protocol):
    """Opaque key-value store for serialized bot state."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...


class MemoryStateStore:
    """Process-local state store. Nothing survives a restart."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


class PostgresStateStore:
    """
    State store backed by a bot_state table.

    One row per key; set() upserts.
    """

    def __init__(self, db_pool: asyncpg.Pool):
        """
        Initialize the state store.

        Args:
            db_pool: asyncpg connection pool
        """
        self.db = db_pool

    async def ensure_schema(self) -> None:
        """Create the bot_state table if it doesn't exist."""
        await self.db.execute(
            """
            CREATE TABLE IF NOT EXISTS bot_state (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
            """
        )

    async def get(self, key: str) -> Optional[str]:
        row = await self.db.fetchrow(
            "SELECT value FROM bot_state WHERE key = $1",
            key,
        )
        return row["value"] if row else None

    async def set(self, key: str, value: str) -> None:
        await self.db.execute(
            """
            INSERT INTO bot_state (key, value, updated_at)
            VALUES ($1, $2, NOW())
            ON CONFLICT (key)
            DO UPDATE SET value = EXCLUDED.value, updated_at = NOW()
            """,
            key,
            value,
        )
        logger.debug(f"Saved state '{key}' ({len(value)} bytes)")
