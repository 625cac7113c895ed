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
Lightweight analytics tracking for reminderbot.

Events go to the analytics_events table through the bot's database pool.
Without a pool (no DATABASE_URL) tracking is a no-op.

Usage:
    from analytics import track

    # Fire-and-forget, uses a background task
    track("reminder_created", "reminder", channel_id=123, properties={"due_in_seconds": 3600})
"""

import asyncio
import json
import logging
import os
from typing import Any, Optional

import asyncpg

logger = logging.getLogger("reminderbot.analytics")

EVENT_CATEGORIES = ("command", "reminder", "error", "system")

_pool: Optional[asyncpg.Pool] = None
_enabled: bool = os.getenv("ANALYTICS_ENABLED", "true").lower() == "true"
_schema_ready: bool = False


def configure(pool: Optional[asyncpg.Pool], enabled: Optional[bool] = None) -> None:
    """Point tracking at a connection pool (usually the bot's)."""
    global _pool, _enabled, _schema_ready
    _pool = pool
    _schema_ready = False
    if enabled is not None:
        _enabled = enabled


async def _ensure_schema(pool: asyncpg.Pool) -> None:
    global _schema_ready
    if _schema_ready:
        return
    await pool.execute(
        """
        CREATE TABLE IF NOT EXISTS analytics_events (
            id BIGSERIAL PRIMARY KEY,
            event_name TEXT NOT NULL,
            event_category TEXT NOT NULL,
            user_id BIGINT,
            channel_id BIGINT,
            guild_id BIGINT,
            properties JSONB NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        """
    )
    _schema_ready = True


async def track_async(
    event_name: str,
    event_category: str,
    user_id: Optional[int] = None,
    channel_id: Optional[int] = None,
    guild_id: Optional[int] = None,
    properties: Optional[dict[str, Any]] = None,
) -> bool:
    """
    Track an event asynchronously.

    Args:
        event_name: Specific event identifier (e.g., "reminder_created")
        event_category: One of EVENT_CATEGORIES
        user_id: Discord user ID (optional)
        channel_id: Discord channel ID (optional)
        guild_id: Discord guild ID (optional)
        properties: Additional event data as key-value pairs

    Returns:
        True if event was recorded, False otherwise
    """
    if not _enabled or _pool is None:
        return False

    if event_category not in EVENT_CATEGORIES:
        logger.debug(f"Unknown analytics category '{event_category}' for {event_name}")

    try:
        await _ensure_schema(_pool)
        await _pool.execute(
            """
            INSERT INTO analytics_events
                (event_name, event_category, user_id, channel_id, guild_id, properties)
            VALUES ($1, $2, $3, $4, $5, $6)
            """,
            event_name,
            event_category,
            user_id,
            channel_id,
            guild_id,
            json.dumps(properties or {}),
        )
        return True
    except Exception as e:
        logger.debug(f"Analytics tracking failed: {e}")
        return False


def track(
    event_name: str,
    event_category: str,
    user_id: Optional[int] = None,
    channel_id: Optional[int] = None,
    guild_id: Optional[int] = None,
    properties: Optional[dict[str, Any]] = None,
) -> None:
    """
    Track an event (fire-and-forget).

    Creates a background task to record the event without blocking.
    Safe to call from sync or async contexts.
    """
    if not _enabled or _pool is None:
        return

    try:
        loop = asyncio.get_running_loop()
        loop.create_task(
            track_async(event_name, event_category, user_id, channel_id, guild_id, properties)
        )
    except RuntimeError:
        # No running loop - skip tracking
        pass
