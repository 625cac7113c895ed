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

"""Tests for state storage backends."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders.state import MemoryStateStore, PostgresStateStore


class TestMemoryStateStore:
    """Test the in-process store."""

    @pytest.mark.asyncio
    async def test_get_missing(self):
        assert await MemoryStateStore().get("reminderbot/state") is None

    @pytest.mark.asyncio
    async def test_set_then_get(self):
        state = MemoryStateStore()
        await state.set("key", '{"reminders": []}')
        assert await state.get("key") == '{"reminders": []}'
        assert state.data == {"key": '{"reminders": []}'}

    @pytest.mark.asyncio
    async def test_initial_data_is_copied(self):
        initial = {"key": "value"}
        state = MemoryStateStore(initial)
        await state.set("key", "other")
        assert initial == {"key": "value"}


class TestPostgresStateStore:
    """Test the bot_state table backend."""

    @pytest.mark.asyncio
    async def test_get_existing(self):
        pool = MagicMock()
        pool.fetchrow = AsyncMock(return_value={"value": "blob"})
        state = PostgresStateStore(pool)

        assert await state.get("reminderbot/state") == "blob"
        sql, key = pool.fetchrow.call_args.args
        assert "FROM bot_state" in sql
        assert key == "reminderbot/state"

    @pytest.mark.asyncio
    async def test_get_missing(self):
        pool = MagicMock()
        pool.fetchrow = AsyncMock(return_value=None)
        assert await PostgresStateStore(pool).get("key") is None

    @pytest.mark.asyncio
    async def test_set_upserts(self):
        pool = MagicMock()
        pool.execute = AsyncMock()
        await PostgresStateStore(pool).set("key", "blob")

        sql, key, value = pool.execute.call_args.args
        assert "ON CONFLICT (key)" in sql
        assert (key, value) == ("key", "blob")

    @pytest.mark.asyncio
    async def test_ensure_schema(self):
        pool = MagicMock()
        pool.execute = AsyncMock()
        await PostgresStateStore(pool).ensure_schema()
        assert "CREATE TABLE IF NOT EXISTS bot_state" in pool.execute.call_args.args[0]
