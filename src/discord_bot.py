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
reminderbot Discord Bot

Maintains the Discord connection, wires the reminder engine to slash
commands and the delivery loop, and posts reminders when they fall due.
"""

import asyncio
import os
from typing import Optional, Union

import asyncpg
import discord
from discord.ext import commands
from dotenv import load_dotenv

import analytics
from analytics import track
from commands.reminder_commands import ReminderCommands
from commands.views import SnoozeView
from reminders import (
    Delivery,
    MemoryStateStore,
    PostgresStateStore,
    ReminderConfig,
    ReminderEngine,
    ReminderScheduler,
    StateStore,
)
from utils import chunk_message

load_dotenv()

import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("reminderbot")


class ReminderBot(commands.Bot):
    """Discord bot that schedules and delivers channel reminders."""

    def __init__(self, config: Optional[ReminderConfig] = None):
        intents = discord.Intents.default()
        intents.guilds = True

        super().__init__(command_prefix="!", intents=intents)

        self.config = config or ReminderConfig.from_env()
        self.db_pool: Optional[asyncpg.Pool] = None
        self.engine: Optional[ReminderEngine] = None
        self.scheduler: Optional[ReminderScheduler] = None
        self._ready_event = asyncio.Event()

    async def setup_hook(self):
        """Called when the bot is starting up."""
        database_url = os.getenv("DATABASE_URL")

        logger.info(f"Setup: DATABASE_URL={'set' if database_url else 'missing'}")
        logger.info(f"Setup: REMINDER_TIMEZONE={self.config.timezone}")
        logger.info(f"Setup: REMINDER_POLL_INTERVAL={self.config.poll_interval_seconds}s")

        state = await self._create_state_store(database_url)

        self.engine = ReminderEngine(state, self.deliver_reminder, config=self.config)
        await self.engine.start()

        await self.add_cog(ReminderCommands(self, self.engine))
        synced = await self.tree.sync()
        logger.info(f"Synced {len(synced)} application command(s)")

        self.scheduler = ReminderScheduler(self, self.engine)
        self.scheduler.start()

    async def _create_state_store(self, database_url: Optional[str]) -> StateStore:
        """Postgres-backed state when a database is configured, else in-memory."""
        if database_url:
            try:
                self.db_pool = await asyncpg.create_pool(database_url)
                state = PostgresStateStore(self.db_pool)
                await state.ensure_schema()
                analytics.configure(self.db_pool)
                logger.info("Reminder state stored in PostgreSQL")
                return state
            except Exception as e:
                logger.error(f"Failed to initialize database: {e}", exc_info=True)
                if self.db_pool:
                    await self.db_pool.close()
                    self.db_pool = None

        logger.warning("Reminders are kept in memory only and will not survive a restart")
        return MemoryStateStore()

    async def on_ready(self):
        """Called when the bot has connected to Discord."""
        print(f"Logged in as {self.user} (ID: {self.user.id})")
        print(f"Connected to {len(self.guilds)} guild(s)")
        self._ready_event.set()

    def is_ready(self) -> bool:
        """Check if the bot is ready."""
        return self._ready_event.is_set()

    async def wait_until_ready(self):
        """Wait until the bot is ready."""
        await self._ready_event.wait()

    async def _resolve_channel(
        self, channel_id: int
    ) -> Union[discord.abc.GuildChannel, discord.abc.PrivateChannel, discord.Thread]:
        channel = self.get_channel(channel_id)
        if channel is None:
            channel = await self.fetch_channel(channel_id)
        return channel

    async def deliver_reminder(self, delivery: Delivery) -> None:
        """
        Post a due reminder to its channel with snooze buttons.

        Errors propagate to the engine, which logs them.
        """
        channel_id = int(delivery.conversation_id)
        channel = await self._resolve_channel(channel_id)

        chunks = chunk_message(delivery.message)
        for chunk in chunks[:-1]:
            await channel.send(chunk)
        await channel.send(
            chunks[-1], view=SnoozeView(self.engine, delivery.snoozes)
        )

        track(
            "reminder_delivered",
            "reminder",
            channel_id=channel_id,
            guild_id=getattr(getattr(channel, "guild", None), "id", None),
            properties={"reminder_id": delivery.reminder.id},
        )
        logger.info(f"Delivered reminder {delivery.reminder.id} to channel {channel_id}")

    async def close(self):
        """Clean up resources on shutdown."""
        if self.scheduler:
            self.scheduler.stop()
        if self.db_pool:
            analytics.configure(None)
            await self.db_pool.close()
        await super().close()


async def main():
    """Run the bot."""
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        print("Error: DISCORD_BOT_TOKEN environment variable not set")
        print("Please set it in your .env file")
        return

    bot = ReminderBot()
    await bot.start(token)


def run():
    """Console entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
