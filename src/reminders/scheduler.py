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
Reminder Scheduler Module

Background task loop that hands due reminders to the engine for delivery.
Uses discord.ext.tasks for reliable scheduling.
"""

import logging
from typing import TYPE_CHECKING, Optional

from discord.ext import tasks

from analytics import track

if TYPE_CHECKING:
    from discord_bot import ReminderBot

from .config import ReminderConfig
from .engine import ReminderEngine

logger = logging.getLogger("reminderbot.reminders.scheduler")


class ReminderScheduler:
    """
    Background scheduler for delivering reminders.

    Runs a loop every 30 seconds (configurable) to deliver due reminders.
    tasks.loop never overlaps iterations, so a tick (delivery and the state
    write included) always finishes before the next one starts.
    """

    def __init__(
        self,
        bot: "ReminderBot",
        engine: ReminderEngine,
        config: Optional[ReminderConfig] = None,
    ):
        """
        Initialize the reminder scheduler.

        Args:
            bot: Discord bot instance
            engine: Reminder engine to poll
            config: Scheduler configuration (defaults to the engine's)
        """
        self.bot = bot
        self.engine = engine
        self.config = config or engine.config
        self._started = False

    def start(self) -> None:
        """Start the scheduler loop."""
        if not self._started:
            self._check_reminders.change_interval(
                seconds=self.config.poll_interval_seconds
            )
            self._check_reminders.start()
            self._started = True
            logger.info(
                f"Reminder scheduler started (interval: {self.config.poll_interval_seconds}s)"
            )

    def stop(self) -> None:
        """Stop the scheduler loop."""
        if self._started:
            self._check_reminders.cancel()
            self._started = False
            logger.info("Reminder scheduler stopped")

    async def run_once(self) -> int:
        """
        Run a single notification check.

        Returns:
            Number of reminders that were due
        """
        try:
            due = await self.engine.on_tick()
            return len(due)
        except Exception as e:
            logger.error(f"Error in reminder scheduler loop: {e}", exc_info=True)
            track(
                "scheduler_error",
                "error",
                properties={
                    "error_type": type(e).__name__,
                    "error_message": str(e)[:200],
                },
            )
            return 0

    @tasks.loop(seconds=30)
    async def _check_reminders(self) -> None:
        """Check for due reminders and deliver them."""
        await self.run_once()

    @_check_reminders.before_loop
    async def _before_check(self) -> None:
        """Wait for the bot to be ready before starting the loop."""
        await self.bot.wait_until_ready()
        logger.info("Reminder scheduler ready, starting loop")
