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
Discord UI Components for Reminder Delivery

Snooze buttons attached to delivered reminders.
"""

import logging
from typing import TYPE_CHECKING, Sequence

import discord

from analytics import track
from reminders import SnoozeOption
from utils import chunk_message

if TYPE_CHECKING:
    from reminders import ReminderEngine

logger = logging.getLogger("reminderbot.commands.views")


class SnoozeButton(discord.ui.Button):
    """A button that re-schedules the delivered reminder."""

    def __init__(self, option: SnoozeOption):
        super().__init__(label=option.label, style=discord.ButtonStyle.secondary)
        self.option = option

    async def callback(self, interaction: discord.Interaction):
        """Run the snooze command in the channel the reminder was posted to."""
        view: SnoozeView = self.view
        reply = await view.engine.handle_remind(
            str(interaction.channel_id), self.option.command
        )

        track(
            "reminder_snoozed",
            "reminder",
            user_id=interaction.user.id,
            channel_id=interaction.channel_id,
            guild_id=interaction.guild_id,
            properties={"label": self.option.label},
        )

        chunks = chunk_message(reply or "")
        await interaction.response.send_message(chunks[0])
        for chunk in chunks[1:]:
            await interaction.followup.send(chunk)


class SnoozeView(discord.ui.View):
    """
    Snooze quick-replies for a delivered reminder.

    Features:
    - One button per snooze option
    - Anyone in the channel can snooze
    - Buttons disabled after timeout (default 1 hour)
    """

    def __init__(
        self,
        engine: "ReminderEngine",
        options: Sequence[SnoozeOption],
        timeout: float = 3600.0,
    ):
        """
        Initialize snooze view.

        Args:
            engine: Engine that handles the snooze command
            options: Snooze options offered with the delivery
            timeout: View timeout in seconds
        """
        super().__init__(timeout=timeout)
        self.engine = engine
        for option in options:
            self.add_item(SnoozeButton(option))

    async def on_timeout(self):
        """Disable buttons when view times out."""
        for item in self.children:
            item.disabled = True
