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
Reminder Slash Commands

Discord slash commands for scheduling and managing channel reminders.
"""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from analytics import track
from reminders import ReminderEngine
from utils import chunk_message

logger = logging.getLogger("reminderbot.commands.reminder")


class ReminderCommands(commands.Cog):
    """
    Slash commands for reminders.

    Commands:
    - /remind - Schedule a reminder for this channel
    - /reminders list - List this channel's reminders
    - /reminders delete - Delete a reminder by its list number
    - /reminders help - Show usage examples

    Reminders belong to the channel they were created in.
    """

    reminders_group = app_commands.Group(
        name="reminders",
        description="Manage this channel's reminders",
    )

    def __init__(self, bot: commands.Bot, engine: ReminderEngine):
        self.bot = bot
        self.engine = engine

    def _track_command(self, interaction: discord.Interaction, name: str, subcommand: str = None):
        track(
            "command_used",
            "command",
            user_id=interaction.user.id,
            channel_id=interaction.channel_id,
            guild_id=interaction.guild.id if interaction.guild else None,
            properties={"command_name": name, "subcommand": subcommand},
        )

    async def _reply(
        self, interaction: discord.Interaction, content: str, ephemeral: bool = False
    ):
        """Send a reply, splitting it if it's over Discord's length limit."""
        chunks = chunk_message(content)
        await interaction.response.send_message(chunks[0], ephemeral=ephemeral)
        for chunk in chunks[1:]:
            await interaction.followup.send(chunk, ephemeral=ephemeral)

    # =========================================================================
    # /remind
    # =========================================================================

    @app_commands.command(name="remind", description="Schedule a reminder for this channel")
    @app_commands.describe(
        text="What and when, e.g. 'me to stretch in 20 minutes' or 'tomorrow at 9am to file the report'",
    )
    async def remind(self, interaction: discord.Interaction, text: str):
        """Schedule a reminder."""
        self._track_command(interaction, "remind")

        reply = await self.engine.handle_remind(str(interaction.channel_id), text)
        if reply is None:
            await self._reply(interaction, self.engine.handle_help(), ephemeral=True)
            return

        await self._reply(interaction, reply)

    # =========================================================================
    # /reminders list | delete | help
    # =========================================================================

    @reminders_group.command(name="list")
    async def list_reminders(self, interaction: discord.Interaction):
        """List this channel's upcoming reminders."""
        self._track_command(interaction, "reminders", "list")
        await self._reply(interaction, self.engine.handle_list(str(interaction.channel_id)))

    @reminders_group.command(name="delete")
    @app_commands.describe(number="Reminder number as shown by /reminders list")
    async def delete_reminder(self, interaction: discord.Interaction, number: str):
        """Delete one of this channel's reminders."""
        self._track_command(interaction, "reminders", "delete")
        reply = await self.engine.handle_delete(str(interaction.channel_id), number)
        await self._reply(interaction, reply)

    @reminders_group.command(name="help")
    async def reminder_help(self, interaction: discord.Interaction):
        """Show how to write reminders."""
        self._track_command(interaction, "reminders", "help")
        await self._reply(interaction, self.engine.handle_help(), ephemeral=True)
