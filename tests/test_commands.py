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

"""Tests for the reminder slash commands and snooze buttons."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from commands.reminder_commands import ReminderCommands
from commands.views import SnoozeButton, SnoozeView
from reminders.engine import SnoozeOption

OPTIONS = [
    SnoozeOption(label="Snooze 20m", command="me in 20 minutes to stretch"),
    SnoozeOption(label="Snooze 1h", command="me in 1 hour to stretch"),
    SnoozeOption(label="Snooze 3h", command="me in 3 hours to stretch"),
    SnoozeOption(label="Snooze 24h", command="me in 24 hours to stretch"),
]


def make_interaction(channel_id=123):
    interaction = MagicMock()
    interaction.user.id = 42
    interaction.channel_id = channel_id
    interaction.guild_id = 7
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


@pytest.fixture
def engine():
    engine = MagicMock()
    engine.handle_remind = AsyncMock(return_value="Okay! I'll remind you \"x\"")
    engine.handle_delete = AsyncMock(return_value='Okay. I deleted the reminder "x"')
    engine.handle_list = MagicMock(return_value="No reminders found")
    engine.handle_help = MagicMock(return_value="Use `/remind` ...")
    return engine


@pytest.fixture(autouse=True)
def no_analytics():
    with patch("commands.reminder_commands.track"), patch("commands.views.track"):
        yield


class TestReminderCommands:
    """Test the cog's command callbacks."""

    @pytest.mark.asyncio
    async def test_remind_uses_channel_as_conversation(self, engine):
        cog = ReminderCommands(MagicMock(), engine)
        interaction = make_interaction(channel_id=555)

        await ReminderCommands.remind.callback(cog, interaction, "me to stretch in 20 minutes")

        engine.handle_remind.assert_awaited_once_with("555", "me to stretch in 20 minutes")
        interaction.response.send_message.assert_awaited_once_with(
            "Okay! I'll remind you \"x\"", ephemeral=False
        )

    @pytest.mark.asyncio
    async def test_empty_remind_shows_help(self, engine):
        engine.handle_remind.return_value = None
        cog = ReminderCommands(MagicMock(), engine)
        interaction = make_interaction()

        await ReminderCommands.remind.callback(cog, interaction, "   ")

        interaction.response.send_message.assert_awaited_once_with(
            "Use `/remind` ...", ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_list(self, engine):
        cog = ReminderCommands(MagicMock(), engine)
        interaction = make_interaction()

        await ReminderCommands.list_reminders.callback(cog, interaction)

        engine.handle_list.assert_called_once_with("123")
        interaction.response.send_message.assert_awaited_once_with(
            "No reminders found", ephemeral=False
        )

    @pytest.mark.asyncio
    async def test_delete_passes_raw_number(self, engine):
        cog = ReminderCommands(MagicMock(), engine)
        interaction = make_interaction()

        await ReminderCommands.delete_reminder.callback(cog, interaction, "2")

        engine.handle_delete.assert_awaited_once_with("123", "2")

    @pytest.mark.asyncio
    async def test_long_reply_is_split(self, engine):
        engine.handle_list.return_value = "\n".join(["x" * 50] * 100)
        cog = ReminderCommands(MagicMock(), engine)
        interaction = make_interaction()

        await ReminderCommands.list_reminders.callback(cog, interaction)

        interaction.response.send_message.assert_awaited_once()
        assert interaction.followup.send.await_count >= 1
        sent = [interaction.response.send_message.await_args.args[0]] + [
            call.args[0] for call in interaction.followup.send.await_args_list
        ]
        assert all(len(chunk) <= 2000 for chunk in sent)


class TestSnoozeView:
    """Test snooze buttons on delivered reminders."""

    @pytest.mark.asyncio
    async def test_one_button_per_option(self, engine):
        view = SnoozeView(engine, OPTIONS)

        assert [item.label for item in view.children] == [o.label for o in OPTIONS]
        assert all(isinstance(item, SnoozeButton) for item in view.children)

    @pytest.mark.asyncio
    async def test_button_resubmits_command(self, engine):
        view = SnoozeView(engine, OPTIONS)
        button = view.children[1]
        interaction = make_interaction(channel_id=999)

        await button.callback(interaction)

        engine.handle_remind.assert_awaited_once_with("999", "me in 1 hour to stretch")
        interaction.response.send_message.assert_awaited_once_with(
            "Okay! I'll remind you \"x\""
        )

    @pytest.mark.asyncio
    async def test_timeout_disables_buttons(self, engine):
        view = SnoozeView(engine, OPTIONS)
        await view.on_timeout()
        assert all(item.disabled for item in view.children)
