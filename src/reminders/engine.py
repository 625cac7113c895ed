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
Reminder Engine

Transport-independent core of the bot. The Discord cog calls the
handle_* methods for user commands and the scheduler calls on_tick();
both get plain reply strings back and never touch the store directly.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Awaitable, Callable, Optional

import pytz

from analytics import track

from .config import ReminderConfig
from .reminder import Reminder, create_reminder
from .state import StateStore
from .store import ReminderIndexError, ReminderStore

logger = logging.getLogger("reminderbot.reminders.engine")

# Listing uses the circled numerals U+2460..U+2473, which stop at 20
MAX_LISTED = 20
CIRCLED_ONE = 0x2460

NO_REMINDERS = "No reminders found"
BAD_INDEX = "Unable to parse reminder index"
INDEX_NOT_FOUND = "Sorry. I couldn't find a reminder with that ID."

DISPLAY_FORMAT = "%Y-%m-%d %H:%M %Z"

# (button suffix, time phrase) for the snoozes offered on every delivery
SNOOZE_LENGTHS = [
    ("20m", "in 20 minutes"),
    ("1h", "in 1 hour"),
    ("3h", "in 3 hours"),
]


@dataclass(frozen=True)
class SnoozeOption:
    """A quick-reply that re-creates a delivered reminder later."""

    label: str  # button text, e.g. "Snooze 1h"
    command: str  # text handed back to handle_remind


@dataclass(frozen=True)
class Delivery:
    """A due reminder ready to be posted."""

    reminder: Reminder
    snoozes: tuple[SnoozeOption, ...]

    @property
    def conversation_id(self) -> str:
        return self.reminder.conversation_id

    @property
    def message(self) -> str:
        prefix = "to " if self.reminder.is_infinitive else ""
        return f'You asked me to remind you {prefix}"{self.reminder.action}".'


DeliverCallback = Callable[[Delivery], Awaitable[None]]


def snooze_options(reminder: Reminder, today: date) -> list[SnoozeOption]:
    """
    Snooze choices for a delivered reminder.

    Always 20 minutes, 1 hour and 3 hours. The fourth choice is 24 hours
    Monday to Thursday, and "until Monday" Friday to Sunday.

    Args:
        reminder: The reminder being delivered
        today: Delivery date in the bot's timezone
    """
    lengths = list(SNOOZE_LENGTHS)
    if today.weekday() >= 4:
        lengths.append(("til Monday", "on Monday"))
    else:
        lengths.append(("24h", "in 24 hours"))

    return [
        SnoozeOption(label=f"Snooze {suffix}", command=f"me {phrase} {reminder.phrase}")
        for suffix, phrase in lengths
    ]


class ReminderEngine:
    """
    Creates, lists, deletes and delivers reminders.

    Owns the ReminderStore and writes a snapshot of it to the state store
    after every change.
    """

    def __init__(
        self,
        state: StateStore,
        deliver: DeliverCallback,
        config: Optional[ReminderConfig] = None,
        store: Optional[ReminderStore] = None,
    ):
        """
        Initialize the engine.

        Args:
            state: Key-value store for the persisted snapshot
            deliver: Async callback that posts a due reminder
            config: Engine configuration (defaults to environment)
            store: Reminder store (defaults to an empty one)
        """
        self.state = state
        self.deliver = deliver
        self.config = config or ReminderConfig.from_env()
        self.store = store if store is not None else ReminderStore()
        self.tz = pytz.timezone(self.config.timezone)
        self._dirty = False

    # =========================================================================
    # Persistence
    # =========================================================================

    async def load_state(self) -> None:
        """Restore the store from saved state. Unreadable state leaves it as is."""
        try:
            data = await self.state.get(self.config.state_key)
            if data:
                self.store.restore(json.loads(data))
                logger.info(f"Loaded {len(self.store)} reminder(s) from saved state")
        except Exception as e:
            logger.error(f"Error loading saved state: {e}", exc_info=True)

    async def save_state(self) -> bool:
        """
        Write a snapshot of the store.

        Returns:
            True if saved; on failure the write is retried on the next tick
        """
        try:
            await self.state.set(
                self.config.state_key, json.dumps(self.store.snapshot())
            )
        except Exception as e:
            self._dirty = True
            logger.error(f"Error saving state: {e}", exc_info=True)
            return False

        self._dirty = False
        return True

    async def start(self, now: Optional[datetime] = None) -> list[Reminder]:
        """
        Load saved state and clear out reminders that fell due while offline.

        Must run before the scheduler loop starts.

        Returns:
            The overdue reminders that were drained
        """
        await self.load_state()

        now = now or datetime.now(pytz.UTC)
        missed = self.store.extract_due(now)
        if missed:
            if self.config.deliver_missed:
                logger.info(f"Delivering {len(missed)} reminder(s) missed while offline")
                await self._deliver_all(missed, now)
            else:
                logger.warning(
                    f"Discarding {len(missed)} reminder(s) that fell due while offline"
                )
            await self.save_state()

        return missed

    # =========================================================================
    # Commands
    # =========================================================================

    async def handle_remind(
        self, conversation_id: str, text: str, now: Optional[datetime] = None
    ) -> Optional[str]:
        """
        Schedule a reminder from free text.

        Returns:
            Reply text, or None when the request is empty
        """
        words = (text or "").split()
        if not words:
            return None
        text = " ".join(words)
        now = now or datetime.now(pytz.UTC)

        result = create_reminder(
            conversation_id, text, now=now, timezone=self.config.timezone
        )
        if not result.ok:
            logger.info(f"Error scheduling reminder '{text}': {result.error.name}")
            return result.error.message

        reminder = self.store.insert(result.reminder)
        logger.info(
            f"Saving reminder {reminder.id} for {conversation_id}: "
            f"due={reminder.due_at.isoformat()} ('{reminder.due_time_text}')"
        )
        await self.save_state()

        track(
            "reminder_created",
            "reminder",
            channel_id=_channel_id(conversation_id),
            properties={
                "due_in_seconds": int((reminder.due_at - now).total_seconds()),
                "is_infinitive": reminder.is_infinitive,
            },
        )

        prefix = "to " if reminder.is_infinitive else ""
        return (
            f'Okay! I\'ll remind you {prefix}"{reminder.action}" '
            f"at {self.format_time(reminder.due_at)}"
        )

    def handle_list(self, conversation_id: str) -> str:
        """Numbered list of a conversation's reminders, soonest first."""
        reminders = self.store.list_for(conversation_id)
        if not reminders:
            return NO_REMINDERS

        lines = []
        for i, reminder in enumerate(reminders[:MAX_LISTED]):
            prefix = "To " if reminder.is_infinitive else ""
            lines.append(
                f'{chr(CIRCLED_ONE + i)} {prefix}"{reminder.action}" '
                f"at {self.format_time(reminder.due_at)}"
            )

        return "Upcoming reminders:\n\n" + "\n".join(lines)

    async def handle_delete(self, conversation_id: str, arg: str) -> str:
        """Delete the Nth (1-indexed, as listed) reminder of a conversation."""
        match = re.match(r"\s*([+-]?\d+)", arg or "")
        number = int(match.group(1)) if match else 0
        if not number:
            return BAD_INDEX

        try:
            reminder = self.store.remove_nth(conversation_id, number - 1)
        except ReminderIndexError:
            return INDEX_NOT_FOUND

        await self.save_state()
        track(
            "reminder_deleted",
            "reminder",
            channel_id=_channel_id(conversation_id),
            properties={"position": number},
        )
        return f'Okay. I deleted the reminder "{reminder.action}"'

    def handle_help(self) -> str:
        zone = datetime.now(self.tz).strftime("%Z")
        return (
            "Use `/remind` to set a reminder for this channel. When the time arrives, "
            "I will post a message here to make sure you don't forget. "
            "Here are a few examples:\n\n"
            "• /remind me to water the plants in 30 minutes\n"
            "• /remind tomorrow to send the weekly report\n"
            "• /remind me to join the standup at 9:30am\n\n"
            f"Absolute times (e.g. 3:00pm) are in {self.config.timezone} ({zone}), "
            "but you can name a timezone too:\n"
            "• /remind me the laundry is done at 2:40pm CDT\n\n"
            "Use `/reminders list` to see this channel's reminders and "
            "`/reminders delete <number>` to remove one."
        )

    # =========================================================================
    # Delivery
    # =========================================================================

    async def on_tick(self, now: Optional[datetime] = None) -> list[Reminder]:
        """
        Deliver every due reminder, then persist once.

        Reminders are consumed when extracted; a failed delivery is not retried.

        Returns:
            The reminders that were due
        """
        now = now or datetime.now(pytz.UTC)
        due = self.store.extract_due(now)

        if not due:
            if self._dirty:
                await self.save_state()
            return []

        logger.info(f"Sending {len(due)} reminder(s)")
        await self._deliver_all(due, now)

        logger.info(f"Sent {len(due)} reminder(s). Saving state.")
        await self.save_state()
        return due

    async def _deliver_all(self, reminders: list[Reminder], now: datetime) -> None:
        today = now.astimezone(self.tz).date()
        for reminder in reminders:
            delivery = Delivery(
                reminder=reminder, snoozes=tuple(snooze_options(reminder, today))
            )
            try:
                await asyncio.wait_for(
                    self.deliver(delivery),
                    timeout=self.config.delivery_timeout_seconds,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"Delivery of reminder {reminder.id} timed out after "
                    f"{self.config.delivery_timeout_seconds}s"
                )
                _track_delivery_error(reminder, "TimeoutError")
            except Exception as e:
                logger.error(f"Failed to deliver reminder {reminder.id}: {e}", exc_info=True)
                _track_delivery_error(reminder, type(e).__name__)

    def format_time(self, when: datetime) -> str:
        return when.astimezone(self.tz).strftime(DISPLAY_FORMAT)


def _channel_id(conversation_id: str) -> Optional[int]:
    return int(conversation_id) if conversation_id.isdigit() else None


def _track_delivery_error(reminder: Reminder, error_type: str) -> None:
    track(
        "reminder_delivery_error",
        "error",
        channel_id=_channel_id(reminder.conversation_id),
        properties={"reminder_id": reminder.id, "error_type": error_type},
    )
