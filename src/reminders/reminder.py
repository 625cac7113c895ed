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
Reminder Entity

The Reminder record and its all-or-nothing construction from a
natural-language request.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import pytz

from .action import ActionNotFound, extract_action
from .time_parser import DEFAULT_TIMEZONE, NoTimeExpressionFound, find_time_expression

logger = logging.getLogger("reminderbot.reminders.reminder")


class ReminderError(Enum):
    """Reasons a reminder request can't be scheduled. Values are user-facing."""

    NO_TIME_EXPRESSION = "Unable to parse date from reminder"
    PAST_SCHEDULE = "Scheduled time is in the past"
    ACTION_NOT_FOUND = "Unable to parse reminder"

    @property
    def message(self) -> str:
        return self.value


@dataclass(frozen=True)
class Reminder:
    """A scheduled reminder for one conversation."""

    conversation_id: str
    due_at: datetime  # timezone-aware
    due_time_text: str  # the substring that was read as the time
    action: str
    is_infinitive: bool
    id: Optional[str] = None

    @property
    def phrase(self) -> str:
        """The action as the user phrased it, e.g. 'to call mom'."""
        return f"to {self.action}" if self.is_infinitive else self.action

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "conversation_id": self.conversation_id,
            "due_at": self.due_at.isoformat(),
            "due_time_text": self.due_time_text,
            "action": self.action,
            "is_infinitive": self.is_infinitive,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reminder":
        """
        Rebuild a reminder from its serialized form.

        Raises:
            KeyError, ValueError: If the data is missing fields or has a bad timestamp
        """
        due_at = datetime.fromisoformat(data["due_at"])
        if due_at.tzinfo is None:
            due_at = pytz.UTC.localize(due_at)

        return cls(
            id=data.get("id"),
            conversation_id=str(data["conversation_id"]),
            due_at=due_at,
            due_time_text=data.get("due_time_text", ""),
            action=data["action"],
            is_infinitive=bool(data.get("is_infinitive", False)),
        )


@dataclass(frozen=True)
class ReminderResult:
    """Outcome of create_reminder: exactly one of reminder/error is set."""

    reminder: Optional[Reminder] = None
    error: Optional[ReminderError] = None

    @property
    def ok(self) -> bool:
        return self.reminder is not None


def create_reminder(
    conversation_id: str,
    text: str,
    now: Optional[datetime] = None,
    timezone: str = DEFAULT_TIMEZONE,
    reminder_id: Optional[str] = None,
) -> ReminderResult:
    """
    Build a reminder from a request like "me to call mom in 2 hours".

    Args:
        conversation_id: Conversation the reminder belongs to
        text: Request text (without the command word)
        now: Reference instant (defaults to the current UTC time)
        timezone: Default zone for clock times
        reminder_id: Explicit id, for reproducible tests; normally the store assigns one

    Returns:
        ReminderResult holding either the Reminder or the ReminderError
    """
    if now is None:
        now = datetime.now(pytz.UTC)
    elif now.tzinfo is None:
        now = pytz.UTC.localize(now)

    try:
        time_match = find_time_expression(text, now=now, timezone=timezone)
    except NoTimeExpressionFound:
        return ReminderResult(error=ReminderError.NO_TIME_EXPRESSION)

    if time_match.when <= now:
        logger.debug(f"Rejected past time '{time_match.text}' ({time_match.when})")
        return ReminderResult(error=ReminderError.PAST_SCHEDULE)

    try:
        action = extract_action(text, time_match.index, len(time_match.text))
    except ActionNotFound:
        return ReminderResult(error=ReminderError.ACTION_NOT_FOUND)

    return ReminderResult(
        reminder=Reminder(
            id=reminder_id,
            conversation_id=conversation_id,
            due_at=time_match.when,
            due_time_text=time_match.text,
            action=action.action,
            is_infinitive=action.is_infinitive,
        )
    )
