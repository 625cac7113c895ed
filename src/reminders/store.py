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
Reminder Store

In-memory queue of pending reminders, always sorted by due time.
"""

import bisect
import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Iterator, Optional

from .reminder import Reminder

logger = logging.getLogger("reminderbot.reminders.store")


class ReminderIndexError(IndexError):
    """Raised when a positional delete doesn't address an existing reminder."""

    pass


class ReminderStore:
    """
    Ordered collection of reminders.

    Entries are kept ascending by due_at; reminders due at the same instant
    keep their insertion order. Every operation holds the store lock, so a
    scan never sees a half-applied mutation.
    """

    def __init__(self, reminders: Iterable[Reminder] = ()):
        self._reminders: list[Reminder] = []
        self._lock = threading.RLock()
        for reminder in reminders:
            self.insert(reminder)

    def __len__(self) -> int:
        with self._lock:
            return len(self._reminders)

    def __iter__(self) -> Iterator[Reminder]:
        with self._lock:
            return iter(list(self._reminders))

    def insert(self, reminder: Reminder) -> Reminder:
        """
        Add a reminder at its sorted position.

        Args:
            reminder: Reminder to add; an id is assigned if it has none

        Returns:
            The stored reminder (with its id)

        Raises:
            ValueError: If a reminder with the same id is already stored
        """
        if reminder.id is None:
            reminder = replace(reminder, id=uuid.uuid4().hex)

        with self._lock:
            if any(r.id == reminder.id for r in self._reminders):
                raise ValueError(f"Duplicate reminder id: {reminder.id}")

            # First entry due strictly later; ties land after existing entries
            index = bisect.bisect_right(
                self._reminders, reminder.due_at, key=lambda r: r.due_at
            )
            self._reminders.insert(index, reminder)

        return reminder

    def extract_due(self, now: datetime) -> list[Reminder]:
        """Remove and return every reminder due at or before now, in order."""
        with self._lock:
            if not self._reminders:
                return []

            if self._reminders[-1].due_at <= now:
                # Everything is due
                index = len(self._reminders)
            else:
                index = bisect.bisect_right(
                    self._reminders, now, key=lambda r: r.due_at
                )

            due = self._reminders[:index]
            del self._reminders[:index]
            return due

    def list_for(self, conversation_id: str) -> list[Reminder]:
        """Reminders for one conversation, soonest first."""
        with self._lock:
            return [r for r in self._reminders if r.conversation_id == conversation_id]

    def remove_nth(self, conversation_id: str, index: int) -> Reminder:
        """
        Remove the nth (zero-indexed, by due time) reminder of a conversation.

        Raises:
            ReminderIndexError: If index is negative or past the conversation's last reminder
        """
        with self._lock:
            reminders = self.list_for(conversation_id)
            if index < 0 or index >= len(reminders):
                raise ReminderIndexError(
                    f"No reminder at position {index} for conversation {conversation_id}"
                )
            return self.remove_by_id(reminders[index].id)

    def remove_by_id(self, reminder_id: str) -> Optional[Reminder]:
        """Remove a reminder by id. Returns None if it isn't stored."""
        with self._lock:
            for i, reminder in enumerate(self._reminders):
                if reminder.id == reminder_id:
                    logger.info(f"Removing reminder {reminder_id}")
                    return self._reminders.pop(i)
        return None

    def snapshot(self) -> dict[str, Any]:
        """Serializable copy of the whole store."""
        with self._lock:
            return {"reminders": [r.to_dict() for r in self._reminders]}

    def restore(self, data: dict[str, Any]) -> None:
        """
        Replace the store contents with a snapshot.

        Raises:
            KeyError, ValueError, TypeError: If the snapshot is malformed
        """
        restored = ReminderStore(
            Reminder.from_dict(item) for item in data.get("reminders") or []
        )
        with self._lock:
            self._reminders = restored._reminders
