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
Reminders Package

Natural-language reminder parsing, an ordered reminder queue and its
delivery loop.
"""

from .time_parser import (
    TimeMatch,
    TimeParseError,
    NoTimeExpressionFound,
    find_time_expression,
    validate_timezone,
)
from .action import ActionMatch, ActionNotFound, extract_action
from .reminder import Reminder, ReminderError, ReminderResult, create_reminder
from .store import ReminderIndexError, ReminderStore
from .state import MemoryStateStore, PostgresStateStore, StateStore
from .config import ReminderConfig
from .engine import Delivery, ReminderEngine, SnoozeOption, snooze_options
from .scheduler import ReminderScheduler

__all__ = [
    "TimeMatch",
    "TimeParseError",
    "NoTimeExpressionFound",
    "find_time_expression",
    "validate_timezone",
    "ActionMatch",
    "ActionNotFound",
    "extract_action",
    "Reminder",
    "ReminderError",
    "ReminderResult",
    "create_reminder",
    "ReminderIndexError",
    "ReminderStore",
    "MemoryStateStore",
    "PostgresStateStore",
    "StateStore",
    "ReminderConfig",
    "Delivery",
    "ReminderEngine",
    "SnoozeOption",
    "snooze_options",
    "ReminderScheduler",
]
