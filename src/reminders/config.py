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
Reminder Configuration

Configurable parameters for parsing, scheduling and persistence.
Values can be overridden via environment variables.
"""

import logging
import os
from dataclasses import dataclass

from .time_parser import DEFAULT_TIMEZONE, validate_timezone

logger = logging.getLogger("reminderbot.reminders.config")

DEFAULT_STATE_KEY = "reminderbot/state"


@dataclass
class ReminderConfig:
    """Configuration for the reminder engine."""

    # Zone used for clock times that don't name one ("at 3pm")
    timezone: str = DEFAULT_TIMEZONE

    # Scheduler settings
    poll_interval_seconds: float = 30.0
    delivery_timeout_seconds: float = 10.0

    # Deliver reminders that fell due while the bot was offline
    deliver_missed: bool = False

    # Key of the persisted state blob
    state_key: str = DEFAULT_STATE_KEY

    @classmethod
    def from_env(cls) -> "ReminderConfig":
        """Create config from environment variables with defaults."""
        timezone = os.getenv("REMINDER_TIMEZONE", DEFAULT_TIMEZONE)
        if not validate_timezone(timezone):
            logger.warning(f"Invalid REMINDER_TIMEZONE '{timezone}', falling back to UTC")
            timezone = "UTC"

        return cls(
            timezone=timezone,
            poll_interval_seconds=float(os.getenv("REMINDER_POLL_INTERVAL", "30")),
            delivery_timeout_seconds=float(
                os.getenv("REMINDER_DELIVERY_TIMEOUT", "10")
            ),
            deliver_missed=os.getenv("REMINDER_DELIVER_MISSED", "false").lower()
            == "true",
            state_key=os.getenv("REMINDER_STATE_KEY", DEFAULT_STATE_KEY),
        )
