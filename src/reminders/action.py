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
Action Extraction

Isolates the "what" of a reminder once the "when" has been found,
e.g. "me to go for a walk in an hour" -> "go for a walk" (infinitive).
"""

import re
from dataclasses import dataclass

# "me" and "to" are stripped from the start, "in" from the end.
# The first pattern needs the trailing "in"; the greedy (.*) would
# otherwise swallow it, so fall back to the second when it's absent.
_WITH_TRAILING_IN = re.compile(r"(?:me\s+)?(to\s+)?(.*?)\s+in$", re.IGNORECASE | re.DOTALL)
_PLAIN = re.compile(r"(?:me\s+)?(to\s+)?(.*)", re.IGNORECASE | re.DOTALL)


@dataclass
class ActionMatch:
    """The action phrase of a reminder and its grammatical form."""

    action: str
    is_infinitive: bool


class ActionNotFound(Exception):
    """Raised when no action phrase remains once the time expression is removed."""

    pass


def extract_action(text: str, index: int, length: int) -> ActionMatch:
    """
    Find the action phrase around a matched time expression.

    The action is taken from whichever side of the match holds more text;
    when both sides are the same length the text after the match wins.

    Args:
        text: Full reminder text
        index: Start of the time expression within text
        length: Length of the time expression

    Returns:
        ActionMatch with the action and whether it was phrased "to <verb>"

    Raises:
        ActionNotFound: If the chosen side is empty after stripping
    """
    end = index + length
    if index > len(text) - end:
        action_text = text[:index].strip()
    else:
        action_text = text[end:].strip()

    match = _WITH_TRAILING_IN.match(action_text) or _PLAIN.match(action_text)
    action = match.group(2).strip() if match else ""
    if not action:
        raise ActionNotFound("Unable to parse reminder")

    return ActionMatch(action=action, is_infinitive=match.group(1) is not None)
