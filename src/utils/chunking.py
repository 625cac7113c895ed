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
Message Chunking

Splits long replies so each piece fits Discord's message limit.
"""

# Discord message length limit
DISCORD_MAX_LENGTH = 2000


def chunk_message(content: str, limit: int = DISCORD_MAX_LENGTH) -> list[str]:
    """
    Split content into chunks of at most `limit` characters.

    Prefers paragraph breaks, then line breaks, then word breaks, and only
    cuts mid-word when a piece has no break in its second half.
    """
    if len(content) <= limit:
        return [content]

    chunks = []
    remaining = content

    while remaining:
        if len(remaining) <= limit:
            chunks.append(remaining)
            break

        break_at = limit
        for separator in ("\n\n", "\n", " "):
            idx = remaining.rfind(separator, 0, limit)
            if idx > limit // 2:
                break_at = idx + len(separator)
                break

        chunks.append(remaining[:break_at].rstrip())
        remaining = remaining[break_at:].lstrip()

    return chunks
