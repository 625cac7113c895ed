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
Time Parser Module

Finds the time expression inside a free-text reminder request and resolves
it to an absolute, timezone-aware instant.

Supports relative offsets ("in 30 minutes", "five minutes ago"), day anchors
("tomorrow", "on Friday"), calendar dates ("March 5th") and clock times
("at 3:00pm", "2:40pm CDT", "at noon"), including a clock combined with a day
("tomorrow at 7am", "at 9am on Monday").
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

import dateparser
import pytz

logger = logging.getLogger("reminderbot.reminders.time_parser")

DEFAULT_TIMEZONE = "America/New_York"

# Hour used for calendar dates that don't carry a clock time
DEFAULT_DATE_HOUR = 12

# Hour used for "tonight" without a clock time
TONIGHT_HOUR = 22

NAMED_TIMES = {
    "noon": "12:00",
    "midnight": "00:00",
}

NUMBER_WORDS = {
    "a": 1,
    "an": 1,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "fifteen": 15,
    "twenty": 20,
    "thirty": 30,
    "forty": 40,
    "forty-five": 45,
    "fifty": 50,
    "sixty": 60,
    "ninety": 90,
}

TIMEZONE_ABBREVIATIONS = (
    "utc", "gmt",
    "est", "edt", "cst", "cdt", "mst", "mdt", "pst", "pdt",
    "akst", "akdt", "hst",
    "bst", "cet", "cest",
)

WEEKDAYS = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

# Longest words first so "an" wins over "a" and "forty-five" over "forty"
_NUMBER = r"(?:\d+|" + "|".join(
    re.escape(word) for word in sorted(NUMBER_WORDS, key=len, reverse=True)
) + r")"
_UNIT = r"(?:sec(?:ond)?s?|min(?:ute)?s?|h(?:ou)?rs?|days?|weeks?|months?|years?|yrs?)"
_MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
_TZ = "|".join(TIMEZONE_ABBREVIATIONS)

_RELATIVE_RE = re.compile(
    rf"\bin\s+(?P<amount>{_NUMBER})\s+(?P<unit>{_UNIT})\b", re.IGNORECASE
)
_AGO_RE = re.compile(
    rf"\b(?P<amount>{_NUMBER})\s+(?P<unit>{_UNIT})\s+ago\b", re.IGNORECASE
)
_CLOCK_RE = re.compile(
    r"\b(?:at\s+)?"
    r"(?P<clock>(?:\d{1,2}:\d{2}(?:\s*[ap]\.?m\.?)?|\d{1,2}\s*[ap]\.?m\.?)(?![a-z0-9])"
    r"|noon\b|midnight\b)"
    rf"(?:\s+(?P<tz>{_TZ})\b)?",
    re.IGNORECASE,
)
_BARE_HOUR_RE = re.compile(r"\bat\s+(?P<hour>\d{1,2})(?![\w:])", re.IGNORECASE)
_DAY_RE = re.compile(
    rf"\b(?:(?P<prefix>on|this|next)\s+)?(?P<weekday>{'|'.join(WEEKDAYS)})\b"
    r"|\b(?P<relative_day>today|tonight|tomorrow)\b",
    re.IGNORECASE,
)
_DATE_RE = re.compile(
    r"\b(?:on\s+)?(?P<date>"
    rf"{_MONTH}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?(?:,?\s+\d{{4}})?"
    rf"|\d{{1,2}}(?:st|nd|rd|th)?\s+(?:of\s+)?{_MONTH}(?:,?\s+\d{{4}})?"
    r"|\d{4}-\d{2}-\d{2})\b",
    re.IGNORECASE,
)

_TOKEN_PATTERNS = (
    ("relative", _RELATIVE_RE),
    ("ago", _AGO_RE),
    ("clock", _CLOCK_RE),
    ("hour", _BARE_HOUR_RE),
    ("day", _DAY_RE),
    ("date", _DATE_RE),
)

_CLOCK_KINDS = ("clock", "hour")
_ANCHOR_KINDS = ("day", "date")


@dataclass
class TimeMatch:
    """A time expression found in a piece of text."""

    when: datetime  # timezone-aware
    index: int  # start of the matched substring
    text: str  # matched substring, verbatim

    @property
    def end(self) -> int:
        return self.index + len(self.text)


@dataclass
class _Token:
    kind: str
    match: re.Match

    @property
    def start(self) -> int:
        return self.match.start()

    @property
    def end(self) -> int:
        return self.match.end()


class TimeParseError(Exception):
    """Raised when a time expression cannot be parsed."""

    pass


class NoTimeExpressionFound(TimeParseError):
    """Raised when a text holds no recognizable time expression."""

    pass


def validate_timezone(tz_name: str) -> bool:
    """
    Validate that a timezone name is valid.

    Args:
        tz_name: IANA timezone name (e.g., "America/Los_Angeles")

    Returns:
        True if valid, False otherwise
    """
    try:
        pytz.timezone(tz_name)
        return True
    except pytz.UnknownTimeZoneError:
        return False


def _to_number(amount: str) -> int:
    amount = amount.lower()
    if amount.isdigit():
        return int(amount)
    return NUMBER_WORDS[amount]


def _unit_name(unit: str) -> str:
    """Map a unit spelling ("hrs", "min", "weeks") to its timedelta name."""
    unit = unit.lower()
    if unit.startswith("s"):
        return "seconds"
    if unit.startswith("mi"):
        return "minutes"
    if unit.startswith("h"):
        return "hours"
    if unit.startswith("d"):
        return "days"
    if unit.startswith("w"):
        return "weeks"
    if unit.startswith("mo"):
        return "months"
    return "years"


def _tokenize(text: str) -> list[_Token]:
    """Find every time-related token, dropping ones that overlap an earlier, longer one."""
    found = [
        _Token(kind, match)
        for kind, pattern in _TOKEN_PATTERNS
        for match in pattern.finditer(text)
    ]
    found.sort(key=lambda t: (t.start, -(t.end - t.start)))

    tokens: list[_Token] = []
    for token in found:
        if tokens and token.start < tokens[-1].end:
            continue
        tokens.append(token)
    return tokens


def _group_tokens(text: str, tokens: list[_Token]) -> list[list[_Token]]:
    """
    Merge a clock with an adjacent day or date into one expression.

    "tomorrow at 7am" and "at 9am on Monday" each become a single group;
    relative offsets always stand alone.
    """
    groups: list[list[_Token]] = []
    for token in tokens:
        if groups:
            group = groups[-1]
            previous = group[-1]
            adjacent = text[previous.end:token.start].strip() == ""
            pairs = (
                (token.kind in _CLOCK_KINDS and previous.kind in _ANCHOR_KINDS)
                or (token.kind in _ANCHOR_KINDS and previous.kind in _CLOCK_KINDS)
            )
            if adjacent and pairs and len(group) == 1:
                group.append(token)
                continue
        groups.append([token])
    return groups


def _dateparse(
    phrase: str,
    base: datetime,
    tz_name: str,
    prefer_future: bool = False,
) -> Optional[datetime]:
    """Resolve a phrase with dateparser relative to a naive local base time."""
    settings = {
        "TIMEZONE": tz_name,
        "RETURN_AS_TIMEZONE_AWARE": True,
        "RELATIVE_BASE": base,
    }
    if prefer_future:
        settings["PREFER_DATES_FROM"] = "future"

    parsed = dateparser.parse(phrase, languages=["en"], settings=settings)
    if parsed is None:
        logger.debug(f"dateparser could not resolve '{phrase}'")
        return None
    if parsed.tzinfo is None:
        parsed = pytz.timezone(tz_name).localize(parsed)
    return parsed


def _resolve_offset(
    token: _Token, now: datetime, tz: pytz.BaseTzInfo
) -> Optional[datetime]:
    amount = _to_number(token.match.group("amount"))
    unit = _unit_name(token.match.group("unit"))
    sign = -1 if token.kind == "ago" else 1

    if unit in ("months", "years"):
        # Calendar-length units; let dateparser handle month arithmetic
        phrase = f"{amount} {unit} ago" if sign < 0 else f"in {amount} {unit}"
        base = now.astimezone(tz).replace(tzinfo=None)
        parsed = _dateparse(phrase, base, tz.zone)
        if parsed is None:
            return None
        # Keep the wall-clock time; the offset may differ across a DST change
        return tz.localize(parsed.replace(tzinfo=None))

    if unit in ("days", "weeks"):
        # Whole days move the local date, not a fixed number of hours
        local = now.astimezone(tz).replace(tzinfo=None)
        return tz.localize(local + sign * timedelta(**{unit: amount}))

    return now + sign * timedelta(**{unit: amount})


def _anchor_day(token: _Token, today: date, prefer_future: bool) -> date:
    relative_day = token.match.group("relative_day")
    if relative_day:
        if relative_day.lower() == "tomorrow":
            return today + timedelta(days=1)
        return today

    weekday = WEEKDAYS.index(token.match.group("weekday").lower())
    prefix = (token.match.group("prefix") or "").lower()
    days_ahead = (weekday - today.weekday()) % 7
    if days_ahead == 0 and prefer_future and prefix != "this":
        days_ahead = 7
    return today + timedelta(days=days_ahead)


def _resolve_clock(
    token: _Token, day: date, tz: pytz.BaseTzInfo, evening: bool
) -> Optional[datetime]:
    if token.kind == "hour":
        hour = int(token.match.group("hour"))
        if hour > 23:
            return None
        if evening and hour < 12:
            hour += 12
        phrase = f"{hour}:00"
    else:
        phrase = token.match.group("clock").replace(".", "")
        named = NAMED_TIMES.get(phrase.lower())
        if named:
            phrase = named
        elif evening and not re.search(r"[ap]m", phrase, re.IGNORECASE):
            phrase += " pm"
        tz_abbreviation = token.match.group("tz")
        if tz_abbreviation:
            # An explicit zone fixes the offset
            phrase = f"{phrase} {tz_abbreviation.upper()}"
            return _dateparse(phrase, datetime.combine(day, time()), tz.zone)

    parsed = _dateparse(phrase, datetime.combine(day, time()), tz.zone)
    if parsed is None:
        return None
    return tz.localize(parsed.replace(tzinfo=None))


def _resolve_group(
    group: list[_Token],
    now: datetime,
    tz: pytz.BaseTzInfo,
    prefer_future: bool,
) -> Optional[datetime]:
    if group[0].kind in ("relative", "ago"):
        return _resolve_offset(group[0], now, tz)

    now_local = now.astimezone(tz)
    anchor = next((t for t in group if t.kind in _ANCHOR_KINDS), None)
    clock = next((t for t in group if t.kind in _CLOCK_KINDS), None)
    evening = (
        anchor is not None
        and anchor.kind == "day"
        and (anchor.match.group("relative_day") or "").lower() == "tonight"
    )

    if anchor is None:
        day = now_local.date()
    elif anchor.kind == "date":
        parsed = _dateparse(
            anchor.match.group("date"),
            now_local.replace(tzinfo=None),
            tz.zone,
            prefer_future=prefer_future,
        )
        if parsed is None:
            return None
        day = parsed.date()
    else:
        day = _anchor_day(anchor, now_local.date(), prefer_future)

    if clock is None:
        if anchor.kind == "date":
            at = time(DEFAULT_DATE_HOUR)
        elif evening:
            at = time(TONIGHT_HOUR)
        else:
            at = now_local.time()
        return tz.localize(datetime.combine(day, at))

    when = _resolve_clock(clock, day, tz, evening)
    if when is None:
        return None

    # A bare clock time means its next occurrence
    if anchor is None and prefer_future and when <= now:
        when = _resolve_clock(clock, day + timedelta(days=1), tz, evening)
    return when


def find_time_expression(
    text: str,
    now: Optional[datetime] = None,
    timezone: str = DEFAULT_TIMEZONE,
    prefer_future: bool = True,
) -> TimeMatch:
    """
    Find and resolve the time expression in a reminder request.

    Args:
        text: Free text, e.g. "me to go for a walk in an hour"
        now: Reference instant (defaults to the current UTC time)
        timezone: IANA zone for clock times that don't name one
        prefer_future: Resolve bare clock times and weekdays to their next occurrence

    Returns:
        TimeMatch with the resolved instant and the matched substring

    Raises:
        NoTimeExpressionFound: If nothing in the text resolves to a time
    """
    if not validate_timezone(timezone):
        logger.warning(f"Invalid timezone '{timezone}', falling back to UTC")
        timezone = "UTC"
    tz = pytz.timezone(timezone)

    if now is None:
        now = datetime.now(pytz.UTC)
    elif now.tzinfo is None:
        now = pytz.UTC.localize(now)

    tokens = _tokenize(text)
    for group in _group_tokens(text, tokens):
        when = _resolve_group(group, now, tz, prefer_future)
        if when is None:
            continue

        start, end = group[0].start, group[-1].end
        return TimeMatch(when=when, index=start, text=text[start:end])

    raise NoTimeExpressionFound("Unable to parse date from reminder")
