# remindbot - Discord Reminder Bot
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

Turns `!remindme` arguments into concrete UTC delivery instants.
Three syntaxes are supported, each handled by its own strategy:

- Absolute: "on 23.12 at 12 PM America/New_York that Christmas is tomorrow"
- Relative: "in 2 days to buy a gift"
- Recurring: "every day at 8:30 AM to take my pills"
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

import pytz
from dateutil.relativedelta import relativedelta

from .validation import to_24_hour, validate_date

logger = logging.getLogger("remindbot.reminders.time_parser")

# Longest reminder text accepted
MAX_CONTENT_LENGTH = 1500

_ZONE = r"[a-zA-Z]+/[a-zA-Z_]+(?:/[a-zA-Z_]+)?"

ABSOLUTE_PATTERN = (
    r"on (?P<day>\d{1,2})\.(?P<month>\d{1,2})(?:\.(?P<year>\d{4}))? "
    r"at (?P<hour>\d{1,2})(?::(?P<minute>\d{1,2}))? (?P<period>AM|PM) ?"
    rf"(?P<zone>{_ZONE})? (?P<content>.+)"
)
RELATIVE_PATTERN = (
    r"in (?P<quantity>\d{1,2}|an?) "
    r"(?P<unit>minutes?|hours?|days?|weeks?|months?) (?P<content>.+)"
)
RECURRING_PATTERN = (
    r"every day at (?P<hour>\d{1,2})(?::(?P<minute>\d{1,2}))? (?P<period>AM|PM) ?"
    rf"(?P<zone>{_ZONE})? (?P<content>.+)"
)

_ABSOLUTE_RE = re.compile(ABSOLUTE_PATTERN, re.DOTALL)
_RELATIVE_RE = re.compile(RELATIVE_PATTERN, re.DOTALL)
_RECURRING_RE = re.compile(RECURRING_PATTERN, re.DOTALL)


class RemindmeKind(Enum):
    """Which `!remindme` syntax a command matched."""

    ABSOLUTE = "absolute"
    RELATIVE = "relative"
    RECURRING = "recurring"


@dataclass
class RemindmeArgs:
    """Structured fields captured from a `!remindme` command."""

    kind: RemindmeKind
    content: str
    # Absolute and recurring
    hour: Optional[int] = None
    minute: int = 0
    period: Optional[str] = None
    zone: Optional[str] = None
    # Absolute only
    day: Optional[int] = None
    month: Optional[int] = None
    year: Optional[int] = None
    # Relative only
    quantity: Optional[int] = None
    unit: Optional[str] = None


@dataclass
class ParsedTime:
    """Result of resolving a reminder request."""

    next_execution: datetime  # UTC timestamp
    is_recurring: bool
    content: str  # rewritten to second person
    timezone: Optional[str] = None  # None for relative reminders
    local_time: Optional[datetime] = None  # wall-clock time in `timezone`


class TimeParseError(Exception):
    """Raised when a reminder request is invalid. The message is user-facing."""

    pass


def _utcnow() -> datetime:
    return datetime.now(pytz.UTC)


def _optional_int(value: Optional[str], default: Optional[int] = None) -> Optional[int]:
    return int(value) if value else default


def parse_remindme_command(text: str) -> Optional[RemindmeArgs]:
    """
    Match `!remindme` arguments against the three supported syntaxes.

    Args:
        text: Everything after "!remindme "

    Returns:
        RemindmeArgs, or None if no syntax matched
    """
    text = text.strip()

    match = _ABSOLUTE_RE.match(text)
    if match:
        return RemindmeArgs(
            kind=RemindmeKind.ABSOLUTE,
            content=match.group("content"),
            day=int(match.group("day")),
            month=int(match.group("month")),
            year=_optional_int(match.group("year")),
            hour=int(match.group("hour")),
            minute=_optional_int(match.group("minute"), 0),
            period=match.group("period"),
            zone=match.group("zone"),
        )

    match = _RELATIVE_RE.match(text)
    if match:
        quantity = match.group("quantity")
        return RemindmeArgs(
            kind=RemindmeKind.RELATIVE,
            content=match.group("content"),
            quantity=1 if quantity in ("a", "an") else int(quantity),
            unit=match.group("unit"),
        )

    match = _RECURRING_RE.match(text)
    if match:
        return RemindmeArgs(
            kind=RemindmeKind.RECURRING,
            content=match.group("content"),
            hour=int(match.group("hour")),
            minute=_optional_int(match.group("minute"), 0),
            period=match.group("period"),
            zone=match.group("zone"),
        )

    return None


def rewrite_to_second_person(text: str) -> str:
    """Rewrite first-person references so the reminder addresses its owner."""
    return text.replace(" my ", " your ")


def check_content_length(content: str) -> None:
    """Raise TimeParseError if the reminder text is too long."""
    if len(content) > MAX_CONTENT_LENGTH:
        raise TimeParseError(
            f"The maximum reminder length is {MAX_CONTENT_LENGTH} characters, you naughty person."
        )


def _localize(tz: pytz.BaseTzInfo, year: int, month: int, day: int, hour: int, minute: int) -> datetime:
    return tz.localize(datetime(year, month, day, hour, minute, 0))


def parse_absolute(
    args: RemindmeArgs,
    tz: pytz.BaseTzInfo,
    now: Optional[datetime] = None,
) -> ParsedTime:
    """
    Resolve an absolute reminder ("on D.M[.YYYY] at H[:MM] AM|PM").

    Args:
        args: Captured command fields
        tz: Resolved timezone
        now: Current instant (defaults to the real clock)

    Returns:
        ParsedTime for a one-shot reminder

    Raises:
        TimeParseError: Invalid calendar fields or a date in the past
    """
    now = now or _utcnow()
    current_time = now.astimezone(tz)
    year = args.year if args.year is not None else current_time.year

    error, ok = validate_date(args.day, args.month, year, args.hour, args.minute, current_time.year)
    if not ok:
        raise TimeParseError(error)

    hour = to_24_hour(args.hour, args.period)
    local_time = _localize(tz, year, args.month, args.day, hour, args.minute)
    target = local_time.astimezone(pytz.UTC)

    logger.debug(f"Absolute reminder {local_time} in {tz.zone} resolved to {target}")
    if target < now.astimezone(pytz.UTC):
        raise TimeParseError("The date cannot be in the past, who would've guessed?")

    return ParsedTime(
        next_execution=target,
        is_recurring=False,
        content=rewrite_to_second_person(args.content),
        timezone=tz.zone,
        local_time=local_time,
    )


def add_relative(now: datetime, quantity: int, unit: str) -> datetime:
    """
    Add a quantity of minutes, hours, days, weeks or months to an instant.

    Minutes and hours are fixed durations; days, weeks and months use
    calendar arithmetic. A day-of-month past the end of the target month rolls
    over into the following month (31 Jan + 1 month = 2 Mar in a leap year).
    """
    unit = unit.rstrip("s")
    if unit == "minute":
        return now + timedelta(minutes=quantity)
    if unit == "hour":
        return now + timedelta(hours=quantity)
    if unit == "day":
        return now + relativedelta(days=quantity)
    if unit == "week":
        return now + relativedelta(days=7 * quantity)
    if unit == "month":
        target = now + relativedelta(months=quantity)
        # relativedelta clamps to the month end; carry the overflow forward
        return target + relativedelta(days=now.day - target.day)
    raise TimeParseError(f"Unknown time unit: '{unit}'")


def parse_relative(args: RemindmeArgs, now: Optional[datetime] = None) -> ParsedTime:
    """
    Resolve a relative reminder ("in N unit").

    Args:
        args: Captured command fields
        now: Current instant (defaults to the real clock)

    Returns:
        ParsedTime for a one-shot reminder
    """
    now = (now or _utcnow()).astimezone(pytz.UTC)
    return ParsedTime(
        next_execution=add_relative(now, args.quantity, args.unit),
        is_recurring=False,
        content=rewrite_to_second_person(args.content),
    )


def parse_recurring(
    args: RemindmeArgs,
    tz: pytz.BaseTzInfo,
    now: Optional[datetime] = None,
) -> ParsedTime:
    """
    Resolve a daily reminder ("every day at H[:MM] AM|PM").

    The first occurrence is today if that time is still ahead, otherwise
    tomorrow.

    Args:
        args: Captured command fields
        tz: Resolved timezone
        now: Current instant (defaults to the real clock)

    Returns:
        ParsedTime for a recurring reminder

    Raises:
        TimeParseError: Invalid time of day
    """
    now = now or _utcnow()
    current_time = now.astimezone(tz)

    error, ok = validate_date(
        current_time.day,
        current_time.month,
        current_time.year,
        args.hour,
        args.minute,
        current_time.year,
    )
    if not ok:
        raise TimeParseError(error)

    hour = to_24_hour(args.hour, args.period)
    local_time = _localize(
        tz, current_time.year, current_time.month, current_time.day, hour, args.minute
    )
    target = local_time.astimezone(pytz.UTC)

    if target < now.astimezone(pytz.UTC):
        logger.debug(f"{local_time} already passed in {tz.zone}, starting tomorrow")
        target = target + relativedelta(days=1)
        local_time = target.astimezone(tz)

    return ParsedTime(
        next_execution=target,
        is_recurring=True,
        content=rewrite_to_second_person(args.content),
        timezone=tz.zone,
        local_time=local_time,
    )
