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
Calendar Validation Module

Checks day/month/year/hour/minute combinations against the real calendar
and the 12-hour clock before a reminder time is built from them.
"""

TWELVE_HOUR_CLOCK_URL = "https://en.wikipedia.org/wiki/12-hour_clock"


def is_leap_year(year: int) -> bool:
    """Gregorian leap year rule."""
    if year % 400 == 0:
        return True

    return year % 4 == 0 and year % 100 != 0


def days_in_month(month: int, year: int) -> int:
    """
    Number of days in a month.

    Args:
        month: Month number (1-12)
        year: Year, used for February

    Returns:
        Day count of the month
    """
    # Rebuilt per call, never shared
    days = [31, 0, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
    days[1] = 29 if is_leap_year(year) else 28
    return days[month - 1]


def validate_date(
    day: int,
    month: int,
    year: int,
    hour: int,
    minute: int,
    current_year: int,
) -> tuple[str, bool]:
    """
    Validate an absolute date and a 12-hour clock time.

    Rules are checked in order and the first violation wins.

    Args:
        day: Day of month
        month: Month number
        year: Full year
        hour: Hour on the 12-hour clock (1-12)
        minute: Minute (0-59)
        current_year: Year "now" in the resolved timezone

    Returns:
        Tuple of (error message, ok). The message is empty when ok is True.
    """
    if day == 0 or day > 31:
        return f"No month has {day} days you silly goose.", False
    if month == 0:
        return "There is no 0th month my dear pumpkin.", False
    if month > 12:
        return "There aren't that many months!", False
    if day > days_in_month(month, year):
        return f"There aren't {day} days in this month.", False

    difference = year - current_year
    if difference < 0 or difference > 1:
        return f"The year has to be either {current_year} or {current_year + 1}.", False

    if hour == 0 or hour > 12:
        return (
            f"The time has to follow the [12-hour clock]({TWELVE_HOUR_CLOCK_URL}).",
            False,
        )

    if minute > 59:
        return "Are you sure you understand the clock?", False

    return "", True


def to_24_hour(hour: int, period: str) -> int:
    """
    Convert a 12-hour clock hour to the 24-hour clock.

    Args:
        hour: Hour (1-12)
        period: "AM" or "PM"

    Returns:
        Hour in 0-23
    """
    period = period.upper()
    if period == "AM" and hour == 12:
        return 0
    if period == "PM" and hour < 12:
        return hour + 12
    return hour
