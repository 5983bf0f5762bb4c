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
Reminders Package

Time expression parsing, timezone resolution, the reminder store and the
background delivery scheduler.
"""

from .validation import is_leap_year, validate_date, to_24_hour
from .time_parser import (
    MAX_CONTENT_LENGTH,
    ParsedTime,
    RemindmeArgs,
    RemindmeKind,
    TimeParseError,
    check_content_length,
    parse_absolute,
    parse_recurring,
    parse_relative,
    parse_remindme_command,
    rewrite_to_second_person,
)
from .timezones import (
    DEFAULT_TIMEZONE,
    TimezoneResolutionError,
    TimezoneResolver,
    validate_timezone,
)
from .manager import Reminder, ReminderManager, RemovalResult
from .migrations import LATEST_VERSION, MigrationError, bootstrap_schema
from .scheduler import ReminderScheduler

__all__ = [
    "is_leap_year",
    "validate_date",
    "to_24_hour",
    "MAX_CONTENT_LENGTH",
    "ParsedTime",
    "RemindmeArgs",
    "RemindmeKind",
    "TimeParseError",
    "check_content_length",
    "parse_absolute",
    "parse_recurring",
    "parse_relative",
    "parse_remindme_command",
    "rewrite_to_second_person",
    "DEFAULT_TIMEZONE",
    "TimezoneResolutionError",
    "TimezoneResolver",
    "validate_timezone",
    "Reminder",
    "ReminderManager",
    "RemovalResult",
    "LATEST_VERSION",
    "MigrationError",
    "bootstrap_schema",
    "ReminderScheduler",
]
