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
Timezone Resolution Module

Picks the timezone a reminder request is interpreted in:
1. Explicitly specified in the command.
2. The user's saved preference.
3. The default zone (Europe/Warsaw unless configured otherwise).
"""

import logging
from typing import TYPE_CHECKING, Optional

import pytz

if TYPE_CHECKING:
    from .manager import ReminderManager

logger = logging.getLogger("remindbot.reminders.timezones")

DEFAULT_TIMEZONE = "Europe/Warsaw"


class TimezoneResolutionError(Exception):
    """Raised when a timezone identifier cannot be resolved."""

    def __init__(self, zone: str):
        super().__init__(f"Unknown timezone: '{zone}'")
        self.zone = zone


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


def load_timezone(tz_name: str) -> pytz.BaseTzInfo:
    """Load an IANA zone, raising TimezoneResolutionError if it is unknown."""
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError as e:
        raise TimezoneResolutionError(tz_name) from e


class TimezoneResolver:
    """Resolves the effective timezone for a user's request."""

    def __init__(self, manager: "ReminderManager", default_timezone: str = DEFAULT_TIMEZONE):
        self.manager = manager
        self.default_timezone = default_timezone

    async def resolve(self, user_id: str, explicit_zone: Optional[str] = None) -> pytz.BaseTzInfo:
        """
        Resolve the timezone for a request.

        Args:
            user_id: Discord user ID of the requester
            explicit_zone: Zone given in the command, if any

        Returns:
            The pytz timezone to interpret the request in

        Raises:
            TimezoneResolutionError: If the chosen identifier is unknown
        """
        if explicit_zone:
            return load_timezone(explicit_zone)

        preference = await self.manager.get_timezone_preference(user_id)
        if preference is None:
            return load_timezone(self.default_timezone)

        logger.debug(f"Using saved timezone {preference} for user {user_id}")
        return load_timezone(preference)
