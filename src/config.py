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
Bot Configuration

Process configuration read from environment variables (a .env file is
loaded by the entry point). The token, reminders channel and database URL
are required; everything else has a default.
"""

import os
from dataclasses import dataclass

from reminders.scheduler import DEFAULT_SWEEP_SECONDS
from reminders.timezones import DEFAULT_TIMEZONE, validate_timezone


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _require(name: str, hint: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigError(f"{hint} not found. Make sure to set the {name} environment variable.")
    return value


@dataclass
class BotConfig:
    """Configuration for the reminder bot."""

    token: str
    reminders_channel_id: int
    database_url: str

    # Scheduler settings
    sweep_interval_seconds: float = DEFAULT_SWEEP_SECONDS
    default_timezone: str = DEFAULT_TIMEZONE

    @classmethod
    def from_env(cls) -> "BotConfig":
        """Create config from environment variables with defaults."""
        token = _require("DISCORD_BOT_TOKEN", "Bot token")
        channel = _require("REMINDERS_CHANNEL_ID", "Reminders channel ID")
        database_url = _require("DATABASE_URL", "Database URL")

        try:
            channel_id = int(channel)
        except ValueError:
            raise ConfigError(f"REMINDERS_CHANNEL_ID must be a channel ID, got '{channel}'")

        try:
            interval = float(os.getenv("REMINDER_SWEEP_SECONDS", str(DEFAULT_SWEEP_SECONDS)))
        except ValueError:
            raise ConfigError("REMINDER_SWEEP_SECONDS must be a number")
        if interval <= 0:
            raise ConfigError("REMINDER_SWEEP_SECONDS must be positive")

        default_timezone = os.getenv("REMINDER_DEFAULT_TIMEZONE", DEFAULT_TIMEZONE)
        if not validate_timezone(default_timezone):
            raise ConfigError(f"REMINDER_DEFAULT_TIMEZONE is not a valid timezone: '{default_timezone}'")

        return cls(
            token=token,
            reminders_channel_id=channel_id,
            database_url=database_url,
            sweep_interval_seconds=interval,
            default_timezone=default_timezone,
        )
