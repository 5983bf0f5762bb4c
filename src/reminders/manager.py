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
Reminder Manager Module

Handles database operations for reminders and timezone preferences.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

import asyncpg

from .time_parser import ParsedTime

logger = logging.getLogger("remindbot.reminders.manager")


@dataclass
class Reminder:
    """A pending reminder row."""

    id: int
    who: str
    time: datetime  # UTC
    to_remind: str
    recurring: bool

    @classmethod
    def from_record(cls, row: asyncpg.Record) -> "Reminder":
        return cls(
            id=row["id"],
            who=row["who"],
            time=row["time"],
            to_remind=row["to_remind"],
            recurring=row["recurring"],
        )


class RemovalResult(Enum):
    """Outcome of a reminder removal request."""

    REMOVED = "removed"
    NOT_FOUND = "not_found"
    NOT_OWNER = "not_owner"


class ReminderManager:
    """
    Manages database operations for reminders.

    Provides methods to create, list and remove reminders, manage user
    timezone preferences, and the batch operations the scheduler needs.
    """

    def __init__(self, db_pool: asyncpg.Pool):
        """
        Initialize the reminder manager.

        Args:
            db_pool: asyncpg connection pool
        """
        self.db = db_pool

    async def create_reminder(self, user_id: str, parsed_time: ParsedTime) -> int:
        """
        Create a new reminder.

        Args:
            user_id: Discord user ID
            parsed_time: Resolved reminder request

        Returns:
            The ID of the created reminder
        """
        reminder_id = await self.db.fetchval(
            """
            INSERT INTO reminders (who, time, to_remind, recurring)
            VALUES ($1, $2, $3, $4)
            RETURNING id
            """,
            user_id,
            parsed_time.next_execution,
            parsed_time.content,
            parsed_time.is_recurring,
        )

        logger.info(
            f"Created reminder {reminder_id} for user {user_id}: "
            f"next={parsed_time.next_execution}, recurring={parsed_time.is_recurring}"
        )
        return reminder_id

    async def list_reminders(self, user_id: str) -> list[Reminder]:
        """
        List a user's pending reminders, soonest first.

        Args:
            user_id: Discord user ID

        Returns:
            List of reminders
        """
        rows = await self.db.fetch(
            """
            SELECT id, who, time, to_remind, recurring
            FROM reminders
            WHERE who = $1
            ORDER BY time ASC
            """,
            user_id,
        )
        return [Reminder.from_record(row) for row in rows]

    async def remove_reminder(self, reminder_id: int, user_id: str) -> RemovalResult:
        """
        Remove a reminder if the user owns it.

        Args:
            reminder_id: Reminder ID
            user_id: Discord user ID (for ownership check)

        Returns:
            REMOVED, NOT_FOUND if there is no such reminder, or NOT_OWNER
            if it belongs to someone else
        """
        owner = await self.db.fetchval(
            "SELECT who FROM reminders WHERE id = $1",
            reminder_id,
        )

        if owner is None:
            return RemovalResult.NOT_FOUND
        if owner != user_id:
            logger.info(f"User {user_id} tried to remove reminder {reminder_id} owned by {owner}")
            return RemovalResult.NOT_OWNER

        await self.db.execute(
            "DELETE FROM reminders WHERE id = $1 AND who = $2",
            reminder_id,
            user_id,
        )

        logger.info(f"Removed reminder {reminder_id} for user {user_id}")
        return RemovalResult.REMOVED

    async def get_timezone_preference(self, user_id: str) -> Optional[str]:
        """
        Get a user's timezone preference.

        Args:
            user_id: Discord user ID

        Returns:
            Timezone name, or None if the user has not set one
        """
        return await self.db.fetchval(
            """
            SELECT timezone_preference FROM timezone_preferences
            WHERE who = $1
            ORDER BY id ASC
            LIMIT 1
            """,
            user_id,
        )

    async def set_timezone_preference(self, user_id: str, timezone: str) -> None:
        """
        Set a user's timezone preference.

        Inserts a row on first use, then updates it, so repeated calls
        leave exactly one preference per user.

        Args:
            user_id: Discord user ID
            timezone: Canonical IANA timezone name
        """
        preference_id = await self.db.fetchval(
            "SELECT id FROM timezone_preferences WHERE who = $1 ORDER BY id ASC LIMIT 1",
            user_id,
        )

        if preference_id is None:
            preference_id = await self.db.fetchval(
                """
                INSERT INTO timezone_preferences (who, timezone_preference)
                VALUES ($1, $2)
                RETURNING id
                """,
                user_id,
                timezone,
            )

        await self.db.execute(
            "UPDATE timezone_preferences SET timezone_preference = $1 WHERE id = $2",
            timezone,
            preference_id,
        )

        logger.info(f"Set timezone for user {user_id}: {timezone}")

    # =========================================================================
    # Scheduler-facing methods
    # =========================================================================

    async def is_bootstrapped(self) -> bool:
        """Check whether the reminders table has been created yet."""
        return await self.db.fetchval("SELECT to_regclass('reminders') IS NOT NULL")

    async def get_all_reminders(self) -> list[Reminder]:
        """
        Get every pending reminder.

        Returns:
            List of reminders, soonest first
        """
        rows = await self.db.fetch(
            """
            SELECT id, who, time, to_remind, recurring
            FROM reminders
            ORDER BY time ASC
            """
        )
        return [Reminder.from_record(row) for row in rows]

    async def delete_reminders(self, reminder_ids: list[int]) -> None:
        """
        Delete fired one-shot reminders in a single statement.

        Args:
            reminder_ids: IDs to delete; an empty list is a no-op
        """
        if not reminder_ids:
            return

        await self.db.execute(
            "DELETE FROM reminders WHERE id = ANY($1::int[])",
            reminder_ids,
        )
        logger.info(f"Deleted {len(reminder_ids)} fired reminder(s)")

    async def reschedule_reminder(self, reminder_id: int, new_time: datetime) -> None:
        """
        Move a recurring reminder to its next occurrence.

        Args:
            reminder_id: Reminder ID
            new_time: Next delivery instant (UTC)
        """
        await self.db.execute(
            "UPDATE reminders SET time = $1 WHERE id = $2",
            new_time,
            reminder_id,
        )
        logger.info(f"Reminder {reminder_id} rescheduled to {new_time}")
