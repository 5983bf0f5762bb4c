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

"""Tests for the reminder store."""

import sys
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytz

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders.manager import Reminder, ReminderManager, RemovalResult
from reminders.time_parser import ParsedTime

WHEN = datetime(2024, 6, 20, 13, 0, tzinfo=pytz.UTC)


@pytest.fixture
def mock_pool():
    pool = MagicMock()
    pool.fetchval = AsyncMock(return_value=None)
    pool.fetch = AsyncMock(return_value=[])
    pool.execute = AsyncMock(return_value="OK")
    return pool


def _row(id, who="42", time=WHEN, to_remind="to stretch", recurring=False):
    return {"id": id, "who": who, "time": time, "to_remind": to_remind, "recurring": recurring}


class TestCreateAndList:
    @pytest.mark.asyncio
    async def test_create_reminder(self, mock_pool):
        mock_pool.fetchval.return_value = 7
        manager = ReminderManager(mock_pool)
        parsed = ParsedTime(next_execution=WHEN, is_recurring=True, content="to take your pills")

        reminder_id = await manager.create_reminder("42", parsed)

        assert reminder_id == 7
        args = mock_pool.fetchval.call_args.args
        assert "INSERT INTO reminders" in args[0]
        assert args[1:] == ("42", WHEN, "to take your pills", True)

    @pytest.mark.asyncio
    async def test_list_reminders(self, mock_pool):
        mock_pool.fetch.return_value = [_row(1), _row(2, recurring=True)]
        manager = ReminderManager(mock_pool)

        reminders = await manager.list_reminders("42")

        assert [r.id for r in reminders] == [1, 2]
        assert reminders[1].recurring is True
        assert mock_pool.fetch.call_args.args[1] == "42"


class TestRemoveReminder:
    """Only the owner may remove a reminder."""

    @pytest.mark.asyncio
    async def test_not_found(self, mock_pool):
        manager = ReminderManager(mock_pool)

        result = await manager.remove_reminder(99, "42")

        assert result is RemovalResult.NOT_FOUND
        mock_pool.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_not_owner(self, mock_pool):
        mock_pool.fetchval.return_value = "1337"
        manager = ReminderManager(mock_pool)

        result = await manager.remove_reminder(5, "42")

        assert result is RemovalResult.NOT_OWNER
        mock_pool.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_owner_removes(self, mock_pool):
        mock_pool.fetchval.return_value = "42"
        manager = ReminderManager(mock_pool)

        result = await manager.remove_reminder(5, "42")

        assert result is RemovalResult.REMOVED
        query, *params = mock_pool.execute.call_args.args
        assert query.startswith("DELETE FROM reminders")
        assert params == [5, "42"]


class TestTimezonePreference:
    @pytest.mark.asyncio
    async def test_get_missing(self, mock_pool):
        manager = ReminderManager(mock_pool)
        assert await manager.get_timezone_preference("42") is None

    @pytest.mark.asyncio
    async def test_first_set_inserts_then_updates(self, mock_pool):
        # No existing row, then the INSERT returns the new id
        mock_pool.fetchval.side_effect = [None, 3]
        manager = ReminderManager(mock_pool)

        await manager.set_timezone_preference("42", "Asia/Tokyo")

        insert = mock_pool.fetchval.call_args_list[1].args
        assert "INSERT INTO timezone_preferences" in insert[0]
        assert insert[1:] == ("42", "Asia/Tokyo")
        update = mock_pool.execute.call_args.args
        assert update[0].startswith("UPDATE timezone_preferences")
        assert update[1:] == ("Asia/Tokyo", 3)

    @pytest.mark.asyncio
    async def test_existing_preference_updated(self, mock_pool):
        mock_pool.fetchval.return_value = 3
        manager = ReminderManager(mock_pool)

        await manager.set_timezone_preference("42", "Europe/London")

        assert mock_pool.fetchval.await_count == 1
        assert mock_pool.execute.call_args.args[1:] == ("Europe/London", 3)


class TestSchedulerQueries:
    @pytest.mark.asyncio
    async def test_delete_empty_batch_skipped(self, mock_pool):
        manager = ReminderManager(mock_pool)

        await manager.delete_reminders([])

        mock_pool.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_batch_single_statement(self, mock_pool):
        manager = ReminderManager(mock_pool)

        await manager.delete_reminders([1, 4, 9])

        mock_pool.execute.assert_awaited_once()
        query, ids = mock_pool.execute.call_args.args
        assert "ANY($1" in query
        assert ids == [1, 4, 9]

    @pytest.mark.asyncio
    async def test_reschedule(self, mock_pool):
        manager = ReminderManager(mock_pool)

        await manager.reschedule_reminder(4, WHEN)

        assert mock_pool.execute.call_args.args[1:] == (WHEN, 4)

    @pytest.mark.asyncio
    async def test_is_bootstrapped(self, mock_pool):
        mock_pool.fetchval.return_value = False
        manager = ReminderManager(mock_pool)

        assert await manager.is_bootstrapped() is False

    def test_reminder_from_record(self):
        reminder = Reminder.from_record(_row(3, recurring=True))
        assert reminder == Reminder(id=3, who="42", time=WHEN, to_remind="to stretch", recurring=True)
