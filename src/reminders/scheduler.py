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
Reminder Scheduler Module

Background task loop for delivering due reminders.
Uses discord.ext.tasks for reliable scheduling.

Each sweep delivers every reminder whose time has come to the reminders
channel, deletes the one-shot ones in one batch and moves the recurring
ones to their next daily occurrence.
"""

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional

import discord
import pytz
from dateutil.relativedelta import relativedelta
from discord.ext import tasks

if TYPE_CHECKING:
    from discord_bot import ReminderBot

from .manager import Reminder, ReminderManager

logger = logging.getLogger("remindbot.reminders.scheduler")

DEFAULT_SWEEP_SECONDS = 60


def next_occurrence(previous: datetime, now: datetime) -> datetime:
    """
    Next daily occurrence of a recurring reminder.

    Advances one calendar day from the pre-fire time. A reminder that went
    stale for several days is advanced until it lies after `now`, so it is
    not delivered again on the following ticks.
    """
    next_time = previous + relativedelta(days=1)
    while next_time <= now:
        next_time = next_time + relativedelta(days=1)
    return next_time


class ReminderScheduler:
    """
    Background scheduler for delivering reminders.

    Runs a loop every `interval_seconds` to check for due reminders and
    post them to the configured reminders channel.
    """

    def __init__(
        self,
        bot: "ReminderBot",
        manager: ReminderManager,
        channel_id: int,
        interval_seconds: float = DEFAULT_SWEEP_SECONDS,
    ):
        """
        Initialize the reminder scheduler.

        Args:
            bot: Discord bot instance
            manager: Reminder store access
            channel_id: Channel that reminders are posted to
            interval_seconds: Time between sweeps
        """
        self.bot = bot
        self.manager = manager
        self.channel_id = channel_id
        self.interval_seconds = interval_seconds
        self._sweep_lock = asyncio.Lock()
        self._started = False

    def start(self) -> None:
        """Start the scheduler loop."""
        if not self._started:
            self._check_reminders.change_interval(seconds=self.interval_seconds)
            self._check_reminders.start()
            self._started = True
            logger.info(f"Reminder scheduler started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the scheduler loop, letting an in-flight sweep finish its writes."""
        if self._started:
            async with self._sweep_lock:
                self._check_reminders.cancel()
            self._started = False
            logger.info("Reminder scheduler stopped")

    @tasks.loop(seconds=DEFAULT_SWEEP_SECONDS)
    async def _check_reminders(self) -> None:
        """Run one sweep per tick."""
        try:
            await self.sweep(datetime.now(pytz.UTC))
        except Exception as e:
            logger.error(f"Error in reminder scheduler loop: {e}", exc_info=True)

    @_check_reminders.before_loop
    async def _before_check(self) -> None:
        """Wait for the bot to be ready before starting the loop."""
        await self.bot.wait_until_ready()
        logger.info("Reminder scheduler ready, starting loop")

    async def sweep(self, now: datetime) -> None:
        """
        Deliver due reminders and update the store.

        Args:
            now: The tick instant (UTC)
        """
        async with self._sweep_lock:
            if not await self.manager.is_bootstrapped():
                logger.info("Database not bootstrapped yet, nothing to check")
                return

            reminders = await self.manager.get_all_reminders()
            due = [reminder for reminder in reminders if reminder.time <= now]
            if not due:
                return

            logger.info(f"Processing {len(due)} due reminder(s)")

            to_delete: list[int] = []
            to_update: list[tuple[Reminder, datetime]] = []
            for reminder in due:
                await self._deliver(
                    f"<@{reminder.who}>, reminding you {reminder.to_remind}.",
                    reminder_id=reminder.id,
                )

                if reminder.recurring:
                    to_update.append((reminder, next_occurrence(reminder.time, now)))
                else:
                    to_delete.append(reminder.id)

            try:
                await self.manager.delete_reminders(to_delete)
            except Exception as e:
                logger.error(f"Failed to delete fired reminders {to_delete}: {e}", exc_info=True)

            for reminder, new_time in to_update:
                try:
                    await self.manager.reschedule_reminder(reminder.id, new_time)
                except Exception as e:
                    logger.error(
                        f"Failed to reschedule recurring reminder {reminder.id}: {e}",
                        exc_info=True,
                    )
                    await self._deliver(
                        f"<@{reminder.who}>, couldn't update the recurring reminder. "
                        "You might need to set it again."
                    )

    async def _get_channel(self) -> discord.abc.Messageable:
        channel = self.bot.get_channel(self.channel_id)
        if channel is None:
            channel = await self.bot.fetch_channel(self.channel_id)
        return channel

    async def _deliver(self, message: str, reminder_id: Optional[int] = None) -> bool:
        """
        Post a message to the reminders channel.

        Failures are logged and never raised.

        Returns:
            True if the message was sent
        """
        try:
            channel = await self._get_channel()
            await channel.send(message)
        except Exception as e:
            logger.error(
                f"Failed to deliver to channel {self.channel_id} (reminder {reminder_id}): {e}",
                exc_info=True,
            )
            return False

        if reminder_id is not None:
            logger.info(f"Delivered reminder {reminder_id} to channel {self.channel_id}")
        return True
