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
Reminder Commands

Prefix commands for managing reminders:
- !remindme - Create a reminder (absolute, relative or daily)
- !reminders - List your reminders
- !rmreminder - Remove one of your reminders
- !tzpreference - Set your timezone
"""

import logging
import re

import asyncpg
import pytz
from discord.ext import commands

from reminders import (
    ReminderManager,
    RemindmeArgs,
    RemindmeKind,
    RemovalResult,
    TimeParseError,
    TimezoneResolutionError,
    TimezoneResolver,
    check_content_length,
    parse_absolute,
    parse_recurring,
    parse_relative,
    parse_remindme_command,
    validate_timezone,
)

logger = logging.getLogger("remindbot.commands.reminder")

# Errors raised by the store (query failures, lost connections)
STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

# Reminder IDs are SERIAL (32-bit signed) keys
MAX_REMINDER_ID = 2**31 - 1

TZ_DATABASE_URL = "https://en.wikipedia.org/wiki/List_of_tz_database_time_zones"

REMINDME_HELP = (
    "Invalid `!remindme` syntax. Use one of these forms:\n"
    "`!remindme on D.M[.YYYY] at H[:MM] AM|PM [Timezone] <text>`\n"
    "`!remindme in N minutes|hours|days|weeks|months <text>`\n"
    "`!remindme every day at H[:MM] AM|PM [Timezone] <text>`\n\n"
    "For example:\n"
    "`!remindme on 23.12 at 12 PM America/New_York that Christmas is tomorrow`\n"
    "`!remindme in 2 days to buy a gift for Aurora`\n"
    "`!remindme every day at 8:30 AM to take my vitamins`\n\n"
    "The timezone identifier (e.g. `America/New_York`), when specified, needs to match one of "
    f"the identifiers from the [IANA Time Zone Database]({TZ_DATABASE_URL}). "
    "When not specified, first it checks whether you have a saved preference, "
    "and if not, defaults to `{default_timezone}`.\n\n"
    "You can set your preference with:\n"
    "`!tzpreference <Timezone>`\n\n"
    "For example:\n"
    "`!tzpreference Antarctica/South_Pole`"
)

STORE_ERROR_REPLY = "Something went wrong while {action}. Check the logs."


class ReminderCommands(commands.Cog):
    """
    Prefix commands for reminder management.

    Every command answers with a single reply to the invoking message.
    """

    def __init__(
        self,
        bot: commands.Bot,
        reminder_manager: ReminderManager,
        timezone_resolver: TimezoneResolver,
    ):
        self.bot = bot
        self.manager = reminder_manager
        self.resolver = timezone_resolver

    # =========================================================================
    # !remindme
    # =========================================================================

    @commands.command(name="remindme")
    async def remindme(self, ctx: commands.Context, *, text: str = ""):
        """Create a new reminder."""
        await self.handle_remindme(ctx, text)

    async def handle_remindme(self, ctx: commands.Context, text: str) -> None:
        args = parse_remindme_command(text)
        if args is None:
            await ctx.reply(
                REMINDME_HELP.replace("{default_timezone}", self.resolver.default_timezone)
            )
            return

        user_id = str(ctx.author.id)

        try:
            check_content_length(args.content)

            if args.kind is RemindmeKind.RELATIVE:
                await self._remind_relative(ctx, user_id, args)
                return

            try:
                tz = await self.resolver.resolve(user_id, args.zone)
            except TimezoneResolutionError as e:
                logger.warning(f"Error resolving the location for user {user_id}: {e}")
                await ctx.reply(
                    "Couldn't resolve your location. Make sure you spelled it correctly or check the logs."
                )
                return

            if args.kind is RemindmeKind.ABSOLUTE:
                await self._remind_absolute(ctx, user_id, args, tz)
            else:
                await self._remind_recurring(ctx, user_id, args, tz)

        except TimeParseError as e:
            await ctx.reply(str(e))
        except STORE_ERRORS as e:
            logger.error(f"Store error while creating a reminder for user {user_id}: {e}", exc_info=True)
            await ctx.reply(STORE_ERROR_REPLY.format(action="saving the reminder"))

    async def _remind_absolute(
        self, ctx: commands.Context, user_id: str, args: RemindmeArgs, tz: pytz.BaseTzInfo
    ) -> None:
        parsed = parse_absolute(args, tz)
        await self.manager.create_reminder(user_id, parsed)

        await ctx.reply(
            "Successfully added to the database. "
            f"I'll remind you {parsed.content} on {parsed.local_time:%d.%m.%Y} "
            f"at {args.hour:02d}:{args.minute:02d} {args.period} in the {parsed.timezone} timezone."
        )

    async def _remind_relative(self, ctx: commands.Context, user_id: str, args: RemindmeArgs) -> None:
        parsed = parse_relative(args)

        if args.quantity == 0:
            await ctx.reply(f"Immediately reminding you {parsed.content}, you silly goose.")
            return

        await self.manager.create_reminder(user_id, parsed)
        await ctx.reply(
            f"Successfully added to the database. "
            f"I'll remind you in {args.quantity} {args.unit} {parsed.content}."
        )

    async def _remind_recurring(
        self, ctx: commands.Context, user_id: str, args: RemindmeArgs, tz: pytz.BaseTzInfo
    ) -> None:
        parsed = parse_recurring(args, tz)
        await self.manager.create_reminder(user_id, parsed)

        await ctx.reply(
            "Successfully added to the database. "
            f"I'll remind you {parsed.content} every day "
            f"at {args.hour:02d}:{args.minute:02d} {args.period} in the {parsed.timezone} timezone."
        )

    # =========================================================================
    # !reminders
    # =========================================================================

    @commands.command(name="reminders")
    async def reminders(self, ctx: commands.Context):
        """List your pending reminders."""
        await self.handle_list(ctx)

    async def handle_list(self, ctx: commands.Context) -> None:
        user_id = str(ctx.author.id)

        try:
            reminders = await self.manager.list_reminders(user_id)
        except STORE_ERRORS as e:
            logger.error(f"Error querying the pending reminders of user {user_id}: {e}", exc_info=True)
            await ctx.reply(STORE_ERROR_REPLY.format(action="querying the pending reminders"))
            return

        if not reminders:
            await ctx.reply("You have no pending reminders.")
            return

        lines = ["You have the following pending reminders:"]
        for index, reminder in enumerate(reminders, start=1):
            timestamp = int(reminder.time.timestamp())
            if reminder.recurring:
                when = f"every day, next time on <t:{timestamp}>"
            else:
                when = f"on <t:{timestamp}>"
            lines.append(f"{index}. Reminder *[ID: {reminder.id}]* {reminder.to_remind} {when}.")
        lines.append("")
        lines.append("To remove a reminder, use `!rmreminder <ID>`, e.g. `!rmreminder 42`.")

        await self.bot.send_chunked(ctx.channel, "\n".join(lines), reply_to=ctx.message)

    # =========================================================================
    # !rmreminder
    # =========================================================================

    @commands.command(name="rmreminder")
    async def rmreminder(self, ctx: commands.Context, *, reminder_id: str = ""):
        """Remove one of your reminders by ID."""
        await self.handle_remove(ctx, reminder_id)

    async def handle_remove(self, ctx: commands.Context, reminder_id: str) -> None:
        if not re.fullmatch(r"[0-9]+", reminder_id):
            await ctx.reply("Usage: `!rmreminder <ID>`, e.g. `!rmreminder 42`.")
            return

        rid = int(reminder_id)
        if rid > MAX_REMINDER_ID:
            await ctx.reply(f"The ID is too big, has to be between 0 and {MAX_REMINDER_ID}.")
            return

        user_id = str(ctx.author.id)

        try:
            result = await self.manager.remove_reminder(rid, user_id)
        except STORE_ERRORS as e:
            logger.error(f"Error deleting reminder {rid}: {e}", exc_info=True)
            await ctx.reply(STORE_ERROR_REPLY.format(action="deleting the reminder"))
            return

        if result is RemovalResult.NOT_FOUND:
            await ctx.reply("There isn't a reminder with that ID. Make sure you provided the correct one.")
        elif result is RemovalResult.NOT_OWNER:
            await ctx.reply("You cannot remove someone else's reminders!")
        else:
            await ctx.reply("Successfully deleted the reminder.")

    # =========================================================================
    # !tzpreference
    # =========================================================================

    @commands.command(name="tzpreference")
    async def tzpreference(self, ctx: commands.Context, *, timezone: str = ""):
        """Set your default timezone for reminders."""
        await self.handle_tzpreference(ctx, timezone)

    async def handle_tzpreference(self, ctx: commands.Context, timezone: str) -> None:
        if not timezone:
            await ctx.reply("Usage: `!tzpreference <Timezone>`, e.g. `!tzpreference Antarctica/South_Pole`.")
            return

        if not validate_timezone(timezone):
            await ctx.reply(
                f"Unknown timezone: `{timezone}`. It has to be one of the identifiers from the "
                f"[IANA Time Zone Database]({TZ_DATABASE_URL})."
            )
            return

        canonical = pytz.timezone(timezone).zone
        user_id = str(ctx.author.id)

        try:
            await self.manager.set_timezone_preference(user_id, canonical)
        except STORE_ERRORS as e:
            logger.error(f"Error saving the timezone preference of user {user_id}: {e}", exc_info=True)
            await ctx.reply(STORE_ERROR_REPLY.format(action="saving the preference"))
            return

        await ctx.reply("Successfully set the preference.")
