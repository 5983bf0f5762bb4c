"""
remindbot Discord Bot

Maintains the Discord connection, owns the database pool and wires the
reminder commands and the delivery scheduler together.
"""

import asyncio
import logging
import sys
from typing import Optional

import asyncpg
import discord
from discord.ext import commands
from dotenv import load_dotenv

from commands.reminder_commands import ReminderCommands
from config import BotConfig, ConfigError
from reminders import (
    MigrationError,
    ReminderManager,
    ReminderScheduler,
    TimezoneResolver,
    bootstrap_schema,
)

# Discord message length limit
DISCORD_MAX_LENGTH = 2000

logger = logging.getLogger("remindbot")


class ReminderBot(commands.Bot):
    """Discord bot that schedules and delivers reminders."""

    def __init__(self, config: BotConfig):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.messages = True

        super().__init__(command_prefix="!", intents=intents, help_command=None)

        self.config = config
        self.db_pool: Optional[asyncpg.Pool] = None
        self.reminder_scheduler: Optional[ReminderScheduler] = None

    async def setup_hook(self):
        """Called when the bot is starting up."""
        self.db_pool = await asyncpg.create_pool(self.config.database_url)
        version = await bootstrap_schema(self.db_pool)
        logger.info(f"Setup: database schema version {version}")

        manager = ReminderManager(self.db_pool)
        resolver = TimezoneResolver(manager, self.config.default_timezone)
        await self.add_cog(ReminderCommands(self, manager, resolver))

        self.reminder_scheduler = ReminderScheduler(
            self,
            manager,
            self.config.reminders_channel_id,
            interval_seconds=self.config.sweep_interval_seconds,
        )
        self.reminder_scheduler.start()

    async def on_ready(self):
        """Called when the bot has connected to Discord."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

    def _chunk_message(self, content: str) -> list[str]:
        """Split a message into chunks that fit Discord's 2000 char limit.

        Prefers splitting on line breaks, then on spaces.
        """
        chunks = []
        remaining = content

        while len(remaining) > DISCORD_MAX_LENGTH:
            break_at = remaining.rfind("\n", 0, DISCORD_MAX_LENGTH)
            if break_at <= 0:
                break_at = remaining.rfind(" ", 0, DISCORD_MAX_LENGTH)
            if break_at <= 0:
                break_at = DISCORD_MAX_LENGTH

            chunks.append(remaining[:break_at].rstrip())
            remaining = remaining[break_at:].lstrip()

        if remaining:
            chunks.append(remaining)
        return chunks

    async def send_chunked(
        self, channel: discord.abc.Messageable, content: str, reply_to: discord.Message = None
    ) -> discord.Message:
        """Send a message, splitting into chunks if needed. Returns the last message sent."""
        chunks = self._chunk_message(content)
        last_msg = None

        for i, chunk in enumerate(chunks):
            if i == 0 and reply_to:
                last_msg = await reply_to.reply(chunk)
            else:
                last_msg = await channel.send(chunk)

        return last_msg

    async def close(self):
        """Stop the scheduler, then release the pool and the connection."""
        if self.reminder_scheduler:
            await self.reminder_scheduler.stop()
        if self.db_pool:
            await self.db_pool.close()
        await super().close()


async def main():
    """Run the bot."""
    load_dotenv()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = BotConfig.from_env()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    bot = ReminderBot(config)
    try:
        async with bot:
            await bot.start(config.token)
    except MigrationError as e:
        logger.error(f"Error bootstrapping the database: {e}")
        sys.exit(1)


def run():
    """Console entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
