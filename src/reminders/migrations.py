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
Schema Migrations

Versioned schema bootstrap for the reminder store. The current version is
kept in a single-row `schema_version` table; every step whose version is
above it runs in its own transaction together with the version bump.
"""

import logging
from dataclasses import dataclass

import asyncpg

logger = logging.getLogger("remindbot.reminders.migrations")


@dataclass(frozen=True)
class Migration:
    """One schema step, applied when the stored version is below `version`."""

    version: int
    description: str
    statements: tuple[str, ...]


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version=1,
        description="base schema",
        statements=(
            """
            CREATE TABLE IF NOT EXISTS reminders (
                id SERIAL PRIMARY KEY,
                who TEXT NOT NULL,
                time TIMESTAMPTZ NOT NULL,
                to_remind TEXT NOT NULL
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS timezone_preferences (
                id SERIAL PRIMARY KEY,
                who TEXT NOT NULL,
                timezone_preference TEXT NOT NULL
            )
            """,
        ),
    ),
    Migration(
        version=2,
        description="recurring reminders",
        statements=(
            """
            ALTER TABLE reminders
            ADD COLUMN IF NOT EXISTS recurring BOOLEAN NOT NULL DEFAULT FALSE
            """,
        ),
    ),
)

LATEST_VERSION = MIGRATIONS[-1].version


class MigrationError(Exception):
    """Raised when a schema step fails. The step's transaction is rolled back."""

    def __init__(self, migration: Migration, cause: Exception):
        super().__init__(
            f"Migration to version {migration.version} ({migration.description}) failed: {cause}"
        )
        self.migration = migration


async def get_schema_version(conn: asyncpg.Connection) -> int:
    """Read the stored schema version, creating the counter if needed."""
    await conn.execute(
        "CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)"
    )
    version = await conn.fetchval("SELECT version FROM schema_version LIMIT 1")
    if version is None:
        await conn.execute("INSERT INTO schema_version (version) VALUES (0)")
        return 0
    return version


async def apply_migrations(conn: asyncpg.Connection) -> int:
    """
    Bring the schema up to LATEST_VERSION.

    Args:
        conn: An acquired asyncpg connection

    Returns:
        The schema version after bootstrapping

    Raises:
        MigrationError: If a step fails
    """
    version = await get_schema_version(conn)

    for migration in MIGRATIONS:
        if migration.version <= version:
            continue

        logger.info(f"Migrating schema to version {migration.version}: {migration.description}")
        try:
            async with conn.transaction():
                for statement in migration.statements:
                    await conn.execute(statement)
                await conn.execute(
                    "UPDATE schema_version SET version = $1", migration.version
                )
        except asyncpg.PostgresError as e:
            raise MigrationError(migration, e) from e

        version = migration.version

    logger.info(f"Schema is at version {version}")
    return version


async def bootstrap_schema(pool: asyncpg.Pool) -> int:
    """Acquire a connection from the pool and run apply_migrations on it."""
    async with pool.acquire() as conn:
        return await apply_migrations(conn)
