"""PostgreSQL implementation of ThreadStore.

Provides persistent storage for thread records. The schema is created
idempotently on startup; there is no migration system.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import asyncpg

from threadwarden.db.errors import ConnectionError, SchemaError
from threadwarden.db.pool import PostgresPool
from threadwarden.observability.logging import get_logger
from threadwarden.threads.models import DEFAULT_TTL, UserThread, utc_now
from threadwarden.threads.store import ThreadStore

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS user_threads (
    id BIGSERIAL PRIMARY KEY,
    user_id TEXT NOT NULL,
    thread_id TEXT NOT NULL,
    channel_id TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    expires_at TIMESTAMPTZ NOT NULL,
    attempt_count INTEGER NOT NULL DEFAULT 0,
    is_active BOOLEAN NOT NULL DEFAULT TRUE
);
CREATE INDEX IF NOT EXISTS idx_user_threads_user_id ON user_threads (user_id);
CREATE INDEX IF NOT EXISTS idx_user_threads_thread_id ON user_threads (thread_id);
CREATE INDEX IF NOT EXISTS idx_user_threads_is_active ON user_threads (is_active);
CREATE INDEX IF NOT EXISTS idx_user_threads_expires_at ON user_threads (expires_at);
CREATE INDEX IF NOT EXISTS idx_user_threads_user_active ON user_threads (user_id, is_active);
"""

_COLUMNS = (
    "id, user_id, thread_id, channel_id, created_at, expires_at, "
    "attempt_count, is_active"
)


class PostgresThreadStore(ThreadStore):
    """PostgreSQL implementation of ThreadStore.

    increment_attempts row-locks the user's active record inside a
    transaction, so concurrent increments for one user serialize while
    other users are unaffected.
    """

    def __init__(
        self,
        pool: PostgresPool,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize PostgreSQL thread store.

        Args:
            pool: Shared connection pool
            ttl: Lifetime given to new records
            clock: Source of "now" for created_at
        """
        self._pool = pool
        self._ttl = ttl
        self._clock = clock

    @staticmethod
    def _row_to_thread(row: asyncpg.Record | dict[str, Any]) -> UserThread:
        return UserThread.model_validate(dict(row))

    async def ensure_schema(self) -> None:
        """Create the user_threads table and its indexes if missing."""
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(SCHEMA_SQL)
            logger.info("thread_schema_ensured", table="user_threads")
        except (OSError, asyncpg.PostgresError, ConnectionError) as e:
            logger.error("thread_schema_failed", error=str(e))
            raise SchemaError(f"Failed to ensure thread schema: {e}", cause=e) from e

    async def get_active(self, user_id: str) -> UserThread | None:
        """Get the most recently created active record for a user."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {_COLUMNS} FROM user_threads
                    WHERE user_id = $1 AND is_active = TRUE
                    ORDER BY created_at DESC, id DESC
                    LIMIT 1
                    """,  # noqa: S608
                    user_id,
                )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("postgres_get_active_error", user_id=user_id, error=str(e))
            raise ConnectionError(f"Failed to get active thread: {e}", cause=e) from e

        return self._row_to_thread(row) if row else None

    async def get_by_thread_id(self, thread_id: str) -> UserThread | None:
        """Get the record for a platform thread id."""
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {_COLUMNS} FROM user_threads
                    WHERE thread_id = $1
                    ORDER BY created_at DESC, id DESC
                    LIMIT 1
                    """,  # noqa: S608
                    thread_id,
                )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("postgres_get_thread_error", thread_id=thread_id, error=str(e))
            raise ConnectionError(f"Failed to get thread: {e}", cause=e) from e

        return self._row_to_thread(row) if row else None

    async def create(self, user_id: str, thread_id: str, channel_id: str) -> UserThread:
        """Insert a new active record."""
        now = self._clock()
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO user_threads (
                        user_id, thread_id, channel_id, created_at, expires_at,
                        attempt_count, is_active
                    ) VALUES ($1, $2, $3, $4, $5, 0, TRUE)
                    RETURNING {_COLUMNS}
                    """,  # noqa: S608
                    user_id,
                    thread_id,
                    channel_id,
                    now,
                    now + self._ttl,
                )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error(
                "postgres_create_error",
                user_id=user_id,
                thread_id=thread_id,
                error=str(e),
            )
            raise ConnectionError(f"Failed to create thread record: {e}", cause=e) from e

        logger.debug("thread_record_created", user_id=user_id, thread_id=thread_id)
        return self._row_to_thread(row)

    async def increment_attempts(self, user_id: str) -> int:
        """Increment the active record's counter and return the new value."""
        try:
            async with self._pool.acquire() as conn, conn.transaction():
                value = await conn.fetchval(
                    """
                    UPDATE user_threads
                    SET attempt_count = attempt_count + 1
                    WHERE id = (
                        SELECT id FROM user_threads
                        WHERE user_id = $1 AND is_active = TRUE
                        ORDER BY created_at DESC, id DESC
                        LIMIT 1
                        FOR UPDATE
                    )
                    RETURNING attempt_count
                    """,
                    user_id,
                )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("postgres_increment_error", user_id=user_id, error=str(e))
            raise ConnectionError(f"Failed to increment attempts: {e}", cause=e) from e

        if value is None:
            logger.warning("increment_without_active_thread", user_id=user_id)
            return 0
        return int(value)

    async def deactivate(self, thread_id: str) -> bool:
        """Mark the record for thread_id inactive."""
        try:
            async with self._pool.acquire() as conn:
                result = await conn.execute(
                    """
                    UPDATE user_threads
                    SET is_active = FALSE
                    WHERE thread_id = $1 AND is_active = TRUE
                    """,
                    thread_id,
                )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("postgres_deactivate_error", thread_id=thread_id, error=str(e))
            raise ConnectionError(f"Failed to deactivate thread: {e}", cause=e) from e

        changed = result.split()[-1] != "0"
        logger.debug("thread_record_deactivated", thread_id=thread_id, changed=changed)
        return changed

    async def list_expired(self, now: datetime) -> list[UserThread]:
        """List active records whose expires_at is before now."""
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS} FROM user_threads
                    WHERE is_active = TRUE AND expires_at < $1
                    ORDER BY expires_at
                    """,  # noqa: S608
                    now,
                )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("postgres_list_expired_error", error=str(e))
            raise ConnectionError(f"Failed to list expired threads: {e}", cause=e) from e

        return [self._row_to_thread(row) for row in rows]

    async def health_check(self) -> bool:
        """Check the pool is connected and responsive."""
        return await self._pool.health_check()

    async def close(self) -> None:
        """Close the underlying pool."""
        await self._pool.close()
