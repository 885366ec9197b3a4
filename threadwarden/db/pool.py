"""asyncpg pool shared by the PostgreSQL thread store."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import urlsplit

import asyncpg

from threadwarden.config.models.storage import StorageConfig
from threadwarden.config.settings import ConfigurationError
from threadwarden.db.errors import ConnectionError
from threadwarden.observability.logging import get_logger

logger = get_logger(__name__)


def describe_dsn(dsn: str) -> str:
    """host:port/database of a DSN, without credentials, for logs."""
    parts = urlsplit(dsn)
    host = parts.hostname or "localhost"
    port = f":{parts.port}" if parts.port else ""
    return f"{host}{port}{parts.path}"


class PostgresPool:
    """Lazily opened asyncpg pool.

    The first acquire() opens the pool if connect() was not called; concurrent
    first callers share one pool.
    """

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 2,
        max_size: int = 10,
        max_inactive_connection_lifetime: float = 300.0,
        command_timeout: float = 30.0,
    ) -> None:
        self._dsn = dsn
        self._options: dict[str, Any] = {
            "min_size": min_size,
            "max_size": max_size,
            "max_inactive_connection_lifetime": max_inactive_connection_lifetime,
            "command_timeout": command_timeout,
        }
        self._pool: asyncpg.Pool | None = None
        self._connecting = asyncio.Lock()

    @classmethod
    def from_config(cls, storage: StorageConfig) -> "PostgresPool":
        """Build a pool from the [storage] section.

        Raises:
            ConfigurationError: If no connection URL is configured
        """
        dsn = storage.resolved_connection_url()
        if not dsn:
            raise ConfigurationError(
                "storage.connection_url (or DATABASE_URL) is required for the postgres backend"
            )
        return cls(
            dsn,
            min_size=storage.min_pool_size,
            max_size=storage.max_pool_size,
            max_inactive_connection_lifetime=storage.max_inactive_connection_lifetime,
            command_timeout=storage.command_timeout,
        )

    @property
    def target(self) -> str:
        return describe_dsn(self._dsn)

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Open the pool; a no-op when already open.

        Raises:
            ConnectionError: If PostgreSQL cannot be reached
        """
        async with self._connecting:
            if self._pool is not None:
                return
            try:
                self._pool = await asyncpg.create_pool(dsn=self._dsn, **self._options)
            except (OSError, asyncpg.PostgresError) as e:
                logger.error("postgres_pool_connection_failed", target=self.target, error=str(e))
                raise ConnectionError(
                    f"Failed to connect to PostgreSQL at {self.target}: {e}", cause=e
                ) from e
        logger.info(
            "postgres_pool_connected",
            target=self.target,
            min_size=self._options["min_size"],
            max_size=self._options["max_size"],
        )

    async def close(self) -> None:
        pool, self._pool = self._pool, None
        if pool is not None:
            await pool.close()
            logger.info("postgres_pool_closed", target=self.target)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Check out a connection, opening the pool on first use.

        Raises:
            ConnectionError: If the pool cannot be opened or was closed meanwhile
        """
        if self._pool is None:
            await self.connect()
        pool = self._pool
        if pool is None:
            raise ConnectionError(f"PostgreSQL pool for {self.target} is closed")

        async with pool.acquire() as connection:
            yield connection

    async def health_check(self) -> bool:
        """True when the pool is open and answers SELECT 1."""
        if self._pool is None:
            return False
        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except (OSError, asyncpg.PostgresError) as e:
            logger.warning("postgres_health_check_failed", target=self.target, error=str(e))
            return False
        return True
