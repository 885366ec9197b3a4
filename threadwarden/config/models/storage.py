"""Storage backend configuration models."""

import os
from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "postgres"]


class StorageConfig(BaseModel):
    """Thread store backend configuration."""

    backend: BackendType = Field(
        default="postgres",
        description="Backend type",
    )
    connection_url: str | None = Field(
        default=None,
        description="Connection URL (falls back to THREADWARDEN_DATABASE_URL / DATABASE_URL)",
    )
    min_pool_size: int = Field(
        default=2,
        gt=0,
        description="Minimum connections to keep open",
    )
    max_pool_size: int = Field(
        default=10,
        gt=0,
        description="Maximum connections in pool",
    )
    max_inactive_connection_lifetime: float = Field(
        default=300.0,
        gt=0,
        description="Close connections idle longer than this (seconds)",
    )
    command_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Default timeout for queries (seconds)",
    )

    def resolved_connection_url(self) -> str | None:
        """connection_url, else THREADWARDEN_DATABASE_URL, else DATABASE_URL."""
        return (
            self.connection_url
            or os.environ.get("THREADWARDEN_DATABASE_URL")
            or os.environ.get("DATABASE_URL")
        )
