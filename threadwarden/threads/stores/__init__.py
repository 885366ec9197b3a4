"""Thread store implementations."""

from threadwarden.threads.stores.inmemory import InMemoryThreadStore
from threadwarden.threads.stores.postgres import PostgresThreadStore

__all__ = [
    "InMemoryThreadStore",
    "PostgresThreadStore",
]
