"""Database utilities for threadwarden.

This module contains:
- Connection pool management
- Store error hierarchy
"""

from threadwarden.db.errors import ConnectionError, SchemaError, StoreError
from threadwarden.db.pool import PostgresPool

__all__ = [
    "StoreError",
    "ConnectionError",
    "SchemaError",
    "PostgresPool",
]
