"""Thread records: the only persisted state.

Usage:
    from threadwarden.threads import ThreadStore, UserThread
    from threadwarden.threads.stores import InMemoryThreadStore
"""

from threadwarden.threads.models import DEFAULT_TTL, UserThread, utc_now
from threadwarden.threads.store import ThreadStore

__all__ = [
    "DEFAULT_TTL",
    "ThreadStore",
    "UserThread",
    "utc_now",
]
