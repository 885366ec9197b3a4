"""Messaging platform boundary.

The core consumes ThreadPlatform and sees failures only as classified
PlatformError instances.

Usage:
    from threadwarden.platform import ThreadPlatform, PlatformError
    from threadwarden.platform.inmemory import InMemoryPlatform
"""

from threadwarden.platform.client import ThreadPlatform
from threadwarden.platform.errors import DirectMessagesDisabled, FaultKind, PlatformError
from threadwarden.platform.models import MessageEvent, ThreadDeletedEvent, ThreadInfo

__all__ = [
    "DirectMessagesDisabled",
    "FaultKind",
    "MessageEvent",
    "PlatformError",
    "ThreadDeletedEvent",
    "ThreadInfo",
    "ThreadPlatform",
]
