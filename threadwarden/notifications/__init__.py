"""Moderator notifications."""

from threadwarden.notifications.notifier import Notifier
from threadwarden.notifications.sink import (
    ChannelNotificationSink,
    LogNotificationSink,
    NotificationKind,
    NotificationSink,
)

__all__ = [
    "ChannelNotificationSink",
    "LogNotificationSink",
    "NotificationKind",
    "NotificationSink",
    "Notifier",
]
