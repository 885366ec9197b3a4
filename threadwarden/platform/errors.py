"""Platform fault classification.

Adapters translate their own failures into PlatformError with an abstract
FaultKind, so the gate and sweeper never look at platform error codes.
"""

from enum import Enum


class FaultKind(str, Enum):
    """How the core should treat a platform failure."""

    TRANSIENT = "transient"  # retry naturally on the next cycle
    PERMANENT = "permanent"  # ground truth, correct local state


class PlatformError(Exception):
    """A classified platform operation failure."""

    def __init__(
        self,
        message: str,
        kind: FaultKind,
        *,
        reason: str | None = None,
        code: int | None = None,
        status: int | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.reason = reason
        self.code = code
        self.status = status
        self.operation = operation

    @property
    def is_permanent(self) -> bool:
        return self.kind is FaultKind.PERMANENT

    @property
    def is_transient(self) -> bool:
        return self.kind is FaultKind.TRANSIENT

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({str(self)!r}, kind={self.kind.value}, "
            f"reason={self.reason!r}, code={self.code})"
        )


class DirectMessagesDisabled(PlatformError):
    """The user does not accept direct messages."""

    def __init__(
        self,
        message: str = "Cannot send messages to this user",
        *,
        code: int | None = None,
        status: int | None = None,
        operation: str | None = "send_direct",
    ) -> None:
        super().__init__(
            message,
            FaultKind.PERMANENT,
            reason="direct_messages_disabled",
            code=code,
            status=status,
            operation=operation,
        )
