"""Escalation policy for duplicate posts."""

from dataclasses import dataclass

from threadwarden.config.models.policy import KickMode, PolicyConfig

WARNING_PREFIX = "⚠️ **WARNING:**"


@dataclass(frozen=True)
class AttemptPolicy:
    """Warning and removal thresholds for a user's attempt count.

    Warnings start at warning_threshold and show how many attempts are left;
    from kick_threshold on the warning is final. Removal fires above
    kick_threshold ("exceeds") or at it ("reaches").
    """

    kick_threshold: int = 10
    warning_threshold: int = 7
    kick_mode: KickMode = "exceeds"
    ttl_hours: float = 24.0
    exempt_role_ids: frozenset[str] = frozenset()

    @classmethod
    def from_config(cls, config: PolicyConfig) -> "AttemptPolicy":
        return cls(
            kick_threshold=config.kick_threshold,
            warning_threshold=config.warning_threshold,
            kick_mode=config.kick_mode,
            ttl_hours=config.ttl_hours,
            exempt_role_ids=frozenset(config.exempt_role_ids),
        )

    def is_exempt(self, role_ids: list[str]) -> bool:
        return not self.exempt_role_ids.isdisjoint(role_ids)

    def remaining(self, attempts: int) -> int:
        return max(self.kick_threshold - attempts, 0)

    def should_remove(self, attempts: int) -> bool:
        if self.kick_mode == "reaches":
            return attempts >= self.kick_threshold
        return attempts > self.kick_threshold

    def warning_text(self, attempts: int) -> str | None:
        """Escalation text for an attempt count, or None below the warning band."""
        if attempts >= self.kick_threshold:
            return (
                f"{WARNING_PREFIX} You have exceeded the maximum number of attempts "
                "and will be kicked from the server."
            )
        if attempts >= self.warning_threshold:
            return (
                f"{WARNING_PREFIX} You have {self.remaining(attempts)} attempt(s) "
                "remaining before being kicked."
            )
        return None

    def direct_message(self, thread_link: str, attempts: int) -> str:
        """Direct message sent to a user whose post was removed."""
        parts = [
            "You already have an active support thread. Please use your existing "
            "thread to continue the conversation:",
            thread_link,
        ]
        warning = self.warning_text(attempts)
        if warning:
            parts.append(warning)
        parts.append(f"You can create a new thread in {self.ttl_hours:g} hours.")
        return "\n\n".join(parts)

    @property
    def removal_reason(self) -> str:
        bound = "more than" if self.kick_mode == "exceeds" else "at least"
        return (
            "Exceeded maximum posting attempts in support channel "
            f"({bound} {self.kick_threshold} attempts)"
        )
