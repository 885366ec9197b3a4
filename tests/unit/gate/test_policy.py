"""Tests for AttemptPolicy."""

import pytest

from threadwarden.config.models.policy import PolicyConfig
from threadwarden.gate.policy import AttemptPolicy


class TestThresholds:
    @pytest.mark.parametrize(
        ("attempts", "removed"),
        [(6, False), (7, False), (9, False), (10, False), (11, True)],
    )
    def test_exceeds_mode(self, attempts: int, removed: bool) -> None:
        assert AttemptPolicy().should_remove(attempts) is removed

    def test_reaches_mode(self) -> None:
        policy = AttemptPolicy(kick_mode="reaches")
        assert policy.should_remove(9) is False
        assert policy.should_remove(10) is True

    def test_remaining_never_negative(self) -> None:
        policy = AttemptPolicy()
        assert policy.remaining(7) == 3
        assert policy.remaining(12) == 0


class TestWarningText:
    def test_no_warning_below_band(self) -> None:
        assert AttemptPolicy().warning_text(6) is None

    @pytest.mark.parametrize(("attempts", "remaining"), [(7, 3), (8, 2), (9, 1)])
    def test_countdown(self, attempts: int, remaining: int) -> None:
        text = AttemptPolicy().warning_text(attempts)
        assert text == (
            f"⚠️ **WARNING:** You have {remaining} attempt(s) remaining before being kicked."
        )

    @pytest.mark.parametrize("attempts", [10, 11, 15])
    def test_final_warning(self, attempts: int) -> None:
        text = AttemptPolicy().warning_text(attempts)
        assert text is not None
        assert "exceeded the maximum number of attempts" in text


class TestDirectMessage:
    def test_without_warning(self) -> None:
        text = AttemptPolicy().direct_message("https://link", 1)

        assert text == (
            "You already have an active support thread. Please use your existing "
            "thread to continue the conversation:\n\n"
            "https://link\n\n"
            "You can create a new thread in 24 hours."
        )

    def test_with_warning(self) -> None:
        text = AttemptPolicy().direct_message("https://link", 8)

        parts = text.split("\n\n")
        assert len(parts) == 4
        assert parts[1] == "https://link"
        assert "2 attempt(s) remaining" in parts[2]

    def test_ttl_follows_policy(self) -> None:
        text = AttemptPolicy(ttl_hours=12).direct_message("https://link", 1)
        assert text.endswith("You can create a new thread in 12 hours.")


class TestExemption:
    def test_exempt_role(self) -> None:
        policy = AttemptPolicy(exempt_role_ids=frozenset({"r1"}))
        assert policy.is_exempt(["r0", "r1"])
        assert not policy.is_exempt(["r0"])
        assert not policy.is_exempt([])


class TestFromConfig:
    def test_copies_config(self) -> None:
        config = PolicyConfig(
            kick_threshold=5,
            warning_threshold=3,
            kick_mode="reaches",
            exempt_role_ids=["400000000000000000"],
        )

        policy = AttemptPolicy.from_config(config)

        assert policy.kick_threshold == 5
        assert policy.warning_threshold == 3
        assert policy.should_remove(5)
        assert policy.is_exempt(["400000000000000000"])
        assert "at least 5 attempts" in policy.removal_reason
