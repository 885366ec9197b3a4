"""Attempt gate: thread opening, duplicate routing and reconciliation.

Usage:
    from threadwarden.gate import AttemptGate, GateOutcome

    gate = AttemptGate(store, platform, notifier)
    outcome = await gate.handle_message(event)
"""

from threadwarden.gate.errors import ThreadOpenError
from threadwarden.gate.gate import AttemptGate, GateOutcome
from threadwarden.gate.locks import UserLockArena
from threadwarden.gate.policy import AttemptPolicy
from threadwarden.gate.reconciler import ThreadReconciler

__all__ = [
    "AttemptGate",
    "AttemptPolicy",
    "GateOutcome",
    "ThreadOpenError",
    "ThreadReconciler",
    "UserLockArena",
]
