"""Background jobs."""

from threadwarden.jobs.sweeper import ExpirySweeper, SweepResult

__all__ = [
    "ExpirySweeper",
    "SweepResult",
]
