"""Prometheus metrics for threadwarden.

Counters for thread lifecycle transitions, platform faults and sweep timing.
"""

from prometheus_client import Counter, Histogram

# Lifecycle metrics
THREADS_CREATED = Counter(
    "threadwarden_threads_created_total",
    "Total number of support threads opened",
)

DUPLICATE_ATTEMPTS = Counter(
    "threadwarden_duplicate_attempts_total",
    "Total number of posts routed to an existing thread",
)

MEMBERS_REMOVED = Counter(
    "threadwarden_members_removed_total",
    "Total number of members removed for excessive attempts",
    labelnames=["result"],
)

THREADS_CLOSED = Counter(
    "threadwarden_threads_closed_total",
    "Expired threads processed by the sweeper",
    labelnames=["outcome"],
)

RECONCILIATIONS = Counter(
    "threadwarden_reconciliations_total",
    "Checks of stored threads against the platform",
    labelnames=["result"],
)

# Platform metrics
PLATFORM_ERRORS = Counter(
    "threadwarden_platform_errors_total",
    "Platform operation failures by classification",
    labelnames=["operation", "kind"],
)

# Event metrics
EVENTS = Counter(
    "threadwarden_events_total",
    "Inbound events by type and outcome",
    labelnames=["type", "outcome"],
)

SWEEP_LATENCY = Histogram(
    "threadwarden_sweep_latency_seconds",
    "Duration of one expiry sweep",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)
