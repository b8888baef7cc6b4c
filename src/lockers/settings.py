"""Runtime knobs for the lockers context, read from the environment at use.

Protean infrastructure (databases, brokers, event store) is configured in
``domain.toml``; the values here tune domain behavior only.
"""

import os
from datetime import timedelta

DEFAULT_HEARTBEAT_FRESHNESS_SECONDS = 120

_TRUTHY = {"1", "true", "yes", "on"}


def heartbeat_freshness() -> timedelta:
    """Window within which a locker counts as online after its last contact."""
    raw = os.environ.get("HEARTBEAT_FRESHNESS_SECONDS", "")
    try:
        seconds = int(raw) if raw else DEFAULT_HEARTBEAT_FRESHNESS_SECONDS
    except ValueError:
        raise ValueError(f"HEARTBEAT_FRESHNESS_SECONDS must be an integer, got {raw!r}") from None
    if seconds <= 0:
        raise ValueError("HEARTBEAT_FRESHNESS_SECONDS must be positive")
    return timedelta(seconds=seconds)


def sticky_manual_inactive() -> bool:
    """Whether a manually deactivated courier stays inactive through recalculation."""
    return os.environ.get("COURIER_STICKY_INACTIVE", "false").strip().lower() in _TRUTHY
