"""Locker liveness — pull-based derivation from the last heartbeat.

There is no background sweep: a locker only turns offline at the moment
someone asks for its status after the freshness window has passed.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from lockers.settings import heartbeat_freshness


class LivenessStatus(Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"


def effective_status(
    last_heartbeat: datetime | None,
    now: datetime | None = None,
    window: timedelta | None = None,
) -> LivenessStatus:
    if last_heartbeat is None:
        return LivenessStatus.UNKNOWN

    now = now or datetime.now(UTC)
    window = window or heartbeat_freshness()

    # Some providers hand back naive datetimes; they are stored in UTC
    if last_heartbeat.tzinfo is None:
        last_heartbeat = last_heartbeat.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    if now - last_heartbeat < window:
        return LivenessStatus.ONLINE
    return LivenessStatus.OFFLINE
