from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


@dataclass(frozen=True)
class Lock:
    """Exclusive-edit claim on a document."""

    holder: str
    acquired_at: datetime | None = None

    def is_expired(self, now: datetime, ttl_seconds: int | None) -> bool:
        if ttl_seconds is None or self.acquired_at is None:
            return False
        acquired_at = self.acquired_at
        if acquired_at.tzinfo is None:
            acquired_at = acquired_at.replace(tzinfo=timezone.utc)
        return now - acquired_at >= timedelta(seconds=ttl_seconds)

    def blocks(self, user_id: str, now: datetime, ttl_seconds: int | None) -> bool:
        """True when this lock prevents ``user_id`` from editing or locking."""
        return self.holder != user_id and not self.is_expired(now, ttl_seconds)


def stale_before(now: datetime, ttl_seconds: int | None) -> datetime | None:
    """Acquisition time at or before which a lock counts as expired."""
    if ttl_seconds is None:
        return None
    return now - timedelta(seconds=ttl_seconds)
