import logging
from datetime import datetime, timezone
from uuid import UUID

from locking.domain.entities import stale_before
from locking.domain.repository import LockRepository

logger = logging.getLogger(__name__)


async def acquire_lock(
    repo: LockRepository,
    document_id: UUID,
    user_id: str,
    ttl_seconds: int | None = None,
    now: datetime | None = None,
) -> bool:
    """Take the lock if the document is unlocked (or its lease has run out).

    A held lock is never re-granted, not even to its own holder.
    """
    now = now or datetime.now(timezone.utc)
    acquired = await repo.try_acquire(
        document_id, user_id, now, stale_before(now, ttl_seconds)
    )
    if acquired:
        logger.info("Document %s locked by %s", document_id, user_id)
    else:
        logger.debug("Lock on document %s refused to %s", document_id, user_id)
    return acquired


async def release_lock(repo: LockRepository, document_id: UUID, user_id: str) -> bool:
    released = await repo.try_release(document_id, user_id)
    if released:
        logger.info("Document %s unlocked by %s", document_id, user_id)
    return released
