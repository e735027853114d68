from datetime import datetime
from typing import Protocol
from uuid import UUID


class LockRepository(Protocol):
    async def try_acquire(
        self,
        document_id: UUID,
        user_id: str,
        now: datetime,
        stale_before: datetime | None = None,
    ) -> bool: ...

    async def try_release(self, document_id: UUID, user_id: str) -> bool: ...
