from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from documents.infrastructure.models import DocumentModel


class DbLockRepository:
    """Compare-and-set on the lock columns of the ``documents`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def try_acquire(
        self,
        document_id: UUID,
        user_id: str,
        now: datetime,
        stale_before: datetime | None = None,
    ) -> bool:
        free = [DocumentModel.locked_by.is_(None)]
        if stale_before is not None:
            free.append(DocumentModel.locked_at <= stale_before)

        result = await self.session.execute(
            update(DocumentModel)
            .where(DocumentModel.id == document_id, or_(*free))
            .values(locked_by=user_id, locked_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount == 1

    async def try_release(self, document_id: UUID, user_id: str) -> bool:
        result = await self.session.execute(
            update(DocumentModel)
            .where(DocumentModel.id == document_id, DocumentModel.locked_by == user_id)
            .values(locked_by=None, locked_at=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount == 1
