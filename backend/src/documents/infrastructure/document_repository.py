from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from documents.domain.entities import Document
from documents.infrastructure.models import DocumentModel
from shared.exceptions import ConflictError, LockConflictError, NotFoundError


class DbDocumentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, document_id: UUID) -> Document | None:
        result = await self.session.execute(
            select(DocumentModel)
            .where(DocumentModel.id == document_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def list_all(self) -> list[Document]:
        result = await self.session.execute(
            select(DocumentModel)
            .order_by(DocumentModel.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def create(self, document: Document) -> Document:
        model = DocumentModel(
            name=document.name,
            content=document.initial_content,
            initial_content=document.initial_content,
            version=0,
            collaborators=sorted(document.collaborators),
            created_by=document.created_by,
        )
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return _to_entity(model)

    async def apply_edit(
        self,
        document_id: UUID,
        editor: str,
        expected_version: int,
        content: str,
        lock_stale_before: datetime | None = None,
    ) -> Document:
        """Store new content as ``expected_version + 1`` and commit the transaction.

        The update only matches while the document is still at
        ``expected_version`` and its lock still lets ``editor`` write, so a
        lock taken or an edit committed since the caller read the document
        makes this fail without touching anything.
        """
        lock_permits = [DocumentModel.locked_by.is_(None), DocumentModel.locked_by == editor]
        if lock_stale_before is not None:
            lock_permits.append(DocumentModel.locked_at <= lock_stale_before)

        result = await self.session.execute(
            update(DocumentModel)
            .where(
                DocumentModel.id == document_id,
                DocumentModel.version == expected_version,
                or_(*lock_permits),
            )
            .values(content=content, version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.session.rollback()
            current = await self.get_by_id(document_id)
            if not current:
                raise NotFoundError("Document", str(document_id))
            if current.version == expected_version and current.locked_by is not None:
                raise LockConflictError(str(document_id), current.locked_by)
            raise ConflictError("Document was modified by another user")

        await self.session.commit()
        refreshed = await self.get_by_id(document_id)
        return refreshed

    async def rollback(self) -> None:
        await self.session.rollback()


def _to_entity(model: DocumentModel) -> Document:
    return Document(
        id=model.id,
        name=model.name,
        created_by=model.created_by,
        current_content=model.content,
        initial_content=model.initial_content,
        version=model.version,
        locked_by=model.locked_by,
        locked_at=model.locked_at,
        collaborators=set(model.collaborators),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
