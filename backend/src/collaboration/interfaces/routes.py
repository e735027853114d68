from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collaboration.application.services import get_active_collaborators
from documents.application.services import get_document
from documents.infrastructure.document_repository import DbDocumentRepository
from shared.dependencies import get_current_user_id, get_db

router = APIRouter(prefix="/api/documents", tags=["collaboration"])


@router.get("/{document_id}/collaborators/active", response_model=list[str])
async def active_collaborators(
    document_id: UUID,
    _: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await get_document(DbDocumentRepository(db), document_id)
    return get_active_collaborators(document_id)
