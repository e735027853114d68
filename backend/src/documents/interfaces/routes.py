from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collaboration.application.services import broadcast_change, broadcast_lock
from collaboration.domain.publisher import EventPublisher
from comments.infrastructure.comment_repository import DbCommentRepository
from documents.application.services import (
    create_document,
    edit_document,
    get_document,
    get_history,
    list_documents,
    lock_document,
    save_document,
    unlock_document,
    verify_document,
    view_version,
)
from documents.infrastructure.document_repository import DbDocumentRepository
from documents.interfaces.schemas import (
    ChangeRecordResponse,
    CreateDocumentRequest,
    DocumentResponse,
    EditDocumentRequest,
    IntegrityResponse,
    LockResponse,
    SaveDocumentRequest,
    UnlockResponse,
    VersionResponse,
)
from history.infrastructure.change_log_repository import DbChangeLogRepository
from locking.infrastructure.lock_repository import DbLockRepository
from shared.config import settings
from shared.dependencies import get_current_user_id, get_db, get_event_publisher

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("/", response_model=DocumentResponse, status_code=201)
async def create(
    body: CreateDocumentRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    doc = await create_document(
        DbDocumentRepository(db),
        name=body.name,
        initial_content=body.content,
        created_by=user_id,
        collaborators=body.collaborators,
    )
    return DocumentResponse.from_entity(doc)


@router.get("/", response_model=list[DocumentResponse])
async def list_all(
    _: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    docs = await list_documents(DbDocumentRepository(db), DbCommentRepository(db))
    return [DocumentResponse.from_entity(d) for d in docs]


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_one(
    document_id: UUID,
    _: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    doc = await get_document(DbDocumentRepository(db), document_id, DbCommentRepository(db))
    return DocumentResponse.from_entity(doc)


@router.post("/{document_id}/changes", response_model=DocumentResponse)
async def edit(
    document_id: UUID,
    body: EditDocumentRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    doc, record = await edit_document(
        DbDocumentRepository(db),
        DbChangeLogRepository(db),
        document_id,
        editor=user_id,
        ops=[op.to_domain() for op in body.ops],
        lock_ttl_seconds=settings.LOCK_TTL_SECONDS,
    )
    await broadcast_change(publisher, doc, record)
    return DocumentResponse.from_entity(doc)


@router.put("/{document_id}/content", response_model=DocumentResponse)
async def save(
    document_id: UUID,
    body: SaveDocumentRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    doc, record = await save_document(
        DbDocumentRepository(db),
        DbChangeLogRepository(db),
        document_id,
        editor=user_id,
        content=body.content,
        lock_ttl_seconds=settings.LOCK_TTL_SECONDS,
    )
    await broadcast_change(publisher, doc, record)
    return DocumentResponse.from_entity(doc)


@router.post("/{document_id}/lock", response_model=LockResponse)
async def lock(
    document_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    repo = DbDocumentRepository(db)
    acquired = await lock_document(
        repo,
        DbLockRepository(db),
        document_id,
        user_id,
        lock_ttl_seconds=settings.LOCK_TTL_SECONDS,
    )
    if acquired:
        await broadcast_lock(publisher, document_id, user_id, locked=True)
    doc = await get_document(repo, document_id)
    return LockResponse(acquired=acquired, locked_by=doc.locked_by)


@router.post("/{document_id}/unlock", response_model=UnlockResponse)
async def unlock(
    document_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    repo = DbDocumentRepository(db)
    released = await unlock_document(repo, DbLockRepository(db), document_id, user_id)
    if released:
        await broadcast_lock(publisher, document_id, user_id, locked=False)
    doc = await get_document(repo, document_id)
    return UnlockResponse(released=released, locked_by=doc.locked_by)


@router.get("/{document_id}/history", response_model=list[ChangeRecordResponse])
async def history(
    document_id: UUID,
    _: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    records = await get_history(DbDocumentRepository(db), DbChangeLogRepository(db), document_id)
    return [ChangeRecordResponse.from_entity(r) for r in records]


@router.get("/{document_id}/versions/{version}", response_model=VersionResponse)
async def get_version(
    document_id: UUID,
    version: int,
    _: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    content = await view_version(
        DbDocumentRepository(db), DbChangeLogRepository(db), document_id, version
    )
    return VersionResponse(document_id=document_id, version=version, content=content)


@router.get("/{document_id}/integrity", response_model=IntegrityResponse)
async def integrity(
    document_id: UUID,
    _: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    repo = DbDocumentRepository(db)
    consistent = await verify_document(repo, DbChangeLogRepository(db), document_id)
    doc = await get_document(repo, document_id)
    return IntegrityResponse(document_id=document_id, version=doc.version, consistent=consistent)
