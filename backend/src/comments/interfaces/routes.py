from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collaboration.application.services import (
    broadcast_comment,
    broadcast_reply,
    broadcast_resolution,
)
from collaboration.domain.publisher import EventPublisher
from comments.application.services import (
    add_comment,
    add_reply,
    get_comment,
    list_comments,
    resolve_comment,
)
from comments.infrastructure.comment_repository import DbCommentRepository
from comments.interfaces.schemas import (
    AddCommentRequest,
    AddReplyRequest,
    CommentResponse,
    ReplyResponse,
    ResolveResponse,
)
from documents.infrastructure.document_repository import DbDocumentRepository
from shared.dependencies import get_current_user_id, get_db, get_event_publisher

router = APIRouter(prefix="/api", tags=["comments"])


@router.get("/documents/{document_id}/comments", response_model=list[CommentResponse])
async def list_for_document(
    document_id: UUID,
    _: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    comments = await list_comments(DbDocumentRepository(db), DbCommentRepository(db), document_id)
    return [CommentResponse.from_entity(c) for c in comments]


@router.post(
    "/documents/{document_id}/comments", response_model=CommentResponse, status_code=201
)
async def create(
    document_id: UUID,
    body: AddCommentRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    comment = await add_comment(
        DbDocumentRepository(db),
        DbCommentRepository(db),
        document_id,
        author=user_id,
        content=body.content,
        position=body.position.to_domain() if body.position else None,
    )
    await broadcast_comment(publisher, comment)
    return CommentResponse.from_entity(comment)


@router.post("/comments/{comment_id}/replies", response_model=ReplyResponse, status_code=201)
async def reply(
    comment_id: UUID,
    body: AddReplyRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    repo = DbCommentRepository(db)
    created = await add_reply(repo, comment_id, author=user_id, content=body.content)
    await broadcast_reply(publisher, await get_comment(repo, comment_id), created)
    return ReplyResponse.from_entity(created)


@router.post("/comments/{comment_id}/resolve", response_model=ResolveResponse)
async def resolve(
    comment_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
):
    repo = DbCommentRepository(db)
    resolved = await resolve_comment(repo, comment_id)
    await broadcast_resolution(publisher, await get_comment(repo, comment_id), user_id)
    return ResolveResponse(resolved=resolved)
