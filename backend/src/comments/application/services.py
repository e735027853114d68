import logging
from uuid import UUID

from comments.domain.entities import Comment, CommentAnchor, Reply
from comments.domain.repository import CommentRepository
from documents.domain.repository import DocumentRepository
from shared.exceptions import NotFoundError

logger = logging.getLogger(__name__)


async def add_comment(
    doc_repo: DocumentRepository,
    repo: CommentRepository,
    document_id: UUID,
    author: str,
    content: str,
    position: CommentAnchor | None = None,
) -> Comment:
    """Attach a comment to a document. Allowed whatever the lock state."""
    if not await doc_repo.get_by_id(document_id):
        raise NotFoundError("Document", str(document_id))
    comment = await repo.create(
        Comment(document_id=document_id, author=author, content=content, position=position)
    )
    logger.info("Comment %s added to document %s by %s", comment.id, document_id, author)
    return comment


async def list_comments(
    doc_repo: DocumentRepository, repo: CommentRepository, document_id: UUID
) -> list[Comment]:
    if not await doc_repo.get_by_id(document_id):
        raise NotFoundError("Document", str(document_id))
    return await repo.list_for_document(document_id)


async def get_comment(repo: CommentRepository, comment_id: UUID) -> Comment:
    comment = await repo.get_by_id(comment_id)
    if not comment:
        raise NotFoundError("Comment", str(comment_id))
    return comment


async def resolve_comment(repo: CommentRepository, comment_id: UUID) -> bool:
    # resolved only ever goes false -> true, so a repeat call is a no-op
    if not await repo.mark_resolved(comment_id):
        raise NotFoundError("Comment", str(comment_id))
    return True


async def add_reply(
    repo: CommentRepository, comment_id: UUID, author: str, content: str
) -> Reply:
    if not await repo.get_by_id(comment_id):
        raise NotFoundError("Comment", str(comment_id))
    reply = await repo.add_reply(Reply(comment_id=comment_id, author=author, content=content))
    logger.info("Reply %s added to comment %s by %s", reply.id, comment_id, author)
    return reply
