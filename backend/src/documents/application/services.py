import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from comments.domain.repository import CommentRepository
from documents.domain.entities import Document
from documents.domain.repository import DocumentRepository
from history.application.services import list_history, reconstruct
from history.domain.entities import ChangeOp, ChangeRecord, ReplaceOp
from history.domain.replay import apply_ops
from history.domain.repository import ChangeLogRepository
from locking.application.services import acquire_lock, release_lock
from locking.domain.entities import stale_before
from locking.domain.repository import LockRepository
from shared.exceptions import ConflictError, LockConflictError, NotFoundError, VersionNotFoundError

logger = logging.getLogger(__name__)


async def create_document(
    repo: DocumentRepository,
    name: str,
    initial_content: str,
    created_by: str,
    collaborators: Iterable[str] = (),
) -> Document:
    """Create a document at version 0.

    ``initial_content`` is the version-0 baseline; it has no change record.
    """
    doc = Document(
        name=name,
        created_by=created_by,
        current_content=initial_content,
        initial_content=initial_content,
        collaborators={created_by, *collaborators},
    )
    created = await repo.create(doc)
    logger.info("Document %s created by %s", created.id, created_by)
    return created


async def get_document(
    repo: DocumentRepository,
    document_id: UUID,
    comment_repo: CommentRepository | None = None,
) -> Document:
    doc = await repo.get_by_id(document_id)
    if not doc:
        raise NotFoundError("Document", str(document_id))
    if comment_repo is not None:
        doc.comments = await comment_repo.list_for_document(document_id)
    return doc


async def list_documents(
    repo: DocumentRepository, comment_repo: CommentRepository | None = None
) -> list[Document]:
    docs = await repo.list_all()
    if comment_repo is not None:
        for doc in docs:
            doc.comments = await comment_repo.list_for_document(doc.id)
    return docs


async def edit_document(
    repo: DocumentRepository,
    change_repo: ChangeLogRepository,
    document_id: UUID,
    editor: str,
    ops: Sequence[ChangeOp],
    lock_ttl_seconds: int | None = None,
    expected_version: int | None = None,
) -> tuple[Document, ChangeRecord]:
    """Apply ``ops`` as the next version of the document.

    The editor must hold the lock, or the document must be unlocked; editing
    never takes the lock itself. When ``expected_version`` is given the ops
    were built against that version, and any other current version is a
    conflict. On any failure neither the document nor the change log is
    modified.
    """
    doc = await get_document(repo, document_id)
    if expected_version is not None and doc.version != expected_version:
        raise ConflictError("Document was modified by another user")
    now = datetime.now(timezone.utc)

    lock = doc.lock
    if lock and lock.blocks(editor, now, lock_ttl_seconds):
        raise LockConflictError(str(document_id), lock.holder)

    content = apply_ops(doc.current_content, ops)

    try:
        record = await change_repo.append(document_id, editor, ops)
    except IntegrityError:
        await repo.rollback()
        raise ConflictError("Document was modified by another user")
    if record.version != doc.version + 1:
        await repo.rollback()
        raise ConflictError("Document was modified by another user")

    updated = await repo.apply_edit(
        document_id,
        editor,
        expected_version=doc.version,
        content=content,
        lock_stale_before=stale_before(now, lock_ttl_seconds),
    )
    logger.info(
        "Document %s edited by %s: version %d -> %d (%d ops)",
        document_id,
        editor,
        doc.version,
        updated.version,
        len(ops),
    )
    return updated, record


async def save_document(
    repo: DocumentRepository,
    change_repo: ChangeLogRepository,
    document_id: UUID,
    editor: str,
    content: str,
    lock_ttl_seconds: int | None = None,
) -> tuple[Document, ChangeRecord]:
    """Replace the whole text with ``content`` as a single full-span replace op."""
    doc = await get_document(repo, document_id)
    op = ReplaceOp(position=0, length=len(doc.current_content), content=content)
    return await edit_document(
        repo,
        change_repo,
        document_id,
        editor,
        [op],
        lock_ttl_seconds=lock_ttl_seconds,
        expected_version=doc.version,
    )


async def lock_document(
    repo: DocumentRepository,
    lock_repo: LockRepository,
    document_id: UUID,
    user_id: str,
    lock_ttl_seconds: int | None = None,
) -> bool:
    await get_document(repo, document_id)
    return await acquire_lock(lock_repo, document_id, user_id, ttl_seconds=lock_ttl_seconds)


async def unlock_document(
    repo: DocumentRepository,
    lock_repo: LockRepository,
    document_id: UUID,
    user_id: str,
) -> bool:
    await get_document(repo, document_id)
    return await release_lock(lock_repo, document_id, user_id)


async def get_history(
    repo: DocumentRepository, change_repo: ChangeLogRepository, document_id: UUID
) -> list[ChangeRecord]:
    await get_document(repo, document_id)
    return await list_history(change_repo, document_id)


async def view_version(
    repo: DocumentRepository,
    change_repo: ChangeLogRepository,
    document_id: UUID,
    version: int,
) -> str:
    doc = await get_document(repo, document_id)
    if version < 0 or version > doc.version:
        raise VersionNotFoundError(version, doc.version)
    return await reconstruct(change_repo, document_id, doc.initial_content, version)


async def verify_document(
    repo: DocumentRepository, change_repo: ChangeLogRepository, document_id: UUID
) -> bool:
    """Check that replaying the full change log reproduces the stored content."""
    doc = await get_document(repo, document_id)
    replayed = await reconstruct(change_repo, document_id, doc.initial_content, doc.version)
    consistent = replayed == doc.current_content
    if not consistent:
        logger.warning(
            "Document %s content diverges from its change log at version %d",
            document_id,
            doc.version,
        )
    return consistent
