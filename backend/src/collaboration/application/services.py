from collections import Counter
from uuid import UUID

from collaboration.domain.entities import DocumentEvent, EventType
from collaboration.domain.publisher import EventPublisher
from comments.domain.entities import Comment, Reply
from documents.domain.entities import Document
from history.domain.entities import ChangeRecord, op_to_dict


class PresenceRegistry:
    """Users with an open real-time session, per document, on this process."""

    def __init__(self):
        self._sessions: dict[UUID, Counter[str]] = {}

    def join(self, document_id: UUID, user_id: str) -> None:
        self._sessions.setdefault(document_id, Counter())[user_id] += 1

    def leave(self, document_id: UUID, user_id: str) -> None:
        sessions = self._sessions.get(document_id)
        if not sessions:
            return
        sessions[user_id] -= 1
        if sessions[user_id] <= 0:
            del sessions[user_id]
        if not sessions:
            del self._sessions[document_id]

    def active_users(self, document_id: UUID) -> list[str]:
        return sorted(self._sessions.get(document_id, ()))


presence = PresenceRegistry()


def get_active_collaborators(document_id: UUID, registry: PresenceRegistry = presence) -> list[str]:
    return registry.active_users(document_id)


async def broadcast_change(
    publisher: EventPublisher, document: Document, record: ChangeRecord
) -> None:
    await publisher.publish(
        DocumentEvent(
            type=EventType.CHANGE,
            document_id=document.id,
            actor=record.author,
            version=record.version,
            payload={"ops": [op_to_dict(op) for op in record.ops]},
        )
    )


async def broadcast_lock(
    publisher: EventPublisher, document_id: UUID, user_id: str, locked: bool
) -> None:
    await publisher.publish(
        DocumentEvent(
            type=EventType.LOCKED if locked else EventType.UNLOCKED,
            document_id=document_id,
            actor=user_id,
        )
    )


async def broadcast_comment(publisher: EventPublisher, comment: Comment) -> None:
    await publisher.publish(
        DocumentEvent(
            type=EventType.COMMENT_ADDED,
            document_id=comment.document_id,
            actor=comment.author,
            payload={"comment_id": str(comment.id), "content": comment.content},
        )
    )


async def broadcast_reply(publisher: EventPublisher, comment: Comment, reply: Reply) -> None:
    await publisher.publish(
        DocumentEvent(
            type=EventType.REPLY_ADDED,
            document_id=comment.document_id,
            actor=reply.author,
            payload={
                "comment_id": str(comment.id),
                "reply_id": str(reply.id),
                "content": reply.content,
            },
        )
    )


async def broadcast_resolution(
    publisher: EventPublisher, comment: Comment, user_id: str
) -> None:
    await publisher.publish(
        DocumentEvent(
            type=EventType.COMMENT_RESOLVED,
            document_id=comment.document_id,
            actor=user_id,
            payload={"comment_id": str(comment.id)},
        )
    )
