from typing import Protocol
from uuid import UUID

from comments.domain.entities import Comment, Reply


class CommentRepository(Protocol):
    async def get_by_id(self, comment_id: UUID) -> Comment | None: ...

    async def list_for_document(self, document_id: UUID) -> list[Comment]: ...

    async def create(self, comment: Comment) -> Comment: ...

    async def mark_resolved(self, comment_id: UUID) -> bool: ...

    async def add_reply(self, reply: Reply) -> Reply: ...
