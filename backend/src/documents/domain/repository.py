from datetime import datetime
from typing import Protocol
from uuid import UUID

from documents.domain.entities import Document


class DocumentRepository(Protocol):
    async def get_by_id(self, document_id: UUID) -> Document | None: ...

    async def list_all(self) -> list[Document]: ...

    async def create(self, document: Document) -> Document: ...

    async def apply_edit(
        self,
        document_id: UUID,
        editor: str,
        expected_version: int,
        content: str,
        lock_stale_before: datetime | None = None,
    ) -> Document: ...

    async def rollback(self) -> None: ...
