from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from history.domain.entities import ChangeOp, ChangeRecord


class ChangeLogRepository(Protocol):
    async def append(
        self, document_id: UUID, author: str, ops: Sequence[ChangeOp]
    ) -> ChangeRecord: ...

    async def list_for_document(
        self, document_id: UUID, up_to_version: int | None = None
    ) -> list[ChangeRecord]: ...

    async def get_latest_version(self, document_id: UUID) -> int: ...
