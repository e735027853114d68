from uuid import UUID

from history.domain.entities import ChangeRecord
from history.domain.replay import replay
from history.domain.repository import ChangeLogRepository


async def list_history(repo: ChangeLogRepository, document_id: UUID) -> list[ChangeRecord]:
    return await repo.list_for_document(document_id)


async def reconstruct(
    repo: ChangeLogRepository, document_id: UUID, base_content: str, target_version: int
) -> str:
    """Content of the document at ``target_version``, replayed from its version-0 baseline."""
    if target_version == 0:
        return base_content
    records = await repo.list_for_document(document_id, up_to_version=target_version)
    return replay(base_content, records, target_version)
