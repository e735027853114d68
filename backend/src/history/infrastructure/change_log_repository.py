from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from history.domain.entities import ChangeOp, ChangeRecord
from history.infrastructure.models import ChangeRecordModel
from history.infrastructure.op_codec import decode_ops, encode_ops


class DbChangeLogRepository:
    """Append-only store of change records.

    ``append`` only flushes: the record joins the caller's transaction and is
    committed together with the document it belongs to.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_latest_version(self, document_id: UUID) -> int:
        result = await self.session.execute(
            select(func.coalesce(func.max(ChangeRecordModel.version), 0))
            .where(ChangeRecordModel.document_id == document_id)
        )
        return result.scalar_one()

    async def append(
        self, document_id: UUID, author: str, ops: Sequence[ChangeOp]
    ) -> ChangeRecord:
        version = await self.get_latest_version(document_id) + 1
        model = ChangeRecordModel(
            document_id=document_id,
            version=version,
            author=author,
            ops=encode_ops(ops),
        )
        self.session.add(model)
        await self.session.flush()
        return _to_entity(model)

    async def list_for_document(
        self, document_id: UUID, up_to_version: int | None = None
    ) -> list[ChangeRecord]:
        query = select(ChangeRecordModel).where(ChangeRecordModel.document_id == document_id)
        if up_to_version is not None:
            query = query.where(ChangeRecordModel.version <= up_to_version)
        result = await self.session.execute(query.order_by(ChangeRecordModel.version.asc()))
        return [_to_entity(m) for m in result.scalars().all()]


def _to_entity(model: ChangeRecordModel) -> ChangeRecord:
    return ChangeRecord(
        id=model.id,
        document_id=model.document_id,
        author=model.author,
        version=model.version,
        ops=decode_ops(model.ops),
        timestamp=model.created_at,
    )
