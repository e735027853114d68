from collections import defaultdict
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from comments.domain.entities import Comment, CommentAnchor, Reply
from comments.infrastructure.models import CommentModel, ReplyModel


class DbCommentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, comment_id: UUID) -> Comment | None:
        result = await self.session.execute(
            select(CommentModel).where(CommentModel.id == comment_id)
        )
        model = result.scalar_one_or_none()
        if not model:
            return None
        replies = await self._replies_for([model.id])
        return _to_entity(model, replies[model.id])

    async def list_for_document(self, document_id: UUID) -> list[Comment]:
        result = await self.session.execute(
            select(CommentModel)
            .where(CommentModel.document_id == document_id)
            .order_by(CommentModel.created_at.asc())
        )
        models = result.scalars().all()
        replies = await self._replies_for([m.id for m in models])
        return [_to_entity(m, replies[m.id]) for m in models]

    async def create(self, comment: Comment) -> Comment:
        model = CommentModel(
            document_id=comment.document_id,
            author=comment.author,
            content=comment.content,
            resolved=False,
            start_line=comment.position.start_line if comment.position else None,
            end_line=comment.position.end_line if comment.position else None,
        )
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return _to_entity(model, [])

    async def mark_resolved(self, comment_id: UUID) -> bool:
        result = await self.session.execute(
            update(CommentModel)
            .where(CommentModel.id == comment_id)
            .values(resolved=True)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount == 1

    async def add_reply(self, reply: Reply) -> Reply:
        model = ReplyModel(
            comment_id=reply.comment_id,
            author=reply.author,
            content=reply.content,
        )
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return _reply_to_entity(model)

    async def _replies_for(self, comment_ids: list[UUID]) -> dict[UUID, list[Reply]]:
        grouped: dict[UUID, list[Reply]] = defaultdict(list)
        if not comment_ids:
            return grouped
        result = await self.session.execute(
            select(ReplyModel)
            .where(ReplyModel.comment_id.in_(comment_ids))
            .order_by(ReplyModel.created_at.asc())
        )
        for model in result.scalars().all():
            grouped[model.comment_id].append(_reply_to_entity(model))
        return grouped


def _to_entity(model: CommentModel, replies: list[Reply]) -> Comment:
    position = None
    if model.start_line is not None and model.end_line is not None:
        position = CommentAnchor(start_line=model.start_line, end_line=model.end_line)
    return Comment(
        id=model.id,
        document_id=model.document_id,
        author=model.author,
        content=model.content,
        resolved=model.resolved,
        position=position,
        replies=list(replies),
        created_at=model.created_at,
    )


def _reply_to_entity(model: ReplyModel) -> Reply:
    return Reply(
        id=model.id,
        comment_id=model.comment_id,
        author=model.author,
        content=model.content,
        created_at=model.created_at,
    )
