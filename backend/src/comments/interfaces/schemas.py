from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field, StringConstraints, model_validator

from comments.domain.entities import Comment, CommentAnchor, Reply

NonBlankText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CommentPosition(BaseModel):
    start_line: int = Field(ge=0)
    end_line: int = Field(ge=0)

    @model_validator(mode="after")
    def check_range(self) -> "CommentPosition":
        if self.end_line < self.start_line:
            raise ValueError("end_line must not be before start_line")
        return self

    def to_domain(self) -> CommentAnchor:
        return CommentAnchor(start_line=self.start_line, end_line=self.end_line)


class AddCommentRequest(BaseModel):
    content: NonBlankText
    position: CommentPosition | None = None


class AddReplyRequest(BaseModel):
    content: NonBlankText


class ReplyResponse(BaseModel):
    id: UUID
    comment_id: UUID
    author: str
    content: str
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, reply: Reply) -> "ReplyResponse":
        return cls(
            id=reply.id,
            comment_id=reply.comment_id,
            author=reply.author,
            content=reply.content,
            created_at=reply.created_at,
        )


class CommentResponse(BaseModel):
    id: UUID
    document_id: UUID
    author: str
    content: str
    resolved: bool
    position: CommentPosition | None = None
    replies: list[ReplyResponse] = Field(default_factory=list)
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, comment: Comment) -> "CommentResponse":
        position = None
        if comment.position:
            position = CommentPosition(
                start_line=comment.position.start_line, end_line=comment.position.end_line
            )
        return cls(
            id=comment.id,
            document_id=comment.document_id,
            author=comment.author,
            content=comment.content,
            resolved=comment.resolved,
            position=position,
            replies=[ReplyResponse.from_entity(r) for r in comment.replies],
            created_at=comment.created_at,
        )


class ResolveResponse(BaseModel):
    resolved: bool
