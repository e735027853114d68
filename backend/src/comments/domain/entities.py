from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class CommentAnchor:
    """Line range of the document a comment refers to."""

    start_line: int
    end_line: int


@dataclass
class Reply:
    comment_id: UUID
    author: str
    content: str
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)


@dataclass
class Comment:
    document_id: UUID
    author: str
    content: str
    resolved: bool = False
    position: CommentAnchor | None = None
    replies: list[Reply] = field(default_factory=list)
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
