from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from comments.domain.entities import Comment
from locking.domain.entities import Lock


@dataclass
class Document:
    name: str
    created_by: str
    current_content: str = ""
    initial_content: str = ""
    version: int = 0
    locked_by: str | None = None
    locked_at: datetime | None = None
    collaborators: set[str] = field(default_factory=set)
    comments: list[Comment] = field(default_factory=list)
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)

    @property
    def is_locked(self) -> bool:
        return self.locked_by is not None

    @property
    def lock(self) -> Lock | None:
        if self.locked_by is None:
            return None
        return Lock(holder=self.locked_by, acquired_at=self.locked_at)
