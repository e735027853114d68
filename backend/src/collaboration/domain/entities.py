from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any
from uuid import UUID


class EventType(StrEnum):
    CHANGE = "change"
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    COMMENT_ADDED = "comment_added"
    REPLY_ADDED = "reply_added"
    COMMENT_RESOLVED = "comment_resolved"


@dataclass(frozen=True)
class DocumentEvent:
    type: EventType
    document_id: UUID
    actor: str
    version: int | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
