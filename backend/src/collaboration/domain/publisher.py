from typing import Protocol

from collaboration.domain.entities import DocumentEvent


class EventPublisher(Protocol):
    async def publish(self, event: DocumentEvent) -> None: ...
