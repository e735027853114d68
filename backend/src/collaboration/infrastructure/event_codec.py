import json
from datetime import datetime
from uuid import UUID

from collaboration.domain.entities import DocumentEvent, EventType


def encode_event(event: DocumentEvent) -> bytes:
    return json.dumps(
        {
            "type": event.type.value,
            "document_id": str(event.document_id),
            "actor": event.actor,
            "version": event.version,
            "payload": event.payload,
            "occurred_at": event.occurred_at.isoformat(),
        }
    ).encode()


def decode_event(data: bytes | str) -> DocumentEvent:
    raw = json.loads(data)
    return DocumentEvent(
        type=EventType(raw["type"]),
        document_id=UUID(raw["document_id"]),
        actor=raw["actor"],
        version=raw.get("version"),
        payload=raw.get("payload") or {},
        occurred_at=datetime.fromisoformat(raw["occurred_at"]),
    )
