from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID


class OpType(StrEnum):
    INSERT = "insert"
    DELETE = "delete"
    REPLACE = "replace"


@dataclass(frozen=True)
class InsertOp:
    position: int
    content: str
    type: OpType = field(default=OpType.INSERT, init=False)


@dataclass(frozen=True)
class DeleteOp:
    position: int
    length: int
    type: OpType = field(default=OpType.DELETE, init=False)


@dataclass(frozen=True)
class ReplaceOp:
    position: int
    length: int
    content: str
    type: OpType = field(default=OpType.REPLACE, init=False)


ChangeOp = InsertOp | DeleteOp | ReplaceOp


def op_to_dict(op: ChangeOp) -> dict[str, Any]:
    data: dict[str, Any] = {"type": op.type.value, "position": op.position}
    if not isinstance(op, InsertOp):
        data["length"] = op.length
    if not isinstance(op, DeleteOp):
        data["content"] = op.content
    return data


@dataclass(frozen=True)
class ChangeRecord:
    document_id: UUID
    author: str
    version: int
    ops: tuple[ChangeOp, ...]
    id: UUID | None = field(default=None)
    timestamp: datetime | None = field(default=None)
