from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from comments.interfaces.schemas import CommentResponse
from documents.domain.entities import Document
from history.domain.entities import ChangeOp, ChangeRecord, DeleteOp, InsertOp, ReplaceOp


class InsertOpSchema(BaseModel):
    type: Literal["insert"]
    position: int = Field(ge=0)
    content: str

    def to_domain(self) -> InsertOp:
        return InsertOp(position=self.position, content=self.content)


class DeleteOpSchema(BaseModel):
    type: Literal["delete"]
    position: int = Field(ge=0)
    length: int = Field(ge=0)

    def to_domain(self) -> DeleteOp:
        return DeleteOp(position=self.position, length=self.length)


class ReplaceOpSchema(BaseModel):
    type: Literal["replace"]
    position: int = Field(ge=0)
    length: int = Field(ge=0)
    content: str

    def to_domain(self) -> ReplaceOp:
        return ReplaceOp(position=self.position, length=self.length, content=self.content)


ChangeOpSchema = Annotated[
    InsertOpSchema | DeleteOpSchema | ReplaceOpSchema, Field(discriminator="type")
]


def op_to_schema(op: ChangeOp) -> InsertOpSchema | DeleteOpSchema | ReplaceOpSchema:
    match op:
        case InsertOp():
            return InsertOpSchema(type="insert", position=op.position, content=op.content)
        case DeleteOp():
            return DeleteOpSchema(type="delete", position=op.position, length=op.length)
        case ReplaceOp():
            return ReplaceOpSchema(
                type="replace", position=op.position, length=op.length, content=op.content
            )
    raise TypeError(f"unknown change op {op!r}")


class CreateDocumentRequest(BaseModel):
    name: str = Field(min_length=1, max_length=500)
    content: str = ""
    collaborators: list[str] = Field(default_factory=list)


class EditDocumentRequest(BaseModel):
    ops: list[ChangeOpSchema] = Field(min_length=1)


class SaveDocumentRequest(BaseModel):
    content: str


class DocumentResponse(BaseModel):
    id: UUID
    name: str
    content: str
    version: int
    is_locked: bool
    locked_by: str | None = None
    collaborators: list[str]
    created_by: str
    comments: list[CommentResponse] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, doc: Document) -> "DocumentResponse":
        return cls(
            id=doc.id,
            name=doc.name,
            content=doc.current_content,
            version=doc.version,
            is_locked=doc.is_locked,
            locked_by=doc.locked_by,
            collaborators=sorted(doc.collaborators),
            created_by=doc.created_by,
            comments=[CommentResponse.from_entity(c) for c in doc.comments],
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        )


class ChangeRecordResponse(BaseModel):
    id: UUID
    document_id: UUID
    author: str
    version: int
    ops: list[ChangeOpSchema]
    timestamp: datetime | None = None

    @classmethod
    def from_entity(cls, record: ChangeRecord) -> "ChangeRecordResponse":
        return cls(
            id=record.id,
            document_id=record.document_id,
            author=record.author,
            version=record.version,
            ops=[op_to_schema(op) for op in record.ops],
            timestamp=record.timestamp,
        )


class LockResponse(BaseModel):
    acquired: bool
    locked_by: str | None = None


class UnlockResponse(BaseModel):
    released: bool
    locked_by: str | None = None


class VersionResponse(BaseModel):
    document_id: UUID
    version: int
    content: str


class IntegrityResponse(BaseModel):
    document_id: UUID
    version: int
    consistent: bool
