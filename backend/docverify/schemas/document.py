from typing import Literal

from pydantic import BaseModel, Field

from docverify.models.document import DocumentKind


class DocumentCreate(BaseModel):
    kind: DocumentKind
    title: str | None = None
    file_name: str = Field(min_length=1)
    file_ref: str = Field(min_length=1)
    mime_type: str | None = None
    file_size_bytes: int | None = Field(default=None, ge=1)
    owner_id: str | None = None  # defaults to the calling member


class DecisionRequest(BaseModel):
    version: int = Field(ge=1)
    outcome: Literal["APPROVED", "REJECTED"]
    note: str | None = None


class ReplaceRequest(BaseModel):
    file_name: str = Field(min_length=1)
    file_ref: str = Field(min_length=1)
    mime_type: str | None = None
    file_size_bytes: int | None = Field(default=None, ge=1)
    version: int | None = Field(default=None, ge=1)


class DocumentResponse(BaseModel):
    id: str
    owner_id: str
    owner_name: str
    area_id: str
    kind: str
    title: str
    file_name: str
    file_ref: str
    mime_type: str | None
    file_size_bytes: int | None
    status: str
    review_note: str | None
    submitted_at: str
    submitted_by: str
    decided_at: str | None
    decided_by: str | None
    version: int


class DocumentListResponse(BaseModel):
    items: list[DocumentResponse]
    total: int
    page: int
    per_page: int
    total_pages: int
    has_next: bool
    has_prev: bool


class DocumentHistoryResponse(BaseModel):
    id: str
    document_id: str
    action: str
    actor: str
    note: str | None
    file_name: str | None
    version: int
    occurred_at: str
