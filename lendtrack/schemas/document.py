from datetime import datetime
from pydantic import BaseModel, Field
from lendtrack.models.document import DocumentType


class DocumentCreate(BaseModel):
    code: str | None = Field(None, max_length=64)  # None -> DOC-ACQ-/DOC-MISC-rok-číslo
    type: DocumentType
    title: str = Field(..., min_length=1, max_length=255)
    related_ref: str | None = Field(None, max_length=64)
    content: str = Field(..., min_length=1)


class DocumentResponse(BaseModel):
    id: int
    code: str
    type: DocumentType
    title: str
    related_ref: str | None
    content: str
    signed_by: list[str]
    created_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}
