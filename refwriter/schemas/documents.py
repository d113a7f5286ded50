from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

class CreateDocumentRequest(BaseModel):
    name: str = Field(default="Pasted text", min_length=1, max_length=255)
    content: str

    @field_validator('content')
    @classmethod
    def content_must_not_be_empty(cls, v):
        if not v or not v.strip():
            raise ValueError('Reference text cannot be empty')
        return v

class DocumentSummary(BaseModel):
    id: str
    name: str
    character_count: int
    created_at: datetime

class DocumentResponse(DocumentSummary):
    content: str
    keywords: List[str]

class DocumentListResponse(BaseModel):
    documents: List[DocumentSummary]
    total: int

class DeleteDocumentResponse(BaseModel):
    id: str
    deleted: bool
    message: Optional[str] = None
