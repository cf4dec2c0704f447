"""Document and folder Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.models.document import DocumentType


class FolderCreate(BaseModel):
    """Schema for creating a folder."""

    name: str = Field(..., min_length=1, max_length=255)
    parent_id: UUID | None = None


class FolderUpdate(BaseModel):
    """Schema for renaming a folder."""

    name: str = Field(..., min_length=1, max_length=255)


class FolderResponse(BaseModel):
    """Schema for folder API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    parent_id: UUID | None = None
    name: str
    created_at: datetime | None = None


class StoredFile(BaseModel):
    """Metadata of a file already uploaded to blob storage."""

    storage_key: str = Field(..., min_length=1, max_length=500)
    mime_type: str | None = Field(default=None, max_length=255)
    size: int | None = Field(default=None, ge=0)


class DocumentCreate(StoredFile):
    """Schema for registering an uploaded document."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    type: DocumentType = DocumentType.GENERAL
    folder_id: UUID | None = None
    meeting_id: UUID | None = Field(default=None, description="Meeting to attach the document to")


class DocumentUpdate(BaseModel):
    """Schema for editing document details or moving it between folders."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    type: DocumentType | None = None
    folder_id: UUID | None = None


class TagsAdd(BaseModel):
    """Schema for tagging a document."""

    tags: list[str] = Field(..., min_length=1)


class DocumentVersionResponse(BaseModel):
    """Schema for one stored version of a document."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    version: int
    storage_key: str
    size: int | None = None
    uploader_id: str
    created_at: datetime | None = None


class DocumentResponse(BaseModel):
    """Schema for document API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    folder_id: UUID | None = None
    uploader_id: str
    name: str
    description: str | None = None
    type: DocumentType
    mime_type: str | None = None
    size: int | None = None
    storage_key: str
    version: int
    tags: list[str] = Field(default_factory=list)
    versions: list[DocumentVersionResponse] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DocumentDownloadResponse(BaseModel):
    """Where the current version of a document is stored."""

    name: str
    storage_key: str
    mime_type: str | None = None
    size: int | None = None
    version: int
