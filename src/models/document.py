"""Document and folder type definitions.

File bytes live in blob storage; these rows hold the metadata and the
storage keys that point at them.
"""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class DocumentType(str, Enum):
    """Document type values."""

    MEETING = "MEETING"
    FINANCIAL = "FINANCIAL"
    GOVERNANCE = "GOVERNANCE"
    GENERAL = "GENERAL"


class Folder(TypedDict):
    """Folder table row representation."""

    id: str
    company_id: str
    parent_id: str | None
    name: str
    created_at: datetime


class Document(TypedDict):
    """Document table row representation."""

    id: str
    company_id: str
    folder_id: str | None
    uploader_id: str
    name: str
    description: str | None
    type: DocumentType
    mime_type: str | None
    size: int | None
    storage_key: str
    version: int
    created_at: datetime


class DocumentVersion(TypedDict):
    """One superseded or current upload of a document."""

    id: str
    document_id: str
    version: int
    storage_key: str
    size: int | None
    uploader_id: str
    created_at: datetime
