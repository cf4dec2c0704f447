"""Document library business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import ConflictError, NotFoundError, ValidationError
from src.core.supabase import get_supabase_client
from src.models.document import DocumentType
from src.schemas.document import DocumentCreate, DocumentUpdate, FolderCreate, StoredFile

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DocumentService:
    """Service for folders, documents, their versions and tags.

    Files are uploaded to blob storage by the client; this service records
    the storage keys and metadata. Every new upload of a document bumps its
    version and keeps the previous keys in ``document_versions``.
    """

    def __init__(self) -> None:
        """Initialize document service with Supabase client."""
        self.client = get_supabase_client()

    # Folders

    async def list_folders(self, company_id: UUID) -> list[dict[str, Any]]:
        return (
            self.client.table("folders")
            .select("*")
            .eq("company_id", str(company_id))
            .order("name")
            .execute()
        ).data or []

    async def get_folder(self, company_id: UUID, folder_id: UUID | str) -> dict[str, Any]:
        response = (
            self.client.table("folders")
            .select("*")
            .eq("id", str(folder_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Folder not found")
        return response.data

    async def create_folder(self, company_id: UUID, data: FolderCreate) -> dict[str, Any]:
        if data.parent_id:
            await self._verify_folder(company_id, data.parent_id)
        response = (
            self.client.table("folders")
            .insert(
                {
                    "company_id": str(company_id),
                    "parent_id": str(data.parent_id) if data.parent_id else None,
                    "name": data.name,
                }
            )
            .execute()
        )
        return response.data[0]

    async def rename_folder(self, company_id: UUID, folder_id: UUID, name: str) -> dict[str, Any]:
        folder = await self.get_folder(company_id, folder_id)
        response = self.client.table("folders").update({"name": name}).eq("id", folder["id"]).execute()
        return response.data[0]

    async def delete_folder(self, company_id: UUID, folder_id: UUID) -> None:
        """Delete an empty folder.

        Raises:
            ConflictError: If the folder still holds documents or subfolders.
        """
        folder = await self.get_folder(company_id, folder_id)
        if self.client.table("documents").select("id").eq("folder_id", folder["id"]).limit(1).execute().data:
            raise ConflictError("Folder still contains documents")
        if self.client.table("folders").select("id").eq("parent_id", folder["id"]).limit(1).execute().data:
            raise ConflictError("Folder still contains subfolders")
        self.client.table("folders").delete().eq("id", folder["id"]).execute()

    # Documents

    async def list_documents(
        self,
        company_id: UUID,
        document_type: DocumentType | None = None,
        folder_id: UUID | None = None,
        tag: str | None = None,
    ) -> list[dict[str, Any]]:
        """List documents, newest first, with their tags."""
        query = (
            self.client.table("documents")
            .select("*")
            .eq("company_id", str(company_id))
        )
        if document_type:
            query = query.eq("type", document_type.value)
        if folder_id:
            query = query.eq("folder_id", str(folder_id))
        if tag:
            tagged = self.client.table("document_tags").select("document_id").eq("tag", tag).execute().data or []
            query = query.in_("id", [t["document_id"] for t in tagged])

        documents = query.order("created_at", desc=True).execute().data or []
        tags = self._tags([d["id"] for d in documents])
        for document in documents:
            document["tags"] = tags.get(document["id"], [])
        return documents

    async def get_document(self, company_id: UUID, document_id: UUID | str) -> dict[str, Any]:
        """Get a document with its tags and versions, newest first.

        Raises:
            NotFoundError: If absent or in another company.
        """
        document = self._document_row(company_id, document_id)
        document["tags"] = self._tags([document["id"]]).get(document["id"], [])
        document["versions"] = (
            self.client.table("document_versions")
            .select("*")
            .eq("document_id", document["id"])
            .order("version", desc=True)
            .execute()
        ).data or []
        return document

    async def create_document(self, company_id: UUID, data: DocumentCreate, uploader_id: str) -> dict[str, Any]:
        """Register an uploaded file as version 1 of a new document.

        Raises:
            ValidationError: If the folder or meeting is not in this company.
        """
        if data.folder_id:
            await self._verify_folder(company_id, data.folder_id)
        if data.meeting_id:
            await self._verify_meeting(company_id, data.meeting_id)

        response = (
            self.client.table("documents")
            .insert(
                {
                    "company_id": str(company_id),
                    "folder_id": str(data.folder_id) if data.folder_id else None,
                    "uploader_id": uploader_id,
                    "name": data.name,
                    "description": data.description,
                    "type": data.type.value,
                    "mime_type": data.mime_type,
                    "size": data.size,
                    "storage_key": data.storage_key,
                    "version": 1,
                }
            )
            .execute()
        )
        document = response.data[0]
        self._record_version(document["id"], 1, data, uploader_id)

        if data.meeting_id:
            self.client.table("meeting_documents").insert(
                {"meeting_id": str(data.meeting_id), "document_id": document["id"], "is_pre_read": False}
            ).execute()
            logger.info("Document %s attached to meeting %s", document["id"], data.meeting_id)

        logger.info("Document %s created in company %s", document["id"], company_id)
        return await self.get_document(company_id, document["id"])

    async def update_document(self, company_id: UUID, document_id: UUID, data: DocumentUpdate) -> dict[str, Any]:
        document = self._document_row(company_id, document_id)

        update = data.model_dump(exclude_unset=True, mode="json")
        if not update:
            raise ValidationError("Nothing to update")
        if update.get("folder_id"):
            await self._verify_folder(company_id, UUID(update["folder_id"]))
        update["updated_at"] = _now()

        self.client.table("documents").update(update).eq("id", document["id"]).execute()
        return await self.get_document(company_id, document["id"])

    async def add_version(
        self,
        company_id: UUID,
        document_id: UUID,
        data: StoredFile,
        uploader_id: str,
    ) -> dict[str, Any]:
        """Make an uploaded file the document's next version."""
        document = self._document_row(company_id, document_id)
        version = document["version"] + 1

        self._record_version(document["id"], version, data, uploader_id)
        self.client.table("documents").update(
            {
                "version": version,
                "storage_key": data.storage_key,
                "mime_type": data.mime_type or document.get("mime_type"),
                "size": data.size,
                "updated_at": _now(),
            }
        ).eq("id", document["id"]).execute()

        logger.info("Document %s now at version %d", document["id"], version)
        return await self.get_document(company_id, document["id"])

    async def delete_document(self, company_id: UUID, document_id: UUID) -> None:
        """Delete a document with its versions, tags and meeting links."""
        document = self._document_row(company_id, document_id)
        for table in ("document_versions", "document_tags", "meeting_documents"):
            self.client.table(table).delete().eq("document_id", document["id"]).execute()
        self.client.table("documents").delete().eq("id", document["id"]).execute()
        logger.info("Document %s deleted from company %s", document["id"], company_id)

    async def download_info(self, company_id: UUID, document_id: UUID) -> dict[str, Any]:
        """Storage location of the document's current version."""
        return self._document_row(company_id, document_id)

    # Tags

    async def add_tags(self, company_id: UUID, document_id: UUID, tags: list[str]) -> dict[str, Any]:
        """Tag a document; tags it already has are skipped."""
        document = self._document_row(company_id, document_id)
        existing = set(self._tags([document["id"]]).get(document["id"], []))
        new_tags = [t for t in dict.fromkeys(tags) if t not in existing]
        if new_tags:
            self.client.table("document_tags").insert(
                [{"document_id": document["id"], "tag": t} for t in new_tags]
            ).execute()
        return await self.get_document(company_id, document["id"])

    async def remove_tag(self, company_id: UUID, document_id: UUID, tag: str) -> dict[str, Any]:
        """Remove a tag.

        Raises:
            NotFoundError: If the document does not carry the tag.
        """
        document = self._document_row(company_id, document_id)
        removed = (
            self.client.table("document_tags")
            .delete()
            .eq("document_id", document["id"])
            .eq("tag", tag)
            .execute()
        )
        if not removed.data:
            raise NotFoundError("Tag not found on document")
        return await self.get_document(company_id, document["id"])

    # Helpers

    def _document_row(self, company_id: UUID, document_id: UUID | str) -> dict[str, Any]:
        response = (
            self.client.table("documents")
            .select("*")
            .eq("id", str(document_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError("Document not found")
        return response.data

    def _tags(self, document_ids: list[str]) -> dict[str, list[str]]:
        if not document_ids:
            return {}
        rows = (
            self.client.table("document_tags")
            .select("document_id, tag")
            .in_("document_id", document_ids)
            .order("tag")
            .execute()
        ).data or []
        tags: dict[str, list[str]] = {}
        for row in rows:
            tags.setdefault(row["document_id"], []).append(row["tag"])
        return tags

    def _record_version(self, document_id: str, version: int, data: StoredFile, uploader_id: str) -> None:
        self.client.table("document_versions").insert(
            {
                "document_id": document_id,
                "version": version,
                "storage_key": data.storage_key,
                "size": data.size,
                "uploader_id": uploader_id,
            }
        ).execute()

    async def _verify_folder(self, company_id: UUID, folder_id: UUID) -> None:
        try:
            await self.get_folder(company_id, folder_id)
        except NotFoundError:
            raise ValidationError("Folder not found in this company") from None

    async def _verify_meeting(self, company_id: UUID, meeting_id: UUID) -> None:
        meeting = (
            self.client.table("meetings")
            .select("id")
            .eq("id", str(meeting_id))
            .eq("company_id", str(company_id))
            .maybe_single()
            .execute()
        )
        if not meeting or not meeting.data:
            raise ValidationError("Meeting not found in this company")
