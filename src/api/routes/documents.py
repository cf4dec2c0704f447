"""Document library API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import require_permission
from src.models.document import DocumentType
from src.schemas.auth import UserContext
from src.schemas.document import (
    DocumentCreate,
    DocumentDownloadResponse,
    DocumentResponse,
    DocumentUpdate,
    FolderCreate,
    FolderResponse,
    FolderUpdate,
    StoredFile,
    TagsAdd,
)
from src.services.document_service import DocumentService

router = APIRouter(prefix="/companies/{company_id}", tags=["documents"])

ViewUser = Annotated[UserContext, Depends(require_permission("documents.view"))]
UploadUser = Annotated[UserContext, Depends(require_permission("documents.upload"))]
DeleteUser = Annotated[UserContext, Depends(require_permission("documents.delete"))]


# Folders


@router.get("/folders", response_model=list[FolderResponse], summary="List folders")
async def list_folders(company_id: UUID, user: ViewUser) -> list[FolderResponse]:
    folders = await DocumentService().list_folders(company_id)
    return [FolderResponse(**f) for f in folders]


@router.post(
    "/folders",
    response_model=FolderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create folder",
)
async def create_folder(company_id: UUID, data: FolderCreate, user: UploadUser) -> FolderResponse:
    folder = await DocumentService().create_folder(company_id, data)
    return FolderResponse(**folder)


@router.put("/folders/{folder_id}", response_model=FolderResponse, summary="Rename folder")
async def rename_folder(company_id: UUID, folder_id: UUID, data: FolderUpdate, user: UploadUser) -> FolderResponse:
    folder = await DocumentService().rename_folder(company_id, folder_id, data.name)
    return FolderResponse(**folder)


@router.delete(
    "/folders/{folder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete folder",
    description="Only empty folders can be deleted.",
)
async def delete_folder(company_id: UUID, folder_id: UUID, user: DeleteUser) -> None:
    await DocumentService().delete_folder(company_id, folder_id)


# Documents


@router.get("/documents", response_model=list[DocumentResponse], summary="List documents")
async def list_documents(
    company_id: UUID,
    user: ViewUser,
    document_type: DocumentType | None = None,
    folder_id: UUID | None = None,
    tag: str | None = None,
) -> list[DocumentResponse]:
    documents = await DocumentService().list_documents(
        company_id, document_type=document_type, folder_id=folder_id, tag=tag
    )
    return [DocumentResponse(**d) for d in documents]


@router.post(
    "/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register document",
    description="Records a file already uploaded to blob storage, optionally attaching it to a meeting.",
)
async def create_document(company_id: UUID, data: DocumentCreate, user: UploadUser) -> DocumentResponse:
    document = await DocumentService().create_document(company_id, data, user.user_id)
    return DocumentResponse(**document)


@router.get("/documents/{document_id}", response_model=DocumentResponse, summary="Get document")
async def get_document(company_id: UUID, document_id: UUID, user: ViewUser) -> DocumentResponse:
    document = await DocumentService().get_document(company_id, document_id)
    return DocumentResponse(**document)


@router.get(
    "/documents/{document_id}/download",
    response_model=DocumentDownloadResponse,
    summary="Get document download location",
)
async def download_document(
    company_id: UUID,
    document_id: UUID,
    user: Annotated[UserContext, Depends(require_permission("documents.download"))],
) -> DocumentDownloadResponse:
    document = await DocumentService().download_info(company_id, document_id)
    return DocumentDownloadResponse(**document)


@router.put("/documents/{document_id}", response_model=DocumentResponse, summary="Update document")
async def update_document(
    company_id: UUID,
    document_id: UUID,
    data: DocumentUpdate,
    user: UploadUser,
) -> DocumentResponse:
    document = await DocumentService().update_document(company_id, document_id, data)
    return DocumentResponse(**document)


@router.post(
    "/documents/{document_id}/versions",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload new document version",
)
async def add_document_version(
    company_id: UUID,
    document_id: UUID,
    data: StoredFile,
    user: UploadUser,
) -> DocumentResponse:
    document = await DocumentService().add_version(company_id, document_id, data, user.user_id)
    return DocumentResponse(**document)


@router.delete(
    "/documents/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete document",
)
async def delete_document(company_id: UUID, document_id: UUID, user: DeleteUser) -> None:
    await DocumentService().delete_document(company_id, document_id)


# Tags


@router.post("/documents/{document_id}/tags", response_model=DocumentResponse, summary="Tag document")
async def add_document_tags(
    company_id: UUID,
    document_id: UUID,
    data: TagsAdd,
    user: UploadUser,
) -> DocumentResponse:
    document = await DocumentService().add_tags(company_id, document_id, data.tags)
    return DocumentResponse(**document)


@router.delete("/documents/{document_id}/tags/{tag}", response_model=DocumentResponse, summary="Remove document tag")
async def remove_document_tag(
    company_id: UUID,
    document_id: UUID,
    tag: str,
    user: UploadUser,
) -> DocumentResponse:
    document = await DocumentService().remove_tag(company_id, document_id, tag)
    return DocumentResponse(**document)
