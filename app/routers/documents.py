# =============================================================================
# app/routers/documents.py - Document Endpoints
# =============================================================================
# Upload, list, download and delete client documents.
#
# Clients work on their own documents. Admin and tech work on any client's
# documents and must say which client an upload is for.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile
from fastapi.responses import StreamingResponse

from app.auth import CurrentUser, require_any_role
from app.config import settings
from app.exceptions import FileTooLargeError, InvalidFileTypeError
from core.models.document import Document, DocumentType, UploadResult
from core.services.document_service import DocumentService
from lib.utils import content_disposition

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_extension(filename: str) -> None:
    file_ext = "." + filename.split(".")[-1].lower() if "." in filename else ""
    if file_ext not in settings.allowed_extensions_list:
        raise InvalidFileTypeError(filename, settings.allowed_extensions_list)


@router.get("", response_model=list[Document])
async def list_documents(
    client_id: Annotated[str | None, Query(description="Only this client's documents (admin/tech)")] = None,
    user: CurrentUser = Depends(require_any_role),
):
    """
    Documents visible to the caller, newest first.

    Clients always get their own; `client_id` is ignored for them.
    """
    return DocumentService.list_documents(user.role, user.id, client_id)


@router.post("", response_model=UploadResult, status_code=201)
async def upload_documents(
    files: Annotated[list[UploadFile], File(description="One or more files")],
    document_type: Annotated[DocumentType, Form(description="What the documents are")],
    client_id: Annotated[str | None, Form(description="Target client (required for admin/tech)")] = None,
    user: CurrentUser = Depends(require_any_role),
):
    """
    Upload files for a client.

    Every file is validated (extension, size) before any is stored, and a
    storage or database failure part way through removes the files already
    stored, so a batch lands whole or not at all.

    Raises:
        400: Missing client for admin/tech, or a disallowed file type
        404: Admin/tech named a client that doesn't exist
        413: A file is over the size limit
    """
    target_client = DocumentService.resolve_client_id(user.id, user.role, client_id)

    pending = []
    for upload in files:
        filename = upload.filename or "document"
        _check_extension(filename)

        content = await upload.read()
        if len(content) > settings.max_upload_size_bytes:
            raise FileTooLargeError(len(content) / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)

        pending.append((filename, content, upload.content_type))

    uploaded = DocumentService.upload_documents(target_client, user.id, document_type, pending)

    logger.info(f"User {user.id} uploaded {len(uploaded)} document(s) for client {target_client}")

    return UploadResult(
        uploaded=uploaded,
        documents=DocumentService.list_documents(user.role, user.id, target_client),
        message=f"Uploaded {len(uploaded)} document(s)",
    )


@router.get("/{document_id}", response_model=Document)
async def get_document(
    document_id: Annotated[str, Path(description="Document id")],
    user: CurrentUser = Depends(require_any_role),
):
    """Metadata for one document."""
    return DocumentService.get_document(document_id, user.role, user.id)


@router.get("/{document_id}/download")
async def download_document(
    document_id: Annotated[str, Path(description="Document id")],
    user: CurrentUser = Depends(require_any_role),
):
    """Stream the stored file."""
    document, content = DocumentService.download_document(document_id, user.role, user.id)

    return StreamingResponse(
        iter([content]),
        media_type=document.get("file_type") or "application/octet-stream",
        headers={
            "Content-Disposition": content_disposition(document["file_name"]),
        }
    )


@router.delete("/{document_id}")
async def delete_document(
    document_id: Annotated[str, Path(description="Document id")],
    user: CurrentUser = Depends(require_any_role),
):
    """Delete the stored file and its record."""
    DocumentService.delete_document(document_id, user.role, user.id)
    return {"document_id": document_id, "deleted": True}
