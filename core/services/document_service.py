# =============================================================================
# core/services/document_service.py - Document Business Logic
# =============================================================================
# Upload, list, download and delete client documents.
# Clients only ever see their own documents; admin and tech see everyone's.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import DOCUMENTS_TABLE, SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, utc_now_iso
from core.models.document import DocumentType
from core.models.profile import UserRole
from core.services.profile_service import ProfileService
from core.services.storage_service import StorageService
from app.exceptions import (
    ClientRequiredError,
    DocumentNotFoundError,
    OnboardingException,
    StorageDeleteError,
)

logger = logging.getLogger(__name__)


class DocumentService:
    """Service for client documents (storage object + documents row)."""

    @staticmethod
    def resolve_client_id(
        user_id: UUID | str,
        role: UserRole,
        client_id: str | None,
    ) -> str:
        """
        Whose documents a request is about.

        Clients always act on themselves. Admin and tech must name an
        existing client.

        Raises:
            ClientRequiredError: If admin/tech didn't pass a client_id
            ClientNotFoundError: If the named client doesn't exist
        """
        if role == UserRole.CLIENT:
            return normalize_uuid(user_id)
        if not client_id:
            raise ClientRequiredError()
        ProfileService.get_client(client_id)
        return client_id

    @staticmethod
    def list_documents(
        role: UserRole,
        user_id: UUID | str,
        client_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Documents visible to the caller.

        Args:
            role: Caller's role
            user_id: Caller's id
            client_id: Optional filter for admin/tech (ignored for clients)
        """
        client = SupabaseClient.get_client()
        query = client.table(DOCUMENTS_TABLE).select("*")

        if role == UserRole.CLIENT:
            query = query.eq("client_id", normalize_uuid(user_id))
        elif client_id:
            query = query.eq("client_id", client_id)

        try:
            response = query.order("uploaded_at", desc=True).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list documents: {e}",
                code="LIST_DOCUMENTS_FAILED",
            )
        return response.data or []

    @staticmethod
    def upload_document(
        client_id: str,
        uploaded_by: UUID | str,
        document_type: DocumentType,
        file_name: str,
        content: bytes,
        content_type: str | None = None,
    ) -> dict[str, Any]:
        """
        Store one file and record it in the documents table.

        If the row can't be inserted the stored object is removed again.

        Returns:
            The inserted documents row

        Raises:
            StorageUploadError: If the storage upload fails
            SupabaseClientError: If the row insert fails
        """
        path = StorageService.build_path(client_id, document_type.value, file_name)
        StorageService.upload_file(path, content, content_type)

        row = {
            "client_id": client_id,
            "file_name": file_name,
            "file_type": content_type,
            "file_size": len(content),
            "storage_path": path,
            "document_type": document_type.value,
            "uploaded_by": normalize_uuid(uploaded_by),
            "uploaded_at": utc_now_iso(),
        }

        try:
            response = SupabaseClient.get_client().table(DOCUMENTS_TABLE).insert(row).execute()
        except Exception as e:
            DocumentService._discard_object(path)
            raise SupabaseClientError(
                message=f"Failed to record document: {e}",
                code="INSERT_DOCUMENT_FAILED",
                details={"storage_path": path},
            )

        if not response.data:
            DocumentService._discard_object(path)
            raise SupabaseClientError(message="Insert returned no data", code="INSERT_NO_DATA")

        logger.info(f"Uploaded {document_type.value} document {file_name} for client {client_id}")
        return response.data[0]

    @staticmethod
    def upload_documents(
        client_id: str,
        uploaded_by: UUID | str,
        document_type: DocumentType,
        files: list[tuple[str, bytes, str | None]],
    ) -> list[dict[str, Any]]:
        """
        Upload a batch of (file_name, content, content_type) as one unit.

        When a file fails, the files already uploaded in this batch are
        removed (object and row) before the error is re-raised.
        """
        uploaded: list[dict[str, Any]] = []
        for file_name, content, content_type in files:
            try:
                uploaded.append(DocumentService.upload_document(
                    client_id=client_id,
                    uploaded_by=uploaded_by,
                    document_type=document_type,
                    file_name=file_name,
                    content=content,
                    content_type=content_type,
                ))
            except (OnboardingException, SupabaseClientError):
                logger.warning(
                    f"Upload of {file_name} failed; rolling back {len(uploaded)} document(s)"
                )
                for document in uploaded:
                    DocumentService._discard_document(document)
                raise
        return uploaded

    @staticmethod
    def _discard_object(storage_path: str) -> None:
        """Best-effort removal of a stored object during cleanup."""
        try:
            StorageService.delete_file(storage_path)
        except StorageDeleteError as e:
            logger.error(f"Orphaned storage object left behind: {e.message}")

    @staticmethod
    def _discard_document(document: dict[str, Any]) -> None:
        """Best-effort removal of an uploaded document during rollback."""
        DocumentService._discard_object(document["storage_path"])
        try:
            SupabaseClient.get_client().table(DOCUMENTS_TABLE).delete().eq("id", document["id"]).execute()
        except Exception as e:
            logger.error(f"Orphaned document row {document['id']} left behind: {e}")

    @staticmethod
    def get_document(
        document_id: str,
        role: UserRole,
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """
        A single document the caller may see.

        Raises:
            DocumentNotFoundError: If it doesn't exist or belongs to another client
        """
        try:
            response = (
                SupabaseClient.get_client()
                .table(DOCUMENTS_TABLE)
                .select("*")
                .eq("id", document_id)
                .single()
                .execute()
            )
        except Exception as e:
            if "PGRST116" in str(e):
                raise DocumentNotFoundError(document_id)
            raise SupabaseClientError(
                message=f"Failed to fetch document: {e}",
                code="FETCH_DOCUMENT_FAILED",
                details={"document_id": document_id},
            )

        document = response.data
        if not document:
            raise DocumentNotFoundError(document_id)

        # Don't reveal other clients' documents exist
        if role == UserRole.CLIENT and str(document.get("client_id")) != normalize_uuid(user_id):
            raise DocumentNotFoundError(document_id)

        return document

    @staticmethod
    def download_document(
        document_id: str,
        role: UserRole,
        user_id: UUID | str,
    ) -> tuple[dict[str, Any], bytes]:
        """Document row and its bytes."""
        document = DocumentService.get_document(document_id, role, user_id)
        return document, StorageService.download_file(document["storage_path"])

    @staticmethod
    def delete_document(
        document_id: str,
        role: UserRole,
        user_id: UUID | str,
    ) -> dict[str, Any]:
        """
        Remove the storage object, then the row.

        Returns:
            The deleted document row
        """
        document = DocumentService.get_document(document_id, role, user_id)
        StorageService.delete_file(document["storage_path"])

        try:
            SupabaseClient.get_client().table(DOCUMENTS_TABLE).delete().eq("id", document_id).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete document record: {e}",
                code="DELETE_DOCUMENT_FAILED",
                details={"document_id": document_id},
            )

        logger.info(f"Deleted document {document_id}")
        return document
