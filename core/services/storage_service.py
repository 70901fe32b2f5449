# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles document upload/download/delete against Supabase Storage.
# Objects are laid out as {client_id}/{document_type}/{epoch_ms}_{file_name}.
# =============================================================================

import logging

from lib.supabase_client import SupabaseClient
from lib.utils import epoch_ms
from app.config import settings
from app.exceptions import StorageUploadError, StorageDownloadError, StorageDeleteError

logger = logging.getLogger(__name__)


class StorageService:
    """
    Service for Supabase Storage operations.

    All calls target the configured documents bucket.
    """

    @staticmethod
    def build_path(client_id: str, document_type: str, filename: str) -> str:
        """
        Storage path for a new document.

        The millisecond prefix keeps repeat uploads of the same file apart.
        """
        safe_name = filename.replace("/", "_").replace("\\", "_")
        return f"{client_id}/{document_type}/{epoch_ms()}_{safe_name}"

    @staticmethod
    def upload_file(
        path: str,
        file_content: bytes,
        content_type: str | None = None,
    ) -> str:
        """
        Upload raw file content to storage.

        Args:
            path: Destination path in the bucket
            file_content: File bytes
            content_type: MIME type recorded on the object

        Returns:
            Storage path

        Raises:
            StorageUploadError: If upload fails
        """
        client = SupabaseClient.get_client()

        try:
            client.storage.from_(settings.DOCUMENTS_BUCKET).upload(
                path=path,
                file=file_content,
                file_options={"content-type": content_type or "application/octet-stream"}
            )

            logger.info(f"Uploaded file to storage: {path}")
            return path

        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e))

    @staticmethod
    def download_file(storage_path: str) -> bytes:
        """
        Download raw file content from storage.

        Raises:
            StorageDownloadError: If download fails
        """
        client = SupabaseClient.get_client()

        try:
            response = client.storage.from_(settings.DOCUMENTS_BUCKET).download(storage_path)
            logger.info(f"Downloaded file from storage: {storage_path}")
            return response

        except Exception as e:
            logger.error(f"Storage download failed: {e}")
            raise StorageDownloadError(storage_path, str(e))

    @staticmethod
    def delete_file(storage_path: str) -> None:
        """
        Delete a file from storage.

        Raises:
            StorageDeleteError: If the object can't be removed
        """
        client = SupabaseClient.get_client()

        try:
            client.storage.from_(settings.DOCUMENTS_BUCKET).remove([storage_path])
            logger.info(f"Deleted file from storage: {storage_path}")

        except Exception as e:
            logger.error(f"Failed to delete file: {e}")
            raise StorageDeleteError(storage_path, str(e))
