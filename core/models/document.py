# =============================================================================
# core/models/document.py - Document Schemas
# =============================================================================
# File metadata for uploads kept in the client_documents storage bucket.
# The bytes live in storage; the documents table holds the pointer.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class DocumentType(str, Enum):
    """What an uploaded document is for."""
    CONTRACT = "contract"
    INVOICE = "invoice"
    ASSESSMENT = "assessment"
    NETWORK_DIAGRAM = "network_diagram"
    ID_VERIFICATION = "id_verification"
    OTHER = "other"


class Document(BaseModel):
    """
    A row of the documents table.

    Example:
        {
            "id": "3f6c...",
            "client_id": "550e8400-...",
            "file_name": "network.pdf",
            "file_type": "application/pdf",
            "file_size": 482133,
            "storage_path": "550e8400-.../network_diagram/1718000000000_network.pdf",
            "document_type": "network_diagram",
            "uploaded_by": "550e8400-...",
            "uploaded_at": "2024-06-10T09:15:00Z"
        }
    """

    id: str
    client_id: str
    file_name: str
    file_type: str | None = None
    file_size: int = Field(default=0, ge=0)
    storage_path: str
    document_type: DocumentType = DocumentType.OTHER
    uploaded_by: str | None = None
    uploaded_at: datetime | None = None


class UploadResult(BaseModel):
    """Response after a batch upload."""
    uploaded: list[Document]
    documents: list[Document] = Field(
        default_factory=list,
        description="The client's full document list after the upload"
    )
    message: str
