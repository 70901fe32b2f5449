# =============================================================================
# core/services/note_service.py - Client Notes
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import CLIENT_NOTES_TABLE, SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)


class NoteService:
    """Free-text notes staff leave on a client."""

    @staticmethod
    def list_notes(client_id: str) -> list[dict[str, Any]]:
        """Notes for a client, newest first."""
        try:
            response = (
                SupabaseClient.get_client()
                .table(CLIENT_NOTES_TABLE)
                .select("*")
                .eq("client_id", client_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch notes: {e}",
                code="FETCH_NOTES_FAILED",
                details={"client_id": client_id},
            )
        return response.data or []

    @staticmethod
    def add_note(client_id: str, note_text: str, author_id: UUID | str) -> dict[str, Any]:
        """
        Add a note authored by the current user.

        Raises:
            ValueError: If the note is blank after trimming
            SupabaseClientError: If the insert fails
        """
        text = note_text.strip()
        if not text:
            raise ValueError("Note text cannot be blank")

        row = {
            "client_id": client_id,
            "note_text": text,
            "created_by": normalize_uuid(author_id),
            "created_at": utc_now_iso(),
        }

        try:
            response = SupabaseClient.get_client().table(CLIENT_NOTES_TABLE).insert(row).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to add note: {e}",
                code="INSERT_NOTE_FAILED",
                details={"client_id": client_id},
            )

        if not response.data:
            raise SupabaseClientError(message="Insert returned no data", code="INSERT_NO_DATA")

        logger.info(f"Added note to client {client_id}")
        return response.data[0]
