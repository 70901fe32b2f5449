# =============================================================================
# app/routers/admin.py - Admin Dashboard Endpoints
# =============================================================================
# Client list, stats, CSV export, client detail, notes, status changes and
# tech assignments.
#
# The client detail page and its notes are shared with techs; everything
# else is admin only.
# =============================================================================

import io
import logging
from datetime import date
from typing import Annotated, Any

import pandas as pd
from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from app.auth import CurrentUser, require_admin, require_staff
from core.models.assignment import AssignmentCreate, ClientNote, NoteCreate, TechAssignment
from core.models.document import Document
from core.models.profile import StatusUpdate, UserRole
from core.services.assignment_service import AssignmentService
from core.services.document_service import DocumentService
from core.services.note_service import NoteService
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter()

EXPORT_COLUMNS = ["full_name", "email", "company_name", "industry", "onboarding_status", "created_at"]

SearchQuery = Annotated[str | None, Query(description="Matches name, email or company")]
StatusQuery = Annotated[str | None, Query(description="Onboarding status, or 'all'")]
ClientIdPath = Annotated[str, Path(description="Client profile id")]


class ClientDetailView(BaseModel):
    """Response model for the client detail page."""
    client: dict[str, Any]
    documents: list[Document]
    notes: list[ClientNote]
    assignments: list[TechAssignment]
    timeline: list[dict[str, Any]]


def _filtered_clients(search: str | None, status: str | None) -> list[dict[str, Any]]:
    return ProfileService.filter_clients(ProfileService.list_clients(), search, status)


# =============================================================================
# Clients
# =============================================================================

@router.get("/clients")
async def list_clients(
    search: SearchQuery = None,
    status: StatusQuery = None,
    user: CurrentUser = Depends(require_admin),
) -> list[dict[str, Any]]:
    """All clients matching the search and status filter, newest first."""
    return _filtered_clients(search, status)


@router.get("/stats")
async def get_stats(user: CurrentUser = Depends(require_admin)) -> dict[str, int]:
    """Dashboard counters over every client."""
    return ProfileService.client_stats(ProfileService.list_clients())


@router.get("/clients/export")
async def export_clients(
    search: SearchQuery = None,
    status: StatusQuery = None,
    user: CurrentUser = Depends(require_admin),
):
    """Download the filtered client list as CSV."""
    rows = [
        {
            "full_name": c.get("full_name"),
            "email": c.get("email"),
            "company_name": (c.get("client_info") or {}).get("company_name"),
            "industry": (c.get("client_info") or {}).get("industry"),
            "onboarding_status": c.get("onboarding_status"),
            "created_at": c.get("created_at"),
        }
        for c in _filtered_clients(search, status)
    ]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)

    csv_buffer = io.StringIO()
    df.to_csv(csv_buffer, index=False)

    filename = f"clients_{date.today().isoformat()}.csv"
    logger.info(f"Admin {user.id} exported {len(df)} clients")

    return StreamingResponse(
        iter([csv_buffer.getvalue()]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
        }
    )


@router.get("/clients/{client_id}", response_model=ClientDetailView)
async def get_client_detail(
    client_id: ClientIdPath,
    user: CurrentUser = Depends(require_staff),
):
    """
    Client detail page.

    Returns the profile with saved answers, documents, notes (newest first),
    assignments and the onboarding progress timeline.
    """
    client = ProfileService.get_client(client_id)

    return ClientDetailView(
        client=client,
        documents=DocumentService.list_documents(UserRole.ADMIN, user.id, client_id),
        notes=NoteService.list_notes(client_id),
        assignments=AssignmentService.list_assignments(client_id=client_id),
        timeline=ProfileService.onboarding_timeline(client),
    )


@router.post("/clients/{client_id}/notes", response_model=ClientNote, status_code=201)
async def add_note(
    client_id: ClientIdPath,
    request: NoteCreate,
    user: CurrentUser = Depends(require_staff),
):
    """Add a note to a client; the author is the caller."""
    ProfileService.get_client(client_id)
    return NoteService.add_note(client_id, request.note_text, user.id)


@router.patch("/clients/{client_id}/status")
async def update_client_status(
    client_id: ClientIdPath,
    request: StatusUpdate,
    user: CurrentUser = Depends(require_admin),
) -> dict[str, Any]:
    """Move a client to any onboarding status."""
    return ProfileService.set_onboarding_status(client_id, request.onboarding_status)


# =============================================================================
# Assignments
# =============================================================================

@router.post("/assignments", response_model=TechAssignment, status_code=201)
async def create_assignment(
    request: AssignmentCreate,
    user: CurrentUser = Depends(require_admin),
):
    """Create a pending task for a client, optionally assigned to a tech."""
    ProfileService.get_client(request.client_id)
    return AssignmentService.create_assignment(
        client_id=request.client_id,
        task_name=request.task_name,
        task_description=request.task_description,
        priority=request.priority,
        due_date=request.due_date,
        assigned_to=request.assigned_to,
    )


@router.get("/assignments", response_model=list[TechAssignment])
async def list_assignments(
    client_id: Annotated[str | None, Query()] = None,
    assigned_to: Annotated[str | None, Query(description="Tech profile id")] = None,
    user: CurrentUser = Depends(require_admin),
):
    """Assignments across all techs, soonest due first."""
    return AssignmentService.list_assignments(assigned_to=assigned_to, client_id=client_id)
