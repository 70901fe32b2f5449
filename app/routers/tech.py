# =============================================================================
# app/routers/tech.py - Tech Dashboard Endpoints
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query

from app.auth import CurrentUser, require_tech
from core.models.assignment import AssignmentStatusUpdate, TechAssignment
from core.services.assignment_service import AssignmentService
from core.services.profile_service import ACTIVE_STATUSES, ProfileService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_tech_dashboard(
    search: Annotated[str | None, Query(description="Matches task or client name")] = None,
    status: Annotated[str | None, Query(description="Assignment status, or 'all'")] = None,
    user: CurrentUser = Depends(require_tech),
) -> dict[str, Any]:
    """
    The tech's working view.

    Returns:
        clients: Clients still onboarding (in_progress / documents_pending)
        assignments: The caller's assignments after search and status filter
        stats: Counters over all of the caller's assignments
    """
    assignments = AssignmentService.list_assignments(assigned_to=user.id)

    return {
        "clients": ProfileService.list_clients(statuses=ACTIVE_STATUSES),
        "assignments": AssignmentService.filter_assignments(assignments, search, status),
        "stats": AssignmentService.assignment_stats(assignments),
    }


@router.patch("/assignments/{assignment_id}", response_model=TechAssignment)
async def update_assignment_status(
    assignment_id: Annotated[str, Path(description="Assignment id")],
    request: AssignmentStatusUpdate,
    user: CurrentUser = Depends(require_tech),
):
    """
    Move one of the caller's assignments to a new status.

    Raises:
        404: If the assignment doesn't exist or isn't assigned to the caller
    """
    return AssignmentService.update_status(assignment_id, request.status, assigned_to=user.id)
