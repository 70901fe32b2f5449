# =============================================================================
# core/services/assignment_service.py - Tech Assignment Business Logic
# =============================================================================
# Tasks technicians work through for a client (assessments, setup, ...).
# Admins create them; techs see and progress the ones assigned to them.
# =============================================================================

import logging
from datetime import date, timedelta
from typing import Any
from uuid import UUID

from lib.supabase_client import TECH_ASSIGNMENTS_TABLE, SupabaseClient, SupabaseClientError
from lib.utils import matches_search, normalize_uuid
from core.models.assignment import AssignmentPriority, AssignmentStatus
from app.exceptions import AssignmentNotFoundError

logger = logging.getLogger(__name__)

ASSIGNMENT_SELECT = (
    "id, client_id, task_name, task_description, status, priority, due_date, "
    "assigned_to, client:profiles!client_id(full_name, email)"
)

# Follow-up work queued once a client completes onboarding:
# (task name, description, priority, days until due)
FOLLOWUP_TASKS: list[tuple[str, str, AssignmentPriority, int]] = [
    (
        "Schedule Kick-off Meeting",
        "Contact the client to schedule the project kick-off",
        AssignmentPriority.HIGH,
        1,
    ),
    (
        "Send Welcome Package",
        "Send the detailed project plan and account setup information",
        AssignmentPriority.MEDIUM,
        2,
    ),
    (
        "Technical Assessment",
        "Conduct an on-site or remote technical assessment",
        AssignmentPriority.MEDIUM,
        7,
    ),
]


class AssignmentService:
    """Service for tech_assignments."""

    @staticmethod
    def create_assignment(
        client_id: str,
        task_name: str,
        task_description: str | None = None,
        priority: AssignmentPriority = AssignmentPriority.MEDIUM,
        due_date: date | None = None,
        assigned_to: str | None = None,
    ) -> dict[str, Any]:
        """
        Insert one assignment in pending status.

        Raises:
            SupabaseClientError: If the insert fails
        """
        row = {
            "client_id": client_id,
            "task_name": task_name,
            "task_description": task_description,
            "status": AssignmentStatus.PENDING.value,
            "priority": priority.value,
            "due_date": due_date.isoformat() if due_date else None,
            "assigned_to": assigned_to,
        }

        try:
            response = SupabaseClient.get_client().table(TECH_ASSIGNMENTS_TABLE).insert(row).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create assignment: {e}",
                code="INSERT_ASSIGNMENT_FAILED",
                details={"client_id": client_id, "task_name": task_name},
            )

        if not response.data:
            raise SupabaseClientError(message="Insert returned no data", code="INSERT_NO_DATA")

        logger.info(f"Created assignment '{task_name}' for client {client_id}")
        return response.data[0]

    @staticmethod
    def create_followups(
        client_id: str,
        assigned_to: str | None = None,
        today: date | None = None,
        only: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Seed the standard post-onboarding tasks for a client.

        Args:
            only: Task names to create (None creates all of them)
        """
        start = today or date.today()
        return [
            AssignmentService.create_assignment(
                client_id=client_id,
                task_name=name,
                task_description=description,
                priority=priority,
                due_date=start + timedelta(days=days),
                assigned_to=assigned_to,
            )
            for name, description, priority, days in FOLLOWUP_TASKS
            if only is None or name in only
        ]

    @staticmethod
    def list_assignments(
        assigned_to: UUID | str | None = None,
        client_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Assignments with the client's name and email embedded.

        Args:
            assigned_to: Only this tech's assignments
            client_id: Only this client's assignments
        """
        query = SupabaseClient.get_client().table(TECH_ASSIGNMENTS_TABLE).select(ASSIGNMENT_SELECT)
        if assigned_to:
            query = query.eq("assigned_to", normalize_uuid(assigned_to))
        if client_id:
            query = query.eq("client_id", client_id)

        try:
            response = query.order("due_date").execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch assignments: {e}",
                code="FETCH_ASSIGNMENTS_FAILED",
            )
        return response.data or []

    @staticmethod
    def update_status(
        assignment_id: str,
        status: AssignmentStatus,
        assigned_to: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Move an assignment to a new status.

        Args:
            assigned_to: When given, the assignment must belong to this tech

        Raises:
            AssignmentNotFoundError: If no matching assignment exists
        """
        query = (
            SupabaseClient.get_client()
            .table(TECH_ASSIGNMENTS_TABLE)
            .update({"status": status.value})
            .eq("id", assignment_id)
        )
        if assigned_to:
            query = query.eq("assigned_to", normalize_uuid(assigned_to))

        try:
            response = query.execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update assignment: {e}",
                code="UPDATE_ASSIGNMENT_FAILED",
                details={"assignment_id": assignment_id},
            )

        if not response.data:
            raise AssignmentNotFoundError(assignment_id)

        logger.info(f"Assignment {assignment_id} -> {status.value}")
        return response.data[0]

    # -------------------------------------------------------------------------
    # Dashboard helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def filter_assignments(
        assignments: list[dict[str, Any]],
        search: str | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        """Tech dashboard filter: search task or client name; status "all" keeps all."""
        def keep(task: dict[str, Any]) -> bool:
            client = task.get("client") or {}
            if not matches_search(search, [task.get("task_name"), client.get("full_name")]):
                return False
            return status in (None, "all") or task.get("status") == status

        return [t for t in assignments if keep(t)]

    @staticmethod
    def assignment_stats(assignments: list[dict[str, Any]]) -> dict[str, int]:
        """Tech dashboard counters."""
        pending = [t for t in assignments if t.get("status") == AssignmentStatus.PENDING.value]
        return {
            "pending_tasks": len(pending),
            "completed_tasks": sum(
                1 for t in assignments if t.get("status") == AssignmentStatus.COMPLETED.value
            ),
            "upcoming_assessments": sum(
                1 for t in pending if "assessment" in (t.get("task_name") or "").lower()
            ),
        }
