# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background work that follows onboarding.
#
# Tasks:
# - seed_onboarding_assignments: Create the standard follow-up assignments
#   for a client who just completed the wizard
# =============================================================================

import logging
from typing import Any
from celery import shared_task, current_task

from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)


# =============================================================================
# Task State Updates
# =============================================================================

def update_progress(current: int, total: int, message: str = "Processing..."):
    """
    Update task progress for polling.

    Args:
        current: Current step number
        total: Total steps
        message: Status message
    """
    if current_task:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100),
                "message": message,
            }
        )


# =============================================================================
# Follow-up Assignments
# =============================================================================

@shared_task(
    bind=True,
    name="workers.tasks.seed_onboarding_assignments",
    max_retries=3,
    default_retry_delay=30,
)
def seed_onboarding_assignments(self, client_id: str) -> dict[str, Any]:
    """
    Create the post-onboarding tasks for a client.

    Tasks already present for the client (same name) are skipped, so a
    client who completes the wizard again (or a retried run) doesn't get
    duplicates. Database errors are retried; anything else is reported in
    the result.

    Args:
        client_id: The client's profile id

    Returns:
        Dict with the created assignment ids
    """
    logger.info(f"Seeding follow-up assignments for client {client_id}")

    try:
        from app.config import settings
        from core.services.assignment_service import AssignmentService, FOLLOWUP_TASKS

        update_progress(1, 2, "Checking existing assignments...")
        existing = {
            a.get("task_name")
            for a in AssignmentService.list_assignments(client_id=client_id)
        }
        missing = [name for name, *_ in FOLLOWUP_TASKS if name not in existing]

        if not missing:
            logger.info(f"Client {client_id} already has every follow-up assignment")
            return {"success": True, "created": [], "skipped": len(FOLLOWUP_TASKS)}

        update_progress(2, 2, "Creating assignments...")
        created = AssignmentService.create_followups(
            client_id,
            assigned_to=settings.DEFAULT_TECH_ID or None,
            only=missing,
        )

        return {
            "success": True,
            "created": [a["id"] for a in created],
            "skipped": len(FOLLOWUP_TASKS) - len(created),
        }

    except SupabaseClientError as e:
        logger.warning(f"Database error seeding assignments for client {client_id}: {e}")
        raise self.retry(exc=e)

    except Exception as e:
        logger.exception(f"Seeding assignments failed for client {client_id}: {e}")
        return {"success": False, "error": str(e)}
