# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Status of background tasks, e.g. the follow-up seeding queued when a
# client completes onboarding (its id is returned as followup_task_id).
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel

from app.auth import CurrentUser, get_current_user, require_admin
from core.models.profile import UserRole
from core.services.wizard_service import WizardStateStore
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)

router = APIRouter()

# Messages for states that carry no extra info
STATE_MESSAGES = {
    "PENDING": "Waiting in queue...",
    "STARTED": "Starting...",
    "RETRY": "Retrying...",
    "REVOKED": "Cancelled",
}


class TaskStatusResponse(BaseModel):
    """Response model for task status."""
    task_id: str
    status: str
    progress: int | None = None
    message: str | None = None
    result: dict | None = None
    error: str | None = None


def _async_result(task_id: str):
    from workers.celery_app import celery_app

    return celery_app.AsyncResult(task_id)


@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: CurrentUser = Depends(get_current_user),
):
    """
    Get the status of a background task.

    States: PENDING, STARTED, PROGRESS (with percent and message),
    SUCCESS (with the task's result), FAILURE (with the error).

    Clients only see tasks queued for them; admin and tech see any task.
    """
    if user.role == UserRole.CLIENT and WizardStateStore.task_owner(task_id) != normalize_uuid(user.id):
        raise HTTPException(status_code=404, detail="Task not found")

    try:
        result = _async_result(task_id)
        state = result.status
    except Exception as e:
        logger.error(f"Error getting task status: {e}")
        raise HTTPException(status_code=503, detail=f"Task backend unavailable: {e}")

    response = TaskStatusResponse(task_id=task_id, status=state)

    if state == "PROGRESS":
        info = result.info or {}
        response.progress = info.get("percent", 0)
        response.message = info.get("message", "Processing...")
    elif state == "SUCCESS":
        response.result = result.result
        response.progress = 100
        response.message = "Complete"
        # Tasks report their own failures in the result
        if isinstance(result.result, dict) and result.result.get("success") is False:
            response.error = result.result.get("error")
            response.message = "Failed"
    elif state == "FAILURE":
        response.error = str(result.result) if result.result else "Unknown error"
        response.message = "Failed"
    else:
        response.progress = 0
        response.message = STATE_MESSAGES.get(state, state.title())

    return response


@router.delete("/{task_id}")
async def cancel_task(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: CurrentUser = Depends(require_admin),
):
    """Cancel a task that hasn't finished yet."""
    try:
        result = _async_result(task_id)

        if result.status in ["SUCCESS", "FAILURE"]:
            return {
                "task_id": task_id,
                "message": f"Task already {result.status.lower()}, cannot cancel",
                "cancelled": False,
            }

        result.revoke(terminate=True)
    except Exception as e:
        logger.error(f"Error cancelling task: {e}")
        raise HTTPException(status_code=503, detail=f"Task backend unavailable: {e}")

    logger.info(f"Admin {user.id} cancelled task {task_id}")
    return {"task_id": task_id, "message": "Task cancelled", "cancelled": True}
