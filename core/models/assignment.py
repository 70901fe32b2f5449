# =============================================================================
# core/models/assignment.py - Notes & Tech Assignment Schemas
# =============================================================================
# - ClientNote: free-text note an admin/tech leaves on a client
# - TechAssignment: a task for a technician against one client
# =============================================================================

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Notes
# =============================================================================

class ClientNote(BaseModel):
    """A row of the client_notes table."""
    id: str
    client_id: str
    note_text: str
    created_by: str | None = None
    created_at: datetime | None = None


class NoteCreate(BaseModel):
    """Request body for adding a note."""

    model_config = ConfigDict(str_strip_whitespace=True)

    note_text: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Note text (blank notes are rejected)"
    )


# =============================================================================
# Tech Assignments
# =============================================================================

class AssignmentStatus(str, Enum):
    """Progress of a tech assignment."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class AssignmentPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TechAssignment(BaseModel):
    """
    A row of the tech_assignments table.

    `client` is the embedded profile (full_name, email) when the query
    joins it.
    """
    id: str
    client_id: str
    task_name: str
    task_description: str | None = None
    status: AssignmentStatus = AssignmentStatus.PENDING
    priority: AssignmentPriority = AssignmentPriority.MEDIUM
    due_date: date | None = None
    assigned_to: str | None = None
    client: dict | None = None


class AssignmentCreate(BaseModel):
    """Admin request to create an assignment."""
    client_id: str
    task_name: str = Field(..., min_length=1, max_length=255)
    task_description: str | None = None
    priority: AssignmentPriority = AssignmentPriority.MEDIUM
    due_date: date | None = None
    assigned_to: str | None = Field(
        default=None,
        description="Tech profile id; leave empty to keep it unassigned"
    )


class AssignmentStatusUpdate(BaseModel):
    """Tech request to move an assignment along."""
    status: AssignmentStatus
