# =============================================================================
# core/models/profile.py - Profile & Client Detail Schemas
# =============================================================================
# Flat records mirrored from the profiles and client_details tables.
# A profile row shares its id with the Supabase auth user.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """
    Who the user is to the provider.

    - client: a company being onboarded
    - admin: staff managing every client
    - tech: technician working assigned tasks
    """
    CLIENT = "client"
    ADMIN = "admin"
    TECH = "tech"


class OnboardingStatus(str, Enum):
    """
    Where a client is in onboarding.

    Flow: not_started -> in_progress -> (documents_pending) -> completed
    Admins may set any status directly.
    """
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DOCUMENTS_PENDING = "documents_pending"
    COMPLETED = "completed"


# Home route per role, used when a guard turns a user away
ROLE_HOME_ROUTES: dict[UserRole, str] = {
    UserRole.ADMIN: "/admin",
    UserRole.TECH: "/tech",
    UserRole.CLIENT: "/dashboard",
}


def home_route_for(role: UserRole | str | None) -> str:
    """Route a user of `role` lands on; unknown roles go to the client dashboard."""
    try:
        return ROLE_HOME_ROUTES[UserRole(role)]
    except ValueError:
        return ROLE_HOME_ROUTES[UserRole.CLIENT]


class ClientProfile(BaseModel):
    """A row of the profiles table."""

    id: str
    full_name: str | None = None
    email: str | None = None
    role: UserRole = UserRole.CLIENT
    onboarding_status: OnboardingStatus = OnboardingStatus.NOT_STARTED
    created_at: datetime | None = None


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""
    full_name: str | None = Field(
        default=None,
        min_length=1,
        max_length=255,
    )


class ClientDetails(BaseModel):
    """
    A row of the client_details table - the saved wizard answers.

    Section columns are stored as JSON, denormalized on purpose.
    """

    id: str | None = None
    client_id: str
    company_name: str | None = None
    industry: str | None = None
    company_size: str | None = None
    phone: str | None = None
    current_provider: str | None = None
    selected_services: list[str] = Field(default_factory=list)
    technical_assessment: dict[str, Any] = Field(default_factory=dict)
    timeline: dict[str, Any] = Field(default_factory=dict)
    contract_details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StatusUpdate(BaseModel):
    """Admin request to move a client to a new onboarding status."""
    onboarding_status: OnboardingStatus
