# =============================================================================
# app/routers/dashboard.py - Client Dashboard
# =============================================================================

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.auth import CurrentUser, require_client
from core.models.profile import ClientDetails, ClientProfile, OnboardingStatus, home_route_for
from core.services.document_service import DocumentService
from core.services.profile_service import ProfileService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()


class DashboardSummary(BaseModel):
    """Counters shown at the top of the client dashboard."""
    onboarding_status: OnboardingStatus
    selected_services: int = 0
    monthly_fee: float = 0
    documents: int = 0


class ClientDashboard(BaseModel):
    """Response model for the client dashboard."""
    profile: ClientProfile
    client_details: ClientDetails | None = None
    summary: DashboardSummary
    route: str


@router.get("", response_model=ClientDashboard)
async def get_client_dashboard(
    user: CurrentUser = Depends(require_client),
):
    """
    Everything the client dashboard shows.

    Returns:
        profile, saved client details (None until onboarding is saved),
        summary counts and the caller's home route
    """
    profile = ClientProfile.model_validate(ProfileService.get_profile(user.id))
    row = SupabaseClient.fetch_client_details(user.id)
    details = ClientDetails.model_validate(row) if row else None
    documents = DocumentService.list_documents(user.role, user.id)

    return ClientDashboard(
        profile=profile,
        client_details=details,
        summary=DashboardSummary(
            onboarding_status=profile.onboarding_status,
            selected_services=len(details.selected_services) if details else 0,
            monthly_fee=details.contract_details.get("monthly_fee", 0) if details else 0,
            documents=len(documents),
        ),
        route=home_route_for(user.role),
    )
