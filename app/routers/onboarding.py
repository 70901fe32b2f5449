# =============================================================================
# app/routers/onboarding.py - Onboarding Wizard Endpoints
# =============================================================================
# The 6-step onboarding wizard. Every response carries the full wizard state
# plus the screen route for its current step.
#
# Steps:
#   1. Client info      PUT  /onboarding/client-info
#   2. Services         PUT  /onboarding/services
#   3. Assessment       PUT  /onboarding/assessment
#   4. Timeline         PUT  /onboarding/timeline
#   5. Contract         GET  /onboarding/quote, POST /onboarding/contract
#   6. Completion       POST /onboarding/complete
# =============================================================================

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from app.auth import CurrentUser, get_current_user
from core import wizard
from core.models.onboarding import (
    CompletionResponse,
    ContractAcceptance,
    ContractDetails,
    OnboardingState,
    ServicesSubmission,
    WizardAction,
    WizardResponse,
)
from core.pricing import COMPANY_SIZES, INDUSTRIES, SERVICE_CATALOG
from core.services.wizard_service import WizardService

logger = logging.getLogger(__name__)

router = APIRouter()

# Section bodies are partial: only the fields sent are changed
SectionBody = Body(..., examples=[{"company_name": "Acme Dental", "company_size": "11-50 employees"}])


def _respond(state: OnboardingState) -> WizardResponse:
    return WizardResponse(state=state, route=wizard.route_for_step(state.current_step))


@router.get("/catalog")
async def get_catalog() -> dict[str, Any]:
    """
    Options for the wizard forms.

    Returns the service catalog plus the industry and company size choices
    shown on step 1.
    """
    return {
        "services": [s.to_dict() for s in SERVICE_CATALOG.values()],
        "industries": INDUSTRIES,
        "company_sizes": COMPANY_SIZES,
    }


@router.get("/state", response_model=WizardResponse)
async def get_state(user: CurrentUser = Depends(get_current_user)):
    """Current wizard state for the caller."""
    return _respond(WizardService.get_state(user.id))


@router.post("/actions", response_model=WizardResponse)
async def dispatch_action(
    action: WizardAction,
    user: CurrentUser = Depends(get_current_user),
):
    """
    Apply a raw wizard action.

    Example body:
        {"type": "UPDATE_TIMELINE", "payload": {"project_duration": "3 months"}}
    """
    return _respond(WizardService.dispatch(user.id, action))


@router.put("/client-info", response_model=WizardResponse)
async def submit_client_info(
    info: dict[str, Any] = SectionBody,
    user: CurrentUser = Depends(get_current_user),
):
    """Step 1: save company and contact details, then go to services."""
    return _respond(WizardService.submit_client_info(user.id, info))


@router.put("/services", response_model=WizardResponse)
async def submit_services(
    request: ServicesSubmission,
    user: CurrentUser = Depends(get_current_user),
):
    """Step 2: replace the selected services, then go to the assessment."""
    return _respond(WizardService.submit_services(user.id, request.selected_services))


@router.put("/assessment", response_model=WizardResponse)
async def submit_assessment(
    assessment: dict[str, Any] = Body(...),
    user: CurrentUser = Depends(get_current_user),
):
    """Step 3: save the technical assessment, then go to the timeline."""
    return _respond(WizardService.submit_assessment(user.id, assessment))


@router.put("/timeline", response_model=WizardResponse)
async def submit_timeline(
    timeline: dict[str, Any] = Body(...),
    user: CurrentUser = Depends(get_current_user),
):
    """Step 4: save the timeline, then go to the contract."""
    return _respond(WizardService.submit_timeline(user.id, timeline))


@router.get("/quote", response_model=ContractDetails)
async def get_quote(user: CurrentUser = Depends(get_current_user)):
    """Step 5: the contract terms priced from the caller's answers so far."""
    return wizard.quote_for(WizardService.get_state(user.id))


@router.post("/contract", response_model=WizardResponse)
async def accept_contract(
    request: ContractAcceptance,
    user: CurrentUser = Depends(get_current_user),
):
    """Step 5: accept the quoted contract and go to completion."""
    return _respond(WizardService.accept_contract(user.id, request.agreed))


@router.post("/back", response_model=WizardResponse)
async def go_back(user: CurrentUser = Depends(get_current_user)):
    """Return to the previous screen."""
    return _respond(WizardService.go_back(user.id))


@router.post("/complete", response_model=CompletionResponse)
async def complete_onboarding(user: CurrentUser = Depends(get_current_user)):
    """
    Step 6: save everything and finish onboarding.

    Raises:
        409: If the wizard isn't on its last step with the contract accepted
        502: If saving to the database fails
    """
    result = WizardService.complete(user.id)
    logger.info(f"User {user.id} completed onboarding")
    return result


@router.delete("/state", response_model=WizardResponse)
async def reset_wizard(user: CurrentUser = Depends(get_current_user)):
    """Discard unfinished answers and start over."""
    return _respond(WizardService.reset(user.id))
