# =============================================================================
# core/models/onboarding.py - Onboarding Wizard Schemas
# =============================================================================
# These models define the wizard's accumulated answers and the actions that
# change them:
# - ClientInfo / TechnicalAssessment / Timeline / ContractDetails: one
#   section per wizard screen
# - OnboardingState: everything the wizard has collected so far
# - WizardAction: a single change, applied by core.wizard.reduce()
#
# Wizard flow (fixed, linear):
#   1 company info -> 2 services -> 3 assessment -> 4 timeline
#   -> 5 contract review -> 6 completion
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Number of screens in the wizard
TOTAL_STEPS = 6


class WizardStep(int, Enum):
    """Wizard screens, in order."""
    CLIENT_INFO = 1
    SERVICES = 2
    ASSESSMENT = 3
    TIMELINE = 4
    CONTRACT = 5
    COMPLETION = 6


# =============================================================================
# Wizard Sections
# =============================================================================
# Each section forbids unknown fields so a payload meant for one step can't
# silently land in another.

class ClientInfo(BaseModel):
    """Step 1 - company and contact information."""

    model_config = ConfigDict(extra="forbid")

    company_name: str = ""
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    industry: str = ""
    company_size: str = Field(
        default="",
        description="Size bucket, e.g. '11-50 employees'"
    )
    current_provider: str = ""
    budget: str = ""
    urgency: str = ""


class TechnicalAssessment(BaseModel):
    """Step 3 - current infrastructure and concerns."""

    model_config = ConfigDict(extra="forbid")

    current_infrastructure: str = ""
    operating_system: str = ""
    network_size: str = ""
    security_concerns: str = ""
    compliance_requirements: str = ""
    backup_solution: str = ""
    cloud_services: list[str] = Field(default_factory=list)


class Timeline(BaseModel):
    """Step 4 - scheduling preferences."""

    model_config = ConfigDict(extra="forbid")

    preferred_start_date: str = ""
    project_duration: str = ""
    critical_deadlines: str = ""
    availability_windows: str = ""


class ContractDetails(BaseModel):
    """Step 5 - the quoted service agreement."""

    model_config = ConfigDict(extra="forbid")

    service_level: str = ""
    support_hours: str = ""
    response_time: str = ""
    monthly_fee: float = Field(default=0, ge=0)
    setup_fee: float = Field(default=0, ge=0)


# =============================================================================
# Wizard State
# =============================================================================

class OnboardingState(BaseModel):
    """
    Everything the wizard has collected for one user.

    Stored as JSON between requests and written to client_details on
    completion.

    Example:
        {
            "current_step": 3,
            "total_steps": 6,
            "client_info": {"company_name": "Acme", ...},
            "selected_services": ["managed-it", "cybersecurity"],
            ...
        }
    """

    current_step: int = Field(
        default=1,
        ge=1,
        le=TOTAL_STEPS,
        description="Screen the user is on (1-indexed)"
    )

    total_steps: int = Field(
        default=TOTAL_STEPS,
        description="Number of wizard screens"
    )

    client_info: ClientInfo = Field(default_factory=ClientInfo)

    selected_services: list[str] = Field(
        default_factory=list,
        description="Service catalog ids chosen on step 2"
    )

    technical_assessment: TechnicalAssessment = Field(default_factory=TechnicalAssessment)

    timeline: Timeline = Field(default_factory=Timeline)

    contract_details: ContractDetails = Field(default_factory=ContractDetails)

    contract_accepted: bool = Field(
        default=False,
        description="Set when the user agrees to the contract on step 5"
    )

    @property
    def is_final_step(self) -> bool:
        return self.current_step == self.total_steps


# =============================================================================
# Wizard Actions
# =============================================================================

class WizardActionType(str, Enum):
    """
    Kinds of change the reducer understands.

    - UPDATE_*: shallow-merge the payload into one section
    - UPDATE_SERVICES: replace the selected services list
    - NEXT_STEP / PREV_STEP: move one screen, clamped to 1..total
    - SET_STEP: jump to the screen given in the payload
    - RESET: start over
    """
    UPDATE_CLIENT_INFO = "UPDATE_CLIENT_INFO"
    UPDATE_SERVICES = "UPDATE_SERVICES"
    UPDATE_ASSESSMENT = "UPDATE_ASSESSMENT"
    UPDATE_TIMELINE = "UPDATE_TIMELINE"
    UPDATE_CONTRACT = "UPDATE_CONTRACT"
    NEXT_STEP = "NEXT_STEP"
    PREV_STEP = "PREV_STEP"
    SET_STEP = "SET_STEP"
    RESET = "RESET"


class WizardAction(BaseModel):
    """
    A single wizard change.

    Example:
        {"type": "UPDATE_TIMELINE", "payload": {"project_duration": "3 months"}}
        {"type": "SET_STEP", "payload": 4}
        {"type": "NEXT_STEP"}

    Unrecognised types are kept as plain strings; the reducer ignores them.
    """

    type: WizardActionType | str = Field(..., union_mode="left_to_right")
    payload: Any = None


# =============================================================================
# Step Submissions
# =============================================================================

class ServicesSubmission(BaseModel):
    """Step 2 request body."""
    selected_services: list[str] = Field(
        default_factory=list,
        description="Service catalog ids",
        examples=[["managed-it", "backup-recovery"]],
    )


class ContractAcceptance(BaseModel):
    """Step 5 request body."""
    agreed: bool = Field(
        ...,
        description="The user agrees to the quoted service agreement"
    )


class WizardResponse(BaseModel):
    """Wizard state plus where the client should go next."""
    state: OnboardingState
    route: str = Field(..., description="Screen route for the current step")


class CompletionResponse(BaseModel):
    """Returned once onboarding is saved."""
    client_id: str
    onboarding_status: str
    contract_details: ContractDetails
    followup_task_id: str | None = None
    message: str = "Onboarding completed successfully"
