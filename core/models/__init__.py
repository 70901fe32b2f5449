# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - onboarding.py: Wizard sections, state, actions and step submissions
# - profile.py: Profiles, roles, onboarding status, saved client details
# - document.py: Uploaded document metadata
# - assignment.py: Client notes and tech assignments
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Onboarding Models - the wizard
# -----------------------------------------------------------------------------
from .onboarding import (
    TOTAL_STEPS,
    ClientInfo,
    CompletionResponse,
    ContractAcceptance,
    ContractDetails,
    OnboardingState,
    ServicesSubmission,
    TechnicalAssessment,
    Timeline,
    WizardAction,
    WizardActionType,
    WizardResponse,
    WizardStep,
)

# -----------------------------------------------------------------------------
# Profile Models - users, roles and saved answers
# -----------------------------------------------------------------------------
from .profile import (
    ClientDetails,
    ClientProfile,
    OnboardingStatus,
    ProfileUpdate,
    StatusUpdate,
    UserRole,
    home_route_for,
)

# -----------------------------------------------------------------------------
# Document Models
# -----------------------------------------------------------------------------
from .document import (
    Document,
    DocumentType,
    UploadResult,
)

# -----------------------------------------------------------------------------
# Notes & Assignments
# -----------------------------------------------------------------------------
from .assignment import (
    AssignmentCreate,
    AssignmentPriority,
    AssignmentStatus,
    AssignmentStatusUpdate,
    ClientNote,
    NoteCreate,
    TechAssignment,
)

__all__ = [
    # Onboarding
    "TOTAL_STEPS",
    "ClientInfo",
    "CompletionResponse",
    "ContractAcceptance",
    "ContractDetails",
    "OnboardingState",
    "ServicesSubmission",
    "TechnicalAssessment",
    "Timeline",
    "WizardAction",
    "WizardActionType",
    "WizardResponse",
    "WizardStep",
    # Profile
    "ClientDetails",
    "ClientProfile",
    "OnboardingStatus",
    "ProfileUpdate",
    "StatusUpdate",
    "UserRole",
    "home_route_for",
    # Documents
    "Document",
    "DocumentType",
    "UploadResult",
    # Notes & Assignments
    "AssignmentCreate",
    "AssignmentPriority",
    "AssignmentStatus",
    "AssignmentStatusUpdate",
    "ClientNote",
    "NoteCreate",
    "TechAssignment",
]
