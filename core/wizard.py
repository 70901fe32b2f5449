# =============================================================================
# core/wizard.py - Onboarding Wizard State Machine
# =============================================================================
# A reducer over OnboardingState: reduce(state, action) -> new state.
#
# The wizard is a fixed, linear 6-step flow. Each screen submits its section
# (a partial merge) and then jumps to the next screen; "back" jumps to the
# previous one. reduce() never mutates the state it is given.
#
# Usage:
#   from core.wizard import reduce, initial_state
#   state = reduce(initial_state(), WizardAction(type="NEXT_STEP"))
# =============================================================================

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from app.exceptions import (
    ContractNotAcceptedError,
    InvalidStepError,
    InvalidWizardPayloadError,
    QuoteChangedError,
    UnknownServiceError,
    WizardIncompleteError,
)
from core.models.onboarding import (
    TOTAL_STEPS,
    ClientInfo,
    ContractDetails,
    OnboardingState,
    TechnicalAssessment,
    Timeline,
    WizardAction,
    WizardActionType,
    WizardStep,
)
from core.pricing import SERVICE_CATALOG, quote_contract, unknown_services

logger = logging.getLogger(__name__)

# Screen routes, indexed by step
STEP_ROUTES: dict[int, str] = {
    WizardStep.CLIENT_INFO: "/onboarding",
    WizardStep.SERVICES: "/services",
    WizardStep.ASSESSMENT: "/assessment",
    WizardStep.TIMELINE: "/timeline",
    WizardStep.CONTRACT: "/contract",
    WizardStep.COMPLETION: "/completion",
}

# Section-merge actions: action type -> (state field, section model)
_SECTION_ACTIONS: dict[WizardActionType, tuple[str, type[BaseModel]]] = {
    WizardActionType.UPDATE_CLIENT_INFO: ("client_info", ClientInfo),
    WizardActionType.UPDATE_ASSESSMENT: ("technical_assessment", TechnicalAssessment),
    WizardActionType.UPDATE_TIMELINE: ("timeline", Timeline),
    WizardActionType.UPDATE_CONTRACT: ("contract_details", ContractDetails),
}

# Changing these invalidates an accepted contract; accept_contract() re-accepts
_CLEARS_ACCEPTANCE = {
    WizardActionType.UPDATE_CLIENT_INFO,
    WizardActionType.UPDATE_SERVICES,
    WizardActionType.UPDATE_CONTRACT,
}


def initial_state() -> OnboardingState:
    """A fresh wizard on step 1 with every answer blank."""
    return OnboardingState()


def route_for_step(step: int) -> str:
    return STEP_ROUTES.get(step, STEP_ROUTES[WizardStep.CLIENT_INFO])


# =============================================================================
# Reducer
# =============================================================================

def _merge_section(
    state: OnboardingState,
    field: str,
    model: type[BaseModel],
    action: WizardActionType,
    payload: Any,
) -> OnboardingState:
    """Shallow-merge `payload` into one section; untouched fields keep their values."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidWizardPayloadError(action.value, "payload must be an object")

    current = getattr(state, field)
    try:
        merged = model.model_validate({**current.model_dump(), **payload})
    except ValidationError as e:
        raise InvalidWizardPayloadError(action.value, str(e))

    return state.model_copy(update={field: merged})


def _coerce_step(payload: Any) -> int:
    if isinstance(payload, dict):
        payload = payload.get("step")
    if isinstance(payload, bool) or not isinstance(payload, int):
        raise InvalidStepError(payload, TOTAL_STEPS)
    if not 1 <= payload <= TOTAL_STEPS:
        raise InvalidStepError(payload, TOTAL_STEPS)
    return payload


def reduce(state: OnboardingState, action: WizardAction) -> OnboardingState:
    """
    Apply one action to the wizard state.

    Args:
        state: Current wizard state (not modified)
        action: The change to apply

    Returns:
        The new wizard state

    Raises:
        InvalidWizardPayloadError: Section payload has unknown or mistyped fields
        InvalidStepError: SET_STEP target is outside 1..total_steps
        UnknownServiceError: UPDATE_SERVICES names a service not in the catalog
    """
    try:
        action_type = WizardActionType(action.type)
    except ValueError:
        logger.debug(f"Ignoring unknown wizard action: {action.type}")
        return state

    if action_type in _SECTION_ACTIONS:
        field, model = _SECTION_ACTIONS[action_type]
        new_state = _merge_section(state, field, model, action_type, action.payload)
        if action_type in _CLEARS_ACCEPTANCE:
            new_state = new_state.model_copy(update={"contract_accepted": False})
        return new_state

    if action_type == WizardActionType.UPDATE_SERVICES:
        services = action.payload or []
        if not isinstance(services, list) or not all(isinstance(s, str) for s in services):
            raise InvalidWizardPayloadError(action_type.value, "payload must be a list of service ids")
        unknown = unknown_services(services)
        if unknown:
            raise UnknownServiceError(unknown, list(SERVICE_CATALOG))
        return state.model_copy(
            update={"selected_services": list(services), "contract_accepted": False}
        )

    if action_type == WizardActionType.NEXT_STEP:
        return state.model_copy(
            update={"current_step": min(state.current_step + 1, state.total_steps)}
        )

    if action_type == WizardActionType.PREV_STEP:
        return state.model_copy(update={"current_step": max(state.current_step - 1, 1)})

    if action_type == WizardActionType.SET_STEP:
        return state.model_copy(update={"current_step": _coerce_step(action.payload)})

    if action_type == WizardActionType.RESET:
        return initial_state()

    return state


def reduce_all(state: OnboardingState, actions: list[WizardAction]) -> OnboardingState:
    """Apply several actions in order."""
    for action in actions:
        state = reduce(state, action)
    return state


# =============================================================================
# Step Submissions
# =============================================================================
# Each screen's "Continue" is an update followed by a jump to the next screen.

def _submit(
    state: OnboardingState,
    action_type: WizardActionType,
    payload: Any,
    next_step: WizardStep,
) -> OnboardingState:
    return reduce_all(state, [
        WizardAction(type=action_type, payload=payload),
        WizardAction(type=WizardActionType.SET_STEP, payload=int(next_step)),
    ])


def submit_client_info(state: OnboardingState, info: dict[str, Any] | BaseModel) -> OnboardingState:
    """Step 1 -> 2."""
    return _submit(state, WizardActionType.UPDATE_CLIENT_INFO, info, WizardStep.SERVICES)


def submit_services(state: OnboardingState, service_ids: list[str]) -> OnboardingState:
    """
    Step 2 -> 3.

    Raises:
        UnknownServiceError: If an id isn't in the service catalog
    """
    # Keep selection order, drop repeats
    deduped = list(dict.fromkeys(service_ids))
    return _submit(state, WizardActionType.UPDATE_SERVICES, deduped, WizardStep.ASSESSMENT)


def submit_assessment(state: OnboardingState, assessment: dict[str, Any] | BaseModel) -> OnboardingState:
    """Step 3 -> 4."""
    return _submit(state, WizardActionType.UPDATE_ASSESSMENT, assessment, WizardStep.TIMELINE)


def submit_timeline(state: OnboardingState, timeline: dict[str, Any] | BaseModel) -> OnboardingState:
    """Step 4 -> 5."""
    return _submit(state, WizardActionType.UPDATE_TIMELINE, timeline, WizardStep.CONTRACT)


def quote_for(state: OnboardingState) -> ContractDetails:
    """The contract the user would accept on step 5, priced from their answers."""
    return quote_contract(state.selected_services, state.client_info.company_size)


def accept_contract(state: OnboardingState, agreed: bool) -> OnboardingState:
    """
    Step 5 -> 6.

    Prices the selected services, stores the quote as the contract and
    records the acceptance.

    Raises:
        ContractNotAcceptedError: If agreed is False
    """
    if not agreed:
        raise ContractNotAcceptedError()

    quote = quote_for(state)
    state = _submit(state, WizardActionType.UPDATE_CONTRACT, quote.model_dump(), WizardStep.COMPLETION)
    return state.model_copy(update={"contract_accepted": True})


def go_back(state: OnboardingState) -> OnboardingState:
    """Previous screen, never before step 1."""
    return reduce(state, WizardAction(type=WizardActionType.PREV_STEP))


def ensure_complete(state: OnboardingState) -> None:
    """
    Check that a wizard may be saved.

    Raises:
        WizardIncompleteError: Not on the last step, or contract not accepted
        UnknownServiceError: A selected service isn't in the catalog
        QuoteChangedError: The stored contract differs from the quote
    """
    if not (state.is_final_step and state.contract_accepted):
        raise WizardIncompleteError(state.current_step, state.total_steps)

    unknown = unknown_services(state.selected_services)
    if unknown:
        raise UnknownServiceError(unknown, list(SERVICE_CATALOG))

    if state.contract_details != quote_for(state):
        raise QuoteChangedError()


# =============================================================================
# Persistence Mapping
# =============================================================================

def to_client_details_row(state: OnboardingState) -> dict[str, Any]:
    """
    Flatten the wizard into a client_details row.

    Company fields become columns; the remaining sections are stored as JSON.
    """
    info = state.client_info
    return {
        "company_name": info.company_name,
        "industry": info.industry,
        "company_size": info.company_size,
        "phone": info.phone,
        "current_provider": info.current_provider,
        "selected_services": list(state.selected_services),
        "technical_assessment": state.technical_assessment.model_dump(),
        "timeline": state.timeline.model_dump(),
        "contract_details": state.contract_details.model_dump(),
    }


def from_client_details_row(row: dict[str, Any]) -> OnboardingState:
    """
    Rebuild a wizard from previously saved answers so a client can revise them.

    The wizard restarts on step 1 and the contract must be accepted again.
    Saved JSON that no longer fits a section is dropped rather than failing.
    """
    def section(model: type[BaseModel], data: Any) -> BaseModel:
        try:
            return model.model_validate(data or {})
        except ValidationError:
            logger.warning(f"Discarding saved {model.__name__} that no longer validates")
            return model()

    client_info = ClientInfo(
        company_name=row.get("company_name") or "",
        industry=row.get("industry") or "",
        company_size=row.get("company_size") or "",
        phone=row.get("phone") or "",
        current_provider=row.get("current_provider") or "",
    )
    return OnboardingState(
        client_info=client_info,
        selected_services=list(row.get("selected_services") or []),
        technical_assessment=section(TechnicalAssessment, row.get("technical_assessment")),
        timeline=section(Timeline, row.get("timeline")),
        contract_details=section(ContractDetails, row.get("contract_details")),
    )
