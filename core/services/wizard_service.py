# =============================================================================
# core/services/wizard_service.py - Onboarding Wizard Business Logic
# =============================================================================
# Loads a user's wizard state, runs it through the reducer, stores it again,
# and on completion writes the answers to client_details.
#
# Wizard state lives in Redis between requests (JSON, with a TTL) so partial
# answers survive until the user completes or the TTL lapses.
# =============================================================================

import logging
from typing import Any, Callable
from uuid import UUID

import redis

from app.config import settings
from app.exceptions import OnboardingSaveError
from core import wizard
from core.models.onboarding import (
    CompletionResponse,
    OnboardingState,
    WizardAction,
)
from core.models.profile import OnboardingStatus
from core.services.profile_service import ProfileService
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

KEY_PREFIX = "onboarding:wizard:"
TASK_OWNER_PREFIX = "onboarding:task:"

# Matches how long the worker keeps task results
TASK_OWNER_TTL_SECONDS = 24 * 3600


class WizardStateStore:
    """
    Redis-backed wizard state, one key per user.

    Implements singleton pattern for the Redis connection, like
    SupabaseClient does for the database.
    """

    _redis: redis.Redis | None = None

    @classmethod
    def get_redis(cls) -> redis.Redis:
        if cls._redis is None:
            cls._redis = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)
            logger.info("Redis connection for wizard state initialized")
        return cls._redis

    @staticmethod
    def _key(user_id: UUID | str) -> str:
        return f"{KEY_PREFIX}{normalize_uuid(user_id)}"

    @classmethod
    def load(cls, user_id: UUID | str) -> OnboardingState | None:
        """Stored state, or None when the user has none (or it no longer parses)."""
        raw = cls.get_redis().get(cls._key(user_id))
        if raw is None:
            return None
        try:
            return OnboardingState.model_validate_json(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable wizard state for {user_id}: {e}")
            return None

    @classmethod
    def save(cls, user_id: UUID | str, state: OnboardingState) -> None:
        cls.get_redis().set(
            cls._key(user_id),
            state.model_dump_json(),
            ex=settings.WIZARD_STATE_TTL_SECONDS,
        )

    @classmethod
    def clear(cls, user_id: UUID | str) -> None:
        cls.get_redis().delete(cls._key(user_id))

    @classmethod
    def remember_task(cls, task_id: str, user_id: UUID | str) -> None:
        """Record which client a queued follow-up task belongs to."""
        cls.get_redis().set(
            f"{TASK_OWNER_PREFIX}{task_id}",
            normalize_uuid(user_id),
            ex=TASK_OWNER_TTL_SECONDS,
        )

    @classmethod
    def task_owner(cls, task_id: str) -> str | None:
        return cls.get_redis().get(f"{TASK_OWNER_PREFIX}{task_id}")


class WizardService:
    """
    Service for the onboarding wizard.

    Every mutating call follows load -> reduce -> save.
    """

    @staticmethod
    def get_state(user_id: UUID | str) -> OnboardingState:
        """
        Current wizard for a user.

        Falls back to previously saved answers (so a completed client can
        revise them), then to a blank wizard.
        """
        state = WizardStateStore.load(user_id)
        if state is not None:
            return state
        return WizardService._initial_state(user_id)

    @staticmethod
    def _initial_state(user_id: UUID | str) -> OnboardingState:
        """Wizard for a user with nothing in Redis."""
        saved = SupabaseClient.fetch_client_details(user_id)
        if saved:
            logger.debug(f"Rebuilding wizard for {user_id} from saved client details")
            return wizard.from_client_details_row(saved)

        return wizard.initial_state()

    @staticmethod
    def _apply(
        user_id: UUID | str,
        change: Callable[[OnboardingState], OnboardingState],
    ) -> OnboardingState:
        """Run one change against the stored state and persist the result."""
        stored = WizardStateStore.load(user_id)
        is_new = stored is None
        state = WizardService._initial_state(user_id) if is_new else stored

        new_state = change(state)
        WizardStateStore.save(user_id, new_state)

        if is_new:
            ProfileService.mark_started(user_id)

        logger.debug(f"Wizard for {user_id} now on step {new_state.current_step}")
        return new_state

    @staticmethod
    def dispatch(user_id: UUID | str, action: WizardAction) -> OnboardingState:
        """Apply a raw reducer action."""
        return WizardService._apply(user_id, lambda s: wizard.reduce(s, action))

    @staticmethod
    def submit_client_info(user_id: UUID | str, info: Any) -> OnboardingState:
        return WizardService._apply(user_id, lambda s: wizard.submit_client_info(s, info))

    @staticmethod
    def submit_services(user_id: UUID | str, service_ids: list[str]) -> OnboardingState:
        return WizardService._apply(user_id, lambda s: wizard.submit_services(s, service_ids))

    @staticmethod
    def submit_assessment(user_id: UUID | str, assessment: Any) -> OnboardingState:
        return WizardService._apply(user_id, lambda s: wizard.submit_assessment(s, assessment))

    @staticmethod
    def submit_timeline(user_id: UUID | str, timeline: Any) -> OnboardingState:
        return WizardService._apply(user_id, lambda s: wizard.submit_timeline(s, timeline))

    @staticmethod
    def accept_contract(user_id: UUID | str, agreed: bool) -> OnboardingState:
        return WizardService._apply(user_id, lambda s: wizard.accept_contract(s, agreed))

    @staticmethod
    def go_back(user_id: UUID | str) -> OnboardingState:
        return WizardService._apply(user_id, wizard.go_back)

    @staticmethod
    def reset(user_id: UUID | str) -> OnboardingState:
        """Throw away unfinished answers."""
        WizardStateStore.clear(user_id)
        return wizard.initial_state()

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    @staticmethod
    def save_onboarding_data(user_id: UUID | str, state: OnboardingState) -> dict[str, Any]:
        """
        Write the wizard to client_details and mark the profile completed.

        Raises:
            OnboardingSaveError: With the backend's error message
        """
        row = {**wizard.to_client_details_row(state), "updated_at": utc_now_iso()}

        try:
            details = SupabaseClient.upsert_client_details(user_id, row)
            SupabaseClient.update_profile(
                user_id, {"onboarding_status": OnboardingStatus.COMPLETED.value}
            )
        except SupabaseClientError as e:
            logger.error(f"Error saving onboarding data for {user_id}: {e}")
            raise OnboardingSaveError(e.message)

        logger.info(f"Saved onboarding data for {user_id}")
        return details

    @staticmethod
    def complete(user_id: UUID | str) -> CompletionResponse:
        """
        Finish onboarding.

        Requires the wizard to be on its last step with the contract
        accepted. Saves the answers, clears the stored wizard and queues the
        follow-up assignments.

        Raises:
            WizardIncompleteError: If the wizard isn't finished
            UnknownServiceError: If a selected service left the catalog
            QuoteChangedError: If the contract differs from the current quote
            OnboardingSaveError: If the database write fails
        """
        state = WizardService.get_state(user_id)
        wizard.ensure_complete(state)

        WizardService.save_onboarding_data(user_id, state)
        WizardStateStore.clear(user_id)

        task_id = None
        try:
            from workers.tasks import seed_onboarding_assignments

            task = seed_onboarding_assignments.delay(normalize_uuid(user_id))
            task_id = task.id
            WizardStateStore.remember_task(task_id, user_id)
        except Exception as e:
            logger.warning(f"Failed to queue follow-up assignments for {user_id}: {e}")

        return CompletionResponse(
            client_id=normalize_uuid(user_id),
            onboarding_status=OnboardingStatus.COMPLETED.value,
            contract_details=state.contract_details,
            followup_task_id=task_id,
        )
