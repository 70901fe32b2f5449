# =============================================================================
# tests/test_wizard_service.py - Wizard Service Tests
# =============================================================================
# The service layer around the reducer: Redis persistence, rebuilding from
# saved answers, and completion. Supabase and Redis are mocked.
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import OnboardingSaveError, QuoteChangedError, WizardIncompleteError
from core.models.onboarding import WizardAction
from core.services.wizard_service import KEY_PREFIX, WizardService, WizardStateStore
from lib.supabase_client import SupabaseClientError
from tests.conftest import CLIENT_ID


@pytest.fixture
def mock_db():
    """Patch the Supabase wrapper and profile service used by the wizard."""
    with patch("core.services.wizard_service.SupabaseClient") as db, \
            patch("core.services.wizard_service.ProfileService") as profiles:
        db.fetch_client_details.return_value = None
        db.upsert_client_details.side_effect = lambda client_id, row: {"client_id": client_id, **row}
        db.update_profile.return_value = {"id": CLIENT_ID, "onboarding_status": "completed"}
        yield db, profiles


def finish_wizard(user_id=CLIENT_ID):
    WizardService.submit_client_info(user_id, {"company_name": "Acme Dental", "company_size": "1-10 employees"})
    WizardService.submit_services(user_id, ["cybersecurity"])
    WizardService.submit_assessment(user_id, {"operating_system": "macOS"})
    WizardService.submit_timeline(user_id, {"project_duration": "1 month"})
    return WizardService.accept_contract(user_id, True)


# =============================================================================
# State Store Tests
# =============================================================================

class TestWizardStateStore:

    def test_missing_state_is_none(self, memory_redis):
        assert WizardStateStore.load(CLIENT_ID) is None

    def test_save_uses_ttl(self, memory_redis, mock_db):
        WizardService.submit_client_info(CLIENT_ID, {"company_name": "Acme"})

        key, _ = memory_redis.set.call_args.args
        assert key == f"{KEY_PREFIX}{CLIENT_ID}"
        assert memory_redis.set.call_args.kwargs["ex"] > 0

    def test_unreadable_state_discarded(self, memory_redis):
        memory_redis.store[f"{KEY_PREFIX}{CLIENT_ID}"] = "{not json"

        assert WizardStateStore.load(CLIENT_ID) is None


# =============================================================================
# State Loading & Mutation Tests
# =============================================================================

class TestGetState:

    def test_blank_for_new_user(self, memory_redis, mock_db):
        state = WizardService.get_state(CLIENT_ID)

        assert state.current_step == 1
        assert state.client_info.company_name == ""

    def test_rebuilt_from_saved_details(self, memory_redis, mock_db, client_details_row):
        db, _ = mock_db
        db.fetch_client_details.return_value = client_details_row

        state = WizardService.get_state(CLIENT_ID)

        assert state.client_info.company_name == "Acme Dental"
        assert state.current_step == 1

    def test_redis_state_wins(self, memory_redis, mock_db, client_details_row):
        db, _ = mock_db
        db.fetch_client_details.return_value = client_details_row
        WizardService.submit_client_info(CLIENT_ID, {"company_name": "Renamed Co"})

        state = WizardService.get_state(CLIENT_ID)

        assert state.client_info.company_name == "Renamed Co"
        assert state.current_step == 2


class TestMutations:

    def test_answers_accumulate_between_calls(self, memory_redis, mock_db):
        state = finish_wizard()

        assert state.current_step == 6
        assert state.client_info.company_name == "Acme Dental"
        assert state.technical_assessment.operating_system == "macOS"
        assert state.timeline.project_duration == "1 month"
        assert state.contract_accepted is True

    def test_first_change_marks_started_once(self, memory_redis, mock_db):
        _, profiles = mock_db

        WizardService.submit_client_info(CLIENT_ID, {"company_name": "Acme"})
        WizardService.go_back(CLIENT_ID)

        profiles.mark_started.assert_called_once_with(CLIENT_ID)

    def test_state_read_once_per_change(self, memory_redis, mock_db):
        WizardService.submit_client_info(CLIENT_ID, {"company_name": "Acme"})
        WizardService.go_back(CLIENT_ID)

        assert memory_redis.get.call_count == 2

    def test_dispatch_raw_action(self, memory_redis, mock_db):
        state = WizardService.dispatch(CLIENT_ID, WizardAction(type="SET_STEP", payload=3))

        assert state.current_step == 3

    def test_reset_clears_store(self, memory_redis, mock_db):
        WizardService.submit_client_info(CLIENT_ID, {"company_name": "Acme"})

        state = WizardService.reset(CLIENT_ID)

        assert state.current_step == 1
        assert memory_redis.store == {}


# =============================================================================
# Completion Tests
# =============================================================================

class TestComplete:

    def test_requires_final_step(self, memory_redis, mock_db):
        WizardService.submit_client_info(CLIENT_ID, {"company_name": "Acme"})

        with pytest.raises(WizardIncompleteError) as exc_info:
            WizardService.complete(CLIENT_ID)

        assert exc_info.value.details["current_step"] == 2

    def test_requires_accepted_contract(self, memory_redis, mock_db):
        finish_wizard()
        WizardService.submit_services(CLIENT_ID, ["backup-recovery"])
        WizardService.dispatch(CLIENT_ID, WizardAction(type="SET_STEP", payload=6))

        with pytest.raises(WizardIncompleteError):
            WizardService.complete(CLIENT_ID)

    def test_saves_and_queues_followups(self, memory_redis, mock_db):
        db, _ = mock_db
        finish_wizard()

        with patch("workers.tasks.seed_onboarding_assignments") as task:
            task.delay.return_value = MagicMock(id="task-123")
            result = WizardService.complete(CLIENT_ID)

        client_id, row = db.upsert_client_details.call_args.args
        assert client_id == CLIENT_ID
        assert row["company_name"] == "Acme Dental"
        assert row["selected_services"] == ["cybersecurity"]
        assert "updated_at" in row
        db.update_profile.assert_called_once_with(CLIENT_ID, {"onboarding_status": "completed"})

        task.delay.assert_called_once_with(CLIENT_ID)
        assert result.followup_task_id == "task-123"
        assert result.onboarding_status == "completed"
        assert result.contract_details.monthly_fee == 200
        assert result.contract_details.setup_fee == 800
        assert WizardStateStore.load(CLIENT_ID) is None
        assert WizardStateStore.task_owner("task-123") == CLIENT_ID

    def test_edited_stored_contract_not_saved(self, memory_redis, mock_db):
        db, _ = mock_db
        state = finish_wizard()
        free = state.contract_details.model_copy(update={"monthly_fee": 0, "setup_fee": 0})
        WizardStateStore.save(CLIENT_ID, state.model_copy(update={"contract_details": free}))

        with pytest.raises(QuoteChangedError):
            WizardService.complete(CLIENT_ID)

        db.upsert_client_details.assert_not_called()

    def test_queue_failure_still_completes(self, memory_redis, mock_db):
        finish_wizard()

        with patch("workers.tasks.seed_onboarding_assignments") as task:
            task.delay.side_effect = ConnectionError("broker down")
            result = WizardService.complete(CLIENT_ID)

        assert result.followup_task_id is None
        assert result.onboarding_status == "completed"

    def test_save_failure_keeps_answers(self, memory_redis, mock_db):
        db, _ = mock_db
        db.upsert_client_details.side_effect = SupabaseClientError("permission denied for table client_details")
        finish_wizard()

        with pytest.raises(OnboardingSaveError) as exc_info:
            WizardService.complete(CLIENT_ID)

        assert "permission denied" in exc_info.value.message
        assert WizardStateStore.load(CLIENT_ID).contract_accepted is True
