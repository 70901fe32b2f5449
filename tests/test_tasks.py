# =============================================================================
# tests/test_tasks.py - Background Task Tests
# =============================================================================
# The follow-up seeding task run in-process (no broker), and the task
# status endpoint with a mocked Celery result.
# =============================================================================

from unittest.mock import MagicMock, patch
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from app.auth import get_current_user
from app.auth.models import CurrentUser
from app.config import settings
from app.main import app
from core.models.profile import UserRole
from core.services.assignment_service import AssignmentService, FOLLOWUP_TASKS
from core.services.wizard_service import WizardStateStore
from lib.supabase_client import SupabaseClientError
from tests.conftest import ADMIN_ID, CLIENT_ID, OTHER_CLIENT_ID, TECH_ID


@pytest.fixture
def no_progress():
    """Progress updates need a result backend; skip them in-process."""
    with patch("workers.tasks.update_progress"):
        yield


class TestSeedOnboardingAssignments:

    def test_creates_all_followups(self, no_progress):
        from workers.tasks import seed_onboarding_assignments

        with patch.object(AssignmentService, "list_assignments", return_value=[]), \
                patch.object(AssignmentService, "create_followups", return_value=[{"id": "a-1"}, {"id": "a-2"}, {"id": "a-3"}]) as create, \
                patch.object(settings, "DEFAULT_TECH_ID", TECH_ID):
            result = seed_onboarding_assignments(CLIENT_ID)

        assert result == {"success": True, "created": ["a-1", "a-2", "a-3"], "skipped": 0}
        create.assert_called_once_with(
            CLIENT_ID,
            assigned_to=TECH_ID,
            only=[name for name, *_ in FOLLOWUP_TASKS],
        )

    def test_skips_existing_tasks(self, no_progress):
        from workers.tasks import seed_onboarding_assignments

        existing = [{"task_name": "Schedule Kick-off Meeting"}]
        with patch.object(AssignmentService, "list_assignments", return_value=existing), \
                patch.object(AssignmentService, "create_followups", return_value=[{"id": "a-2"}, {"id": "a-3"}]) as create, \
                patch.object(settings, "DEFAULT_TECH_ID", None):
            result = seed_onboarding_assignments(CLIENT_ID)

        assert create.call_args.kwargs["only"] == ["Send Welcome Package", "Technical Assessment"]
        assert create.call_args.kwargs["assigned_to"] is None
        assert result["skipped"] == 1

    def test_nothing_to_do(self, no_progress):
        from workers.tasks import seed_onboarding_assignments

        existing = [{"task_name": name} for name, *_ in FOLLOWUP_TASKS]
        with patch.object(AssignmentService, "list_assignments", return_value=existing), \
                patch.object(AssignmentService, "create_followups") as create:
            result = seed_onboarding_assignments(CLIENT_ID)

        create.assert_not_called()
        assert result["created"] == []

    def test_failure_reported_in_result(self, no_progress):
        from workers.tasks import seed_onboarding_assignments

        with patch.object(AssignmentService, "list_assignments", side_effect=RuntimeError("db down")):
            result = seed_onboarding_assignments(CLIENT_ID)

        assert result == {"success": False, "error": "db down"}

    def test_database_errors_are_retried(self, no_progress):
        from workers.tasks import seed_onboarding_assignments

        # Outside a worker, retry() re-raises the original error
        with patch.object(AssignmentService, "list_assignments", side_effect=SupabaseClientError("timeout")), \
                pytest.raises(SupabaseClientError):
            seed_onboarding_assignments(CLIENT_ID)


class TestTaskStatusRoute:

    @pytest.fixture
    def client(self, memory_redis):
        WizardStateStore.remember_task("task-123", CLIENT_ID)
        user = CurrentUser(id=UUID(CLIENT_ID), role=UserRole.CLIENT)
        app.dependency_overrides[get_current_user] = lambda: user
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_success(self, client):
        result = MagicMock(status="SUCCESS", result={"success": True, "created": ["a-1"]})

        with patch("app.routers.tasks._async_result", return_value=result):
            body = client.get("/api/v1/tasks/task-123").json()

        assert body["status"] == "SUCCESS"
        assert body["progress"] == 100
        assert body["result"]["created"] == ["a-1"]
        assert body["error"] is None

    def test_reported_failure(self, client):
        result = MagicMock(status="SUCCESS", result={"success": False, "error": "db down"})

        with patch("app.routers.tasks._async_result", return_value=result):
            body = client.get("/api/v1/tasks/task-123").json()

        assert body["message"] == "Failed"
        assert body["error"] == "db down"

    def test_pending(self, client):
        result = MagicMock(status="PENDING")

        with patch("app.routers.tasks._async_result", return_value=result):
            body = client.get("/api/v1/tasks/task-123").json()

        assert body["progress"] == 0
        assert body["message"] == "Waiting in queue..."

    def test_cancel_is_admin_only(self, client):
        response = client.delete("/api/v1/tasks/task-123")

        assert response.status_code == 403

    def test_other_clients_task_hidden(self, memory_redis):
        WizardStateStore.remember_task("task-456", OTHER_CLIENT_ID)
        user = CurrentUser(id=UUID(CLIENT_ID), role=UserRole.CLIENT)
        app.dependency_overrides[get_current_user] = lambda: user

        try:
            with patch("app.routers.tasks._async_result") as lookup:
                response = TestClient(app).get("/api/v1/tasks/task-456")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 404
        lookup.assert_not_called()

    @pytest.mark.parametrize("role,user_id", [(UserRole.ADMIN, ADMIN_ID), (UserRole.TECH, TECH_ID)])
    def test_staff_see_any_task(self, memory_redis, role, user_id):
        user = CurrentUser(id=UUID(user_id), role=role)
        app.dependency_overrides[get_current_user] = lambda: user
        result = MagicMock(status="SUCCESS", result={"success": True, "created": []})

        try:
            with patch("app.routers.tasks._async_result", return_value=result):
                response = TestClient(app).get("/api/v1/tasks/task-789")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
