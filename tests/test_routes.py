# =============================================================================
# tests/test_routes.py - API Route Tests
# =============================================================================
# Role gating and request handling through the FastAPI app. The current user
# is injected with dependency overrides; services are patched.
# =============================================================================

import time
from types import SimpleNamespace
from unittest.mock import patch
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.auth import get_current_user
from app.auth.dependencies import decode_token
from app.auth.models import CurrentUser
from app.config import settings
from app.exceptions import ClientNotFoundError
from app.main import app
from core.models.profile import UserRole
from core.services.assignment_service import AssignmentService
from core.services.document_service import DocumentService
from core.services.note_service import NoteService
from core.services.profile_service import ProfileService
from lib.supabase_client import SupabaseClientError
from lib.utils import content_disposition
from tests.conftest import ADMIN_ID, CLIENT_ID, TECH_ID

USER_IDS = {
    UserRole.CLIENT: CLIENT_ID,
    UserRole.ADMIN: ADMIN_ID,
    UserRole.TECH: TECH_ID,
}

NOTE_ROW = {
    "id": "n-1",
    "client_id": CLIENT_ID,
    "note_text": "Prefers email",
    "created_by": ADMIN_ID,
    "created_at": "2024-06-04T10:00:00Z",
}


@pytest.fixture
def api():
    """
    TestClient plus a `login(role)` helper that makes every request come
    from a user with that role.
    """
    client = TestClient(app)

    def login(role: UserRole) -> TestClient:
        user = CurrentUser(
            id=UUID(USER_IDS[role]),
            email=f"{role.value}@example.com",
            role=role,
            access_token="test-token",
        )
        app.dependency_overrides[get_current_user] = lambda: user
        return client

    yield SimpleNamespace(login=login)
    app.dependency_overrides.clear()


def make_token(sub: str = CLIENT_ID, expires_in: int = 3600) -> str:
    now = int(time.time())
    return jwt.encode(
        {
            "sub": sub,
            "email": "dana@acmedental.com",
            "aud": "authenticated",
            "iat": now,
            "exp": now + expires_in,
            "role": "authenticated",
        },
        settings.SUPABASE_JWT_SECRET,
        algorithm="HS256",
    )


# =============================================================================
# Token Verification
# =============================================================================

class TestTokens:

    def test_decode_valid_token(self):
        user = decode_token(make_token())

        assert user.id == UUID(CLIENT_ID)
        assert user.email == "dana@acmedental.com"

    def test_expired_token(self):
        from fastapi import HTTPException

        with pytest.raises(HTTPException) as exc_info:
            decode_token(make_token(expires_in=-60))

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_malformed_subject(self):
        from fastapi import HTTPException

        with pytest.raises(HTTPException) as exc_info:
            decode_token(make_token(sub="not-a-uuid"))

        assert exc_info.value.status_code == 401

    def test_verify_endpoint_loads_role(self):
        with patch("app.auth.dependencies.ProfileService.get_role", return_value=UserRole.TECH):
            response = TestClient(app).get(
                "/api/v1/auth/verify",
                headers={"Authorization": f"Bearer {make_token()}"},
            )

        assert response.status_code == 200
        assert response.json()["role"] == "tech"

    def test_missing_token(self):
        response = TestClient(app).get("/api/v1/dashboard")

        assert response.status_code in (401, 403)


# =============================================================================
# Role Gating
# =============================================================================

class TestRoleGating:

    @pytest.mark.parametrize("role,path,redirect", [
        (UserRole.CLIENT, "/api/v1/admin/clients", "/dashboard"),
        (UserRole.CLIENT, "/api/v1/tech", "/dashboard"),
        (UserRole.CLIENT, f"/api/v1/admin/clients/{CLIENT_ID}", "/dashboard"),
        (UserRole.TECH, "/api/v1/admin/stats", "/tech"),
        (UserRole.TECH, "/api/v1/dashboard", "/tech"),
        (UserRole.ADMIN, "/api/v1/tech", "/admin"),
        (UserRole.ADMIN, "/api/v1/dashboard", "/admin"),
    ])
    def test_forbidden_role_gets_home_route(self, api, role, path, redirect):
        response = api.login(role).get(path)

        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "ROLE_FORBIDDEN"
        assert body["details"]["redirect"] == redirect

    def test_tech_may_view_client_detail(self, api, client_profile):
        client = {**client_profile, "client_info": None}

        with patch.object(ProfileService, "get_client", return_value=client), \
                patch.object(DocumentService, "list_documents", return_value=[]), \
                patch.object(NoteService, "list_notes", return_value=[NOTE_ROW]), \
                patch.object(AssignmentService, "list_assignments", return_value=[]):
            response = api.login(UserRole.TECH).get(f"/api/v1/admin/clients/{CLIENT_ID}")

        assert response.status_code == 200
        body = response.json()
        assert body["client"]["id"] == CLIENT_ID
        assert [n["id"] for n in body["notes"]] == ["n-1"]
        assert len(body["timeline"]) == 6

    def test_catalog_is_public(self):
        response = TestClient(app).get("/api/v1/onboarding/catalog")

        assert response.status_code == 200
        assert len(response.json()["services"]) == 6


# =============================================================================
# Admin
# =============================================================================

class TestAdminRoutes:

    def test_list_clients_filters(self, api, sample_clients):
        with patch.object(ProfileService, "list_clients", return_value=sample_clients):
            response = api.login(UserRole.ADMIN).get("/api/v1/admin/clients", params={"search": "acme"})

        assert response.status_code == 200
        assert [c["full_name"] for c in response.json()] == ["Dana Reyes"]

    def test_stats(self, api, sample_clients):
        with patch.object(ProfileService, "list_clients", return_value=sample_clients):
            response = api.login(UserRole.ADMIN).get("/api/v1/admin/stats")

        assert response.json()["total_clients"] == 4

    def test_export_csv(self, api, sample_clients):
        with patch.object(ProfileService, "list_clients", return_value=sample_clients):
            response = api.login(UserRole.ADMIN).get("/api/v1/admin/clients/export", params={"status": "completed"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0] == "full_name,email,company_name,industry,onboarding_status,created_at"
        assert len(lines) == 2
        assert "Northwind Logistics" in lines[1]

    def test_add_note_uses_caller_as_author(self, api, client_profile):
        with patch.object(ProfileService, "get_client", return_value=client_profile), \
                patch.object(NoteService, "add_note", return_value={**NOTE_ROW, "id": "n-2"}) as add_note:
            response = api.login(UserRole.ADMIN).post(
                f"/api/v1/admin/clients/{CLIENT_ID}/notes",
                json={"note_text": " Prefers email "},
            )

        assert response.status_code == 201
        assert response.json()["id"] == "n-2"
        add_note.assert_called_once_with(CLIENT_ID, "Prefers email", UUID(ADMIN_ID))

    def test_staff_upload_for_unknown_client(self, api):
        with patch.object(ProfileService, "get_client", side_effect=ClientNotFoundError("nobody")), \
                patch.object(DocumentService, "upload_document") as upload:
            response = api.login(UserRole.ADMIN).post(
                "/api/v1/documents",
                data={"document_type": "contract", "client_id": "nobody"},
                files=[("files", ("msa.pdf", b"%PDF", "application/pdf"))],
            )

        assert response.status_code == 404
        assert response.json()["code"] == "CLIENT_NOT_FOUND"
        upload.assert_not_called()

    def test_blank_note_rejected(self, api):
        response = api.login(UserRole.ADMIN).post(
            f"/api/v1/admin/clients/{CLIENT_ID}/notes",
            json={"note_text": "   "},
        )

        assert response.status_code == 422

    def test_backend_error_message_surfaces(self, api):
        with patch.object(ProfileService, "list_clients", side_effect=SupabaseClientError("relation does not exist")):
            response = api.login(UserRole.ADMIN).get("/api/v1/admin/clients")

        assert response.status_code == 502
        assert response.json()["detail"] == "relation does not exist"


# =============================================================================
# Tech
# =============================================================================

class TestTechRoutes:

    def test_dashboard(self, api, sample_clients, sample_assignments):
        with patch.object(ProfileService, "list_clients", return_value=sample_clients[:1]) as list_clients, \
                patch.object(AssignmentService, "list_assignments", return_value=sample_assignments):
            response = api.login(UserRole.TECH).get("/api/v1/tech", params={"status": "pending"})

        body = response.json()
        assert response.status_code == 200
        assert [t["id"] for t in body["assignments"]] == ["a-1"]
        assert body["stats"]["pending_tasks"] == 1
        list_clients.assert_called_once_with(statuses=["in_progress", "documents_pending"])

    def test_update_assignment_status(self, api, sample_assignments):
        updated = {**sample_assignments[0], "status": "completed"}

        with patch.object(AssignmentService, "update_status", return_value=updated) as update:
            response = api.login(UserRole.TECH).patch("/api/v1/tech/assignments/a-1", json={"status": "completed"})

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert update.call_args.kwargs["assigned_to"] == UUID(TECH_ID)


# =============================================================================
# Documents
# =============================================================================

class TestDocumentRoutes:

    def test_bad_extension_rejected(self, api):
        response = api.login(UserRole.CLIENT).post(
            "/api/v1/documents",
            data={"document_type": "contract"},
            files=[("files", ("payload.exe", b"MZ", "application/octet-stream"))],
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"

    def test_staff_upload_needs_client(self, api):
        response = api.login(UserRole.ADMIN).post(
            "/api/v1/documents",
            data={"document_type": "contract"},
            files=[("files", ("msa.pdf", b"%PDF", "application/pdf"))],
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Please select a client"

    def test_unknown_document_type_rejected(self, api):
        response = api.login(UserRole.CLIENT).post(
            "/api/v1/documents",
            data={"document_type": "selfie"},
            files=[("files", ("me.png", b"PNG", "image/png"))],
        )

        assert response.status_code == 422

    def test_client_upload(self, api):
        row = {
            "id": "d-1",
            "client_id": CLIENT_ID,
            "file_name": "msa.pdf",
            "file_type": "application/pdf",
            "file_size": 4,
            "storage_path": f"{CLIENT_ID}/contract/1_msa.pdf",
            "document_type": "contract",
        }

        with patch.object(DocumentService, "upload_document", return_value=row) as upload, \
                patch.object(DocumentService, "list_documents", return_value=[row]):
            response = api.login(UserRole.CLIENT).post(
                "/api/v1/documents",
                data={"document_type": "contract", "client_id": "someone-else"},
                files=[("files", ("msa.pdf", b"%PDF", "application/pdf"))],
            )

        assert response.status_code == 201
        assert response.json()["message"] == "Uploaded 1 document(s)"
        assert upload.call_args.kwargs["client_id"] == CLIENT_ID

    def test_download(self, api):
        document = {"file_name": "msa.pdf", "file_type": "application/pdf"}

        with patch.object(DocumentService, "download_document", return_value=(document, b"%PDF-1.7")):
            response = api.login(UserRole.CLIENT).get("/api/v1/documents/d-1/download")

        assert response.status_code == 200
        assert response.content == b"%PDF-1.7"
        assert "msa.pdf" in response.headers["content-disposition"]

    @pytest.mark.parametrize("file_name", ["договор.pdf", "合同.pdf", 'say "hi".txt'])
    def test_download_any_filename(self, api, file_name):
        document = {"file_name": file_name, "file_type": "application/pdf"}

        with patch.object(DocumentService, "download_document", return_value=(document, b"%PDF-1.7")):
            response = api.login(UserRole.CLIENT).get("/api/v1/documents/d-1/download")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == content_disposition(file_name)


# =============================================================================
# Client Dashboard
# =============================================================================

class TestClientDashboard:

    def test_summary(self, api, client_profile, client_details_row):
        with patch.object(ProfileService, "get_profile", return_value=client_profile), \
                patch("app.routers.dashboard.SupabaseClient") as db, \
                patch.object(DocumentService, "list_documents", return_value=[{"id": "d-1"}]):
            db.fetch_client_details.return_value = client_details_row
            response = api.login(UserRole.CLIENT).get("/api/v1/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert body["profile"]["full_name"] == "Dana Reyes"
        assert body["client_details"]["company_name"] == "Acme Dental"
        assert body["summary"] == {
            "onboarding_status": "in_progress",
            "selected_services": 2,
            "monthly_fee": 7700,
            "documents": 1,
        }
        assert body["route"] == "/dashboard"

    def test_before_onboarding_saved(self, api, client_profile):
        with patch.object(ProfileService, "get_profile", return_value=client_profile), \
                patch("app.routers.dashboard.SupabaseClient") as db, \
                patch.object(DocumentService, "list_documents", return_value=[]):
            db.fetch_client_details.return_value = None
            body = api.login(UserRole.CLIENT).get("/api/v1/dashboard").json()

        assert body["client_details"] is None
        assert body["summary"]["selected_services"] == 0
        assert body["summary"]["monthly_fee"] == 0


# =============================================================================
# Onboarding Wizard
# =============================================================================

class TestOnboardingRoutes:

    @pytest.fixture
    def wizard_db(self, memory_redis):
        with patch("core.services.wizard_service.SupabaseClient") as db, \
                patch("core.services.wizard_service.ProfileService"):
            db.fetch_client_details.return_value = None
            yield db

    def test_state_for_new_user(self, api, wizard_db):
        response = api.login(UserRole.CLIENT).get("/api/v1/onboarding/state")

        assert response.status_code == 200
        assert response.json()["route"] == "/onboarding"
        assert response.json()["state"]["current_step"] == 1

    def test_steps_through_to_contract(self, api, wizard_db):
        client = api.login(UserRole.CLIENT)

        response = client.put("/api/v1/onboarding/client-info", json={"company_name": "Acme", "company_size": "1-10 employees"})
        assert response.json()["route"] == "/services"

        response = client.put("/api/v1/onboarding/services", json={"selected_services": ["managed-it"]})
        assert response.json()["route"] == "/assessment"

        response = client.put("/api/v1/onboarding/assessment", json={"network_size": "small"})
        response = client.put("/api/v1/onboarding/timeline", json={"project_duration": "2 weeks"})
        assert response.json()["route"] == "/contract"

        quote = client.get("/api/v1/onboarding/quote").json()
        assert quote["monthly_fee"] == 1500
        assert quote["setup_fee"] == 500

        response = client.post("/api/v1/onboarding/contract", json={"agreed": True})
        assert response.json()["route"] == "/completion"
        assert response.json()["state"]["contract_accepted"] is True

    def test_unknown_service(self, api, wizard_db):
        response = api.login(UserRole.CLIENT).put(
            "/api/v1/onboarding/services", json={"selected_services": ["teleportation"]}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "UNKNOWN_SERVICE"

    def test_unknown_field(self, api, wizard_db):
        response = api.login(UserRole.CLIENT).put("/api/v1/onboarding/timeline", json={"when": "soon"})

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_PAYLOAD"

    def test_set_step_out_of_range(self, api, wizard_db):
        response = api.login(UserRole.CLIENT).post(
            "/api/v1/onboarding/actions", json={"type": "SET_STEP", "payload": 9}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STEP"

    def test_complete_too_early(self, api, wizard_db):
        response = api.login(UserRole.CLIENT).post("/api/v1/onboarding/complete")

        assert response.status_code == 409
        assert response.json()["code"] == "WIZARD_INCOMPLETE"

    def test_staff_may_use_wizard(self, api, wizard_db):
        response = api.login(UserRole.ADMIN).post("/api/v1/onboarding/back")

        assert response.status_code == 200
        assert response.json()["state"]["current_step"] == 1

    def _accept_managed_it(self, client):
        client.put("/api/v1/onboarding/client-info", json={"company_name": "Acme", "company_size": "500+ employees"})
        client.put("/api/v1/onboarding/services", json={"selected_services": ["managed-it"]})
        client.put("/api/v1/onboarding/assessment", json={})
        client.put("/api/v1/onboarding/timeline", json={})
        response = client.post("/api/v1/onboarding/contract", json={"agreed": True})
        assert response.json()["state"]["contract_details"]["monthly_fee"] == 150000
        return response

    def test_edited_contract_needs_new_acceptance(self, api, wizard_db):
        client = api.login(UserRole.CLIENT)
        self._accept_managed_it(client)

        response = client.post(
            "/api/v1/onboarding/actions",
            json={"type": "UPDATE_CONTRACT", "payload": {"monthly_fee": 0, "setup_fee": 0}},
        )
        assert response.json()["state"]["contract_accepted"] is False

        response = client.post("/api/v1/onboarding/complete")
        assert response.status_code == 409
        wizard_db.upsert_client_details.assert_not_called()

    def test_raw_services_action_checks_catalog(self, api, wizard_db):
        response = api.login(UserRole.CLIENT).post(
            "/api/v1/onboarding/actions",
            json={"type": "UPDATE_SERVICES", "payload": ["bogus-service"]},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "UNKNOWN_SERVICE"
