# =============================================================================
# core/services/profile_service.py - Profile & Client Business Logic
# =============================================================================
# Role lookup, onboarding status changes and the client listings behind the
# admin and tech dashboards.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import (
    CLIENT_DETAILS_TABLE,
    PROFILES_TABLE,
    SupabaseClient,
    SupabaseClientError,
)
from lib.utils import matches_search, normalize_uuid
from core.models.profile import OnboardingStatus, UserRole
from app.exceptions import ClientNotFoundError

logger = logging.getLogger(__name__)

# Profile columns plus the embedded saved answers
CLIENT_SELECT = (
    "id, full_name, email, created_at, onboarding_status, "
    f"client_info:{CLIENT_DETAILS_TABLE}(*)"
)

# Statuses that show up on the tech dashboard
ACTIVE_STATUSES = [
    OnboardingStatus.IN_PROGRESS.value,
    OnboardingStatus.DOCUMENTS_PENDING.value,
]


def _flatten_client_info(row: dict[str, Any]) -> dict[str, Any]:
    """PostgREST embeds one-to-many as a list; a client has at most one details row."""
    info = row.get("client_info")
    if isinstance(info, list):
        row["client_info"] = info[0] if info else None
    return row


class ProfileService:
    """Service for profile lookups and client listings."""

    @staticmethod
    def get_role(user_id: UUID | str) -> UserRole:
        """
        Role for a user.

        Users without a profile row (e.g. the signup trigger hasn't run
        yet) are treated as clients.
        """
        profile = SupabaseClient.fetch_profile(user_id)
        if not profile:
            logger.warning(f"No profile for user {user_id}, defaulting role to client")
            return UserRole.CLIENT
        try:
            return UserRole(profile.get("role") or UserRole.CLIENT.value)
        except ValueError:
            logger.warning(f"Unknown role {profile.get('role')!r} for user {user_id}")
            return UserRole.CLIENT

    @staticmethod
    def get_profile(user_id: UUID | str) -> dict[str, Any]:
        """
        Raises:
            ClientNotFoundError: If no profile row exists
        """
        profile = SupabaseClient.fetch_profile(user_id)
        if not profile:
            raise ClientNotFoundError(normalize_uuid(user_id))
        return profile

    @staticmethod
    def update_profile(user_id: UUID | str, updates: dict[str, Any]) -> dict[str, Any]:
        """
        Update a user's own profile fields.

        Returns the current profile unchanged when there is nothing to update.
        """
        if not updates:
            return ProfileService.get_profile(user_id)
        updated = SupabaseClient.update_profile(user_id, updates)
        if not updated:
            raise ClientNotFoundError(normalize_uuid(user_id))
        return updated

    @staticmethod
    def set_onboarding_status(
        client_id: UUID | str,
        status: OnboardingStatus,
    ) -> dict[str, Any]:
        """
        Move a client to a new onboarding status.

        Raises:
            ClientNotFoundError: If the client doesn't exist
        """
        updated = SupabaseClient.update_profile(client_id, {"onboarding_status": status.value})
        if not updated:
            raise ClientNotFoundError(normalize_uuid(client_id))
        logger.info(f"Client {client_id} onboarding status -> {status.value}")
        return updated

    @staticmethod
    def mark_started(client_id: UUID | str) -> None:
        """Flip a not_started client to in_progress; other statuses are left alone."""
        profile = SupabaseClient.fetch_profile(client_id)
        if profile and profile.get("onboarding_status") in (None, OnboardingStatus.NOT_STARTED.value):
            SupabaseClient.update_profile(
                client_id, {"onboarding_status": OnboardingStatus.IN_PROGRESS.value}
            )
            logger.info(f"Client {client_id} started onboarding")

    # -------------------------------------------------------------------------
    # Client listings
    # -------------------------------------------------------------------------

    @staticmethod
    def get_client(client_id: UUID | str) -> dict[str, Any]:
        """
        A client profile with its saved onboarding answers embedded.

        Raises:
            ClientNotFoundError: If the client doesn't exist
        """
        client = SupabaseClient.get_client()
        client_id_str = normalize_uuid(client_id)

        try:
            response = (
                client.table(PROFILES_TABLE)
                .select(CLIENT_SELECT)
                .eq("id", client_id_str)
                .single()
                .execute()
            )
        except Exception as e:
            if "PGRST116" in str(e):
                raise ClientNotFoundError(client_id_str)
            raise SupabaseClientError(
                message=f"Failed to fetch client: {e}",
                code="FETCH_CLIENT_FAILED",
                details={"client_id": client_id_str}
            )

        if not response.data:
            raise ClientNotFoundError(client_id_str)
        return _flatten_client_info(response.data)

    @staticmethod
    def list_clients(
        statuses: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        All client profiles, optionally limited to some onboarding statuses.

        Args:
            statuses: Onboarding status values to keep (None keeps all)

        Returns:
            Client dicts with `client_info` embedded, newest first
        """
        client = SupabaseClient.get_client()

        query = (
            client.table(PROFILES_TABLE)
            .select(CLIENT_SELECT)
            .eq("role", UserRole.CLIENT.value)
        )
        if statuses:
            query = query.in_("onboarding_status", statuses)

        try:
            response = query.order("created_at", desc=True).execute()
        except Exception as e:
            logger.error(f"Failed to list clients: {e}")
            raise SupabaseClientError(
                message=f"Failed to list clients: {e}",
                code="LIST_CLIENTS_FAILED",
            )

        return [_flatten_client_info(row) for row in response.data or []]

    @staticmethod
    def filter_clients(
        clients: list[dict[str, Any]],
        search: str | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Admin dashboard filter.

        Search matches name, email or company name (case-insensitive);
        status "all" or None keeps every status.
        """
        def keep(c: dict[str, Any]) -> bool:
            info = c.get("client_info") or {}
            if not matches_search(search, [c.get("full_name"), c.get("email"), info.get("company_name")]):
                return False
            return status in (None, "all") or c.get("onboarding_status") == status

        return [c for c in clients if keep(c)]

    @staticmethod
    def client_stats(clients: list[dict[str, Any]]) -> dict[str, int]:
        """Admin dashboard counters over the unfiltered client list."""
        def count(status: OnboardingStatus) -> int:
            return sum(1 for c in clients if c.get("onboarding_status") == status.value)

        return {
            "total_clients": len(clients),
            "active_onboardings": count(OnboardingStatus.IN_PROGRESS),
            "completed_onboardings": count(OnboardingStatus.COMPLETED),
            "pending_documents": count(OnboardingStatus.DOCUMENTS_PENDING),
        }

    @staticmethod
    def onboarding_timeline(client: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Progress milestones shown on the client detail page.

        Each event: title, date (or None), description, status
        (completed / pending / upcoming).
        """
        info = client.get("client_info") or {}
        assessment = info.get("technical_assessment") or {}
        contract = info.get("contract_details") or {}
        completed = client.get("onboarding_status") == OnboardingStatus.COMPLETED.value

        def done(flag: Any) -> str:
            return "completed" if flag else "pending"

        return [
            {
                "title": "Account Created",
                "date": client.get("created_at"),
                "description": "Client registered an account",
                "status": "completed",
            },
            {
                "title": "Onboarding Started",
                "date": info.get("created_at"),
                "description": "Client started the onboarding process",
                "status": done(info or client.get("onboarding_status") != OnboardingStatus.NOT_STARTED.value),
            },
            {
                "title": "Service Selection",
                "date": None,
                "description": "Client selected IT services",
                "status": done(info.get("selected_services")),
            },
            {
                "title": "Technical Assessment",
                "date": None,
                "description": "Completed IT infrastructure assessment",
                "status": done(assessment.get("current_infrastructure")),
            },
            {
                "title": "Contract Signed",
                "date": info.get("updated_at") if completed else None,
                "description": "Service agreement accepted",
                "status": done(completed and contract.get("service_level")),
            },
            {
                "title": "Implementation",
                "date": None,
                "description": "Service implementation and setup",
                "status": "upcoming",
            },
        ]
