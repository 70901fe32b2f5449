# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase operations.
# It implements the singleton pattern to reuse a single service-role client
# and provides specialized methods for the records every layer needs:
# - Profiles (role + onboarding status)
# - Client details (the saved wizard answers)
#
# Auth calls (sign in, sign up, password reset) use a fresh anon-key client
# per call, so one user's session never leaks into another request.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   profile = SupabaseClient.fetch_profile(user_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Table names
# -----------------------------------------------------------------------------
PROFILES_TABLE = "profiles"
CLIENT_DETAILS_TABLE = "client_details"
DOCUMENTS_TABLE = "documents"
CLIENT_NOTES_TABLE = "client_notes"
TECH_ASSIGNMENTS_TABLE = "tech_assignments"

# PostgREST code for "no rows" on .single()
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    errors should tell HOW to fix, not just WHAT failed.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        profile = SupabaseClient.fetch_profile("550e8400-...")
        role = profile["role"] if profile else "client"
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Access rules are enforced by the role guard in the API layer.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def get_auth_client(cls) -> Client:
        """
        Create a short-lived anon-key client for Supabase Auth calls.

        Raises:
            SupabaseClientError: If client creation fails
        """
        try:
            return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase auth client: {e}",
                code="AUTH_CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file"
            )

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a profile row by user ID.

        Args:
            user_id: The auth user UUID (also the profile primary key)

        Returns:
            Profile dict (id, full_name, email, role, onboarding_status,
            created_at), or None if the profile doesn't exist

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table(PROFILES_TABLE)
                .select("*")
                .eq("id", user_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch profile: {e}",
                code="FETCH_PROFILE_FAILED",
                suggestion="Check that the profiles table is accessible",
                details={"user_id": user_id_str}
            )

    @classmethod
    def update_profile(
        cls,
        user_id: str | UUID,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update fields on a profile row.

        Args:
            user_id: The profile UUID
            updates: Column -> value mapping

        Returns:
            Updated profile dict, or None if no row matched

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table(PROFILES_TABLE)
                .update(updates)
                .eq("id", user_id_str)
                .execute()
            )

            if response.data:
                logger.debug(f"Updated profile {user_id_str}: {sorted(updates)}")
                return response.data[0]
            return None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update profile: {e}",
                code="UPDATE_PROFILE_FAILED",
                details={"user_id": user_id_str, "fields": sorted(updates)}
            )

    # -------------------------------------------------------------------------
    # Client Details
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_client_details(cls, client_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch the saved onboarding answers for a client.

        Args:
            client_id: The client's profile UUID

        Returns:
            Client details dict, or None if the client hasn't completed onboarding

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        client_id_str = cls._normalize_uuid(client_id)

        try:
            response = (
                client.table(CLIENT_DETAILS_TABLE)
                .select("*")
                .eq("client_id", client_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch client details: {e}",
                code="FETCH_CLIENT_DETAILS_FAILED",
                details={"client_id": client_id_str}
            )

    @classmethod
    def upsert_client_details(
        cls,
        client_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Insert or update the single client_details row for a client.

        Looks up an existing row by client_id first; updates it if found,
        otherwise inserts a new one.

        Args:
            client_id: The client's profile UUID
            data: Column -> value mapping (client_id is set automatically)

        Returns:
            The written row

        Raises:
            SupabaseClientError: If the lookup or write fails
        """
        client = cls.get_client()
        client_id_str = cls._normalize_uuid(client_id)
        row = {**data, "client_id": client_id_str}

        existing = cls.fetch_client_details(client_id_str)

        try:
            if existing:
                response = (
                    client.table(CLIENT_DETAILS_TABLE)
                    .update(row)
                    .eq("client_id", client_id_str)
                    .execute()
                )
            else:
                response = (
                    client.table(CLIENT_DETAILS_TABLE)
                    .insert(row)
                    .execute()
                )

            if response.data:
                logger.info(
                    f"{'Updated' if existing else 'Inserted'} client details for {client_id_str}"
                )
                return response.data[0]
            raise SupabaseClientError(
                message="Write returned no data",
                code="UPSERT_NO_DATA",
                details={"client_id": client_id_str}
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to save client details: {e}",
                code="UPSERT_CLIENT_DETAILS_FAILED",
                details={"client_id": client_id_str}
            )
