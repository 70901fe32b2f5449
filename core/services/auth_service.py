# =============================================================================
# core/services/auth_service.py - Supabase Auth Operations
# =============================================================================
# Sign in, sign up, sign out and password reset are delegated to Supabase
# Auth. Failures come back as AuthFailedError carrying Supabase's message.
# =============================================================================

import logging
from typing import Any

from app.config import settings
from app.exceptions import AuthFailedError
from core.models.profile import UserRole
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


def _session_dict(session: Any) -> dict[str, Any] | None:
    if session is None:
        return None
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": session.expires_in,
        "token_type": session.token_type,
    }


class AuthService:
    """Thin wrapper over the Supabase Auth API."""

    @staticmethod
    def login(email: str, password: str) -> dict[str, Any]:
        """
        Password sign-in.

        Returns:
            Dict with user_id, email and session tokens

        Raises:
            AuthFailedError: If Supabase rejects the credentials
        """
        client = SupabaseClient.get_auth_client()
        try:
            response = client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning(f"Login failed for {email}: {e}")
            raise AuthFailedError(getattr(e, "message", str(e)))

        return {
            "user_id": response.user.id,
            "email": response.user.email,
            "session": _session_dict(response.session),
        }

    @staticmethod
    def register(email: str, password: str, full_name: str | None = None) -> dict[str, Any]:
        """
        Create a client account.

        Self-registration always creates a client; staff roles are granted
        by an admin. The signup trigger copies full_name and role from the
        user metadata into profiles.

        Raises:
            AuthFailedError: If Supabase rejects the signup
        """
        client = SupabaseClient.get_auth_client()
        try:
            response = client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "data": {"full_name": full_name, "role": UserRole.CLIENT.value},
                },
            })
        except Exception as e:
            logger.warning(f"Signup failed for {email}: {e}")
            raise AuthFailedError(getattr(e, "message", str(e)))

        logger.info(f"Registered new client {email}")
        return {
            "user_id": response.user.id if response.user else None,
            "email": email,
            "session": _session_dict(response.session),
            "confirmation_required": response.session is None,
        }

    @staticmethod
    def logout(access_token: str) -> None:
        """
        Revoke the session behind an access token.

        Raises:
            AuthFailedError: If Supabase refuses the sign-out
        """
        client = SupabaseClient.get_client()
        try:
            client.auth.admin.sign_out(access_token)
        except Exception as e:
            raise AuthFailedError(getattr(e, "message", str(e)))

    @staticmethod
    def reset_password(email: str) -> None:
        """
        Send a password reset email.

        Raises:
            AuthFailedError: If Supabase refuses the request
        """
        client = SupabaseClient.get_auth_client()
        try:
            client.auth.reset_password_for_email(
                email, {"redirect_to": settings.PASSWORD_RESET_REDIRECT_URL}
            )
        except Exception as e:
            raise AuthFailedError(getattr(e, "message", str(e)))
        logger.info(f"Password reset requested for {email}")
