# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Login, registration and password reset are delegated to Supabase Auth.
# /me returns the caller's profile including their role, which clients use
# to decide which dashboard to show.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import (
    CurrentUser,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from core.models.profile import ProfileUpdate, home_route_for
from core.services.auth_service import AuthService
from core.services.profile_service import ProfileService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login")
async def login(request: LoginRequest) -> dict:
    """
    Sign in with email and password.

    Returns the Supabase session tokens plus the user's role and the
    dashboard route for that role.
    """
    result = AuthService.login(request.email, request.password)
    role = ProfileService.get_role(result["user_id"])

    return {
        **result,
        "role": role.value,
        "redirect": home_route_for(role),
    }


@router.post("/register", status_code=201)
async def register(request: RegisterRequest) -> dict:
    """
    Create a client account.

    If email confirmation is enabled in Supabase, no session is returned
    and `confirmation_required` is true.
    """
    return AuthService.register(request.email, request.password, request.full_name)


@router.post("/logout")
async def logout(user: CurrentUser = Depends(get_current_user)) -> dict:
    """Revoke the current session."""
    AuthService.logout(user.access_token)
    return {"message": "Signed out"}


@router.post("/forgot-password")
async def forgot_password(request: ForgotPasswordRequest) -> dict:
    """Send a password reset email."""
    AuthService.reset_password(request.email)
    return {"success": True, "message": "Check your email for a reset link"}


def _user_response(user: CurrentUser, profile: dict | None) -> UserResponse:
    # User exists in auth but not yet in profiles
    # (might happen if the signup trigger hasn't run yet)
    if not profile:
        return UserResponse(id=user.id, email=user.email, role=user.role)
    return UserResponse(
        id=user.id,
        email=profile.get("email") or user.email,
        full_name=profile.get("full_name"),
        role=user.role,
        onboarding_status=profile.get("onboarding_status"),
        created_at=profile.get("created_at"),
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: CurrentUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the current authenticated user's profile.

    Raises:
        401: If not authenticated
    """
    return _user_response(user, SupabaseClient.fetch_profile(user.id))


@router.patch("/me", response_model=UserResponse)
async def update_current_user(
    request: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
) -> UserResponse:
    """
    Update the caller's own profile.

    Only the display name can be changed here; roles are managed by admins.
    """
    profile = ProfileService.update_profile(user.id, request.model_dump(exclude_none=True))
    return _user_response(user, profile)


@router.get("/verify")
async def verify_token(
    user: CurrentUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Returns:
        dict: Confirmation with user_id and role

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email,
        "role": user.role.value,
    }
