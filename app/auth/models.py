# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from core.models.profile import OnboardingStatus, UserRole


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None


class CurrentUser(AuthUser):
    """Authenticated user plus the role from their profile row."""
    role: UserRole = UserRole.CLIENT
    access_token: Optional[str] = Field(default=None, repr=False)


class UserResponse(BaseModel):
    """
    Full user response for API endpoints.

    Includes the profile data from the profiles table.
    """
    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: UserRole = UserRole.CLIENT
    onboarding_status: Optional[OnboardingStatus] = None
    created_at: Optional[datetime] = None


# =============================================================================
# Request Models
# =============================================================================

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Self-registration; the account is always a client."""
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = Field(default=None, max_length=255)


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)


class TokenPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    Supabase tokens include standard JWT claims plus custom claims.
    """
    sub: str  # User ID
    email: Optional[str] = None
    aud: str  # Audience (should be "authenticated")
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    role: Optional[str] = None  # Postgres role, not the app role
