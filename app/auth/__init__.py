# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based authentication using Supabase Auth, and role guards.
#
# Usage:
#   from app.auth import get_current_user, require_admin, CurrentUser
#
#   @router.get("/protected")
#   async def protected(user: CurrentUser = Depends(get_current_user)):
#       return {"user_id": user.id, "role": user.role}
# =============================================================================

from app.auth.dependencies import (
    decode_token,
    get_current_user,
    require_admin,
    require_any_role,
    require_client,
    require_roles,
    require_staff,
    require_tech,
)
from app.auth.models import AuthUser, CurrentUser, UserResponse

__all__ = [
    "decode_token",
    "get_current_user",
    "require_admin",
    "require_any_role",
    "require_client",
    "require_roles",
    "require_staff",
    "require_tech",
    "AuthUser",
    "CurrentUser",
    "UserResponse",
]
