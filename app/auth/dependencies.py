# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication and role gating.
#
# Token verification supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret) as fallback
#
# Usage:
#   from app.auth import get_current_user, require_roles, CurrentUser
#
#   @router.get("/admin-only")
#   async def admin_only(user: CurrentUser = Depends(require_roles(UserRole.ADMIN))):
#       return {"user_id": user.id}
# =============================================================================

import logging
import time
from typing import Callable
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser, CurrentUser, TokenPayload
from app.exceptions import RoleForbiddenError
from core.models.profile import UserRole, home_route_for
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _get_jwks_url() -> str:
    """Get the JWKS URL from Supabase URL."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    # Return cached if valid
    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Return cached even if expired, as fallback
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Get the appropriate signing key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    # For ES256 or other algorithms, use JWKS
    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return the user it names.

    Raises:
        HTTPException: 401 if the token is invalid, expired or malformed
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = TokenPayload(**jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience="authenticated"
        ))
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")
    except ValueError as e:
        logger.warning(f"JWT payload missing claims: {e}")
        raise _unauthorized("Invalid token: missing claims")

    try:
        user_uuid = UUID(payload.sub)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {payload.sub}")
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_uuid, email=payload.email)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CurrentUser:
    """
    Extract and validate user from Supabase JWT token, then load their role.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies the JWT signature (supports ES256 and HS256)
    3. Looks up the user's role in the profiles table (default: client)

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    token = credentials.credentials
    auth_user = decode_token(token)
    role = ProfileService.get_role(auth_user.id)

    logger.debug(f"Authenticated user: {auth_user.id} ({role.value})")
    return CurrentUser(
        id=auth_user.id,
        email=auth_user.email,
        role=role,
        access_token=token,
    )


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency that only lets the given roles through.

    A user with another role gets 403 with their own home route in the
    error details, so the client can send them there.

    Usage:
        @router.get("/tech")
        async def tech_home(user: CurrentUser = Depends(require_roles(UserRole.TECH))):
            ...
    """
    allowed = [r.value for r in roles]

    async def _guard(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            logger.info(f"User {user.id} with role {user.role.value} denied; allowed={allowed}")
            raise RoleForbiddenError(user.role.value, allowed, home_route_for(user.role))
        return user

    return _guard


# Common guards
require_client = require_roles(UserRole.CLIENT)
require_admin = require_roles(UserRole.ADMIN)
require_tech = require_roles(UserRole.TECH)
require_staff = require_roles(UserRole.ADMIN, UserRole.TECH)
require_any_role = require_roles(UserRole.CLIENT, UserRole.ADMIN, UserRole.TECH)
