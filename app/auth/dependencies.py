# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# The identity provider for the paste API. Callers are identified by a
# Supabase Auth access token in the Authorization header; no header means
# an anonymous caller.
#
# Supports both:
# - ES256 (current Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret)
#
# Usage:
#   from app.auth import get_current_user_optional, AuthUser
#
#   @router.get("/pastes/{id}")
#   async def read(user: AuthUser | None = Depends(get_current_user_optional)):
#       ...
# =============================================================================

import logging
import time
from typing import Any, Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthUser
from app.config import settings

logger = logging.getLogger(__name__)

# HTTP Bearer token extractors
security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)

JWKS_CACHE_TTL = 3600  # 1 hour
TOKEN_AUDIENCE = "authenticated"


class _JwksCache:
    """Process-wide cache of the project's JSON Web Key Set."""

    def __init__(self, ttl: int = JWKS_CACHE_TTL):
        self.ttl = ttl
        self.keys: dict[str, Any] = {}
        self.fetched_at: float = 0

    def url(self) -> str:
        return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"

    def get(self) -> dict[str, Any]:
        now = time.time()
        if self.keys and (now - self.fetched_at) < self.ttl:
            return self.keys

        try:
            response = httpx.get(self.url(), timeout=10)
            response.raise_for_status()
            self.keys = response.json()
            self.fetched_at = now
            logger.debug(f"Fetched JWKS from {self.url()}")
        except httpx.HTTPError as e:
            # Stale keys beat no keys
            logger.warning(f"Failed to fetch JWKS: {e}")
            if not self.keys:
                return {"keys": []}
        return self.keys


_jwks = _JwksCache()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _hs256_key() -> tuple[str, str]:
    # An empty secret would verify tokens signed with an empty key
    if not settings.SUPABASE_JWT_SECRET:
        logger.warning("Rejected HS256 token: SUPABASE_JWT_SECRET is not configured")
        raise _unauthorized("Invalid token")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def _get_signing_key(token: str) -> tuple[Any, str]:
    """
    Pick the key and algorithm to verify a token with.

    Returns:
        Tuple of (key, algorithm)

    Raises:
        HTTPException: 401 if the token needs the HS256 secret and none is set
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return _hs256_key()

    alg = header.get("alg", "HS256")
    kid = header.get("kid")

    if alg == "HS256":
        return _hs256_key()

    if kid:
        for key in _jwks.get().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return _hs256_key()


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and extract the caller.

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no usable subject
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=TOKEN_AUDIENCE,
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_uuid, email=payload.get("email"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Require an authenticated caller.

    Raises:
        HTTPException: 401 if the header is missing or the token is invalid
    """
    user = decode_access_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> Optional[AuthUser]:
    """
    Identify the caller if they sent a token.

    Returns None when no Authorization header is present. A token that is
    present but invalid is still rejected with 401, so an expired session
    never silently turns into an anonymous paste.
    """
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)
