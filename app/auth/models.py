# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated caller extracted from a Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database. Its id is the owner reference stored
    on pastes.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None


class TokenCheckResponse(BaseModel):
    """Returned by GET /auth/verify."""
    valid: bool
    user_id: str
    email: Optional[str] = None
