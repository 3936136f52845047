# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Sign-up and login happen client-side against Supabase Auth. The API only
# lets a client check that a stored token is still accepted.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, TokenCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/verify", response_model=TokenCheckResponse)
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> TokenCheckResponse:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return TokenCheckResponse(valid=True, user_id=str(user.id), email=user.email)
