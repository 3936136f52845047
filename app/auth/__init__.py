# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based caller identification using Supabase Auth.
#
# Usage:
#   from app.auth import get_current_user_optional, AuthUser
#
#   @router.get("/pastes/{paste_id}")
#   async def read(user: AuthUser | None = Depends(get_current_user_optional)):
#       ...
# =============================================================================

from app.auth.dependencies import decode_access_token, get_current_user, get_current_user_optional
from app.auth.models import AuthUser, TokenCheckResponse

__all__ = [
    "decode_access_token",
    "get_current_user",
    "get_current_user_optional",
    "AuthUser",
    "TokenCheckResponse",
]
