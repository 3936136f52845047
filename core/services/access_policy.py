# =============================================================================
# core/services/access_policy.py - Paste Read Access and Expiry Rules
# =============================================================================
# The read decision for a paste is evaluated in a fixed order; the first
# terminal state wins:
#
#   1. missing                         -> PasteNotFoundError
#   2. expired (lazy expiry)           -> PasteExpiredError
#   3. private, caller is not owner    -> PastePrivateError
#   4. protected, no password          -> LOCKED (redacted view)
#   5. protected, wrong password       -> IncorrectPasswordError
#   6. otherwise                       -> GRANTED
#
# Nothing in this module writes to the store.
# =============================================================================

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from app.config import Settings
from app.exceptions import (
    IncorrectPasswordError,
    PasteExpiredError,
    PasteNotFoundError,
    PastePrivateError,
)
from core.models.paste import Paste, Visibility
from lib.security import PasswordHasher

logger = logging.getLogger(__name__)


class AccessDecision(str, Enum):
    GRANTED = "granted"
    LOCKED = "locked"


@dataclass(frozen=True)
class ExpiryPolicy:
    """
    Lifetime rules for pastes.

    extend_on_view: when True, every successful read of a paste that has an
    expiry pushes it to now + the owner-status maximum. Pastes that never
    expire have nothing to extend. Off by default.
    """

    guest_max_days: int = 7
    user_max_days: int = 30
    default_days: int = 7
    extend_on_view: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExpiryPolicy":
        return cls(
            guest_max_days=settings.GUEST_MAX_EXPIRY_DAYS,
            user_max_days=settings.USER_MAX_EXPIRY_DAYS,
            default_days=settings.DEFAULT_EXPIRY_DAYS,
            extend_on_view=settings.EXTEND_EXPIRY_ON_VIEW,
        )

    def max_days_for(self, authenticated: bool) -> int:
        return self.user_max_days if authenticated else self.guest_max_days

    def ceiling(self, now: datetime, authenticated: bool) -> datetime:
        """Latest expiry a caller of this kind may hold."""
        return now + timedelta(days=self.max_days_for(authenticated))

    def extended_expiry(self, paste: Paste, now: datetime) -> datetime | None:
        """New expires_at after a successful read, or None to leave it alone."""
        if not self.extend_on_view or paste.expires_at is None:
            return None
        return self.ceiling(now, authenticated=paste.user_id is not None)


def evaluate_access(
    paste: Paste | None,
    paste_id: str,
    password: str | None,
    user_id: object | None,
    hasher: PasswordHasher,
    now: datetime,
) -> AccessDecision:
    """
    Decide whether a caller may read a paste.

    Args:
        paste: The stored paste, or None when the lookup found nothing
        paste_id: Requested id (for error details)
        password: Password supplied by the caller, if any
        user_id: Caller's account id, None for anonymous callers
        hasher: Verifies the password against the stored digest
        now: Current time (timezone-aware)

    Returns:
        GRANTED when the full paste may be returned, LOCKED when only the
        redacted metadata may be returned

    Raises:
        PasteNotFoundError, PasteExpiredError, PastePrivateError,
        IncorrectPasswordError
    """
    if paste is None:
        raise PasteNotFoundError(paste_id)

    if paste.is_expired(now):
        logger.info(f"Rejected read of expired paste {paste_id}")
        raise PasteExpiredError(paste_id)

    if paste.visibility == Visibility.PRIVATE and not paste.is_owned_by(user_id):
        logger.warning(f"Rejected read of private paste {paste_id} by non-owner")
        raise PastePrivateError(paste_id)

    if paste.is_protected:
        if not password:
            return AccessDecision.LOCKED
        if not paste.password_hash or not hasher.verify(password, paste.password_hash):
            logger.warning(f"Incorrect password for paste {paste_id}")
            raise IncorrectPasswordError(paste_id)

    return AccessDecision.GRANTED
