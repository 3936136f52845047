# =============================================================================
# core/services/paste_service.py - Paste Access Controller
# =============================================================================
# Create, read, update and delete pastes under the access and expiry rules:
# - anonymous pastes never outlive the guest ceiling and can't be private
# - reads follow evaluate_access(); checks run before any write
# - a successful read stamps last_accessed_at (and extends expiry when the
#   rolling-expiry policy is on)
# - only the owner may update or delete; ownerless pastes are immutable
# - paste_type is fixed at creation
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from uuid import UUID

from app.exceptions import (
    AuthenticationRequiredError,
    InvalidInputError,
    NotPasteOwnerError,
    PasteExpiredError,
    PasteNotFoundError,
)
from core.models.paste import (
    Paste,
    PasteCreate,
    PasteCreated,
    PasteList,
    PasteSummary,
    PasteType,
    PasteUpdate,
    PasteView,
    RedactedPasteView,
    Visibility,
)
from core.repositories.paste_repository import DuplicatePasteIdError, PasteRepository
from core.services.access_policy import AccessDecision, ExpiryPolicy, evaluate_access
from core.services.file_service import FileService
from lib.security import PasswordHasher, generate_paste_id

logger = logging.getLogger(__name__)

# Attempts at a fresh id when an insert hits an existing primary key
MAX_ID_ATTEMPTS = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasteService:
    """
    Service for the paste lifecycle.

    Collaborators are injected so the same rules run against Supabase in
    production and in-memory fakes in tests.
    """

    def __init__(
        self,
        pastes: PasteRepository,
        files: FileService,
        hasher: PasswordHasher,
        policy: ExpiryPolicy | None = None,
        id_factory: Callable[[], str] = generate_paste_id,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.pastes = pastes
        self.files = files
        self.hasher = hasher
        self.policy = policy or ExpiryPolicy()
        self.id_factory = id_factory
        self.clock = clock

    # -------------------------------------------------------------------------
    # Expiry helpers
    # -------------------------------------------------------------------------

    def _resolve_expiry(
        self,
        now: datetime,
        authenticated: bool,
        expires_at: datetime | None,
        expiry_days: int | None,
        never_expire: bool,
    ) -> datetime | None:
        """
        Turn the requested expiry into the stored expires_at.

        Returns None only for authenticated callers asking to never expire.
        """
        chosen = sum([expires_at is not None, expiry_days is not None, bool(never_expire)])
        if chosen > 1:
            raise InvalidInputError(
                "Choose only one of expires_at, expiry_days or never_expire",
                code="CONFLICTING_EXPIRY",
            )

        if expires_at is not None:
            if expires_at.tzinfo is None:
                raise InvalidInputError(
                    "expires_at must include a timezone offset",
                    code="INVALID_EXPIRY",
                )
            if expires_at <= now:
                raise InvalidInputError(
                    "expires_at must be in the future",
                    code="INVALID_EXPIRY",
                    details={"expires_at": expires_at.isoformat()},
                )

        if expiry_days is not None and expiry_days > self.policy.user_max_days:
            raise InvalidInputError(
                f"expiry_days cannot exceed {self.policy.user_max_days}",
                code="INVALID_EXPIRY",
                details={"expiry_days": expiry_days},
            )

        ceiling = self.policy.ceiling(now, authenticated)

        if never_expire:
            # Guests get the ceiling instead of forever
            return None if authenticated else ceiling

        if expires_at is not None:
            requested = expires_at.astimezone(timezone.utc)
        else:
            requested = now + timedelta(days=expiry_days or self.policy.default_days)

        return min(requested, ceiling)

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create_paste(
        self,
        request: PasteCreate,
        user_id: UUID | str | None = None,
    ) -> PasteCreated:
        """
        Create a new paste.

        Args:
            request: Validated request body
            user_id: Caller's account id, None for anonymous callers

        Returns:
            PasteCreated with the new id and effective expiry

        Raises:
            InvalidInputError: If validation fails (nothing is written)
        """
        now = self.clock()
        authenticated = user_id is not None

        if not request.title.strip():
            raise InvalidInputError("Title cannot be blank", code="EMPTY_TITLE")

        if request.paste_type == PasteType.TEXT and not request.content:
            raise InvalidInputError("Text pastes need content", code="EMPTY_CONTENT")

        if request.visibility == Visibility.PRIVATE and not authenticated:
            raise InvalidInputError(
                "Private pastes require an account",
                code="PRIVATE_REQUIRES_ACCOUNT",
                suggestion="Sign in, or create the paste as public",
            )

        expires_at = self._resolve_expiry(
            now,
            authenticated,
            request.expires_at,
            request.expiry_days,
            request.never_expire,
        )

        password_hash = self.hasher.hash(request.password) if request.password else None

        for attempt in range(1, MAX_ID_ATTEMPTS + 1):
            paste = Paste(
                id=self.id_factory(),
                title=request.title,
                content=request.content,
                language=request.language,
                visibility=request.visibility,
                paste_type=request.paste_type,
                expires_at=expires_at,
                last_accessed_at=now,
                is_protected=password_hash is not None,
                password_hash=password_hash,
                user_id=str(user_id) if authenticated else None,
                created_at=now,
            )
            try:
                saved = self.pastes.insert(paste)
                break
            except DuplicatePasteIdError:
                logger.warning(f"Paste id collision on attempt {attempt}, retrying")
                if attempt == MAX_ID_ATTEMPTS:
                    raise

        logger.info(
            f"Created paste {saved.id} "
            f"(owner={'user' if authenticated else 'anonymous'}, "
            f"protected={saved.is_protected}, expires_at={saved.expires_at})"
        )
        return PasteCreated(id=saved.id, expires_at=saved.expires_at)

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def get_paste(
        self,
        paste_id: str,
        password: str | None = None,
        user_id: UUID | str | None = None,
    ) -> PasteView | RedactedPasteView:
        """
        Read a paste.

        Returns:
            PasteView when access is granted, RedactedPasteView when the
            paste is protected and no password was supplied

        Raises:
            PasteNotFoundError, PasteExpiredError, PastePrivateError,
            IncorrectPasswordError
        """
        now = self.clock()
        paste = self.pastes.get(paste_id)

        decision = evaluate_access(paste, paste_id, password, user_id, self.hasher, now)
        if decision == AccessDecision.LOCKED:
            return RedactedPasteView.from_paste(paste)

        changes: dict[str, Any] = {"last_accessed_at": now}
        extended = self.policy.extended_expiry(paste, now)
        if extended is not None:
            changes["expires_at"] = extended

        updated = self.pastes.update(paste_id, changes)
        if updated is None:
            # Deleted between the read and the stamp
            raise PasteNotFoundError(paste_id)

        return PasteView.from_paste(updated)

    def list_user_pastes(
        self,
        user_id: UUID | str | None,
        page: int = 1,
        page_size: int = 10,
    ) -> PasteList:
        """
        List the caller's pastes, newest first.

        Raises:
            AuthenticationRequiredError: If called anonymously
        """
        if user_id is None:
            raise AuthenticationRequiredError("list your pastes")

        pastes, total = self.pastes.list_by_owner(str(user_id), page, page_size)

        return PasteList(
            pastes=[PasteSummary.from_paste(p) for p in pastes],
            total=total,
            page=page,
            page_size=page_size,
        )

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def _get_owned(self, paste_id: str, user_id: UUID | str | None, action: str) -> Paste:
        paste = self.pastes.get(paste_id)
        if paste is None:
            raise PasteNotFoundError(paste_id)
        if not paste.is_owned_by(user_id):
            logger.warning(f"Rejected {action} of paste {paste_id} by non-owner")
            raise NotPasteOwnerError(paste_id, action=action)
        return paste

    def update_paste(
        self,
        paste_id: str,
        patch: PasteUpdate,
        user_id: UUID | str | None,
    ) -> PasteView:
        """
        Apply a partial update. Owner only.

        Raises:
            PasteNotFoundError: If the paste doesn't exist (or vanished mid-update)
            PasteExpiredError: If the paste has already expired
            NotPasteOwnerError: If the caller isn't the owner
            InvalidInputError: If the patch is invalid (nothing is written)
        """
        paste = self._get_owned(paste_id, user_id, action="update")
        now = self.clock()

        # Expiry is final; an owner cannot bring a paste back
        if paste.is_expired(now):
            raise PasteExpiredError(paste_id)

        if patch.paste_type is not None and patch.paste_type != paste.paste_type:
            raise InvalidInputError(
                "Paste type cannot be changed after creation",
                code="PASTE_TYPE_IMMUTABLE",
                details={"paste_id": paste_id, "paste_type": paste.paste_type.value},
            )

        changes: dict[str, Any] = {}

        if patch.title is not None:
            if not patch.title.strip():
                raise InvalidInputError("Title cannot be blank", code="EMPTY_TITLE")
            changes["title"] = patch.title

        if patch.content is not None:
            if paste.paste_type == PasteType.TEXT and not patch.content:
                raise InvalidInputError("Text pastes need content", code="EMPTY_CONTENT")
            changes["content"] = patch.content

        if patch.language is not None:
            changes["language"] = patch.language

        if patch.visibility is not None:
            changes["visibility"] = patch.visibility

        if patch.expires_at is not None or patch.expiry_days is not None or patch.never_expire:
            changes["expires_at"] = self._resolve_expiry(
                now,
                True,
                patch.expires_at,
                patch.expiry_days,
                patch.never_expire,
            )

        # Removal wins over a new password sent in the same patch
        if patch.remove_password:
            changes["is_protected"] = False
            changes["password_hash"] = None
        elif patch.password:
            changes["is_protected"] = True
            changes["password_hash"] = self.hasher.hash(patch.password)

        if not changes:
            return PasteView.from_paste(paste)

        updated = self.pastes.update(paste_id, changes)
        if updated is None:
            raise PasteNotFoundError(paste_id)

        logger.info(f"Updated paste {paste_id}: {sorted(changes)}")
        return PasteView.from_paste(updated)

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def delete_paste(self, paste_id: str, user_id: UUID | str | None) -> None:
        """
        Delete a paste and its files. Owner only.

        Raises:
            PasteNotFoundError: If the paste doesn't exist
            NotPasteOwnerError: If the caller isn't the owner
        """
        self._get_owned(paste_id, user_id, action="delete")

        self.files.delete_files_for_pastes([paste_id])

        if not self.pastes.delete(paste_id):
            raise PasteNotFoundError(paste_id)

        logger.info(f"Deleted paste {paste_id}")

    def delete_all_pastes_for_user(self, user_id: UUID | str | None) -> int:
        """
        Delete every paste the caller owns, with their files.

        Idempotent: a second call finds nothing and returns 0.

        Returns:
            Number of pastes deleted

        Raises:
            AuthenticationRequiredError: If called anonymously
        """
        if user_id is None:
            raise AuthenticationRequiredError("delete your pastes")

        owner = str(user_id)
        paste_ids = self.pastes.list_ids_by_owner(owner)
        if not paste_ids:
            return 0

        self.files.delete_files_for_pastes(paste_ids)
        deleted = self.pastes.delete_by_owner(owner)

        logger.info(f"Deleted {deleted} pastes for user {owner}")
        return deleted
