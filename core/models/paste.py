# =============================================================================
# core/models/paste.py - Paste Schemas
# =============================================================================
# These models define the stored paste record and the API contract around it:
# - Paste: one row of the pastes table (includes the password hash)
# - PasteCreate / PasteUpdate: request bodies
# - PasteView / RedactedPasteView: what a reader gets back
# - PasteSummary / PasteList: the owner's paginated listing
#
# The password hash only ever appears on Paste; every response model
# leaves it out.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Visibility(str, Enum):
    """
    Who may read a paste.

    - public: anyone with the link
    - private: only the owning account
    """
    PUBLIC = "public"
    PRIVATE = "private"


class PasteType(str, Enum):
    """
    What a paste holds. Fixed at creation.

    - text: inline text content
    - multimedia: files attached through the upload endpoints
    """
    TEXT = "text"
    MULTIMEDIA = "multimedia"


class Paste(BaseModel):
    """
    A row of the pastes table.

    Invariants kept by PasteService:
    - is_protected is True exactly when password_hash is set
    - visibility == private implies user_id is set
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str = ""
    language: str = "plaintext"
    visibility: Visibility = Visibility.PUBLIC
    paste_type: PasteType = PasteType.TEXT
    # None means the paste never expires
    expires_at: datetime | None = None
    last_accessed_at: datetime
    is_protected: bool = False
    password_hash: str | None = None
    user_id: str | None = None
    created_at: datetime

    def is_owned_by(self, user_id: object | None) -> bool:
        """Ownerless pastes belong to nobody, not even anonymous callers."""
        return self.user_id is not None and user_id is not None and self.user_id == str(user_id)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now


# =============================================================================
# Requests
# =============================================================================

class PasteCreate(BaseModel):
    """
    Body of POST /pastes.

    Pick at most one of expires_at, expiry_days and never_expire. With none
    of them the default lifetime applies. Anonymous pastes are always capped
    at the guest ceiling, whatever is requested.

    Example:
        {
            "title": "nginx.conf",
            "content": "server { listen 80; }",
            "language": "nginx",
            "password": "hunter2",
            "expiry_days": 3
        }
    """

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(
        default="",
        description="Required for text pastes; multimedia pastes may leave it empty"
    )
    language: str = Field(default="plaintext", min_length=1, max_length=50)
    password: str | None = Field(
        default=None,
        min_length=1,
        description="Optional password; hashed before it is stored"
    )
    visibility: Visibility = Visibility.PUBLIC
    paste_type: PasteType = PasteType.TEXT
    expires_at: datetime | None = Field(
        default=None,
        description="Explicit expiry instant (must be in the future)"
    )
    expiry_days: int | None = Field(default=None, ge=1)
    never_expire: bool = Field(
        default=False,
        description="Keep the paste forever (honored for signed-in users only)"
    )


class PasteUpdate(BaseModel):
    """
    Body of PATCH /pastes/{id}. Every field is optional.

    remove_password wins when sent together with a new password.
    paste_type is accepted only when it equals the stored value.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = None
    language: str | None = Field(default=None, min_length=1, max_length=50)
    visibility: Visibility | None = None
    paste_type: PasteType | None = None
    password: str | None = Field(default=None, min_length=1)
    remove_password: bool = False
    expires_at: datetime | None = None
    expiry_days: int | None = Field(default=None, ge=1)
    never_expire: bool = False


class UnlockRequest(BaseModel):
    """Body of POST /pastes/{id}/unlock."""
    password: str = Field(..., min_length=1)


# =============================================================================
# Responses
# =============================================================================

class PasteCreated(BaseModel):
    """Returned by POST /pastes."""
    id: str
    expires_at: datetime | None = None


class PasteView(BaseModel):
    """Full paste returned once every access check has passed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    language: str
    visibility: Visibility
    paste_type: PasteType
    expires_at: datetime | None = None
    last_accessed_at: datetime
    is_protected: bool
    user_id: str | None = None
    created_at: datetime

    @classmethod
    def from_paste(cls, paste: Paste) -> "PasteView":
        return cls.model_validate(paste.model_dump(exclude={"password_hash"}))


class RedactedPasteView(BaseModel):
    """
    Metadata of a protected paste requested without a password.

    content is always None; clients turn this into a password prompt.
    """

    id: str
    title: str
    content: None = None
    language: str
    visibility: Visibility
    paste_type: PasteType
    expires_at: datetime | None = None
    is_protected: bool = True
    user_id: str | None = None
    created_at: datetime

    @classmethod
    def from_paste(cls, paste: Paste) -> "RedactedPasteView":
        return cls(
            id=paste.id,
            title=paste.title,
            language=paste.language,
            visibility=paste.visibility,
            paste_type=paste.paste_type,
            expires_at=paste.expires_at,
            is_protected=paste.is_protected,
            user_id=paste.user_id,
            created_at=paste.created_at,
        )


class PasteSummary(BaseModel):
    """One entry of the owner's paste listing (no content, no hash)."""

    id: str
    title: str
    language: str
    visibility: Visibility
    paste_type: PasteType
    is_protected: bool
    expires_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_paste(cls, paste: Paste) -> "PasteSummary":
        return cls.model_validate(paste.model_dump(include=set(cls.model_fields)))


class PasteList(BaseModel):
    """
    Paginated listing returned by GET /pastes/mine.

    Example:
        {
            "pastes": [...],
            "total": 42,
            "page": 1,
            "page_size": 10
        }
    """

    pastes: list[PasteSummary] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=50)


class BulkDeleteResponse(BaseModel):
    """Returned by the account-wide wipe endpoints."""
    deleted: int
    message: str
