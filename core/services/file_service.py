# =============================================================================
# core/services/file_service.py - File Upload Lifecycle
# =============================================================================
# Coordinates the file_uploads table with the blob store:
# - upload: store bytes, then record metadata
# - delete: best-effort blob removal, then metadata removal
# - list: gated by the same read policy as the paste itself
#
# Blob deletion failures are logged and never stop a metadata delete.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Callable
from uuid import UUID

from app.exceptions import (
    AuthenticationRequiredError,
    FileTooLargeError,
    InvalidInputError,
    NotPasteOwnerError,
    PasswordRequiredError,
    PasteExpiredError,
    PasteNotFoundError,
    UploadNotFoundError,
)
from core.models.file_upload import FileUpload, FileUploadView, categorize_content_type
from core.models.paste import PasteType
from core.repositories.file_upload_repository import FileUploadRepository
from core.repositories.paste_repository import PasteRepository
from core.services.access_policy import AccessDecision, evaluate_access
from core.services.storage_service import StorageService
from lib.security import PasswordHasher, generate_paste_id

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _storage_path(paste_id: str, file_id: str, filename: str) -> str:
    # Keep only the final path component so a filename can't escape the prefix
    safe_name = filename.replace("\\", "/").rsplit("/", 1)[-1] or "file"
    return f"uploads/{paste_id}/{file_id}-{safe_name}"


class FileService:
    """
    Service for files attached to multimedia pastes.

    Ownership rule: when a paste has an owner, only that owner may add or
    remove its files. Ownerless pastes accept uploads from anyone holding
    the link, because their author has no identity to check against.
    """

    def __init__(
        self,
        files: FileUploadRepository,
        pastes: PasteRepository,
        storage: StorageService,
        hasher: PasswordHasher,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        id_factory: Callable[[], str] = generate_paste_id,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.files = files
        self.pastes = pastes
        self.storage = storage
        self.hasher = hasher
        self.max_upload_bytes = max_upload_bytes
        self.id_factory = id_factory
        self.clock = clock

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    def upload_file(
        self,
        paste_id: str,
        filename: str,
        data: bytes,
        content_type: str | None = None,
        user_id: UUID | str | None = None,
    ) -> FileUploadView:
        """
        Attach a file to a multimedia paste.

        Raises:
            PasteNotFoundError: If the paste doesn't exist
            PasteExpiredError: If the paste has expired
            NotPasteOwnerError: If the paste belongs to another account
            InvalidInputError: If the paste is a text paste or filename is empty
            FileTooLargeError: If the file exceeds the upload limit
            StorageUploadError: If the blob store rejects the upload
        """
        if not filename or not filename.strip():
            raise InvalidInputError("Filename is required")

        if len(data) > self.max_upload_bytes:
            raise FileTooLargeError(
                len(data) / (1024 * 1024),
                self.max_upload_bytes // (1024 * 1024),
            )

        paste = self.pastes.get(paste_id)
        if paste is None:
            raise PasteNotFoundError(paste_id)

        if paste.is_expired(self.clock()):
            raise PasteExpiredError(paste_id)

        if paste.user_id is not None and not paste.is_owned_by(user_id):
            raise NotPasteOwnerError(paste_id, action="add files to")

        if paste.paste_type != PasteType.MULTIMEDIA:
            raise InvalidInputError(
                "Files can only be attached to multimedia pastes",
                details={"paste_id": paste_id, "paste_type": paste.paste_type.value},
            )

        file_id = self.id_factory()
        stored = self.storage.store(
            _storage_path(paste_id, file_id, filename),
            data,
            content_type=content_type,
        )

        upload = FileUpload(
            id=file_id,
            paste_id=paste_id,
            filename=filename,
            file_type=categorize_content_type(content_type),
            file_size=len(data),
            storage_key=stored.path,
            url=stored.url,
            created_at=self.clock(),
        )

        try:
            saved = self.files.insert(upload)
        except Exception:
            # Don't leave an orphaned blob behind a failed metadata insert
            self.storage.delete(stored.path)
            raise

        logger.info(f"Attached file {file_id} ({upload.file_size} bytes) to paste {paste_id}")
        return FileUploadView.from_upload(saved)

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def list_files(
        self,
        paste_id: str,
        password: str | None = None,
        user_id: UUID | str | None = None,
    ) -> list[FileUploadView]:
        """
        List files of a paste the caller is allowed to read.

        Applies the paste read policy without touching last_accessed_at.

        Raises:
            PasswordRequiredError: If the paste is protected and no password was given
            (plus every error evaluate_access raises)
        """
        paste = self.pastes.get(paste_id)
        decision = evaluate_access(
            paste, paste_id, password, user_id, self.hasher, self.clock()
        )
        if decision == AccessDecision.LOCKED:
            raise PasswordRequiredError(paste_id)

        return [FileUploadView.from_upload(f) for f in self.files.list_by_paste(paste_id)]

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def _remove_blobs(self, uploads: list[FileUpload]) -> int:
        """Best-effort blob cleanup. Returns how many blobs failed to delete."""
        failures = 0
        for upload in uploads:
            if upload.storage_key and not self.storage.delete(upload.storage_key):
                failures += 1
                logger.warning(
                    f"Could not delete blob for file {upload.id}; continuing with metadata delete"
                )
        return failures

    def delete_file(self, file_id: str, user_id: UUID | str | None) -> None:
        """
        Delete one file. Only the owner of the parent paste may do this.

        Raises:
            UploadNotFoundError: If the file (or its paste) doesn't exist
            NotPasteOwnerError: If the caller doesn't own the parent paste
        """
        upload = self.files.get(file_id)
        if upload is None:
            raise UploadNotFoundError(file_id)

        paste = self.pastes.get(upload.paste_id)
        if paste is None:
            raise UploadNotFoundError(file_id)

        if not paste.is_owned_by(user_id):
            raise NotPasteOwnerError(paste.id, action="delete files of")

        self._remove_blobs([upload])

        if not self.files.delete(file_id):
            raise UploadNotFoundError(file_id)

        logger.info(f"Deleted file {file_id} from paste {paste.id}")

    def delete_files_for_pastes(self, paste_ids: list[str]) -> int:
        """
        Remove every file of the given pastes. Callers check ownership first.

        Returns:
            Number of file rows deleted
        """
        if not paste_ids:
            return 0

        uploads = self.files.list_by_pastes(paste_ids)
        if not uploads:
            return 0

        self._remove_blobs(uploads)
        deleted = self.files.delete_by_pastes(paste_ids)

        logger.info(f"Deleted {deleted} files across {len(paste_ids)} pastes")
        return deleted

    def delete_all_files_for_user(self, user_id: UUID | str | None) -> int:
        """
        Account-wide file wipe. The pastes themselves are kept.

        Raises:
            AuthenticationRequiredError: If called anonymously
        """
        if user_id is None:
            raise AuthenticationRequiredError("delete your files")

        paste_ids = self.pastes.list_ids_by_owner(str(user_id))
        return self.delete_files_for_pastes(paste_ids)
