# =============================================================================
# core/repositories/file_upload_repository.py - File Upload Persistence
# =============================================================================
# Metadata rows for files attached to pastes. The database cascades these
# rows when their paste is deleted; FileService still removes them
# explicitly so it can clean the blob store first.
# =============================================================================

import logging
from typing import Protocol

from core.models.file_upload import FileUpload
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

TABLE_NAME = "file_uploads"


class FileUploadRepository(Protocol):
    """Storage operations needed by FileService."""

    def get(self, file_id: str) -> FileUpload | None: ...

    def insert(self, upload: FileUpload) -> FileUpload: ...

    def list_by_paste(self, paste_id: str) -> list[FileUpload]: ...

    def list_by_pastes(self, paste_ids: list[str]) -> list[FileUpload]: ...

    def delete(self, file_id: str) -> bool: ...

    def delete_by_pastes(self, paste_ids: list[str]) -> int: ...


class SupabaseFileUploadRepository:
    """FileUploadRepository backed by the Supabase `file_uploads` table."""

    def __init__(self, client_factory=SupabaseClient.get_client):
        self._client_factory = client_factory

    def _table(self):
        return self._client_factory().table(TABLE_NAME)

    def get(self, file_id: str) -> FileUpload | None:
        try:
            response = (
                self._table()
                .select("*")
                .eq("id", file_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch file: {e}",
                code="FETCH_FILE_FAILED",
                details={"file_id": file_id},
            )

        rows = response.data or []
        return FileUpload.model_validate(rows[0]) if rows else None

    def insert(self, upload: FileUpload) -> FileUpload:
        try:
            response = self._table().insert(upload.model_dump(mode="json")).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert file: {e}",
                code="INSERT_FILE_FAILED",
                details={"file_id": upload.id, "paste_id": upload.paste_id},
            )

        if not response.data:
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"file_id": upload.id},
            )
        return FileUpload.model_validate(response.data[0])

    def list_by_paste(self, paste_id: str) -> list[FileUpload]:
        try:
            response = (
                self._table()
                .select("*")
                .eq("paste_id", paste_id)
                .order("created_at")
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list files: {e}",
                code="LIST_FILES_FAILED",
                details={"paste_id": paste_id},
            )
        return [FileUpload.model_validate(row) for row in response.data or []]

    def list_by_pastes(self, paste_ids: list[str]) -> list[FileUpload]:
        if not paste_ids:
            return []
        try:
            response = (
                self._table()
                .select("*")
                .in_("paste_id", paste_ids)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list files: {e}",
                code="LIST_FILES_FAILED",
                details={"paste_count": len(paste_ids)},
            )
        return [FileUpload.model_validate(row) for row in response.data or []]

    def delete(self, file_id: str) -> bool:
        try:
            response = self._table().delete().eq("id", file_id).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete file: {e}",
                code="DELETE_FILE_FAILED",
                details={"file_id": file_id},
            )
        return bool(response.data)

    def delete_by_pastes(self, paste_ids: list[str]) -> int:
        if not paste_ids:
            return 0
        try:
            response = self._table().delete().in_("paste_id", paste_ids).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete files: {e}",
                code="DELETE_FILES_FAILED",
                details={"paste_count": len(paste_ids)},
            )
        return len(response.data or [])
