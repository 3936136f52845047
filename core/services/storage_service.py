# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Thin wrapper over the blob store that holds uploaded file bytes.
#
# Contract:
# - store() raises StorageUploadError when the upload fails
# - delete() never raises; failures are logged and reported as False so a
#   metadata delete is never blocked by the blob store
# =============================================================================

import logging
from dataclasses import dataclass

from app.config import settings
from app.exceptions import StorageUploadError
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredObject:
    """Where an uploaded blob ended up."""
    path: str
    url: str


class StorageService:
    """
    Service for Supabase Storage operations.

    Handles uploading and deleting the files attached to multimedia pastes.
    """

    def __init__(
        self,
        bucket: str | None = None,
        client_factory=SupabaseClient.get_client,
    ):
        self.bucket = bucket or settings.STORAGE_BUCKET
        self._client_factory = client_factory

    def _bucket(self):
        return self._client_factory().storage.from_(self.bucket)

    def store(
        self,
        path: str,
        data: bytes,
        content_type: str | None = None,
    ) -> StoredObject:
        """
        Upload raw bytes to storage.

        Args:
            path: Object path inside the bucket
            data: File bytes
            content_type: MIME type recorded on the object

        Returns:
            StoredObject with the path and its public URL

        Raises:
            StorageUploadError: If upload fails
        """
        try:
            bucket = self._bucket()
            bucket.upload(
                path=path,
                file=data,
                file_options={
                    "content-type": content_type or "application/octet-stream",
                    "upsert": "false",
                },
            )
            url = bucket.get_public_url(path)

            logger.info(f"Uploaded file to storage: {path} ({len(data)} bytes)")
            return StoredObject(path=path, url=url)

        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e))

    def delete(self, path: str) -> bool:
        """
        Delete a file from storage.

        Args:
            path: Object path inside the bucket

        Returns:
            True if deleted successfully, False if the blob store refused
        """
        try:
            self._bucket().remove([path])
            logger.info(f"Deleted file from storage: {path}")
            return True

        except Exception as e:
            logger.error(f"Failed to delete file {path} from storage: {e}")
            return False
