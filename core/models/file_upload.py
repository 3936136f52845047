# =============================================================================
# core/models/file_upload.py - File Upload Schemas
# =============================================================================
# A FileUpload is the metadata row for one file attached to a multimedia
# paste. The bytes live in Supabase Storage under storage_key.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, ConfigDict


def categorize_content_type(content_type: str | None) -> str:
    """
    Reduce a MIME type to its coarse category.

    Example:
        categorize_content_type("image/png")        # "image"
        categorize_content_type("application/pdf")  # "application"
        categorize_content_type(None)               # "unknown"
    """
    if not content_type or "/" not in content_type:
        return "unknown"
    major = content_type.split("/", 1)[0].strip().lower()
    return major or "unknown"


class FileUpload(BaseModel):
    """A row of the file_uploads table. Deleted with its paste (cascade)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    paste_id: str
    filename: str
    file_type: str
    file_size: int
    storage_key: str
    url: str
    created_at: datetime


class FileUploadView(BaseModel):
    """File metadata as returned to clients."""

    id: str
    paste_id: str
    filename: str
    file_type: str
    file_size: int
    url: str
    created_at: datetime

    @classmethod
    def from_upload(cls, upload: FileUpload) -> "FileUploadView":
        return cls.model_validate(upload.model_dump(exclude={"storage_key"}))
