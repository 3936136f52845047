# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - paste.py: Paste record, create/update requests, read views
# - file_upload.py: File upload record and view
#
# These models define the "contract" between API and clients.
# =============================================================================

from .paste import (
    BulkDeleteResponse,
    Paste,
    PasteCreate,
    PasteCreated,
    PasteList,
    PasteSummary,
    PasteType,
    PasteUpdate,
    PasteView,
    RedactedPasteView,
    UnlockRequest,
    Visibility,
)
from .file_upload import (
    FileUpload,
    FileUploadView,
    categorize_content_type,
)

__all__ = [
    # Paste
    "BulkDeleteResponse",
    "Paste",
    "PasteCreate",
    "PasteCreated",
    "PasteList",
    "PasteSummary",
    "PasteType",
    "PasteUpdate",
    "PasteView",
    "RedactedPasteView",
    "UnlockRequest",
    "Visibility",
    # File uploads
    "FileUpload",
    "FileUploadView",
    "categorize_content_type",
]
