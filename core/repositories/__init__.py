# =============================================================================
# core/repositories/ - Relational Store Access
# =============================================================================
# Protocols the services depend on, plus their Supabase implementations.
# Tests substitute in-memory fakes for the protocols.
# =============================================================================

from .paste_repository import (
    DuplicatePasteIdError,
    PasteRepository,
    SupabasePasteRepository,
)
from .file_upload_repository import (
    FileUploadRepository,
    SupabaseFileUploadRepository,
)

__all__ = [
    "DuplicatePasteIdError",
    "PasteRepository",
    "SupabasePasteRepository",
    "FileUploadRepository",
    "SupabaseFileUploadRepository",
]
