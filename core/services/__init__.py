# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .access_policy import AccessDecision, ExpiryPolicy, evaluate_access
from .storage_service import StorageService, StoredObject
from .file_service import FileService
from .paste_service import PasteService

__all__ = [
    "AccessDecision",
    "ExpiryPolicy",
    "evaluate_access",
    "StorageService",
    "StoredObject",
    "FileService",
    "PasteService",
]
