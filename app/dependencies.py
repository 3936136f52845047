# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for the service layer.
# Routers ask for PasteServiceDep / FileServiceDep; tests replace the
# providers through app.dependency_overrides.
# =============================================================================

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config import settings
from core.repositories import SupabaseFileUploadRepository, SupabasePasteRepository
from core.services import ExpiryPolicy, FileService, PasteService, StorageService
from lib.security import PasswordHasher, generate_paste_id


@lru_cache
def get_file_service() -> FileService:
    """
    Build the FileService wired to Supabase.

    Cached: the service holds no per-request state.
    """
    return FileService(
        files=SupabaseFileUploadRepository(),
        pastes=SupabasePasteRepository(),
        storage=StorageService(bucket=settings.STORAGE_BUCKET),
        hasher=PasswordHasher(),
        max_upload_bytes=settings.max_upload_size_bytes,
    )


@lru_cache
def get_paste_service() -> PasteService:
    """Build the PasteService wired to Supabase and the configured policy."""
    file_service = get_file_service()
    return PasteService(
        pastes=file_service.pastes,
        files=file_service,
        hasher=file_service.hasher,
        policy=ExpiryPolicy.from_settings(settings),
        id_factory=lambda: generate_paste_id(settings.PASTE_ID_BYTES),
    )


# Type aliases for dependency injection
PasteServiceDep = Annotated[PasteService, Depends(get_paste_service)]
FileServiceDep = Annotated[FileService, Depends(get_file_service)]
