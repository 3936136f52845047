# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - In-memory repositories and blob store so services run without Supabase
# - A fixed clock so expiry arithmetic is deterministic
# =============================================================================

import os
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from app.exceptions import StorageUploadError
from core.models.file_upload import FileUpload
from core.models.paste import Paste
from core.repositories.paste_repository import DuplicatePasteIdError
from core.services.access_policy import ExpiryPolicy
from core.services.file_service import FileService
from core.services.paste_service import PasteService
from core.services.storage_service import StoredObject
from lib.security import PasswordHasher

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

OWNER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_ID = "22222222-2222-2222-2222-222222222222"


# =============================================================================
# Fakes
# =============================================================================

class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryPasteRepository:
    """PasteRepository kept in a dict."""

    def __init__(self):
        self.rows: dict[str, Paste] = {}

    def get(self, paste_id: str) -> Paste | None:
        return self.rows.get(paste_id)

    def insert(self, paste: Paste) -> Paste:
        if paste.id in self.rows:
            raise DuplicatePasteIdError(paste.id)
        self.rows[paste.id] = paste
        return paste

    def update(self, paste_id: str, changes: dict[str, Any]) -> Paste | None:
        current = self.rows.get(paste_id)
        if current is None:
            return None
        updated = current.model_copy(update=changes)
        self.rows[paste_id] = updated
        return updated

    def delete(self, paste_id: str) -> bool:
        return self.rows.pop(paste_id, None) is not None

    def delete_many(self, paste_ids: list[str]) -> int:
        return sum(1 for pid in paste_ids if self.rows.pop(pid, None) is not None)

    def delete_by_owner(self, user_id: str) -> int:
        return self.delete_many(self.list_ids_by_owner(user_id))

    def list_ids_by_owner(self, user_id: str) -> list[str]:
        return [p.id for p in self.rows.values() if p.user_id == user_id]

    def list_by_owner(self, user_id: str, page: int, page_size: int):
        owned = sorted(
            (p for p in self.rows.values() if p.user_id == user_id),
            key=lambda p: p.created_at,
            reverse=True,
        )
        start = (page - 1) * page_size
        return owned[start:start + page_size], len(owned)

    def list_expired_ids(self, before: datetime, limit: int) -> list[str]:
        expired = [
            p.id for p in self.rows.values()
            if p.expires_at is not None and p.expires_at <= before
        ]
        return expired[:limit]


class InMemoryFileUploadRepository:
    """FileUploadRepository kept in a dict."""

    def __init__(self):
        self.rows: dict[str, FileUpload] = {}
        self.fail_insert = False

    def get(self, file_id: str) -> FileUpload | None:
        return self.rows.get(file_id)

    def insert(self, upload: FileUpload) -> FileUpload:
        if self.fail_insert:
            raise RuntimeError("insert failed")
        self.rows[upload.id] = upload
        return upload

    def list_by_paste(self, paste_id: str) -> list[FileUpload]:
        return [f for f in self.rows.values() if f.paste_id == paste_id]

    def list_by_pastes(self, paste_ids: list[str]) -> list[FileUpload]:
        return [f for f in self.rows.values() if f.paste_id in paste_ids]

    def delete(self, file_id: str) -> bool:
        return self.rows.pop(file_id, None) is not None

    def delete_by_pastes(self, paste_ids: list[str]) -> int:
        doomed = [f.id for f in self.list_by_pastes(paste_ids)]
        for file_id in doomed:
            del self.rows[file_id]
        return len(doomed)


class FakeStorage:
    """Blob store double with switchable failures."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.fail_uploads = False
        self.fail_deletes = False
        self.delete_calls: list[str] = []

    def store(self, path: str, data: bytes, content_type: str | None = None) -> StoredObject:
        if self.fail_uploads:
            raise StorageUploadError("bucket unavailable")
        self.objects[path] = data
        return StoredObject(path=path, url=f"https://cdn.test/{path}")

    def delete(self, path: str) -> bool:
        self.delete_calls.append(path)
        if self.fail_deletes:
            return False
        self.objects.pop(path, None)
        return True


def _sequential_ids(prefix: str):
    counter = count(1)
    return lambda: f"{prefix}{next(counter):04d}"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def clock():
    """Fixed, advanceable clock."""
    return FakeClock()


@pytest.fixture
def hasher():
    """Argon2 hasher with the cheapest parameters argon2 accepts."""
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def paste_repo():
    return InMemoryPasteRepository()


@pytest.fixture
def file_repo():
    return InMemoryFileUploadRepository()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def policy():
    """Default policy: 7 day guest cap, 30 day user cap, no rolling expiry."""
    return ExpiryPolicy()


@pytest.fixture
def file_service(file_repo, paste_repo, storage, hasher, clock):
    return FileService(
        files=file_repo,
        pastes=paste_repo,
        storage=storage,
        hasher=hasher,
        max_upload_bytes=1024,
        id_factory=_sequential_ids("file"),
        clock=clock,
    )


@pytest.fixture
def paste_service(paste_repo, file_service, hasher, policy, clock):
    return PasteService(
        pastes=paste_repo,
        files=file_service,
        hasher=hasher,
        policy=policy,
        id_factory=_sequential_ids("paste"),
        clock=clock,
    )


@pytest.fixture
def make_paste(paste_repo, clock):
    """Insert a paste row directly, bypassing PasteService validation."""

    def _make(**overrides: Any) -> Paste:
        data = {
            "id": f"p{len(paste_repo.rows) + 1}",
            "title": "notes",
            "content": "hello",
            "last_accessed_at": clock(),
            "created_at": clock(),
            "expires_at": clock() + timedelta(days=7),
        }
        data.update(overrides)
        return paste_repo.insert(Paste(**data))

    return _make
