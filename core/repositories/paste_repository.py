# =============================================================================
# core/repositories/paste_repository.py - Paste Persistence
# =============================================================================
# PasteRepository is the interface the paste service depends on.
# SupabasePasteRepository implements it on the `pastes` table through
# PostgREST. Every mutation is a single statement keyed by primary key (or
# owner), so concurrent requests rely on the database's row atomicity.
# =============================================================================

import logging
from datetime import datetime
from typing import Any, Protocol

from core.models.paste import Paste
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

TABLE_NAME = "pastes"

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class DuplicatePasteIdError(SupabaseClientError):
    """Raised when an insert collides with an existing paste id."""

    def __init__(self, paste_id: str):
        super().__init__(
            message=f"Paste id already exists: {paste_id}",
            code="DUPLICATE_PASTE_ID",
            details={"paste_id": paste_id},
        )


class PasteRepository(Protocol):
    """Storage operations needed by PasteService and the expiry sweep."""

    def get(self, paste_id: str) -> Paste | None: ...

    def insert(self, paste: Paste) -> Paste: ...

    def update(self, paste_id: str, changes: dict[str, Any]) -> Paste | None: ...

    def delete(self, paste_id: str) -> bool: ...

    def delete_many(self, paste_ids: list[str]) -> int: ...

    def delete_by_owner(self, user_id: str) -> int: ...

    def list_ids_by_owner(self, user_id: str) -> list[str]: ...

    def list_by_owner(
        self, user_id: str, page: int, page_size: int
    ) -> tuple[list[Paste], int]: ...

    def list_expired_ids(self, before: datetime, limit: int) -> list[str]: ...


def _serialize(changes: dict[str, Any]) -> dict[str, Any]:
    """Make datetimes and enums JSON-safe for PostgREST."""
    data: dict[str, Any] = {}
    for key, value in changes.items():
        if isinstance(value, datetime):
            data[key] = value.isoformat()
        elif hasattr(value, "value"):
            data[key] = value.value
        else:
            data[key] = value
    return data


class SupabasePasteRepository:
    """PasteRepository backed by the Supabase `pastes` table."""

    def __init__(self, client_factory=SupabaseClient.get_client):
        self._client_factory = client_factory

    def _table(self):
        return self._client_factory().table(TABLE_NAME)

    def get(self, paste_id: str) -> Paste | None:
        try:
            response = (
                self._table()
                .select("*")
                .eq("id", paste_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch paste: {e}",
                code="FETCH_PASTE_FAILED",
                details={"paste_id": paste_id},
            )

        rows = response.data or []
        return Paste.model_validate(rows[0]) if rows else None

    def insert(self, paste: Paste) -> Paste:
        data = paste.model_dump(mode="json")

        try:
            response = self._table().insert(data).execute()
        except Exception as e:
            if UNIQUE_VIOLATION in str(e):
                raise DuplicatePasteIdError(paste.id)
            raise SupabaseClientError(
                message=f"Failed to insert paste: {e}",
                code="INSERT_PASTE_FAILED",
                details={"paste_id": paste.id},
            )

        if not response.data:
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"paste_id": paste.id},
            )
        return Paste.model_validate(response.data[0])

    def update(self, paste_id: str, changes: dict[str, Any]) -> Paste | None:
        """Apply a partial update. Returns None when the row no longer exists."""
        try:
            response = (
                self._table()
                .update(_serialize(changes))
                .eq("id", paste_id)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update paste: {e}",
                code="UPDATE_PASTE_FAILED",
                details={"paste_id": paste_id, "fields": sorted(changes)},
            )

        rows = response.data or []
        return Paste.model_validate(rows[0]) if rows else None

    def delete(self, paste_id: str) -> bool:
        try:
            response = self._table().delete().eq("id", paste_id).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete paste: {e}",
                code="DELETE_PASTE_FAILED",
                details={"paste_id": paste_id},
            )
        return bool(response.data)

    def delete_many(self, paste_ids: list[str]) -> int:
        if not paste_ids:
            return 0
        try:
            response = self._table().delete().in_("id", paste_ids).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete pastes: {e}",
                code="DELETE_PASTES_FAILED",
                details={"count": len(paste_ids)},
            )
        return len(response.data or [])

    def delete_by_owner(self, user_id: str) -> int:
        try:
            response = self._table().delete().eq("user_id", user_id).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete user pastes: {e}",
                code="DELETE_USER_PASTES_FAILED",
                details={"user_id": user_id},
            )
        return len(response.data or [])

    def list_ids_by_owner(self, user_id: str) -> list[str]:
        try:
            response = (
                self._table()
                .select("id")
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list user pastes: {e}",
                code="LIST_USER_PASTES_FAILED",
                details={"user_id": user_id},
            )
        return [row["id"] for row in response.data or []]

    def list_by_owner(
        self, user_id: str, page: int, page_size: int
    ) -> tuple[list[Paste], int]:
        offset = (page - 1) * page_size

        try:
            response = (
                self._table()
                .select("*", count="exact")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .range(offset, offset + page_size - 1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list user pastes: {e}",
                code="LIST_USER_PASTES_FAILED",
                details={"user_id": user_id, "page": page},
            )

        pastes = [Paste.model_validate(row) for row in response.data or []]
        return pastes, response.count or 0

    def list_expired_ids(self, before: datetime, limit: int) -> list[str]:
        try:
            response = (
                self._table()
                .select("id")
                .lte("expires_at", before.isoformat())
                .order("expires_at")
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list expired pastes: {e}",
                code="LIST_EXPIRED_FAILED",
                details={"before": before.isoformat()},
            )
        return [row["id"] for row in response.data or []]
