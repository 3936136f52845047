# =============================================================================
# tests/test_workers.py - Expiry Sweep Tests
# =============================================================================
# purge_expired() is the body of the Celery task; it is tested directly
# against the in-memory repositories so no broker is needed.
# =============================================================================

from datetime import timedelta

from core.models.paste import PasteType
from tests.conftest import NOW, OWNER_ID
from workers.tasks import purge_expired


class TestPurgeExpired:
    """Tests for the expired-paste sweep."""

    def test_removes_only_expired(self, paste_repo, file_service, make_paste):
        """Live and never-expiring pastes are kept."""
        make_paste(id="old", expires_at=NOW - timedelta(days=1))
        make_paste(id="edge", expires_at=NOW)
        make_paste(id="live", expires_at=NOW + timedelta(days=1))
        make_paste(id="forever", expires_at=None, user_id=OWNER_ID)

        result = purge_expired(paste_repo, file_service, NOW, batch_size=10)

        assert result == {"pastes_deleted": 2, "files_deleted": 0, "more": False}
        assert sorted(paste_repo.rows) == ["forever", "live"]

    def test_removes_files_of_expired_pastes(
        self, paste_repo, file_repo, file_service, storage, make_paste, clock
    ):
        """Files go with their paste; blob failures don't stop the sweep."""
        make_paste(id="album", paste_type=PasteType.MULTIMEDIA, expires_at=NOW + timedelta(hours=1))
        file_service.upload_file("album", "a.png", b"x", "image/png")
        storage.fail_deletes = True
        clock.advance(hours=2)

        result = purge_expired(paste_repo, file_service, clock(), batch_size=10)

        assert result["pastes_deleted"] == 1
        assert result["files_deleted"] == 1
        assert file_repo.rows == {}

    def test_full_batch_signals_more(self, paste_repo, file_service, make_paste):
        """A full batch tells the task to run again."""
        for i in range(3):
            make_paste(id=f"old{i}", expires_at=NOW - timedelta(days=1))

        result = purge_expired(paste_repo, file_service, NOW, batch_size=2)

        assert result["pastes_deleted"] == 2
        assert result["more"] is True

    def test_nothing_to_do(self, paste_repo, file_service):
        """An empty store is a no-op."""
        assert purge_expired(paste_repo, file_service, NOW, batch_size=10) == {
            "pastes_deleted": 0,
            "files_deleted": 0,
            "more": False,
        }
