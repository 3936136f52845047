# =============================================================================
# tests/test_paste_service.py - Paste Lifecycle Tests
# =============================================================================
# Exercises PasteService against in-memory repositories:
# - creation rules (expiry ceilings, private pastes, id collisions)
# - the read decision order and password handling
# - owner-only updates and deletes
#
# Run with: pytest tests/test_paste_service.py -v
# =============================================================================

from datetime import timedelta

import pytest

from app.exceptions import (
    AuthenticationRequiredError,
    IncorrectPasswordError,
    InvalidInputError,
    NotPasteOwnerError,
    PasteExpiredError,
    PasteNotFoundError,
    PastePrivateError,
)
from core.models.paste import (
    PasteCreate,
    PasteType,
    PasteUpdate,
    PasteView,
    RedactedPasteView,
    Visibility,
)
from core.repositories.paste_repository import DuplicatePasteIdError
from core.services.access_policy import ExpiryPolicy
from core.services.paste_service import MAX_ID_ATTEMPTS, PasteService
from tests.conftest import NOW, OTHER_ID, OWNER_ID


# =============================================================================
# Create
# =============================================================================

class TestCreatePaste:
    """Tests for PasteService.create_paste."""

    def test_round_trip_without_password(self, paste_service):
        """A fresh paste reads back with the same title, content and language."""
        created = paste_service.create_paste(
            PasteCreate(title="main.py", content="print('hi')\n", language="python")
        )

        view = paste_service.get_paste(created.id)

        assert isinstance(view, PasteView)
        assert view.title == "main.py"
        assert view.content == "print('hi')\n"
        assert view.language == "python"

    def test_default_expiry_is_seven_days(self, paste_service):
        """No expiry choice means the default lifetime."""
        created = paste_service.create_paste(PasteCreate(title="t", content="c"))

        assert created.expires_at == NOW + timedelta(days=7)

    def test_anonymous_never_expire_is_capped(self, paste_service):
        """Guests asking for forever still get the guest ceiling."""
        created = paste_service.create_paste(
            PasteCreate(title="t", content="c", never_expire=True)
        )

        assert created.expires_at is not None
        assert created.expires_at <= NOW + timedelta(days=7)

    def test_anonymous_long_expiry_is_capped(self, paste_service):
        """expiry_days beyond the guest ceiling is clamped, not rejected."""
        created = paste_service.create_paste(
            PasteCreate(title="t", content="c", expiry_days=20)
        )

        assert created.expires_at == NOW + timedelta(days=7)

    def test_user_never_expire_is_honored(self, paste_service):
        """Signed-in users may keep a paste forever."""
        created = paste_service.create_paste(
            PasteCreate(title="t", content="c", never_expire=True),
            user_id=OWNER_ID,
        )

        assert created.expires_at is None

    def test_user_explicit_expiry_capped_at_user_max(self, paste_service):
        """An explicit instant past the user maximum is clamped to it."""
        created = paste_service.create_paste(
            PasteCreate(title="t", content="c", expires_at=NOW + timedelta(days=90)),
            user_id=OWNER_ID,
        )

        assert created.expires_at == NOW + timedelta(days=30)

    def test_user_expiry_days_respected(self, paste_service):
        """expiry_days within the user maximum is used as given."""
        created = paste_service.create_paste(
            PasteCreate(title="t", content="c", expiry_days=14),
            user_id=OWNER_ID,
        )

        assert created.expires_at == NOW + timedelta(days=14)

    def test_expiry_days_over_user_max_rejected(self, paste_service, paste_repo):
        """expiry_days above the longest lifetime anyone can have is invalid."""
        with pytest.raises(InvalidInputError) as exc_info:
            paste_service.create_paste(
                PasteCreate(title="t", content="c", expiry_days=31),
                user_id=OWNER_ID,
            )

        assert exc_info.value.code == "INVALID_EXPIRY"
        assert paste_repo.rows == {}

    def test_past_expiry_rejected(self, paste_service, paste_repo):
        """An expiry instant in the past is malformed."""
        with pytest.raises(InvalidInputError):
            paste_service.create_paste(
                PasteCreate(title="t", content="c", expires_at=NOW - timedelta(minutes=1))
            )

        assert paste_repo.rows == {}

    def test_naive_expiry_rejected(self, paste_service):
        """expires_at without an offset is ambiguous."""
        naive = (NOW + timedelta(days=1)).replace(tzinfo=None)

        with pytest.raises(InvalidInputError):
            paste_service.create_paste(PasteCreate(title="t", content="c", expires_at=naive))

    def test_conflicting_expiry_choices_rejected(self, paste_service):
        """Only one way of choosing an expiry per request."""
        with pytest.raises(InvalidInputError) as exc_info:
            paste_service.create_paste(
                PasteCreate(title="t", content="c", expiry_days=2, never_expire=True),
                user_id=OWNER_ID,
            )

        assert exc_info.value.code == "CONFLICTING_EXPIRY"

    def test_blank_title_rejected(self, paste_service, paste_repo):
        """Whitespace-only titles are treated as empty."""
        with pytest.raises(InvalidInputError):
            paste_service.create_paste(PasteCreate(title="   ", content="c"))

        assert paste_repo.rows == {}

    def test_empty_text_content_rejected(self, paste_service):
        """Text pastes must carry content."""
        with pytest.raises(InvalidInputError) as exc_info:
            paste_service.create_paste(PasteCreate(title="t", content=""))

        assert exc_info.value.code == "EMPTY_CONTENT"

    def test_empty_multimedia_content_allowed(self, paste_service):
        """Multimedia pastes hold files, so content may be empty."""
        created = paste_service.create_paste(
            PasteCreate(title="photos", paste_type=PasteType.MULTIMEDIA)
        )

        assert created.id

    def test_anonymous_private_rejected(self, paste_service, paste_repo):
        """A private paste needs an owner who can read it."""
        with pytest.raises(InvalidInputError) as exc_info:
            paste_service.create_paste(
                PasteCreate(title="t", content="c", visibility=Visibility.PRIVATE)
            )

        assert exc_info.value.code == "PRIVATE_REQUIRES_ACCOUNT"
        assert paste_repo.rows == {}

    def test_password_is_hashed(self, paste_service, paste_repo):
        """The plaintext password never reaches the store."""
        created = paste_service.create_paste(
            PasteCreate(title="t", content="c", password="hunter2")
        )

        stored = paste_repo.rows[created.id]
        assert stored.is_protected is True
        assert stored.password_hash
        assert "hunter2" not in stored.password_hash

    def test_owner_recorded_as_string(self, paste_service, paste_repo):
        """user_id is stored in its canonical string form."""
        created = paste_service.create_paste(
            PasteCreate(title="t", content="c"), user_id=OWNER_ID
        )

        assert paste_repo.rows[created.id].user_id == OWNER_ID

    def test_id_collision_retries(self, paste_repo, file_service, hasher, clock, make_paste):
        """A duplicate id triggers a retry with a fresh id."""
        make_paste(id="taken")
        ids = iter(["taken", "fresh"])
        service = PasteService(
            paste_repo, file_service, hasher, id_factory=lambda: next(ids), clock=clock
        )

        created = service.create_paste(PasteCreate(title="t", content="c"))

        assert created.id == "fresh"

    def test_id_collision_gives_up(self, paste_repo, file_service, hasher, clock, make_paste):
        """Repeated collisions eventually propagate."""
        make_paste(id="taken")
        service = PasteService(
            paste_repo, file_service, hasher, id_factory=lambda: "taken", clock=clock
        )

        with pytest.raises(DuplicatePasteIdError):
            service.create_paste(PasteCreate(title="t", content="c"))

        assert MAX_ID_ATTEMPTS == 3


# =============================================================================
# Read
# =============================================================================

class TestGetPaste:
    """Tests for PasteService.get_paste and its access decision."""

    def test_missing_paste_not_found(self, paste_service):
        """Unknown ids are NotFound."""
        with pytest.raises(PasteNotFoundError):
            paste_service.get_paste("nope")

    def test_expired_paste_forbidden_even_with_password(self, paste_service, hasher, make_paste):
        """Expiry is checked before the password, so content never leaks."""
        make_paste(
            id="old",
            expires_at=NOW - timedelta(seconds=1),
            is_protected=True,
            password_hash=hasher.hash("pw"),
        )

        with pytest.raises(PasteExpiredError):
            paste_service.get_paste("old", password="pw")

    def test_expiry_boundary_is_inclusive(self, paste_service, make_paste):
        """A paste is expired at the exact instant of expires_at."""
        make_paste(id="edge", expires_at=NOW)

        with pytest.raises(PasteExpiredError):
            paste_service.get_paste("edge")

    def test_paste_expires_as_clock_moves(self, paste_service, clock):
        """Lazy expiry: no sweep is needed for a paste to become unreadable."""
        created = paste_service.create_paste(PasteCreate(title="t", content="c", expiry_days=1))
        clock.advance(days=1, seconds=1)

        with pytest.raises(PasteExpiredError):
            paste_service.get_paste(created.id)

    def test_protected_paste_scenario(self, paste_service):
        """Redacted without a password, full with the right one, 401 with a wrong one."""
        created = paste_service.create_paste(
            PasteCreate(title="t", content="c", language="plaintext", password="pw", expiry_days=1)
        )

        locked = paste_service.get_paste(created.id)
        assert isinstance(locked, RedactedPasteView)
        assert locked.content is None
        assert locked.is_protected is True

        unlocked = paste_service.get_paste(created.id, password="pw")
        assert unlocked.content == "c"

        with pytest.raises(IncorrectPasswordError):
            paste_service.get_paste(created.id, password="wrong")

    def test_redacted_view_matches_stored_metadata(self, paste_service, paste_repo):
        """Everything but content equals the stored row."""
        created = paste_service.create_paste(
            PasteCreate(title="secret", content="c", language="go", password="pw"),
            user_id=OWNER_ID,
        )
        stored = paste_repo.rows[created.id]

        view = paste_service.get_paste(created.id)

        assert view.title == stored.title
        assert view.language == stored.language
        assert view.visibility == stored.visibility
        assert view.paste_type == stored.paste_type
        assert view.expires_at == stored.expires_at
        assert view.user_id == stored.user_id
        assert view.created_at == stored.created_at
        assert "password_hash" not in view.model_dump()

    def test_redacted_read_does_not_stamp_access(self, paste_service, paste_repo, clock):
        """A locked read is not a successful read."""
        created = paste_service.create_paste(PasteCreate(title="t", content="c", password="pw"))
        clock.advance(hours=1)

        paste_service.get_paste(created.id)

        assert paste_repo.rows[created.id].last_accessed_at == NOW

    def test_private_paste_scenario(self, paste_service):
        """Private pastes are owner-only; a password is irrelevant."""
        created = paste_service.create_paste(
            PasteCreate(title="t", content="mine", visibility=Visibility.PRIVATE),
            user_id=OWNER_ID,
        )

        with pytest.raises(PastePrivateError):
            paste_service.get_paste(created.id)

        with pytest.raises(PastePrivateError):
            paste_service.get_paste(created.id, user_id=OTHER_ID)

        view = paste_service.get_paste(created.id, user_id=OWNER_ID)
        assert view.content == "mine"

    def test_successful_read_stamps_last_accessed(self, paste_service, paste_repo, clock):
        """last_accessed_at tracks the latest successful read."""
        created = paste_service.create_paste(PasteCreate(title="t", content="c"))
        clock.advance(hours=3)

        view = paste_service.get_paste(created.id)

        assert view.last_accessed_at == NOW + timedelta(hours=3)
        assert paste_repo.rows[created.id].last_accessed_at == NOW + timedelta(hours=3)

    def test_read_does_not_extend_expiry_by_default(self, paste_service, clock):
        """Rolling expiry is off unless configured."""
        created = paste_service.create_paste(PasteCreate(title="t", content="c"))
        clock.advance(days=2)

        view = paste_service.get_paste(created.id)

        assert view.expires_at == created.expires_at

    def test_read_extends_expiry_when_enabled(self, paste_repo, file_service, hasher, clock):
        """With extend_on_view the expiry rolls forward to the owner-status max."""
        service = PasteService(
            paste_repo,
            file_service,
            hasher,
            policy=ExpiryPolicy(extend_on_view=True),
            clock=clock,
        )
        guest = service.create_paste(PasteCreate(title="t", content="c", expiry_days=1))
        owned = service.create_paste(
            PasteCreate(title="t", content="c", expiry_days=1), user_id=OWNER_ID
        )
        forever = service.create_paste(
            PasteCreate(title="t", content="c", never_expire=True), user_id=OWNER_ID
        )
        clock.advance(hours=12)

        assert service.get_paste(guest.id).expires_at == clock() + timedelta(days=7)
        assert service.get_paste(owned.id).expires_at == clock() + timedelta(days=30)
        assert service.get_paste(forever.id).expires_at is None

    def test_deleted_mid_read_is_not_found(self, paste_service, paste_repo, monkeypatch):
        """If the row vanishes before the access stamp, report NotFound."""
        created = paste_service.create_paste(PasteCreate(title="t", content="c"))
        monkeypatch.setattr(paste_repo, "update", lambda paste_id, changes: None)

        with pytest.raises(PasteNotFoundError):
            paste_service.get_paste(created.id)


# =============================================================================
# List
# =============================================================================

class TestListUserPastes:
    """Tests for PasteService.list_user_pastes."""

    def test_lists_only_own_pastes_newest_first(self, paste_service, clock):
        """Other accounts' and anonymous pastes are not listed."""
        first = paste_service.create_paste(PasteCreate(title="a", content="c"), user_id=OWNER_ID)
        clock.advance(minutes=1)
        second = paste_service.create_paste(PasteCreate(title="b", content="c"), user_id=OWNER_ID)
        paste_service.create_paste(PasteCreate(title="x", content="c"), user_id=OTHER_ID)
        paste_service.create_paste(PasteCreate(title="y", content="c"))

        listing = paste_service.list_user_pastes(OWNER_ID)

        assert listing.total == 2
        assert [p.id for p in listing.pastes] == [second.id, first.id]

    def test_pagination(self, paste_service, clock):
        """page and page_size slice the listing."""
        for i in range(5):
            paste_service.create_paste(PasteCreate(title=f"p{i}", content="c"), user_id=OWNER_ID)
            clock.advance(minutes=1)

        listing = paste_service.list_user_pastes(OWNER_ID, page=2, page_size=2)

        assert listing.total == 5
        assert [p.title for p in listing.pastes] == ["p2", "p1"]

    def test_anonymous_rejected(self, paste_service):
        """There is nothing to list without an account."""
        with pytest.raises(AuthenticationRequiredError):
            paste_service.list_user_pastes(None)


# =============================================================================
# Update
# =============================================================================

class TestUpdatePaste:
    """Tests for PasteService.update_paste."""

    @pytest.fixture
    def owned(self, paste_service):
        return paste_service.create_paste(
            PasteCreate(title="t", content="c"), user_id=OWNER_ID
        )

    def test_partial_update(self, paste_service, owned):
        """Only fields present in the patch change."""
        view = paste_service.update_paste(
            owned.id, PasteUpdate(title="renamed"), user_id=OWNER_ID
        )

        assert view.title == "renamed"
        assert view.content == "c"

    def test_non_owner_rejected(self, paste_service, paste_repo, owned):
        """Other accounts and anonymous callers cannot update."""
        for caller in (OTHER_ID, None):
            with pytest.raises(NotPasteOwnerError):
                paste_service.update_paste(owned.id, PasteUpdate(title="x"), user_id=caller)

        assert paste_repo.rows[owned.id].title == "t"

    def test_ownerless_paste_is_immutable(self, paste_service):
        """Anonymous pastes have no owner who could update them."""
        created = paste_service.create_paste(PasteCreate(title="t", content="c"))

        with pytest.raises(NotPasteOwnerError):
            paste_service.update_paste(created.id, PasteUpdate(title="x"), user_id=None)

    def test_missing_paste(self, paste_service):
        """Updating an unknown id is NotFound."""
        with pytest.raises(PasteNotFoundError):
            paste_service.update_paste("nope", PasteUpdate(title="x"), user_id=OWNER_ID)

    def test_set_and_remove_password(self, paste_service, owned):
        """A password can be added and later removed."""
        paste_service.update_paste(owned.id, PasteUpdate(password="pw"), user_id=OWNER_ID)
        assert isinstance(paste_service.get_paste(owned.id), RedactedPasteView)

        view = paste_service.update_paste(
            owned.id, PasteUpdate(remove_password=True), user_id=OWNER_ID
        )
        assert view.is_protected is False
        assert paste_service.get_paste(owned.id).content == "c"

    def test_remove_password_wins(self, paste_service, paste_repo, owned):
        """remove_password together with a new password leaves it unprotected."""
        paste_service.update_paste(
            owned.id,
            PasteUpdate(password="new", remove_password=True),
            user_id=OWNER_ID,
        )

        stored = paste_repo.rows[owned.id]
        assert stored.is_protected is False
        assert stored.password_hash is None

    def test_paste_type_is_immutable(self, paste_service, owned):
        """Switching text to multimedia is rejected."""
        with pytest.raises(InvalidInputError) as exc_info:
            paste_service.update_paste(
                owned.id, PasteUpdate(paste_type=PasteType.MULTIMEDIA), user_id=OWNER_ID
            )

        assert exc_info.value.code == "PASTE_TYPE_IMMUTABLE"

    def test_same_paste_type_accepted(self, paste_service, owned):
        """Sending the current paste_type is a no-op."""
        view = paste_service.update_paste(
            owned.id, PasteUpdate(paste_type=PasteType.TEXT), user_id=OWNER_ID
        )

        assert view.paste_type == PasteType.TEXT

    def test_empty_content_rejected_for_text(self, paste_service, paste_repo, owned):
        """Text pastes can't be emptied."""
        with pytest.raises(InvalidInputError):
            paste_service.update_paste(owned.id, PasteUpdate(content=""), user_id=OWNER_ID)

        assert paste_repo.rows[owned.id].content == "c"

    def test_update_expiry(self, paste_service, owned):
        """Owners may move or drop the expiry."""
        view = paste_service.update_paste(
            owned.id, PasteUpdate(expiry_days=20), user_id=OWNER_ID
        )
        assert view.expires_at == NOW + timedelta(days=20)

        view = paste_service.update_paste(
            owned.id, PasteUpdate(never_expire=True), user_id=OWNER_ID
        )
        assert view.expires_at is None

    def test_make_private(self, paste_service, owned):
        """Visibility changes take effect on the next read."""
        paste_service.update_paste(
            owned.id, PasteUpdate(visibility=Visibility.PRIVATE), user_id=OWNER_ID
        )

        with pytest.raises(PastePrivateError):
            paste_service.get_paste(owned.id)

    def test_empty_patch_returns_current(self, paste_service, owned):
        """An empty patch changes nothing."""
        view = paste_service.update_paste(owned.id, PasteUpdate(), user_id=OWNER_ID)

        assert view.title == "t"

    def test_expired_paste_cannot_be_revived(self, paste_service, paste_repo, owned, clock):
        """Once expired, a paste stays expired even for its owner."""
        clock.advance(days=8)

        for patch in (PasteUpdate(expiry_days=5), PasteUpdate(never_expire=True), PasteUpdate(title="x")):
            with pytest.raises(PasteExpiredError):
                paste_service.update_paste(owned.id, patch, user_id=OWNER_ID)

        assert paste_repo.rows[owned.id].expires_at == NOW + timedelta(days=7)
        with pytest.raises(PasteExpiredError):
            paste_service.get_paste(owned.id)

    def test_vanished_row_is_not_found(self, paste_service, paste_repo, owned, monkeypatch):
        """A concurrent delete between check and write surfaces as NotFound."""
        monkeypatch.setattr(paste_repo, "update", lambda paste_id, changes: None)

        with pytest.raises(PasteNotFoundError):
            paste_service.update_paste(owned.id, PasteUpdate(title="x"), user_id=OWNER_ID)


# =============================================================================
# Delete
# =============================================================================

class TestDeletePaste:
    """Tests for PasteService.delete_paste and the account-wide wipe."""

    def test_owner_deletes(self, paste_service, paste_repo):
        """The owner can delete; the paste is gone afterwards."""
        created = paste_service.create_paste(PasteCreate(title="t", content="c"), user_id=OWNER_ID)

        paste_service.delete_paste(created.id, user_id=OWNER_ID)

        assert created.id not in paste_repo.rows
        with pytest.raises(PasteNotFoundError):
            paste_service.get_paste(created.id)

    @pytest.mark.parametrize("caller", [OTHER_ID, None])
    def test_non_owner_cannot_delete(self, paste_service, caller):
        """A rejected delete leaves the paste readable."""
        created = paste_service.create_paste(PasteCreate(title="t", content="c"), user_id=OWNER_ID)

        with pytest.raises(NotPasteOwnerError):
            paste_service.delete_paste(created.id, user_id=caller)

        assert paste_service.get_paste(created.id).content == "c"

    def test_anonymous_paste_cannot_be_deleted(self, paste_service):
        """Nobody owns an anonymous paste, so nobody may delete it."""
        created = paste_service.create_paste(PasteCreate(title="t", content="c"))

        with pytest.raises(NotPasteOwnerError):
            paste_service.delete_paste(created.id, user_id=None)

    def test_delete_missing(self, paste_service):
        """Deleting an unknown id is NotFound."""
        with pytest.raises(PasteNotFoundError):
            paste_service.delete_paste("nope", user_id=OWNER_ID)

    def test_delete_removes_files_even_if_storage_fails(
        self, paste_service, file_service, file_repo, storage, paste_repo
    ):
        """Blob deletion is best-effort; the paste and file rows still go."""
        created = paste_service.create_paste(
            PasteCreate(title="album", paste_type=PasteType.MULTIMEDIA), user_id=OWNER_ID
        )
        file_service.upload_file(created.id, "a.png", b"png", "image/png", user_id=OWNER_ID)
        storage.fail_deletes = True

        paste_service.delete_paste(created.id, user_id=OWNER_ID)

        assert created.id not in paste_repo.rows
        assert file_repo.rows == {}
        assert len(storage.delete_calls) == 1

    def test_delete_all_is_idempotent(self, paste_service, paste_repo):
        """The second wipe finds nothing to delete."""
        for _ in range(3):
            paste_service.create_paste(PasteCreate(title="t", content="c"), user_id=OWNER_ID)
        kept = paste_service.create_paste(PasteCreate(title="t", content="c"), user_id=OTHER_ID)

        assert paste_service.delete_all_pastes_for_user(OWNER_ID) == 3
        assert paste_service.delete_all_pastes_for_user(OWNER_ID) == 0
        assert list(paste_repo.rows) == [kept.id]

    def test_delete_all_requires_account(self, paste_service):
        """Anonymous callers own nothing."""
        with pytest.raises(AuthenticationRequiredError):
            paste_service.delete_all_pastes_for_user(None)
