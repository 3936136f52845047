# =============================================================================
# app/routers/pastes.py - Paste Endpoints
# =============================================================================
# HTTP surface of the paste access controller. Reads and creates work
# anonymously; listing, updating and deleting need the owner's token.
#
# Endpoints are plain `def` so FastAPI runs them in its threadpool: the
# Supabase client and password hashing are both blocking.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Path, Query, Response, status

from app.auth import AuthUser, get_current_user, get_current_user_optional
from app.dependencies import PasteServiceDep
from core.models.paste import (
    BulkDeleteResponse,
    PasteCreate,
    PasteCreated,
    PasteList,
    PasteUpdate,
    PasteView,
    RedactedPasteView,
    UnlockRequest,
)

router = APIRouter()

PasteId = Annotated[str, Path(min_length=1, max_length=64, description="Paste id")]


def _user_id(user: AuthUser | None):
    return user.id if user else None


# =============================================================================
# Collection
# =============================================================================

@router.post("", response_model=PasteCreated, status_code=status.HTTP_201_CREATED)
def create_paste(
    request: PasteCreate,
    service: PasteServiceDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Create a paste.

    Anonymous pastes expire within 7 days whatever is requested, and cannot
    be private. Returns the new id for the share link.
    """
    return service.create_paste(request, user_id=_user_id(user))


@router.get("/mine", response_model=PasteList)
def list_my_pastes(
    service: PasteServiceDep,
    user: AuthUser = Depends(get_current_user),
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int, Query(ge=1, le=50, description="Items per page")] = 10,
):
    """List the caller's pastes, newest first."""
    return service.list_user_pastes(user.id, page=page, page_size=page_size)


@router.delete("/mine", response_model=BulkDeleteResponse)
def delete_my_pastes(
    service: PasteServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Delete every paste the caller owns, along with their files.

    Safe to repeat; a second call deletes nothing.
    """
    deleted = service.delete_all_pastes_for_user(user.id)
    return BulkDeleteResponse(
        deleted=deleted,
        message="All your pastes have been deleted",
    )


# =============================================================================
# Single paste
# =============================================================================

@router.get("/{paste_id}", response_model=PasteView | RedactedPasteView)
def get_paste(
    paste_id: PasteId,
    service: PasteServiceDep,
    user: AuthUser | None = Depends(get_current_user_optional),
    x_paste_password: Annotated[str | None, Header(description="Password for protected pastes")] = None,
):
    """
    Read a paste.

    Protected pastes requested without a password come back with
    `content: null`; send the password in the X-Paste-Password header
    (or POST it to /unlock) to get the content.
    """
    return service.get_paste(paste_id, password=x_paste_password, user_id=_user_id(user))


@router.post("/{paste_id}/unlock", response_model=PasteView | RedactedPasteView)
def unlock_paste(
    paste_id: PasteId,
    request: UnlockRequest,
    service: PasteServiceDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """Read a protected paste with the password in the request body."""
    return service.get_paste(paste_id, password=request.password, user_id=_user_id(user))


@router.patch("/{paste_id}", response_model=PasteView)
def update_paste(
    paste_id: PasteId,
    patch: PasteUpdate,
    service: PasteServiceDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Update a paste. Owner only; anyone else gets 403.

    Fields left out of the body stay unchanged. `remove_password` wins over
    a new `password`; `paste_type` cannot change.
    """
    return service.update_paste(paste_id, patch, user_id=_user_id(user))


@router.delete("/{paste_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_paste(
    paste_id: PasteId,
    service: PasteServiceDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """Delete a paste and its files. Owner only."""
    service.delete_paste(paste_id, user_id=_user_id(user))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
