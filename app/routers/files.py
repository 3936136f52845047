# =============================================================================
# app/routers/files.py - File Upload Endpoints
# =============================================================================
# Files attached to multimedia pastes. Listing follows the paste's read
# rules; uploads and deletes follow its ownership.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Header, Path, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from app.auth import AuthUser, get_current_user, get_current_user_optional
from app.dependencies import FileServiceDep
from core.models.file_upload import FileUploadView
from core.models.paste import BulkDeleteResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/pastes/{paste_id}/files", response_model=list[FileUploadView])
def list_files(
    paste_id: Annotated[str, Path(min_length=1, max_length=64)],
    service: FileServiceDep,
    user: AuthUser | None = Depends(get_current_user_optional),
    x_paste_password: Annotated[str | None, Header()] = None,
):
    """List files of a paste. Protected pastes need X-Paste-Password."""
    return service.list_files(
        paste_id,
        password=x_paste_password,
        user_id=user.id if user else None,
    )


@router.post(
    "/pastes/{paste_id}/files",
    response_model=FileUploadView,
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    paste_id: Annotated[str, Path(min_length=1, max_length=64)],
    file: Annotated[UploadFile, File(description="File to attach")],
    service: FileServiceDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Attach a file to a multimedia paste.

    This endpoint:
    1. Reads the upload (size is checked before anything is stored)
    2. Stores the bytes in Supabase Storage
    3. Records the file metadata

    Owned pastes accept files from their owner only.
    """
    content = await file.read()
    filename = file.filename or ""

    logger.info(f"Processing upload for paste {paste_id}: {filename} ({len(content)} bytes)")

    return await run_in_threadpool(
        service.upload_file,
        paste_id,
        filename,
        content,
        file.content_type,
        user.id if user else None,
    )


@router.delete("/files/mine", response_model=BulkDeleteResponse)
def delete_my_files(
    service: FileServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Delete every file attached to the caller's pastes. The pastes stay."""
    deleted = service.delete_all_files_for_user(user.id)
    return BulkDeleteResponse(deleted=deleted, message="All your files have been deleted")


@router.delete("/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_file(
    file_id: Annotated[str, Path(min_length=1, max_length=64)],
    service: FileServiceDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """Delete one file. Only the owner of its paste may do this."""
    service.delete_file(file_id, user_id=user.id if user else None)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
