# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background maintenance that sits outside the request path.
#
# Tasks:
# - purge_expired_pastes: delete pastes whose expiry has passed, with
#   best-effort cleanup of their stored files
#
# Reads never depend on this task: an expired paste is already unreadable
# the moment its expires_at passes. The sweep only reclaims storage.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)


def purge_expired(pastes, file_service, now: datetime, batch_size: int) -> dict[str, Any]:
    """
    Delete one batch of expired pastes.

    Args:
        pastes: PasteRepository
        file_service: FileService used for blob + file row cleanup
        now: Cutoff; pastes with expires_at <= now are removed
        batch_size: Max pastes per run

    Returns:
        Dict with pastes_deleted, files_deleted and whether more remain
    """
    expired_ids = pastes.list_expired_ids(now, limit=batch_size)
    if not expired_ids:
        return {"pastes_deleted": 0, "files_deleted": 0, "more": False}

    files_deleted = file_service.delete_files_for_pastes(expired_ids)
    pastes_deleted = pastes.delete_many(expired_ids)

    logger.info(
        f"Purged {pastes_deleted} expired pastes and {files_deleted} files "
        f"(expired before {now.isoformat()})"
    )
    return {
        "pastes_deleted": pastes_deleted,
        "files_deleted": files_deleted,
        "more": len(expired_ids) == batch_size,
    }


@shared_task(bind=True, name="workers.tasks.purge_expired_pastes")
def purge_expired_pastes(self, batch_size: int | None = None) -> dict[str, Any]:
    """
    Periodic sweep scheduled by Celery beat (see workers.config).

    Re-queues itself while full batches keep coming back.
    """
    from app.config import settings
    from app.dependencies import get_file_service

    file_service = get_file_service()
    size = batch_size or settings.SWEEP_BATCH_SIZE

    try:
        result = purge_expired(
            file_service.pastes,
            file_service,
            datetime.now(timezone.utc),
            size,
        )
    except Exception as e:
        logger.exception(f"Expiry sweep failed: {e}")
        raise self.retry(exc=e)

    if result["more"]:
        purge_expired_pastes.apply_async(kwargs={"batch_size": size}, countdown=1)

    return {"success": True, **result}
