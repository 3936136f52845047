# =============================================================================
# workers/ - Celery Background Workers
# =============================================================================
# Optional maintenance worker. It periodically deletes pastes whose expiry
# has passed so their rows and files stop taking up space. The API enforces
# expiry on its own at read time and does not need this worker running.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: purge_expired_pastes
# - config.py: Worker settings and beat schedule
#
# Usage:
#   celery -A workers.celery_app worker --beat --loglevel=info
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
