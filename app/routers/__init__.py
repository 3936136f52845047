# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - pastes.py: Paste create/read/update/delete endpoints
# - files.py: File upload endpoints for multimedia pastes
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import pastes
from . import files

__all__ = [
    "health",
    "pastes",
    "files",
]
