# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the paste domain:
# - models/: Pydantic schemas for records, requests and views
# - repositories/: Relational store interfaces and Supabase implementations
# - services/: Access policy, paste lifecycle, file uploads, blob storage
#
# Code in this package should NOT import from FastAPI routers or Celery.
# This keeps the logic testable and reusable.
# =============================================================================
