# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Takobin API:
# - test_models.py: Pydantic model validation
# - test_access_policy.py: Read decision order and expiry policy
# - test_paste_service.py / test_file_service.py: Service rules on in-memory fakes
# - test_repositories.py: Supabase repositories and storage with mocked clients
# - test_api.py: Endpoints through FastAPI's TestClient
# - test_workers.py: Expired-paste sweep
#
# Run tests with: pytest
# =============================================================================
