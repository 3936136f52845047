# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Shared Supabase client (database + storage)
# - security.py: Password hashing and paste id generation
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.security import PasswordHasher, generate_paste_id

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Security
    "PasswordHasher",
    "generate_paste_id",
]
