# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - utils.py: Shared utilities (UUIDs, timestamps, search, headers)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import (
    content_disposition,
    epoch_ms,
    matches_search,
    normalize_uuid,
    utc_now_iso,
)

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "content_disposition",
    "epoch_ms",
    "matches_search",
    "normalize_uuid",
    "utc_now_iso",
]
