# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import re
import time
from datetime import datetime, timezone
from typing import Any, Iterable
from urllib.parse import quote
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        client_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        client_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string for timestamp columns."""
    return datetime.now(timezone.utc).isoformat()


def epoch_ms() -> int:
    """Milliseconds since the epoch, used to keep storage paths unique."""
    return int(time.time() * 1000)


# =============================================================================
# Filtering
# =============================================================================

def matches_search(query: str | None, values: Iterable[Any]) -> bool:
    """
    Case-insensitive substring match of `query` against any of `values`.

    An empty query matches everything; None values are skipped.

    Example:
        matches_search("acme", ["Jane", "jane@x.io", "ACME Corp"])  # True
    """
    if not query:
        return True
    needle = query.lower()
    return any(needle in str(value).lower() for value in values if value)


# =============================================================================
# HTTP Headers
# =============================================================================

def content_disposition(filename: str) -> str:
    """
    Attachment header for a user-supplied filename.

    Header values must be latin-1, so the plain `filename` is an ASCII
    fallback and the real name goes in the RFC 5987 `filename*` parameter.

    Example:
        content_disposition("договор.pdf")
        # attachment; filename="_______.pdf"; filename*=UTF-8''%D0%B4%D0%BE...
    """
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename) or "download"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
