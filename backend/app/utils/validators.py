"""
Input validation utilities.
"""

import re
from typing import Optional


# Engine index names: lowercase, no wildcards, no leading punctuation
INDEX_NAME_PATTERN = re.compile(r'^[a-z0-9][a-z0-9_\-]*$')

# Document ids are opaque but must be URL-path safe
DOCUMENT_ID_PATTERN = re.compile(r'^[A-Za-z0-9._:\-]{1,512}$')

SORT_MODES = ("relevance", "newest", "oldest")


def validate_index_name(index: str, prefix: Optional[str] = None) -> bool:
    """
    Validate an engine index name.

    Args:
        index: Index name to validate
        prefix: Application prefix the index must carry (``<prefix>_...``)

    Returns:
        True if the index name is valid, False otherwise
    """
    if not index or not INDEX_NAME_PATTERN.match(index):
        return False

    if prefix and not index.startswith(f"{prefix}_"):
        return False

    return True


def validate_document_id(document_id: str) -> bool:
    """
    Validate a document id.

    Args:
        document_id: Id to validate

    Returns:
        True if the id is valid, False otherwise
    """
    if not isinstance(document_id, str):
        return False
    return bool(DOCUMENT_ID_PATTERN.match(document_id))


def validate_sort_mode(sort: Optional[str]) -> bool:
    """Check a sort mode against the supported values."""
    return sort is None or sort in SORT_MODES


def clamp_pagination(
    page: Optional[int],
    per_page: Optional[int],
    default_per_page: int = 20,
    max_per_page: int = 100,
) -> tuple[int, int]:
    """
    Clamp pagination values into their valid ranges.

    Page below 1 becomes 1. Per-page below 1 falls back to the default,
    above the maximum is capped.

    Args:
        page: Requested page (1-indexed)
        per_page: Requested page size
        default_per_page: Size used when per_page is missing or < 1
        max_per_page: Upper bound for per_page

    Returns:
        Tuple of (page, per_page)
    """
    if page is None or page < 1:
        page = 1

    if per_page is None or per_page < 1:
        per_page = default_per_page
    if per_page > max_per_page:
        per_page = max_per_page

    return page, per_page
