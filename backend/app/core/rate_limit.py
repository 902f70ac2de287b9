"""
Rate limiting configuration.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from app.core.config import settings


def get_client_identifier(request: Request) -> str:
    """
    Key requests by the gateway-supplied user id, falling back to the client IP.
    """
    user_id = request.headers.get("X-User-ID")
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=get_client_identifier, enabled=settings.RATE_LIMIT_ENABLED)


# Format: "count/period" where period can be second(s), minute(s), hour(s), day(s)
SEARCH_LIMIT = "120/minute"  # Search, suggest and aggregation endpoints
INDEX_LIMIT = "600/minute"  # Single-document writes from upstream services
BULK_LIMIT = "30/minute"  # Bulk index, batch delete and reindex
