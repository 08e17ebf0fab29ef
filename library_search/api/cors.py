"""
CORS headers for the API.

The search endpoint answers any origin with a fixed header set. Other
routes only echo origins from api.allowed_origins.
"""

from typing import Dict, Optional, Sequence


SEARCH_CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def allowlist_headers(origin: Optional[str], allowed_origins: Sequence[str]) -> Dict[str, str]:
    """
    CORS headers for routes restricted to known origins.

    Args:
        origin: Origin header of the request.
        allowed_origins: Configured origins.

    Returns:
        Headers allowing the request origin if it is listed, else the first
        configured origin.
    """
    if not allowed_origins:
        return {}

    allow_origin = origin if origin in allowed_origins else allowed_origins[0]
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Credentials": "true",
        "Vary": "Origin",
    }
