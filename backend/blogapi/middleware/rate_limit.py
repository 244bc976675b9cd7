"""Rate limiting middleware for API protection"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from blogapi.config import settings


def get_identifier(request: Request) -> str:
    """
    Get identifier for rate limiting based on authentication

    Priority:
    1. User ID (attached by bearer authentication)
    2. IP address (for unauthenticated)
    """
    identity = getattr(request.state, "identity", None)
    if identity is not None:
        return f"user:{identity.user_id}"

    return get_remote_address(request)


# Create limiter instance
limiter = Limiter(
    key_func=get_identifier,
    default_limits=settings.RATE_LIMIT_DEFAULT,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


# Rate limit configurations for different endpoints
RATE_LIMITS = {
    # Credential endpoints - brute-force exposure
    "register": settings.RATE_LIMIT_AUTH,
    "login": settings.RATE_LIMIT_AUTH,
    "verify_email": "30/minute",

    # Blog endpoints
    "blog_read": "300/minute",
    "blog_write": "60/minute",
}


def get_rate_limit(endpoint: str) -> str:
    """Get rate limit for specific endpoint"""
    return RATE_LIMITS.get(endpoint, settings.RATE_LIMIT_DEFAULT[0])
