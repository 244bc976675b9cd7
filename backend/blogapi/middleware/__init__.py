"""Middleware modules for production-ready features"""
from blogapi.middleware.monitoring import (
    MonitoringMiddleware,
    record_auth_failure,
    record_blog_broadcast,
    record_token_rejection,
    record_verification_email,
)
from blogapi.middleware.rate_limit import limiter, get_rate_limit

__all__ = [
    "MonitoringMiddleware",
    "record_auth_failure",
    "record_blog_broadcast",
    "record_token_rejection",
    "record_verification_email",
    "limiter",
    "get_rate_limit"
]
