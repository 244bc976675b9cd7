"""Monitoring and observability middleware"""
import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

from blogapi.config import settings
from blogapi.utils.logger import logger


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "blogapi_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "blogapi_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

http_errors_total = Counter(
    "blogapi_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "status"]
)

# Auth metrics
authentication_failures_total = Counter(
    "blogapi_authentication_failures_total",
    "Total authentication failures",
    ["reason"]  # missing_token, invalid_token, invalid_credentials, unverified
)

token_rejections_total = Counter(
    "blogapi_token_rejections_total",
    "Tokens rejected by the token service",
    ["purpose", "kind"]  # kind: expired, malformed, signature_invalid
)

# Side-channel metrics
verification_emails_total = Counter(
    "blogapi_verification_emails_total",
    "Verification email dispatch attempts",
    ["outcome"]  # sent, failed
)

blog_broadcasts_total = Counter(
    "blogapi_blog_broadcasts_total",
    "new-blog broadcast attempts",
    ["outcome"]  # published, failed, skipped
)


UNMATCHED_ENDPOINT = "unmatched"


def route_template(request: Request) -> str:
    """Path template of the route serving ``request`` (``/api/blogs/{blog_id}``)

    Requests that match no route share one label value.
    """
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", UNMATCHED_ENDPOINT)
    return UNMATCHED_ENDPOINT


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for monitoring and metrics collection"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        start_time = time.time()

        method = request.method
        endpoint = route_template(request)

        # Add request ID for tracing
        request_id = request.headers.get("x-request-id", f"req_{int(time.time() * 1000)}")
        request.state.request_id = request_id

        if settings.is_development:
            logger.debug(
                "Session cookie %s",
                "present" if settings.SESSION_COOKIE_NAME in request.cookies else "absent",
                extra={"request_id": request_id, "path": request.url.path},
            )

        try:
            response = await call_next(request)
            status = response.status_code

            duration = time.time() - start_time
            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=status
            ).inc()

            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            # Log slow requests
            if duration > 1.0:
                logger.warning(
                    f"Slow request detected: {method} {endpoint}",
                    extra={
                        "request_id": request_id,
                        "method": method,
                        "endpoint": endpoint,
                        "duration": duration,
                        "status": status
                    }
                )

            if status >= 400:
                http_errors_total.labels(
                    method=method,
                    endpoint=endpoint,
                    status=status
                ).inc()

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration:.3f}s"

            return response

        except Exception as e:
            duration = time.time() - start_time
            http_errors_total.labels(
                method=method,
                endpoint=endpoint,
                status=500
            ).inc()

            logger.error(
                f"Request failed: {method} {endpoint}",
                extra={
                    "request_id": request_id,
                    "method": method,
                    "endpoint": endpoint,
                    "duration": duration,
                    "error": str(e)
                },
                exc_info=True
            )
            raise


def record_auth_failure(reason: str):
    """Record authentication failure"""
    authentication_failures_total.labels(reason=reason).inc()


def record_token_rejection(purpose: str, kind: str):
    """Record a token rejected by the token service"""
    token_rejections_total.labels(purpose=purpose, kind=kind).inc()


def record_verification_email(outcome: str):
    verification_emails_total.labels(outcome=outcome).inc()


def record_blog_broadcast(outcome: str):
    blog_broadcasts_total.labels(outcome=outcome).inc()
