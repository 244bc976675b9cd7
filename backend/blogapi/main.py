"""FastAPI application entry point"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogapi import __version__
from blogapi.api import auth, blogs, health
from blogapi.config import settings
from blogapi.database import SessionLocal, init_db
from blogapi.errors import BlogAPIError
from blogapi.middleware.rate_limit import limiter
from blogapi.services.credentials import SessionStore
from blogapi.utils.jwt_utils import TokenService
from blogapi.utils.logger import logger, setup_logging
from blogapi.utils.mailer import Mailer
from blogapi.utils.broadcast import PusherPublisher

# Setup logging
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup; a missing JWT_SECRET raises ConfigurationError and aborts here
    app.state.token_service = TokenService.from_settings(settings)
    app.state.mailer = Mailer.from_settings(settings)
    app.state.publisher = PusherPublisher.from_settings(settings)

    if settings.DATABASE_AUTO_CREATE:
        init_db()

    db = SessionLocal()
    try:
        purged = SessionStore(db, max_age=settings.SESSION_MAX_AGE).purge_expired()
    finally:
        db.close()

    if settings.MAIL_VERIFY_ON_STARTUP:
        app.state.mailer.verify_connection()

    logger.info("Blog API starting up", extra={
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "log_level": settings.LOG_LEVEL,
        "rate_limiting": settings.RATE_LIMIT_ENABLED,
        "monitoring": settings.METRICS_ENABLED,
        "mail": app.state.mailer.is_configured,
        "push": app.state.publisher.is_configured,
        "expired_sessions_purged": purged,
    })
    yield
    # Shutdown
    logger.info("Blog API shutting down")


# Create FastAPI app
app = FastAPI(
    title="Blog API",
    description="Blog CRUD with JWT authentication, email verification and real-time publish notifications",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ===== Middleware Setup =====

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Monitoring middleware
if settings.METRICS_ENABLED:
    from blogapi.middleware.monitoring import MonitoringMiddleware
    app.add_middleware(MonitoringMiddleware)

    # Prometheus metrics
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[settings.METRICS_PATH, "/health", "/health/ready", "/health/live"],
        inprogress_name="blogapi_requests_inprogress",
        inprogress_labels=True
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# Rate limiting
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors"""
    logger.warning(
        "Rate limit exceeded",
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please try again later.",
        }
    )

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(blogs.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "service": "blogapi",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
        "metrics": settings.METRICS_PATH if settings.METRICS_ENABLED else None
    }


# ===== Error Handlers =====

@app.exception_handler(BlogAPIError)
async def blog_api_error_handler(request: Request, exc: BlogAPIError):
    """Render domain errors; server-side failures are logged with traceback"""
    if exc.status_code >= 500:
        logger.error(
            exc.message,
            extra={"path": request.url.path, "method": request.method, "error": exc.error},
            exc_info=exc if exc.__cause__ is not None else None,
        )
    else:
        logger.info(
            exc.message,
            extra={"path": request.url.path, "method": request.method, "status": exc.status_code},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.message},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400, not FastAPI's default 422"""
    fields = [".".join(str(part) for part in err["loc"] if part != "body") for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={
            "error": "validation_error",
            "message": "Invalid request",
            "fields": [field for field in fields if field],
        }
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "not_found", "message": "API route not found"})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method
        },
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please contact support."
        }
    )
