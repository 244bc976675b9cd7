"""Exception taxonomy.

Every error a handler can surface to a client derives from :class:`BlogAPIError`
and carries its HTTP status, a short machine-readable code and a human message.
``main.py`` renders them as ``{"error": ..., "message": ...}``.
"""
from typing import Dict, Optional


class BlogAPIError(Exception):
    """Base class for errors rendered to the client"""

    status_code: int = 500
    error: str = "internal_server_error"
    message: str = "An unexpected error occurred."
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ConfigurationError(Exception):
    """Missing or invalid deployment configuration (raised at startup)"""


# ---------------------------------------------------------------------------
# 4xx
# ---------------------------------------------------------------------------

class ValidationError(BlogAPIError):
    status_code = 400
    error = "validation_error"
    message = "Invalid request"


class InvalidCredentialsError(BlogAPIError):
    status_code = 401
    error = "invalid_credentials"
    message = "Invalid credentials"


class UnauthorizedError(BlogAPIError):
    status_code = 401
    error = "unauthorized"
    message = "Invalid or expired token"
    headers = {"WWW-Authenticate": "Bearer"}


class UnverifiedEmailError(BlogAPIError):
    status_code = 403
    error = "email_not_verified"
    message = "Please verify your email to log in."


class NotFoundError(BlogAPIError):
    status_code = 404
    error = "not_found"
    message = "Not found"


class UserNotFoundError(BlogAPIError):
    # verify-email reports an unknown user as a bad request
    status_code = 400
    error = "user_not_found"
    message = "User not found"


class ConflictError(BlogAPIError):
    status_code = 409
    error = "conflict"
    message = "Resource already exists"


# ---------------------------------------------------------------------------
# 5xx
# ---------------------------------------------------------------------------

class PersistenceError(BlogAPIError):
    status_code = 500
    error = "persistence_error"


class UpstreamError(BlogAPIError):
    status_code = 500
    error = "upstream_error"
    message = "Upstream service failed"


class InvalidVerificationTokenError(BlogAPIError):
    status_code = 500
    error = "invalid_token"
    message = "Invalid or expired token"

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__()


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------

class TokenError(Exception):
    """Token rejected by the token service; ``kind`` names the cause"""

    kind = "invalid"


class TokenExpiredError(TokenError):
    kind = "expired"


class TokenMalformedError(TokenError):
    kind = "malformed"


class TokenSignatureError(TokenError):
    kind = "signature_invalid"
