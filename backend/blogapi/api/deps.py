"""API dependencies: collaborators, services and the two auth capabilities.

Two authentication mechanisms coexist and are kept separate:

- :class:`BearerAuth` guards the blog routes. It reads
  ``Authorization: Bearer <JWT>`` and yields an :class:`Identity`.
- :class:`SessionAuth` reads the session cookie. Only logout uses it.

A valid bearer token does not open a session and a session cookie does not
authorize blog access.
"""
from typing import NamedTuple, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from blogapi.config import settings
from blogapi.database import get_db
from blogapi.errors import TokenError, UnauthorizedError
from blogapi.middleware.monitoring import record_auth_failure, record_token_rejection
from blogapi.services.auth_flow import AuthFlow
from blogapi.services.blogs import BlogManager
from blogapi.utils.jwt_utils import TokenPurpose, TokenService
from blogapi.utils.logger import logger
from blogapi.utils.mailer import Mailer
from blogapi.utils.broadcast import PusherPublisher

_bearer_scheme = HTTPBearer(auto_error=False)


class Identity(NamedTuple):
    """Caller identity decoded from a login token"""
    user_id: int
    name: Optional[str]


class SessionHandle(NamedTuple):
    """Session cookie value, if the client sent one"""
    session_id: Optional[str]


# ---------------------------------------------------------------------------
# Process-wide collaborators (built in the lifespan handler)
# ---------------------------------------------------------------------------

def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_publisher(request: Request) -> PusherPublisher:
    return request.app.state.publisher


# ---------------------------------------------------------------------------
# Request-scoped services
# ---------------------------------------------------------------------------

def get_auth_flow(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    mailer: Mailer = Depends(get_mailer),
) -> AuthFlow:
    return AuthFlow(db=db, tokens=tokens, mailer=mailer, settings=settings)


def get_blog_manager(
    db: Session = Depends(get_db),
    publisher: PusherPublisher = Depends(get_publisher),
) -> BlogManager:
    return BlogManager(db=db, publisher=publisher)


# ---------------------------------------------------------------------------
# Bearer authentication
# ---------------------------------------------------------------------------

class BearerAuth:
    """Require a valid login token.

    A missing header and a bad token produce different messages but the same
    401 status. Expired, forged and malformed tokens are indistinguishable to
    the client; the cause is logged and counted. Verification status is not
    re-checked: a token stays valid until it expires.
    """

    def __call__(
        self,
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
        tokens: TokenService = Depends(get_token_service),
    ) -> Identity:
        return self.authenticate(request, credentials, tokens)

    @staticmethod
    def authenticate(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials],
        tokens: TokenService,
    ) -> Identity:
        if not credentials:
            record_auth_failure("missing_token")
            raise UnauthorizedError("Authentication token is required")

        try:
            claims = tokens.verify(credentials.credentials, TokenPurpose.LOGIN)
        except TokenError as exc:
            record_auth_failure("invalid_token")
            record_token_rejection(TokenPurpose.LOGIN.value, exc.kind)
            logger.info(
                "Bearer token rejected",
                extra={"kind": exc.kind, "path": request.url.path},
            )
            raise UnauthorizedError("Invalid or expired token") from exc

        identity = Identity(user_id=tokens.user_id(claims), name=claims.get("name"))
        request.state.identity = identity
        return identity


bearer_auth = BearerAuth()


def optional_create_guard(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[Identity]:
    """Bearer auth for blog creation, applied only when BLOG_CREATE_REQUIRES_AUTH is set"""
    if not settings.BLOG_CREATE_REQUIRES_AUTH:
        return None
    return BearerAuth.authenticate(request, credentials, tokens)


# ---------------------------------------------------------------------------
# Session authentication
# ---------------------------------------------------------------------------

class SessionAuth:
    """Expose the session cookie. Never rejects a request."""

    def __call__(self, request: Request) -> SessionHandle:
        return SessionHandle(session_id=request.cookies.get(settings.SESSION_COOKIE_NAME))


session_auth = SessionAuth()
