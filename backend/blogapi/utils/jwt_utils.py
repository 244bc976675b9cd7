"""JWT utilities: token signing and verification for login and email verification"""
import enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from blogapi.config import Settings
from blogapi.errors import (
    ConfigurationError,
    TokenExpiredError,
    TokenMalformedError,
    TokenSignatureError,
)
from blogapi.utils.logger import logger

EMAIL_VERIFICATION_EXPIRE_SECONDS = 3600


class TokenPurpose(str, enum.Enum):
    """Stored in the ``type`` claim; a token is only accepted for its own purpose."""

    LOGIN = "login"
    EMAIL_VERIFICATION = "email_verification"


class TokenService:
    """Issues and verifies HS256 tokens signed with a single shared secret.

    Tokens are stateless: there is no revocation list, and expiry is enforced
    with zero leeway.
    """

    def __init__(self, secret: Optional[str], algorithm: str = "HS256", login_expire_seconds: int = 3600):
        if not secret:
            raise ConfigurationError("JWT_SECRET must be set")
        self._secret = secret
        self.algorithm = algorithm
        self.login_expire_seconds = login_expire_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            login_expire_seconds=settings.JWT_EXPIRES_IN,
        )

    def expires_in(self, purpose: TokenPurpose) -> int:
        """Validity window in seconds for a token purpose"""
        if purpose is TokenPurpose.EMAIL_VERIFICATION:
            return EMAIL_VERIFICATION_EXPIRE_SECONDS
        return self.login_expire_seconds

    # -----------------------------------------------------------------------
    # Token creation
    # -----------------------------------------------------------------------

    def issue(
        self,
        claims: Dict[str, Any],
        purpose: TokenPurpose,
        issued_at: Optional[datetime] = None,
    ) -> str:
        """Sign ``claims`` and return a JWT.

        Args:
            claims:    Payload claims; ``sub`` must be the user id as a string.
            purpose:   Decides the ``type`` claim and the expiry window.
            issued_at: Override for the issue instant (defaults to now, UTC).
        """
        now = issued_at or datetime.now(timezone.utc)
        iat = int(now.timestamp())

        payload: Dict[str, Any] = {
            **claims,
            "type": purpose.value,
            "iat": iat,
            "exp": iat + self.expires_in(purpose),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def issue_login_token(self, user_id: int, name: str) -> str:
        return self.issue({"sub": str(user_id), "name": name}, TokenPurpose.LOGIN)

    def issue_verification_token(self, user_id: int) -> str:
        return self.issue({"sub": str(user_id)}, TokenPurpose.EMAIL_VERIFICATION)

    # -----------------------------------------------------------------------
    # Token verification
    # -----------------------------------------------------------------------

    def verify(self, token: str, purpose: Optional[TokenPurpose] = None) -> Dict[str, Any]:
        """Verify a JWT and return its claims.

        Raises:
            TokenMalformedError: not a JWT, wrong purpose or missing subject.
            TokenSignatureError: signed with another key or algorithm.
            TokenExpiredError:   ``exp`` is in the past.
        """
        try:
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise TokenMalformedError(str(exc)) from exc

        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpiredError(str(exc)) from exc
        except JWTClaimsError as exc:
            raise TokenMalformedError(str(exc)) from exc
        except JWTError as exc:
            raise TokenSignatureError(str(exc)) from exc

        if purpose is not None and claims.get("type") != purpose.value:
            logger.debug("Token presented for the wrong purpose", extra={"kind": "malformed"})
            raise TokenMalformedError(f"Token is not a {purpose.value} token")

        subject = claims.get("sub")
        if not subject or not str(subject).isdigit():
            raise TokenMalformedError("Token subject is missing")

        return claims

    @staticmethod
    def user_id(claims: Dict[str, Any]) -> int:
        return int(claims["sub"])
