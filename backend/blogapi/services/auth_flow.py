"""Registration, login, logout and email verification.

A user moves ``unregistered -> pending verification -> verified``; the state is
read from the ``is_verified`` column, there is no separate state machine row.

Register is not transactional across its steps: the user row is committed
before the verification email goes out, and a failed send leaves the row in
place (logged, counted, no retry).
"""
import hashlib
from typing import NamedTuple, Optional, Protocol

from sqlalchemy.orm import Session

from blogapi.config import Settings, settings as default_settings
from blogapi.database import store_errors
from blogapi.errors import (
    InvalidCredentialsError,
    InvalidVerificationTokenError,
    TokenError,
    UnverifiedEmailError,
    UpstreamError,
    UserNotFoundError,
    ValidationError,
)
from blogapi.middleware.monitoring import (
    record_auth_failure,
    record_token_rejection,
    record_verification_email,
)
from blogapi.models.user import User
from blogapi.services.credentials import SessionStore, UserStore
from blogapi.utils.auth import burn_password_check, hash_password, verify_password
from blogapi.utils.jwt_utils import TokenPurpose, TokenService
from blogapi.utils.logger import logger

VERIFICATION_SUBJECT = "Email Verification"


class MailSender(Protocol):
    def send_mail(self, to: str, subject: str, text: str) -> None: ...


class LoginResult(NamedTuple):
    token: str
    user: User
    session_id: str


class AuthFlow:
    """Orchestrates the credential store, token service and mail transport"""

    def __init__(
        self,
        db: Session,
        tokens: TokenService,
        mailer: MailSender,
        settings: Settings = default_settings,
    ):
        self.db = db
        self.tokens = tokens
        self.mailer = mailer
        self.settings = settings
        self.users = UserStore(db)
        self.sessions = SessionStore(db, max_age=settings.SESSION_MAX_AGE)

    # -----------------------------------------------------------------------
    # register
    # -----------------------------------------------------------------------

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> User:
        if not name or not email or not password:
            raise ValidationError("All fields are required")

        password_hash = hash_password(password, rounds=self.settings.BCRYPT_ROUNDS)

        with store_errors(self.db, "Error registering user"):
            user = self.users.create(name=name, email=email, password_hash=password_hash)
            token = self.tokens.issue_verification_token(user.id)
            self.users.set_verification_code(user, hashlib.sha256(token.encode()).hexdigest())

        logger.info(f"Registered user {user.id}", extra={"user_id": user.id, "action": "register"})

        self._send_verification_email(user, token)
        return user

    def verification_link(self, token: str) -> str:
        return f"{self.settings.APP_BASE_URL.rstrip('/')}/api/auth/verify-email?token={token}"

    def _send_verification_email(self, user: User, token: str) -> None:
        text = f"Click this link to verify your email: {self.verification_link(token)}"
        try:
            self.mailer.send_mail(user.email, VERIFICATION_SUBJECT, text)
        except UpstreamError as exc:
            record_verification_email("failed")
            logger.error(
                "Verification email not delivered",
                extra={"user_id": user.id, "action": "send_verification", "error": str(exc)},
            )
            return
        record_verification_email("sent")

    # -----------------------------------------------------------------------
    # login / logout
    # -----------------------------------------------------------------------

    def login(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        """Authenticate a verified user and open a session.

        Unknown email and wrong password both raise InvalidCredentialsError;
        an unverified account raises UnverifiedEmailError before the password
        is checked, even when no password was sent.
        """
        if not email:
            record_auth_failure("invalid_credentials")
            raise InvalidCredentialsError()

        with store_errors(self.db, "Error logging in"):
            user = self.users.get_by_email(email)

        if user is None:
            burn_password_check(password or "")
            record_auth_failure("invalid_credentials")
            raise InvalidCredentialsError()

        if not user.is_verified:
            record_auth_failure("unverified")
            raise UnverifiedEmailError()

        if not password or not verify_password(password, user.password_hash):
            record_auth_failure("invalid_credentials")
            raise InvalidCredentialsError()

        token = self.tokens.issue_login_token(user.id, user.name)
        with store_errors(self.db, "Error logging in"):
            session_id = self.sessions.create(user_id=user.id)

        logger.info(f"User {user.id} logged in", extra={"user_id": user.id, "action": "login"})
        return LoginResult(token=token, user=user, session_id=session_id)

    def logout(self, session_id: Optional[str]) -> None:
        """Destroy the session record, whether or not one exists"""
        with store_errors(self.db, "Error logging out"):
            destroyed = self.sessions.destroy(session_id)
        logger.info("Session destroyed" if destroyed else "Logout without session", extra={"action": "logout"})

    # -----------------------------------------------------------------------
    # verify email
    # -----------------------------------------------------------------------

    def verify_email(self, token: Optional[str]) -> User:
        if not token:
            raise ValidationError("Verification token is required")

        try:
            claims = self.tokens.verify(token, TokenPurpose.EMAIL_VERIFICATION)
        except TokenError as exc:
            record_token_rejection(TokenPurpose.EMAIL_VERIFICATION.value, exc.kind)
            logger.warning(
                "Email verification token rejected",
                extra={"kind": exc.kind, "action": "verify_email"},
            )
            raise InvalidVerificationTokenError(exc.kind) from exc

        user_id = self.tokens.user_id(claims)
        with store_errors(self.db, "Error verifying email"):
            user = self.users.get_by_id(user_id)
            if user is None:
                raise UserNotFoundError()
            self.users.mark_verified(user)

        logger.info(f"User {user.id} verified", extra={"user_id": user.id, "action": "verify_email"})
        return user
