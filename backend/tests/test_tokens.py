"""Tests for the token service"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from blogapi.config import parse_duration
from blogapi.errors import (
    ConfigurationError,
    TokenExpiredError,
    TokenMalformedError,
    TokenSignatureError,
)
from blogapi.utils.jwt_utils import EMAIL_VERIFICATION_EXPIRE_SECONDS, TokenPurpose, TokenService


@pytest.fixture
def service() -> TokenService:
    return TokenService("unit-test-secret", login_expire_seconds=900)


def test_missing_secret_is_a_configuration_error():
    """The service cannot be built without a signing secret"""
    with pytest.raises(ConfigurationError):
        TokenService(None)
    with pytest.raises(ConfigurationError):
        TokenService("")


def test_login_token_claims(service: TokenService):
    """Login tokens carry user id, name and the configured expiry"""
    token = service.issue_login_token(42, "Ada")
    claims = service.verify(token, TokenPurpose.LOGIN)

    assert claims["sub"] == "42"
    assert claims["name"] == "Ada"
    assert claims["type"] == "login"
    assert claims["exp"] - claims["iat"] == 900
    assert service.user_id(claims) == 42


def test_verification_token_claims(service: TokenService):
    """Verification tokens carry only the user id and expire after one hour"""
    token = service.issue_verification_token(7)
    claims = service.verify(token, TokenPurpose.EMAIL_VERIFICATION)

    assert claims["sub"] == "7"
    assert "name" not in claims
    assert claims["type"] == "email_verification"
    assert claims["exp"] - claims["iat"] == EMAIL_VERIFICATION_EXPIRE_SECONDS == 3600


def test_purposes_are_not_interchangeable(service: TokenService):
    """A token is rejected when presented for the other purpose"""
    login_token = service.issue_login_token(1, "Ada")
    verification_token = service.issue_verification_token(1)

    with pytest.raises(TokenMalformedError):
        service.verify(login_token, TokenPurpose.EMAIL_VERIFICATION)
    with pytest.raises(TokenMalformedError):
        service.verify(verification_token, TokenPurpose.LOGIN)


def test_token_valid_one_second_before_expiry(service: TokenService):
    """exp one second in the future still verifies"""
    issued_at = datetime.now(timezone.utc) - timedelta(seconds=900 - 1)
    token = service.issue({"sub": "1"}, TokenPurpose.LOGIN, issued_at=issued_at)

    assert service.verify(token, TokenPurpose.LOGIN)["sub"] == "1"


def test_token_rejected_one_second_after_expiry(service: TokenService):
    """exp one second in the past is rejected, with no leeway"""
    issued_at = datetime.now(timezone.utc) - timedelta(seconds=900 + 1)
    token = service.issue({"sub": "1"}, TokenPurpose.LOGIN, issued_at=issued_at)

    with pytest.raises(TokenExpiredError) as exc_info:
        service.verify(token, TokenPurpose.LOGIN)
    assert exc_info.value.kind == "expired"


def test_verification_token_expires_after_one_hour(service: TokenService):
    issued_at = datetime.now(timezone.utc) - timedelta(hours=1, seconds=1)
    token = service.issue({"sub": "1"}, TokenPurpose.EMAIL_VERIFICATION, issued_at=issued_at)

    with pytest.raises(TokenExpiredError):
        service.verify(token, TokenPurpose.EMAIL_VERIFICATION)


@pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b", "abc.def.ghi"])
def test_malformed_token(service: TokenService, garbage: str):
    """Strings that are not JWTs are reported as malformed"""
    with pytest.raises(TokenMalformedError) as exc_info:
        service.verify(garbage)
    assert exc_info.value.kind == "malformed"


def test_foreign_signature(service: TokenService):
    """A token signed with another secret is a signature failure"""
    other = TokenService("someone-elses-secret")
    token = other.issue_login_token(1, "Mallory")

    with pytest.raises(TokenSignatureError) as exc_info:
        service.verify(token, TokenPurpose.LOGIN)
    assert exc_info.value.kind == "signature_invalid"


def test_expired_and_forged_is_a_signature_failure(service: TokenService):
    """Signature is checked before expiry"""
    other = TokenService("someone-elses-secret")
    issued_at = datetime.now(timezone.utc) - timedelta(days=1)
    token = other.issue({"sub": "1"}, TokenPurpose.LOGIN, issued_at=issued_at)

    with pytest.raises(TokenSignatureError):
        service.verify(token)


def test_missing_subject_is_malformed(service: TokenService):
    token = jwt.encode(
        {"type": "login", "exp": int(datetime.now(timezone.utc).timestamp()) + 60},
        "unit-test-secret",
        algorithm="HS256",
    )
    with pytest.raises(TokenMalformedError):
        service.verify(token, TokenPurpose.LOGIN)


@pytest.mark.parametrize("value,expected", [
    ("3600", 3600),
    (900, 900),
    ("45s", 45),
    ("30m", 1800),
    ("1h", 3600),
    ("7d", 604800),
])
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("one hour")
