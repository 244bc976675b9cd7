"""Registration, login, logout and email verification endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from blogapi.api.deps import SessionHandle, get_auth_flow, session_auth
from blogapi.config import settings
from blogapi.middleware.rate_limit import get_rate_limit, limiter
from blogapi.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UserSummary,
)
from blogapi.services.auth_flow import AuthFlow

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("register"))
def register(
    request: Request,
    payload: RegisterRequest,
    auth: AuthFlow = Depends(get_auth_flow),
) -> MessageResponse:
    """
    Register a new user

    The account starts unverified; a verification link valid for one hour is
    emailed to the given address.
    """
    auth.register(payload.name, payload.email, payload.password)
    return MessageResponse(message="User registered successfully. Please verify your email.")


@router.post("/login", response_model=LoginResponse)
@limiter.limit(get_rate_limit("login"))
def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    auth: AuthFlow = Depends(get_auth_flow),
) -> LoginResponse:
    """
    Log in with email and password

    Returns a bearer token for the blog routes and sets the session cookie
    used by logout.
    """
    result = auth.login(payload.email, payload.password)

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=result.session_id,
        max_age=settings.SESSION_MAX_AGE,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    return LoginResponse(
        message="Login successful",
        token=result.token,
        user=UserSummary.model_validate(result.user),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    session: SessionHandle = Depends(session_auth),
    auth: AuthFlow = Depends(get_auth_flow),
) -> MessageResponse:
    """Destroy the current session; succeeds even without one"""
    auth.logout(session.session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Logout successful")


@router.api_route("/verify-email", methods=["GET", "POST"], response_model=MessageResponse)
@limiter.limit(get_rate_limit("verify_email"))
def verify_email(
    request: Request,
    token: Optional[str] = Query(None, description="Verification token from the email link"),
    auth: AuthFlow = Depends(get_auth_flow),
) -> MessageResponse:
    """Mark the token's user as verified"""
    auth.verify_email(token)
    return MessageResponse(message="Email verified successfully. You can now log in.")
