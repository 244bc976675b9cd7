"""Pydantic schemas for request/response validation"""
from blogapi.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UserSummary,
)
from blogapi.schemas.blog import BlogCreate, BlogResponse, BlogUpdate

__all__ = [
    "BlogCreate",
    "BlogResponse",
    "BlogUpdate",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RegisterRequest",
    "UserSummary",
]
