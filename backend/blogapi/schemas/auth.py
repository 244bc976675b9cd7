"""Auth schemas"""
from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Registration payload.

    Fields are optional at the schema level so that a missing field is reported
    as "All fields are required" rather than a per-field validation error.
    """

    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserSummary


class MessageResponse(BaseModel):
    message: str
