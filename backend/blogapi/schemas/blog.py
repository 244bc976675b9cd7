"""Blog schemas"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BlogCreate(BaseModel):
    """Schema for creating a blog post"""

    title: str = Field(..., min_length=1, max_length=255)
    snippet: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)


class BlogUpdate(BaseModel):
    """Schema for updating a blog post; omitted fields keep their value"""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    snippet: Optional[str] = Field(None, min_length=1, max_length=255)
    body: Optional[str] = Field(None, min_length=1)


class BlogResponse(BaseModel):
    id: int
    title: str
    snippet: str
    body: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
