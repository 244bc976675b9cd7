"""Database models

Every entity is registered here by name; table creation walks this registry.
"""
from blogapi.models.blog import Blog
from blogapi.models.session_record import SessionRecord
from blogapi.models.user import User

MODEL_REGISTRY = {
    "User": User,
    "Blog": Blog,
    "SessionRecord": SessionRecord,
}

__all__ = ["Blog", "MODEL_REGISTRY", "SessionRecord", "User"]
