"""User model"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from blogapi.database import Base


class User(Base):
    """A registered account.

    ``password_hash`` holds a bcrypt hash; the plaintext password is never stored.
    A user whose ``is_verified`` flag is false cannot log in.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    verification_code = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
