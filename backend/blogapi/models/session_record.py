"""SessionRecord model - server-side state behind the session cookie"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from blogapi.database import Base


class SessionRecord(Base):
    """Server-side session keyed by the SHA-256 of the cookie value.

    Only logout reads this table; bearer-token routes never consult it.
    """

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_hash = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)
