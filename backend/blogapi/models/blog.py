"""Blog post model"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from blogapi.database import Base


class Blog(Base):
    """Blog post - not linked to any user"""

    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    snippet = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
