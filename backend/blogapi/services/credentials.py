"""Credential store - user records and server-side session records"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogapi.errors import ConflictError
from blogapi.models.session_record import SessionRecord
from blogapi.models.user import User
from blogapi.utils.auth import generate_session_id, hash_session_id


class UserStore:
    """Persistence for :class:`User` rows.

    Email uniqueness is left to the table's unique constraint.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def create(self, name: str, email: str, password_hash: str) -> User:
        """Insert an unverified user.

        Raises:
            ConflictError: the email is already registered.
        """
        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            is_verified=False,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Email is already registered") from exc
        self.db.refresh(user)
        return user

    def set_verification_code(self, user: User, code: Optional[str]) -> None:
        user.verification_code = code
        self.db.commit()

    def mark_verified(self, user: User) -> None:
        user.is_verified = True
        user.verification_code = None
        self.db.commit()


class SessionStore:
    """Server-side sessions keyed by the SHA-256 of the cookie value"""

    def __init__(self, db: Session, max_age: int):
        self.db = db
        self.max_age = max_age

    def create(self, user_id: Optional[int] = None) -> str:
        """Persist a new session and return the raw cookie value"""
        session_id = generate_session_id()
        now = datetime.utcnow()
        self.db.add(SessionRecord(
            session_hash=hash_session_id(session_id),
            user_id=user_id,
            created_at=now,
            expires_at=now + timedelta(seconds=self.max_age),
        ))
        self.db.commit()
        return session_id

    def destroy(self, session_id: Optional[str]) -> bool:
        """Delete the session if it exists; returns whether a row was removed"""
        if not session_id:
            return False
        deleted = (
            self.db.query(SessionRecord)
            .filter(SessionRecord.session_hash == hash_session_id(session_id))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted > 0

    def purge_expired(self) -> int:
        """Remove sessions past their expiry"""
        deleted = (
            self.db.query(SessionRecord)
            .filter(SessionRecord.expires_at < datetime.utcnow())
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted
