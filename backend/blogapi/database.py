"""Database engine, session factory and declarative base"""
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from blogapi.config import settings
from blogapi.errors import PersistenceError
from blogapi.utils.logger import logger

Base = declarative_base()


def build_engine(url: str) -> Engine:
    """Create an engine, applying pool settings for server databases only."""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        pool_pre_ping=True,
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = engine) -> None:
    """Create tables for every registered model"""
    from blogapi.models import MODEL_REGISTRY

    tables = [model.__table__ for model in MODEL_REGISTRY.values()]
    Base.metadata.create_all(bind=bind, tables=tables)
    logger.info("Database tables ready", extra={"models": sorted(MODEL_REGISTRY)})


@contextmanager
def store_errors(db: Session, message: str) -> Iterator[None]:
    """Roll back and re-raise store failures as :class:`PersistenceError`.

    ``message`` is what the client sees; the driver error is only logged.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(message, extra={"error": str(exc)}, exc_info=True)
        raise PersistenceError(message) from exc
