"""SQLAlchemy engine, session factory and connectivity probe."""

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from .config import DatabaseSettings, get_settings


def _engine_options(settings: DatabaseSettings) -> dict:
    if settings.url.startswith("sqlite"):
        # Bulk review writes from worker threads
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_size": settings.pool_size, "pool_pre_ping": True}


settings = get_settings()
engine = create_engine(settings.url, echo=settings.echo, future=True, **_engine_options(settings))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


@contextmanager
def session_scope() -> Session:
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_database() -> None:
    """Run a trivial query; raises when the database cannot be reached."""
    with SessionLocal() as session:
        session.execute(text("SELECT 1"))
