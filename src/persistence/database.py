"""Database connection and session management."""
import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings
from src.persistence.models import Base

logger = logging.getLogger(__name__)


def _build_engine():
    """Engine for the volunteer, NGO and opportunity store named by `settings.database_url`.

    The default is a local SQLite file. Pooled SQLite connections can be
    handed to any thread that opens a session, so same-thread checking is
    turned off there.
    """
    url = settings.database_url

    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    # Shared deployments point DATABASE_URL at a server database
    return create_engine(
        url,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


engine = _build_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the volunteer, NGO, opportunity and application tables if missing."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized at %s", engine.url.render_as_string(hide_password=True))


def drop_db() -> None:
    """Drop every table, including application history."""
    Base.metadata.drop_all(bind=engine)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Session for one unit of work. Commits on exit, rolls back and re-raises on error."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_session_direct() -> Session:
    """Bare session for callers that manage commit and close themselves."""
    return SessionLocal()
