"""Database connection and session management."""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator
from reelshelf.config import settings


def _engine_options() -> dict:
    """Build engine keyword arguments for the configured backend."""
    if settings.is_sqlite:
        # SQLite has no connection pool sizing; allow use across threads
        return {"connect_args": {"check_same_thread": False}}

    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,  # Verify connections before using
    }


# Create database engine
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,  # Log SQL queries in debug mode
    **_engine_options()
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database sessions.

    Usage in FastAPI endpoints:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            ...

    Yields:
        Database session
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        # Failed requests leave nothing half-applied
        db.rollback()
        raise
    finally:
        db.close()


def init_db():
    """Initialize database - create all tables."""
    # Import all models here to ensure they're registered with Base
    from reelshelf.models import user, media, review, media_list, platform, wishlist  # noqa: F401

    Base.metadata.create_all(bind=engine)
