"""
Database engine and per-request sessions.
"""
from typing import Any, Dict
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from app.core.config import settings
from app.db.base import Base


def engine_options(url: str) -> Dict[str, Any]:
    """Connection options for the configured database backend."""
    options = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # One SQLite connection may serve several request threads
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_recycle"] = 3600
    return options


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Yield a session for one request and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create every ledger table that does not exist yet."""
    import app.models  # noqa: F401  registers every table on Base.metadata
    Base.metadata.create_all(bind=engine)
