"""
Engine and per-request sessions for the reserve database.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from reserve.core.config import settings
from reserve.db.base import Base


def engine_options(database_url: str) -> dict:
    """
    Engine keyword arguments for a database URL.
    MySQL connections are recycled before the server drops them; SQLite
    connections are shared with the TestClient worker thread.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 3600}


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    **engine_options(settings.DATABASE_URL)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Request-scoped session; anything left uncommitted by a failed request is rolled back."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind=None):
    """Create every table registered on ``Base``."""
    Base.metadata.create_all(bind=bind or engine)
