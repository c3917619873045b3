import logging
from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings

logger = logging.getLogger("string_analyzer.db")


def _engine_kwargs(url: str) -> Dict[str, Any]:
    parsed = make_url(url)
    kwargs: Dict[str, Any] = {"future": True}
    if parsed.get_backend_name() == "sqlite":
        # Requests are served from FastAPI's thread pool
        kwargs["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            # Keep a single in-memory DB across threads/requests
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
    return kwargs


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_database_dsn(hide_password: bool = True) -> str:
    """Return the configured DB DSN string with the password masked."""
    return engine.url.render_as_string(hide_password=hide_password)


def init_db() -> None:
    """Create tables that do not exist yet."""
    from app import models  # noqa: F401  registers the mappings on Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized at %s", get_database_dsn())


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
