"""
Database engine and session management for the shared store
"""
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leave_engine.core.config import settings


def is_memory_url(url: str) -> bool:
    """True for SQLite in-memory URLs (each engine gets a private database)."""
    return url in ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str) -> Engine:
    """
    Create an engine with the options this project uses everywhere.

    SQLite connections are shared across threads (FastAPI runs sync routes
    in a threadpool) and in-memory databases are pinned to a single
    connection so the data outlives the first checkout.
    """
    kwargs = {"pool_pre_ping": True, "echo": False}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if is_memory_url(url):
            kwargs["poolclass"] = StaticPool
        else:
            database = make_url(url).database
            if database:
                Path(database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, **kwargs)


def init_shared_db(engine: Engine) -> None:
    """Create the registry tables on the shared store (tenant tables never go here)."""
    from leave_engine.db.base import SharedBase
    import leave_engine.models  # noqa: F401  (register models)

    SharedBase.metadata.create_all(bind=engine)


shared_engine = build_engine(settings.SHARED_DATABASE_URL)

SharedSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=shared_engine)
