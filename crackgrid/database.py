"""
Engine, session factory and declarative base for the CrackGrid tables.

Sessions are opened both by request handlers (through get_db) and by the
data-access facade from worker threads, so SQLite connections must be
shareable across threads. An in-memory SQLite URL gets a single shared
connection, otherwise every new connection would see an empty database.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from crackgrid import config


def _is_in_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def make_engine(url: str, echo: bool = False) -> Engine:
    """
    Build an engine for `url`.

    Postgres (the production store) gets a plain pooled engine with
    pre-ping. SQLite is opened with check_same_thread disabled, and an
    in-memory SQLite database is pinned to one connection.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if _is_in_memory_sqlite(url):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, echo=echo, **kwargs)


engine = make_engine(config.DATABASE_URL, echo=config.SQL_ECHO)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


class Base(DeclarativeBase):
    """Declarative base shared by every CrackGrid model."""


def init_db(bind: Engine = None) -> None:
    """Create any missing tables on `bind` (the app engine by default)."""
    import crackgrid.models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Request-scoped session; closing it rolls back anything left uncommitted."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
