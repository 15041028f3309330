# storefront/app/core/database.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from storefront.app.core.config import settings

logger = logging.getLogger(__name__)

# Module-level singleton
_engine: Optional[Engine] = None


def _ensure_sqlite_dir(url: str) -> None:
    """SQLite will not create missing parent directories for the db file."""
    db = make_url(url).database
    if db and db != ":memory:":
        Path(db).expanduser().parent.mkdir(parents=True, exist_ok=True)


def _is_memory(url: str) -> bool:
    return make_url(url).database in (None, "", ":memory:")


def build_engine(url: str, *, echo: bool = False) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)
    # FastAPI runs sync endpoints in a threadpool; one connection may cross threads
    connect_args = {"check_same_thread": False}
    if _is_memory(url):
        # every pooled connection would otherwise see its own empty database
        return create_engine(url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
    _ensure_sqlite_dir(url)
    return create_engine(url, echo=echo, connect_args=connect_args)


def get_engine() -> Engine:
    """
    Return the singleton engine for settings.database_url.
    """
    global _engine
    if _engine is None:
        _engine = build_engine(settings.database_url, echo=settings.database_echo)
    return _engine


def init_db(engine: Optional[Engine] = None) -> None:
    """Create missing tables. Safe to call repeatedly."""
    # table models must be imported before create_all sees them
    from storefront.app.models import product  # noqa: F401

    engine = engine or get_engine()
    SQLModel.metadata.create_all(engine)
    logger.info("database ready at %s", engine.url.render_as_string(hide_password=True))


def get_session() -> Iterator[Session]:
    """FastAPI dependency: one Session per request."""
    with Session(get_engine()) as session:
        yield session
