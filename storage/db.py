# household/storage/db.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from core.settings import DB_PATH

# Ensure SQLModel metadata is populated
import models.queued_action  # noqa: F401


SessionFactory = Callable[[], Session]

_engine: Optional[Engine] = None


def create_db_engine(path: Path | str) -> Engine:
    """Create the engine for the offline store at ``path``.

    Ticks run in a worker thread, so the connection must not be pinned to
    the thread that opened it.
    """

    db_file = Path(path)
    db_file.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        f"sqlite:///{db_file.as_posix()}",
        echo=False,
        connect_args={"check_same_thread": False},
    )


def init_db(engine: Optional[Engine] = None) -> Engine:
    actual = engine or get_engine()
    SQLModel.metadata.create_all(actual)
    return actual


def get_engine() -> Engine:
    """Return (and lazily create) the engine for the default database file."""

    global _engine
    if _engine is None:
        _engine = create_db_engine(DB_PATH)
    return _engine


def session_factory(engine: Engine) -> SessionFactory:
    def _factory() -> Session:
        return Session(engine)

    return _factory


def get_session() -> Session:
    return Session(get_engine())


__all__ = [
    "SessionFactory",
    "create_db_engine",
    "init_db",
    "get_engine",
    "get_session",
    "session_factory",
]
