"""SQLAlchemy engine and session helpers.

Nothing here runs at import time: whoever opens a store builds its own engine
from a database URL and owns it until ``dispose()``.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# ``Base`` is the parent class for every SQLAlchemy model in school_equipment/models.
Base = declarative_base()


def sqlite_url(path: str | Path) -> str:
    return f"sqlite:///{Path(path)}"


def _is_sqlite_memory(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def _ensure_sqlite_parent(url: str) -> None:
    parsed = make_url(url)
    database = parsed.database
    if parsed.get_backend_name() != "sqlite" or not database or database == ":memory:":
        return
    Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite file databases get their folder created first."""

    # For SQLite, ``check_same_thread=False`` lets the store's lock, rather than
    # the driver, decide which thread may use the connection.
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    kwargs = {}
    if _is_sqlite_memory(url):
        # A single shared connection, otherwise every checkout sees an empty database.
        kwargs["poolclass"] = StaticPool
    else:
        _ensure_sqlite_parent(url)
    return create_engine(url, connect_args=connect_args, echo=echo, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """Yield a session and guarantee cleanup; uncommitted work is rolled back."""

    db: Session = factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


__all__ = ["Base", "build_engine", "build_session_factory", "session_scope", "sqlite_url"]
