"""SQLAlchemy engine and session helpers."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def sqlite_url_for_path(path: Path) -> str:
    """Return a SQLAlchemy URL for the SQLite file at ``path``."""

    return f"sqlite:///{Path(path).expanduser().resolve()}"


def _unicode_lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def _install_unicode_lower(engine: Engine) -> Engine:
    """Replace SQLite's ASCII-only ``lower()`` with Python's ``str.lower``."""

    @event.listens_for(engine, "connect")
    def _register_lower(dbapi_connection, _connection_record) -> None:
        dbapi_connection.create_function("lower", 1, _unicode_lower)

    return engine


def create_lexicon_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``url``.

    File-backed SQLite databases get their parent directory created; in-memory
    SQLite shares one connection so every session sees the same tables.
    """

    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        database = parsed.database or ""
        if database and database != ":memory:":
            Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
            return _install_unicode_lower(
                create_engine(
                    url,
                    echo=echo,
                    connect_args={"check_same_thread": False},
                )
            )
        return _install_unicode_lower(
            create_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        )

    return create_engine(
        url,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=echo,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
