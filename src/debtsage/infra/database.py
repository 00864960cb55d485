"""Database infrastructure: engine, schema and session factories."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Tuple

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig


def create_db_engine(config: BaseConfig) -> Engine:
    """Create SQLModel engine from configuration."""
    return create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())


def init_database(engine: Engine) -> None:
    """Initialize database schema."""
    # Import all models to ensure they're registered
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Provide a transactional scope around operations."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_session_factory(engine: Engine) -> Callable[[], ContextManager[Session]]:
    """Create a session factory for repositories."""

    def factory() -> ContextManager[Session]:
        return session_scope(engine)

    return factory


def bootstrap_database(
    config: BaseConfig | None = None,
) -> Tuple[Engine, Callable[[], ContextManager[Session]]]:
    """Create the engine, ensure the schema exists and return (engine, session_factory)."""

    cfg = config or BaseConfig()
    engine = create_db_engine(cfg)
    init_database(engine)
    return engine, create_session_factory(engine)
