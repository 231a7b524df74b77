"""Database package — async SQLAlchemy engine, session factory, Base."""
from propertyhub.db.base import (
    Base,
    async_session_factory,
    drop_models,
    engine,
    get_db,
    init_models,
)

__all__ = [
    "Base",
    "async_session_factory",
    "drop_models",
    "engine",
    "get_db",
    "init_models",
]
