"""Database infrastructure helpers.

Usage Example:
    from infrastructure.db import require_embeddings_session_factory, session_scope

    factory = require_embeddings_session_factory()
    async with session_scope(factory) as session:
        await session.execute(...)
        # Session auto-commits when the block exits without error

Repositories never commit themselves; each ``session_scope`` is one
transaction.
"""

from __future__ import annotations

from .engines import (
    AsyncSessionFactory,
    create_postgres_engine,
    get_session_factory,
)
from .sessions import dispose_engine, require_embeddings_session_factory, session_scope

__all__ = [
    "AsyncSessionFactory",
    "create_postgres_engine",
    "get_session_factory",
    "dispose_engine",
    "require_embeddings_session_factory",
    "session_scope",
]
