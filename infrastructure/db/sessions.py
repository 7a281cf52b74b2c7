"""Session management for the embeddings database."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from config.database.defaults import ECHO, MAX_OVERFLOW, POOL_RECYCLE, POOL_SIZE
from config.database.urls import EMBEDDINGS_DB_URL as CONFIG_EMBEDDINGS_DB_URL
from core.exceptions import ConfigurationError, DatabaseError
from infrastructure.db.engines import create_postgres_engine, get_session_factory

logger = logging.getLogger(__name__)

# Lazy-loaded engine and session factory - initialized on first use
embeddings_engine: Optional[AsyncEngine] = None
embeddings_session_factory: Optional[async_sessionmaker] = None


@asynccontextmanager
async def session_scope(factory: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    session = factory()
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise DatabaseError(f"Database operation failed: {exc}", operation="transaction") from exc
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


def require_embeddings_session_factory() -> async_sessionmaker:
    """Return the embeddings session factory or raise a configuration error."""
    global embeddings_engine, embeddings_session_factory

    if embeddings_session_factory is None:
        url = CONFIG_EMBEDDINGS_DB_URL
        if not url:
            raise ConfigurationError(
                "EMBEDDINGS_DB_URL is not configured; set it before requesting sessions",
                key="EMBEDDINGS_DB_URL",
            )

        embeddings_engine = create_postgres_engine(
            url,
            echo=ECHO,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_recycle=POOL_RECYCLE,
        )
        embeddings_session_factory = get_session_factory(embeddings_engine)

    return embeddings_session_factory


async def dispose_engine() -> None:
    """Dispose the engine if it was initialised.

    Useful for scripts/tests to avoid event-loop shutdown warnings.
    """
    global embeddings_engine, embeddings_session_factory

    if embeddings_engine is None:
        return
    try:
        await embeddings_engine.dispose()
    except Exception:  # pragma: no cover - best-effort cleanup
        logger.warning("Failed to dispose embeddings engine", exc_info=True)
    finally:
        embeddings_engine = None
        embeddings_session_factory = None


__all__ = [
    "session_scope",
    "require_embeddings_session_factory",
    "dispose_engine",
]
