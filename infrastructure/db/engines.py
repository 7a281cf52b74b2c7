"""Database engine management utilities for the PostgreSQL (asyncpg) store."""

from __future__ import annotations

import logging
import os
import ssl

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from config.database.defaults import COMMAND_TIMEOUT
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

AsyncSessionFactory = async_sessionmaker[AsyncSession]


def _create_ssl_context(cert_path: str | None) -> ssl.SSLContext | None:
    """Create SSL context for PostgreSQL connection if certificate path provided.

    Args:
        cert_path: Path to CA certificate file (e.g., prod-ca-2021.crt)

    Returns:
        SSLContext configured with CA cert, or None if no cert path
    """
    if not cert_path:
        return None

    if not os.path.exists(cert_path):
        logger.warning("SSL certificate not found at %s, skipping SSL", cert_path)
        return None

    ctx = ssl.create_default_context(cafile=cert_path)
    ctx.check_hostname = True
    ctx.verify_mode = ssl.CERT_REQUIRED
    logger.info("SSL enabled with certificate: %s", cert_path)
    return ctx


def create_postgres_engine(
    url: str,
    *,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 5,
    pool_recycle: int = 900,
    url_key: str = "EMBEDDINGS_DB_URL",
) -> AsyncEngine:
    """Create an async SQLAlchemy engine backed by asyncpg."""

    if not url:
        raise ConfigurationError("Database connection URL is required", key=url_key)

    connect_args: dict = {"command_timeout": COMMAND_TIMEOUT}
    ssl_context = _create_ssl_context(os.environ.get("SUPABASE_SSL_CERT_PATH"))
    if ssl_context:
        connect_args["ssl"] = ssl_context

    return create_async_engine(
        url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
        isolation_level="READ COMMITTED",
        connect_args=connect_args,
    )


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Return an ``async_sessionmaker`` bound to ``engine``."""

    return async_sessionmaker(engine, expire_on_commit=False)


__all__ = [
    "AsyncSessionFactory",
    "create_postgres_engine",
    "get_session_factory",
]
