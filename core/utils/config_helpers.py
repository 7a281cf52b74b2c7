"""Helper utilities for configuration modules."""

from __future__ import annotations

from urllib.parse import quote_plus


def build_postgresql_url(
    user: str,
    password: str | None,
    host: str,
    database: str,
    *,
    port: int = 5432,
    driver: str = "postgresql+asyncpg",
) -> str:
    """Build an async PostgreSQL connection string.

    Args:
        user: Database username
        password: Database password (can be None for socket/trust auth)
        host: Database host (can include port as host:port)
        database: Database name
        port: Database port, ignored when ``host`` already carries one
        driver: SQLAlchemy driver string

    Returns:
        Async SQLAlchemy connection URL
    """
    credentials = f"{user}:{quote_plus(password)}" if password else user

    if port and ":" not in host:
        host_with_port = f"{host}:{port}"
    else:
        host_with_port = host

    return f"{driver}://{credentials}@{host_with_port}/{database}"


__all__ = ["build_postgresql_url"]
