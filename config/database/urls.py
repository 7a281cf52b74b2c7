"""Database URL configuration.

The embeddings store is a PostgreSQL database (Supabase or self-hosted) with
the ``pgvector`` and ``pgmq`` extensions installed.

Environment Variables:
    - EMBEDDINGS_DB_URL: Override entire URL (takes precedence)
    - SUPABASE_DB_HOST: Database host
    - SUPABASE_DB_PASS: Database password
    - SUPABASE_DB_USER: Username (default: postgres)
    - SUPABASE_DB_PORT: Port (default: 5432)
    - SUPABASE_DB_NAME: Database name (default: postgres)
"""

from __future__ import annotations

import os

from core.utils.config_helpers import build_postgresql_url

# Supports multiple naming conventions for flexibility
SUPABASE_DB_HOST = os.getenv("SUPABASE_HOST") or os.getenv("SUPABASE_DB_HOST", "")
SUPABASE_DB_PASS = os.getenv("SUPABASE_DB_PASSWORD") or os.getenv("SUPABASE_DB_PASS", "")
SUPABASE_DB_USER = os.getenv("SUPABASE_DB_USER", "postgres")
SUPABASE_DB_PORT = int(os.getenv("SUPABASE_DB_PORT", "5432"))
SUPABASE_DB_NAME = os.getenv("SUPABASE_DB_NAME", "postgres")


def _build_default_url() -> str:
    if not SUPABASE_DB_HOST:
        # Empty - session factory raises a ConfigurationError on first use
        return ""
    return build_postgresql_url(
        SUPABASE_DB_USER,
        SUPABASE_DB_PASS or None,
        SUPABASE_DB_HOST,
        SUPABASE_DB_NAME,
        port=SUPABASE_DB_PORT,
    )


EMBEDDINGS_DB_URL = os.getenv("EMBEDDINGS_DB_URL") or _build_default_url()

__all__ = [
    "SUPABASE_DB_HOST",
    "SUPABASE_DB_USER",
    "SUPABASE_DB_PORT",
    "SUPABASE_DB_NAME",
    "EMBEDDINGS_DB_URL",
]
