"""Embeddings database configuration (pool settings and connection URL)."""

from .defaults import COMMAND_TIMEOUT, ECHO, MAX_OVERFLOW, POOL_RECYCLE, POOL_SIZE
from .urls import EMBEDDINGS_DB_URL, SUPABASE_DB_HOST, SUPABASE_DB_NAME, SUPABASE_DB_PORT, SUPABASE_DB_USER

__all__ = [
    "COMMAND_TIMEOUT",
    "ECHO",
    "MAX_OVERFLOW",
    "POOL_RECYCLE",
    "POOL_SIZE",
    "EMBEDDINGS_DB_URL",
    "SUPABASE_DB_HOST",
    "SUPABASE_DB_NAME",
    "SUPABASE_DB_PORT",
    "SUPABASE_DB_USER",
]
