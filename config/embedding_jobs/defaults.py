"""Default configuration values for the embedding job pipeline."""

from __future__ import annotations

from core.utils.env import get_bool_env, get_env, get_float_env, get_int_env, get_list_env

# Provider request
EMBEDDING_MODEL = get_env("EMBEDDING_JOBS_MODEL", default="text-embedding-3-small") or "text-embedding-3-small"
"""Model used for every item of a batch."""

_dimensions = get_int_env("EMBEDDING_JOBS_DIMENSIONS", 0)
EMBEDDING_DIMENSIONS: int | None = _dimensions or None
"""Optional output dimensions; omitted from requests when unset."""

BATCH_ENDPOINT = "/v1/embeddings"

COMPLETION_WINDOW = get_env("EMBEDDING_JOBS_COMPLETION_WINDOW", default="24h") or "24h"

BATCH_MAX_REQUESTS = 50000
"""Maximum requests per OpenAI batch job."""

# Polling
POLL_INTERVAL_SECONDS = get_float_env("EMBEDDING_JOBS_POLL_INTERVAL_SECONDS", 2.0)
"""Delay between two batch status checks."""

WAIT_DEADLINE_SECONDS = get_float_env("EMBEDDING_JOBS_WAIT_DEADLINE_SECONDS", 0.0)
"""Upper bound for waiting on a batch; 0 disables the deadline."""

# Queue / store
QUEUE_NAME = get_env("EMBEDDING_JOBS_QUEUE_NAME", default="embedding_jobs") or "embedding_jobs"

ALLOWED_TABLES = get_list_env("EMBEDDING_JOBS_ALLOWED_TABLES")
"""``schema.table`` pairs jobs may touch; empty allows any valid identifier."""

# Execution
MAX_CONCURRENCY = max(1, get_int_env("EMBEDDING_JOBS_MAX_CONCURRENCY", 1))

CLEANUP_REMOTE_FILES = get_bool_env("EMBEDDING_JOBS_CLEANUP_REMOTE_FILES", True)


__all__ = [
    "EMBEDDING_MODEL",
    "EMBEDDING_DIMENSIONS",
    "BATCH_ENDPOINT",
    "COMPLETION_WINDOW",
    "BATCH_MAX_REQUESTS",
    "POLL_INTERVAL_SECONDS",
    "WAIT_DEADLINE_SECONDS",
    "QUEUE_NAME",
    "ALLOWED_TABLES",
    "MAX_CONCURRENCY",
    "CLEANUP_REMOTE_FILES",
]
