"""Configuration package for the embedding batch backend.

Submodules are imported on first attribute access so that ``import config``
never reads the environment for settings a caller does not use.
"""

from __future__ import annotations

import importlib
from typing import Any

_SUBMODULES = frozenset({"api_keys", "database", "embedding_jobs"})

__all__ = sorted(_SUBMODULES)


def __getattr__(name: str) -> Any:
    if name not in _SUBMODULES:
        raise AttributeError(f"module 'config' has no attribute '{name}'")

    module = importlib.import_module(f".{name}", __name__)
    globals()[name] = module
    return module
