"""Utility helpers shared across core packages.

Kept limited to environment and URL helpers so that configuration modules can
import them without pulling in feature code.
"""

from .config_helpers import build_postgresql_url
from .env import (
    get_bool_env,
    get_env,
    get_float_env,
    get_int_env,
    get_list_env,
    get_node_env,
    is_production,
)

__all__ = [
    "build_postgresql_url",
    "get_bool_env",
    "get_env",
    "get_float_env",
    "get_int_env",
    "get_list_env",
    "get_node_env",
    "is_production",
]
