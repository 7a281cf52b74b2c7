"""Environment helpers shared by configuration modules."""

from __future__ import annotations

import os

from core.exceptions import ConfigurationError

__all__ = [
    "get_env",
    "get_bool_env",
    "get_float_env",
    "get_int_env",
    "get_list_env",
    "get_node_env",
    "is_production",
]

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def get_env(key: str, default: str | None = None, *, required: bool = False) -> str | None:
    """Return an environment variable and optionally enforce its presence."""

    value = os.getenv(key, default)
    if required and value is None:
        raise ConfigurationError(f"Required environment variable {key} not set", key=key)
    return value


def get_bool_env(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean value for {key}: {raw}", key=key)


def get_float_env(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid float value for {key}: {raw}", key=key) from exc


def get_int_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer value for {key}: {raw}", key=key) from exc


def get_list_env(key: str) -> tuple[str, ...]:
    """Split a comma separated variable, dropping blanks."""

    raw = os.getenv(key) or ""
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def get_node_env() -> str:
    """Return the current runtime environment label."""

    return (get_env("NODE_ENV", default="local") or "local").strip()


def is_production() -> bool:
    """True when running in production."""

    return get_node_env() == "production"
