"""API key loading for external providers."""

from __future__ import annotations

import os
from typing import Dict


def load_api_keys() -> Dict[str, str]:
    """Load API keys from the environment with sensible defaults."""

    return {
        "openai": os.getenv("OPENAI_API_KEY", ""),
        "openai_organization": os.getenv("OPENAI_ORGANIZATION", ""),
        "openai_base_url": os.getenv("OPENAI_BASE_URL", ""),
    }


API_KEYS = load_api_keys()

OPENAI_API_KEY = API_KEYS["openai"]
OPENAI_ORGANIZATION = API_KEYS["openai_organization"]
OPENAI_BASE_URL = API_KEYS["openai_base_url"]

__all__ = [
    "API_KEYS",
    "OPENAI_API_KEY",
    "OPENAI_ORGANIZATION",
    "OPENAI_BASE_URL",
    "load_api_keys",
]
