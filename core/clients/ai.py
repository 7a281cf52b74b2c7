"""Initialise AI provider clients used across the application."""

from __future__ import annotations

import logging
from typing import Dict

from openai import AsyncOpenAI

from config.api_keys import OPENAI_API_KEY, OPENAI_BASE_URL, OPENAI_ORGANIZATION
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ai_clients: Dict[str, object] = {}


def get_openai_async_client() -> AsyncOpenAI:
    """Return the shared ``AsyncOpenAI`` client, creating it on first use."""

    client = ai_clients.get("openai_async")
    if client is None:
        if not OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY is not configured", key="OPENAI_API_KEY")
        client = AsyncOpenAI(
            api_key=OPENAI_API_KEY,
            organization=OPENAI_ORGANIZATION or None,
            base_url=OPENAI_BASE_URL or None,
        )
        ai_clients["openai_async"] = client
        logger.info("Initialised OpenAI async client")
    return client  # type: ignore[return-value]


async def close_ai_clients() -> None:
    """Close any clients created during the process lifetime."""

    client = ai_clients.pop("openai_async", None)
    if client is not None:
        await client.close()  # type: ignore[attr-defined]


__all__ = ["ai_clients", "get_openai_async_client", "close_ai_clients"]
