"""Test configuration helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Explicitly opt-in to the async plugins we rely on. Some execution environments
# disable plugin auto-discovery via ``PYTEST_DISABLE_PLUGIN_AUTOLOAD`` which
# prevents ``pytest-asyncio`` and AnyIO's plugin from being loaded even if the
# packages are installed.
pytest_plugins = ("anyio", "pytest_asyncio")

# Ensure the repository root is importable so that ``import core`` and other
# absolute imports succeed when tests run from arbitrary working directories.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def anyio_backend() -> str:
    """Default AnyIO backend used when tests do not override the fixture."""

    return "asyncio"
