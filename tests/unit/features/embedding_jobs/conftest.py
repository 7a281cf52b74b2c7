"""Fixtures for the embedding jobs pipeline tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers.embedding_jobs import FakeBatchProvider, FakeClock, FakeContentStore, FakeQueue


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def content_store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def queue() -> FakeQueue:
    return FakeQueue()


@pytest.fixture
def provider(tmp_path: Path) -> FakeBatchProvider:
    return FakeBatchProvider(staging_dir=tmp_path)
