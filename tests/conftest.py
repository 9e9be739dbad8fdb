"""Shared test fixtures and configuration."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from esmapper.config.settings import BulkSettings


@pytest.fixture
def es() -> MagicMock:
    """A mocked synchronous Elasticsearch client."""
    return MagicMock()


@pytest.fixture
def bulk_settings() -> BulkSettings:
    """Small bulk settings so a handful of records spans several chunks."""
    return BulkSettings(thread_count=2, chunk_size=2, queue_size=4)
