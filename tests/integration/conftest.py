"""Integration test fixtures — a live Elasticsearch node.

Expects a single-node cluster with security disabled, e.g.:
    docker run -p 9200:9200 -e discovery.type=single-node \
        -e xpack.security.enabled=false elasticsearch:8.15.0

Each test gets a fresh, uniquely named index that is deleted afterwards.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterator

import httpx
import pytest
from elasticsearch import Elasticsearch

from esmapper.client.connection import create_client
from esmapper.config.settings import ConnectionSettings

ES_HOST = "http://localhost:9200"


def _wait_for_service(url: str, timeout: float = 30.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(2)
    return False


@pytest.fixture(scope="session")
def elasticsearch_ready() -> str:
    """Ensure Elasticsearch is running."""
    if not _wait_for_service(ES_HOST):
        pytest.skip(f"Elasticsearch not available at {ES_HOST}")
    return ES_HOST


@pytest.fixture
def live_client(elasticsearch_ready: str) -> Iterator[Elasticsearch]:
    client = create_client(ConnectionSettings(hosts=[elasticsearch_ready], request_timeout=30))
    yield client
    client.close()


@pytest.fixture
def index_name(live_client: Elasticsearch) -> Iterator[str]:
    name = f"esmapper-test-{uuid.uuid4().hex[:8]}"
    live_client.indices.create(index=name)
    yield name
    live_client.indices.delete(index=name, ignore_unavailable=True)
