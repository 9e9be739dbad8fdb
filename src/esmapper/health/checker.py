"""Elasticsearch health checker."""

from __future__ import annotations

import logging
from typing import Any

from elastic_transport import TransportError as ESTransportError
from elasticsearch import Elasticsearch

from esmapper.exceptions import TransportError

logger = logging.getLogger(__name__)


class HealthChecker:
    """Pings the cluster and reports the result as a plain dict.

    Args:
        client: Elasticsearch client.
        name: Name reported for this check.
        timeout: Seconds to wait for the ping.
    """

    def __init__(self, client: Elasticsearch, name: str = "elasticsearch", timeout: float = 4.0) -> None:
        self.client = client
        self.name = name or "elasticsearch"
        self.timeout = timeout

    def check(self) -> dict[str, Any]:
        """Ping the cluster.

        Returns:
            ``{"status": "success"}`` when the cluster answered.

        Raises:
            TransportError: If the ping failed.
        """
        try:
            ok = self.client.options(request_timeout=self.timeout).ping()
        except ESTransportError as e:
            raise TransportError(f"Elasticsearch ping failed: {e}") from e
        if not ok:
            raise TransportError("Elasticsearch ping failed.")
        return {"status": "success"}

    def build(self, data: dict[str, Any], error: Exception | None) -> dict[str, Any]:
        """Attach ``error`` to a check result, if any."""
        if error is None:
            return data
        logger.warning("Health check %s failed: %s", self.name, error)
        data["error"] = str(error)
        return data
