"""Elasticsearch client factory."""

from __future__ import annotations

import logging
import ssl
from typing import Any

from elasticsearch import Elasticsearch

from esmapper.config.settings import ConnectionSettings
from esmapper.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def create_client(settings: ConnectionSettings | None = None) -> Elasticsearch:
    """Create a synchronous Elasticsearch client.

    The client keeps a bounded pool of connections per node, waits at most
    ``request_timeout`` seconds for each response and, for ``https`` hosts,
    refuses TLS versions older than ``min_tls_version``.

    Args:
        settings: Connection settings. Uses defaults if None.

    Returns:
        A configured ``Elasticsearch`` client.

    Raises:
        ConfigurationError: If no host is configured or the TLS version is unknown.
    """
    if settings is None:
        settings = ConnectionSettings()

    if not settings.hosts:
        raise ConfigurationError("At least one Elasticsearch host is required.")

    kwargs: dict[str, Any] = {
        "hosts": settings.hosts,
        "request_timeout": settings.request_timeout,
        "connections_per_node": settings.connections_per_node,
        "max_retries": settings.max_retries,
    }

    if any(host.startswith("https") for host in settings.hosts):
        kwargs["ssl_context"] = _ssl_context(settings)

    if settings.api_key:
        kwargs["api_key"] = settings.api_key
    elif settings.username and settings.password:
        kwargs["basic_auth"] = (settings.username, settings.password)

    logger.debug("Creating Elasticsearch client for hosts: %s", settings.hosts)
    return Elasticsearch(**kwargs)


def _ssl_context(settings: ConnectionSettings) -> ssl.SSLContext:
    try:
        min_version = ssl.TLSVersion[settings.min_tls_version]
    except KeyError as e:
        raise ConfigurationError(f"Unknown TLS version: {settings.min_tls_version!r}") from e

    context = ssl.create_default_context(cafile=settings.ca_certs)
    context.minimum_version = min_version
    if not settings.verify_certs:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context
