"""esmapper exceptions.

Every operation raises one of these to its immediate caller. Errors coming
from the ``elasticsearch`` client are translated at the client boundary
(see ``esmapper.client.errors``) so callers never need to import the
client's own exception hierarchy.
"""

from __future__ import annotations

from typing import Any


class EsMapperError(Exception):
    """Base exception for esmapper errors."""


class TransportError(EsMapperError):
    """Raised when the cluster cannot be reached (connection, timeout, TLS)."""


class ResponseError(EsMapperError):
    """Raised when Elasticsearch answers with an error status.

    Attributes:
        status: HTTP status reported by the cluster (0 when unknown).
        body: The error body exactly as returned by the cluster.
    """

    def __init__(self, message: str, status: int = 0, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class DecodeError(EsMapperError):
    """Raised when a payload does not match the shape of its target."""


class MissingIdentifierError(EsMapperError):
    """Raised when an operation needs a document ID and none can be resolved."""


class DuplicateKeyError(EsMapperError):
    """Raised when creating a document whose ID already exists in the index."""


class NotFoundError(EsMapperError):
    """Raised when an update or delete targets a document that does not exist."""


class InvalidInputError(EsMapperError):
    """Raised when an argument is not usable (e.g. an empty bulk collection)."""


class ConfigurationError(EsMapperError):
    """Raised when client or bulk indexer configuration is invalid."""


class BulkIndexerClosedError(EsMapperError):
    """Raised when an item is added to a bulk indexer that is already closed."""
