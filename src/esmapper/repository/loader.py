"""Loader — Read access to one index for one record type."""

from __future__ import annotations

import logging
from typing import Any

from elasticsearch import Elasticsearch

from esmapper.mapping.codec import build_query
from esmapper.mapping.fields import ID_PROPERTY, find_identifier
from esmapper.operations import documents

logger = logging.getLogger(__name__)


class Loader:
    """Loads records of ``model_type`` from ``index_name``.

    A record type without an ``_id`` field is accepted, but ``load`` and
    ``exist`` then have no way to match documents back to records, so a
    warning is logged.

    Args:
        client: Elasticsearch client.
        index_name: Index the loader reads from.
        model_type: Record type documents are decoded into.
    """

    def __init__(self, client: Elasticsearch, index_name: str, model_type: type) -> None:
        self.client = client
        self.index_name = index_name
        self.model_type = model_type
        self.id_binding = find_identifier(model_type)
        if not self.id_binding.present:
            logger.warning(
                "%s repository can't use functions that need an ID value (load, exist, update): "
                "no field of %s is mapped to '%s'.",
                model_type.__name__, model_type.__name__, ID_PROPERTY,
            )

    def keys(self) -> list[str]:
        return [self.index_name]

    def all(self) -> list[Any]:
        """Return the documents matched by an empty query (cluster default page size)."""
        query = build_query(self.index_name)
        return documents.find(self.client, [self.index_name], query, self.model_type)

    def load(self, id: str) -> Any | None:
        return documents.find_one_by_id(self.client, self.index_name, id, self.model_type)

    def load_and_decode(self, id: str, target: Any) -> bool:
        return documents.find_one_by_id_and_decode(self.client, self.index_name, id, target)

    def exist(self, id: str) -> bool:
        return documents.exists(self.client, self.index_name, id)
