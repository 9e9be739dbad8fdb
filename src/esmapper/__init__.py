"""esmapper — Typed document access and bulk writes for Elasticsearch.

Quick start::

    from esmapper import Loader, create_client, insert_many

    client = create_client()
    result = insert_many(client, "users", [User(id="u1", name="Ada")])
    loader = Loader(client, "users", User)
    user = loader.load("u1")
"""

from esmapper.bulk.writer import insert_many, upsert_many
from esmapper.client.connection import create_client
from esmapper.models.bulk import BulkResult
from esmapper.repository.loader import Loader
from esmapper.repository.searcher import Searcher, new_default_search_loader, new_search_loader

__version__ = "0.1.0"

__all__ = [
    "BulkResult",
    "Loader",
    "Searcher",
    "__version__",
    "create_client",
    "insert_many",
    "new_default_search_loader",
    "new_search_loader",
    "upsert_many",
]
