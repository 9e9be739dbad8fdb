"""Bulk writes — Background indexer and batch insert/upsert."""

from esmapper.bulk.indexer import BulkIndexer
from esmapper.bulk.writer import insert_many, upsert_many

__all__ = ["BulkIndexer", "insert_many", "upsert_many"]
