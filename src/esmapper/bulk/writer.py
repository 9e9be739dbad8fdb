"""Bulk writer — insert-many / upsert-many with per-position outcomes.

A submission goes through four steps:

  1. Open: a ``BulkIndexer`` is created. If that fails, the error is raised
     and nothing is submitted.
  2. Submit: records are walked in input order. A record is skipped (and
     counted as failed) when it is not a record instance, its type has no
     ``_id`` field, or its identifier is empty. Others are encoded and
     queued with callbacks tagged with their input position.
  3. Drain: the indexer is closed, which blocks until every queued item has
     been answered. A flush-level fault is raised; no partial result.
  4. Reconcile: the ``(position, ok)`` messages posted by the callbacks are
     collected into a ``BulkResult``.

Callbacks only post to a ``queue.Queue``; the lists are built by the
collector alone. Outcomes are tagged by position, so two records sharing
the same ``_id`` in one submission are still reported separately.
"""

from __future__ import annotations

import logging
import queue
from collections.abc import Sequence
from functools import partial
from typing import Any

from elasticsearch import Elasticsearch

from esmapper.bulk.indexer import BulkIndexer
from esmapper.config.settings import BulkSettings
from esmapper.exceptions import BulkIndexerClosedError, InvalidInputError
from esmapper.mapping.codec import encode_without_id
from esmapper.mapping.fields import find_identifier, identifier_value, is_record
from esmapper.models.bulk import BulkAction, BulkItem, BulkResponseItem, BulkResult

logger = logging.getLogger(__name__)

Outcome = tuple[int, bool]


def insert_many(
    client: Elasticsearch,
    index: str,
    records: Sequence[Any],
    settings: BulkSettings | None = None,
) -> BulkResult:
    """Create one document per record; existing IDs are reported as failed.

    Args:
        client: Elasticsearch client.
        index: Target index.
        records: A non-empty list or tuple of records (types may differ).
        settings: Bulk indexer settings. Uses defaults if None.

    Returns:
        Input positions split into succeeded and failed.

    Raises:
        InvalidInputError: If ``records`` is not a non-empty list or tuple.
        ConfigurationError: If the bulk indexer cannot be opened.
        TransportError: If the bulk requests could not be flushed.
    """
    return _write_many(client, index, records, BulkAction.CREATE, settings)


def upsert_many(
    client: Elasticsearch,
    index: str,
    records: Sequence[Any],
    settings: BulkSettings | None = None,
) -> BulkResult:
    """Index one document per record, replacing existing documents.

    Same contract as ``insert_many``.
    """
    return _write_many(client, index, records, BulkAction.INDEX, settings)


def _write_many(
    client: Elasticsearch,
    index: str,
    records: Sequence[Any],
    action: BulkAction,
    settings: BulkSettings | None,
) -> BulkResult:
    if not isinstance(records, (list, tuple)) or not records:
        raise InvalidInputError("Bulk write requires a non-empty list or tuple of records.")
    if settings is None:
        settings = BulkSettings()

    indexer = BulkIndexer(
        client,
        index,
        thread_count=settings.thread_count,
        chunk_size=settings.chunk_size,
        queue_size=settings.queue_size,
        refresh=settings.refresh,
    )

    outcomes: queue.Queue[Outcome] = queue.Queue()
    try:
        skipped = _submit(indexer, records, action, outcomes)
    finally:
        indexer.close()

    result = _reconcile(len(records), outcomes, skipped)
    logger.info(
        "Bulk %s into %s: %d succeeded, %d failed",
        action.value, index, len(result.succeeded), len(result.failed),
    )
    return result


def _report(outcomes: queue.Queue[Outcome], position: int, ok: bool, item: BulkItem, response: BulkResponseItem) -> None:
    if not ok:
        logger.debug("Bulk item %d (%s) rejected: status=%d error=%s", position, item.document_id, response.status, response.error)
    outcomes.put((position, ok))


def _submit(indexer: BulkIndexer, records: Sequence[Any], action: BulkAction, outcomes: queue.Queue[Outcome]) -> list[int]:
    """Queue every valid record; return the positions skipped up front."""
    skipped: list[int] = []
    for position, record in enumerate(records):
        if not is_record(record):
            skipped.append(position)
            continue
        binding = find_identifier(type(record))
        doc_id = identifier_value(record, binding)
        if not doc_id:
            skipped.append(position)
            continue

        item = BulkItem(
            action=action,
            document_id=doc_id,
            body=encode_without_id(record),
            on_success=partial(_report, outcomes, position, True),
            on_failure=partial(_report, outcomes, position, False),
        )
        try:
            indexer.add(item)
        except BulkIndexerClosedError:
            skipped.append(position)
    return skipped


def _reconcile(total: int, outcomes: queue.Queue[Outcome], skipped: list[int]) -> BulkResult:
    succeeded: list[int] = []
    rejected: list[int] = []
    while True:
        try:
            position, ok = outcomes.get_nowait()
        except queue.Empty:
            break
        (succeeded if ok else rejected).append(position)

    reported = set(succeeded) | set(rejected) | set(skipped)
    unanswered = [p for p in range(total) if p not in reported]
    if unanswered:
        logger.warning("Bulk items without an outcome counted as failed: %s", unanswered)

    return BulkResult(succeeded=sorted(succeeded), failed=sorted(rejected) + skipped + unanswered)
