"""Bulk indexer — A disconnected batch channel over ``helpers.parallel_bulk``.

Items are queued with ``add()`` while a background thread streams them into
``parallel_bulk``, which owns the worker pool and sends chunks concurrently.
``parallel_bulk`` yields one outcome per action in submission order, so
each outcome is paired with the oldest pending item and exactly one of the
item's callbacks is invoked.

Lifecycle::

    indexer = BulkIndexer(client, "docs")        # open (validates config)
    indexer.add(BulkItem(...))                   # submit, any number of times
    indexer.close()                              # drain: blocks until every item got its callback
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from collections.abc import Iterator
from typing import Any

from elasticsearch import Elasticsearch
from elasticsearch.helpers import parallel_bulk

from esmapper.client.errors import translate_client_error
from esmapper.config.settings import RefreshPolicy
from esmapper.exceptions import BulkIndexerClosedError, ConfigurationError
from esmapper.models.bulk import BulkIndexerStats, BulkItem, BulkResponseItem

logger = logging.getLogger(__name__)

_END = object()

_REFRESH_POLICIES = ("true", "false", "wait_for")


class BulkIndexer:
    """Asynchronous bulk writer for a single index.

    Args:
        client: Elasticsearch client used for the bulk requests.
        index: Target index for every item.
        thread_count: Bulk requests in flight at once.
        chunk_size: Items per bulk request.
        queue_size: Items buffered before ``add()`` blocks.
        refresh: Refresh policy sent with each bulk request.

    Raises:
        ConfigurationError: If any argument is out of range. Nothing is
            started in that case.
    """

    def __init__(
        self,
        client: Elasticsearch,
        index: str,
        *,
        thread_count: int = 4,
        chunk_size: int = 500,
        queue_size: int = 1000,
        refresh: RefreshPolicy = "false",
    ) -> None:
        if not index:
            raise ConfigurationError("Bulk indexer requires an index name.")
        if thread_count < 1 or chunk_size < 1 or queue_size < 1:
            raise ConfigurationError(
                f"Bulk indexer sizes must be positive "
                f"(thread_count={thread_count}, chunk_size={chunk_size}, queue_size={queue_size})."
            )
        if refresh not in _REFRESH_POLICIES:
            raise ConfigurationError(f"Unknown refresh policy: {refresh!r}")

        self._client = client
        self._index = index
        self._thread_count = thread_count
        self._chunk_size = chunk_size
        self._refresh = refresh

        self._queue: queue.Queue[Any] = queue.Queue(maxsize=queue_size)
        self._pending: deque[BulkItem] = deque()
        self._submit_lock = threading.Lock()
        self._lock = threading.Lock()
        self._closed = False
        self._drained = False
        self._error: Exception | None = None
        self._stats = BulkIndexerStats()

        self._worker = threading.Thread(target=self._run, name=f"bulk-indexer-{index}", daemon=True)
        self._worker.start()

    def __enter__(self) -> BulkIndexer:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def stats(self) -> BulkIndexerStats:
        with self._lock:
            return self._stats.model_copy()

    def add(self, item: BulkItem) -> None:
        """Queue an item; blocks while the buffer is full.

        Raises:
            BulkIndexerClosedError: If the indexer is closed or its worker has failed.
        """
        with self._submit_lock:
            if self._closed:
                raise BulkIndexerClosedError("Bulk indexer is closed.")
            if self._error is not None:
                raise BulkIndexerClosedError(f"Bulk indexer stopped after an error: {self._error}")
            # Pending order must match queue order.
            self._pending.append(item)
            self._queue.put(item)
        with self._lock:
            self._stats.added += 1

    def close(self) -> None:
        """Stop accepting items and wait until every queued item is answered.

        Calling ``close()`` again is a no-op.

        Raises:
            TransportError: If the bulk requests could not be sent.
            ResponseError: If the cluster rejected a bulk request as a whole.
        """
        with self._submit_lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_END)
        self._worker.join()

        stats = self.stats
        logger.debug(
            "Bulk indexer for %s closed: added=%d flushed=%d failed=%d",
            self._index, stats.added, stats.flushed, stats.failed,
        )
        if self._error is not None:
            raise translate_client_error(self._error) from self._error

    # ── Worker ───────────────────────────────────────────────────────────

    def _actions(self) -> Iterator[dict[str, Any]]:
        while True:
            item = self._queue.get()
            if item is _END:
                self._drained = True
                return
            yield {
                "_op_type": item.action.value,
                "_index": self._index,
                "_id": item.document_id,
                "_source": item.body,
            }

    def _run(self) -> None:
        try:
            for ok, info in parallel_bulk(
                self._client,
                self._actions(),
                thread_count=self._thread_count,
                chunk_size=self._chunk_size,
                raise_on_error=False,
                raise_on_exception=False,
                refresh=self._refresh,
            ):
                self._dispatch(self._pending.popleft(), ok, BulkResponseItem.from_info(info))
        except Exception as e:
            logger.warning("Bulk indexer for %s failed: %s", self._index, e)
            self._error = e
            # parallel_bulk usually consumes the end marker before re-raising;
            # if it did not, keep draining so blocked producers can finish.
            while not self._drained:
                if self._queue.get() is _END:
                    self._drained = True

    def _dispatch(self, item: BulkItem, ok: bool, response: BulkResponseItem) -> None:
        with self._lock:
            if ok:
                self._stats.flushed += 1
            else:
                self._stats.failed += 1
        callback = item.on_success if ok else item.on_failure
        if callback is not None:
            callback(item, response)
