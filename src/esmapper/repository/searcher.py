"""Searcher — Paged search over one index, and Searcher/Loader factories.

A ``Searcher`` either delegates to a caller-supplied search function or
wires a caller-supplied query builder and sort extractor to the index.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from elasticsearch import Elasticsearch

from esmapper.operations import documents
from esmapper.repository.loader import Loader

SearchFunc = Callable[[Any, int, int], tuple[list[Any], int]]
"""``search(filter, limit, offset) -> (records, total)``."""

QueryBuilder = Callable[[Any], dict[str, Any]]
SortExtractor = Callable[[Any], str]


def build_sort(sort: str) -> list[dict[str, Any]]:
    """Convert ``"-createdAt,title"`` into an Elasticsearch ``sort`` clause.

    A leading ``-`` sorts descending, ``+`` or no prefix ascending. Empty
    segments are ignored.
    """
    clauses: list[dict[str, Any]] = []
    for part in sort.split(","):
        field = part.strip()
        if not field:
            continue
        order = "asc"
        if field[0] in "+-":
            order = "desc" if field[0] == "-" else "asc"
            field = field[1:].strip()
        if field:
            clauses.append({field: {"order": order}})
    return clauses


class Searcher:
    """Runs paged searches through ``search_func``.

    Args:
        search_func: ``(filter, limit, offset) -> (records, total)``.
    """

    def __init__(self, search_func: SearchFunc) -> None:
        self._search = search_func

    @classmethod
    def with_query(
        cls,
        client: Elasticsearch,
        index_name: str,
        model_type: type,
        build_query: QueryBuilder,
        get_sort: SortExtractor | None = None,
    ) -> Searcher:
        """Build a searcher that queries ``index_name`` directly.

        ``build_query(filter)`` supplies the query document; ``size``,
        ``from`` and (when ``get_sort`` returns something) ``sort`` are
        added to it for each call.
        """

        def search(filter: Any, limit: int, offset: int) -> tuple[list[Any], int]:
            body = dict(build_query(filter))
            body["size"] = limit
            body["from"] = offset
            if get_sort is not None:
                sort = build_sort(get_sort(filter) or "")
                if sort:
                    body["sort"] = sort
            return documents.find_with_total(client, index_name, body, model_type)

        return cls(search)

    def search(self, filter: Any, limit: int = 20, offset: int = 0) -> tuple[list[Any], int]:
        """Return one page of results and the total number of matches."""
        return self._search(filter, limit, offset)


def new_default_search_loader(
    client: Elasticsearch,
    index_name: str,
    model_type: type,
    search: SearchFunc,
) -> tuple[Searcher, Loader]:
    """Pair a caller-supplied search function with a ``Loader`` for the same index."""
    return Searcher(search), Loader(client, index_name, model_type)


def new_search_loader(
    client: Elasticsearch,
    index_name: str,
    model_type: type,
    build_query: QueryBuilder,
    get_sort: SortExtractor | None = None,
) -> tuple[Searcher, Loader]:
    """Pair a query-builder ``Searcher`` with a ``Loader`` for the same index."""
    searcher = Searcher.with_query(client, index_name, model_type, build_query, get_sort)
    return searcher, Loader(client, index_name, model_type)
