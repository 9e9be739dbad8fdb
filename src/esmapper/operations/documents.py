"""Single-document operations.

Every function takes a synchronous ``Elasticsearch`` client and blocks until
the request completes or the client's request timeout fires. Query
documents are passed through literally.

Read functions report an absent document as ``None`` / ``False``; write
functions raise ``NotFoundError`` when their target does not exist.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from elastic_transport import TransportError as ESTransportError
from elasticsearch import ApiError, Elasticsearch
from elasticsearch.exceptions import NotFoundError as ESNotFoundError

from esmapper.client.errors import client_errors, response_error, translate_client_error
from esmapper.config.settings import RefreshPolicy
from esmapper.exceptions import MissingIdentifierError
from esmapper.mapping.codec import decode, decode_into, decode_many, encode, encode_without_id, map_to_document, source_of
from esmapper.mapping.fields import ID_PROPERTY, find_identifier, identifier_value, make_property_map
from esmapper.models.responses import GetResponse, Hit, SearchResponse, WriteResponse, parse_response

T = TypeVar("T")

logger = logging.getLogger(__name__)


# ── Reads ────────────────────────────────────────────────────────────────────


def exists(client: Elasticsearch, index: str, doc_id: str) -> bool:
    """Return True if the document exists in ``index``.

    Raises:
        TransportError: On network failure.
        ResponseError: If the cluster answers with an error status.
    """
    with client_errors(doc_id):
        return bool(client.exists(index=index, id=doc_id))


def _get(client: Elasticsearch, index: str, doc_id: str) -> GetResponse | None:
    try:
        response = client.get(index=index, id=doc_id)
    except ESNotFoundError as e:
        # A missing document is a 404 whose body still says found=false;
        # anything else (e.g. a missing index) stays an error.
        if isinstance(e.body, Mapping) and e.body.get("found") is False:
            return None
        raise response_error(e) from e
    except (ApiError, ESTransportError) as e:
        raise translate_client_error(e) from e
    parsed = parse_response(GetResponse, response)
    return parsed if parsed.found else None


def find_one_by_id(client: Elasticsearch, index: str, doc_id: str, model_type: type[T]) -> T | None:
    """Fetch a document by ID and decode it into a new ``model_type`` record.

    Returns:
        The record, or None if the document does not exist.
    """
    found = _get(client, index, doc_id)
    if found is None:
        return None
    return decode(found.as_hit(), model_type)


def find_one_by_id_and_decode(client: Elasticsearch, index: str, doc_id: str, target: Any) -> bool:
    """Fetch a document by ID into an existing record or dict.

    Returns:
        True if the document was found and decoded, False if it does not exist.

    Raises:
        DecodeError: If the document does not fit ``target``.
    """
    found = _get(client, index, doc_id)
    if found is None:
        return False
    decode_into(found.as_hit(), target)
    return True


def _search(client: Elasticsearch, indices: str | Sequence[str], query: Mapping[str, Any]) -> SearchResponse:
    index = indices if isinstance(indices, str) else list(indices)
    with client_errors():
        response = client.search(index=index, body=dict(query), track_total_hits=True)
    return parse_response(SearchResponse, response)


def _first_hit(response: SearchResponse) -> Hit | None:
    if response.hits.total.value >= 1 and response.hits.hits:
        return response.hits.hits[0]
    return None


def find_one(
    client: Elasticsearch,
    indices: str | Sequence[str],
    query: Mapping[str, Any],
    model_type: type[T],
) -> T | None:
    """Run a query and decode its first hit.

    Returns:
        The first matching record, or None if nothing matched.
    """
    hit = _first_hit(_search(client, indices, query))
    if hit is None:
        return None
    return decode(hit.as_hit(), model_type)


def find_one_and_decode(
    client: Elasticsearch,
    indices: str | Sequence[str],
    query: Mapping[str, Any],
    target: Any,
) -> bool:
    """Run a query and decode its first hit into an existing record or dict."""
    hit = _first_hit(_search(client, indices, query))
    if hit is None:
        return False
    decode_into(hit.as_hit(), target)
    return True


def find(
    client: Elasticsearch,
    indices: str | Sequence[str],
    query: Mapping[str, Any],
    model_type: type[T],
) -> list[T]:
    """Run a query and decode every returned hit into ``model_type`` records."""
    response = _search(client, indices, query)
    return decode_many((hit.as_hit() for hit in response.hits.hits), model_type)


def find_with_total(
    client: Elasticsearch,
    indices: str | Sequence[str],
    query: Mapping[str, Any],
    model_type: type[T],
) -> tuple[list[T], int]:
    """Like ``find`` but also return ``hits.total.value``."""
    response = _search(client, indices, query)
    return decode_many((hit.as_hit() for hit in response.hits.hits), model_type), response.hits.total.value


def find_and_decode(
    client: Elasticsearch,
    indices: str | Sequence[str],
    query: Mapping[str, Any],
    target: list[Any],
    model_type: type | None = None,
) -> bool:
    """Run a query and append the returned hits to ``target``.

    Hits are decoded into ``model_type`` records when given, otherwise the
    raw source documents (with ``_id``) are appended.
    """
    response = _search(client, indices, query)
    for hit in response.hits.hits:
        if model_type is None:
            target.append(source_of(hit.as_hit()))
        else:
            target.append(decode(hit.as_hit(), model_type))
    return True


# ── Writes ───────────────────────────────────────────────────────────────────


def insert_one(client: Elasticsearch, index: str, record: Any, refresh: RefreshPolicy = "true") -> int:
    """Create a document from ``record``.

    With an identifier value the document is created under that key and
    must not exist yet. Without an identifier field, the whole record is
    indexed and the cluster assigns the key.

    Returns:
        The document version reported by the cluster.

    Raises:
        DuplicateKeyError: If a document with the same ID already exists.
    """
    binding = find_identifier(type(record))
    doc_id = identifier_value(record, binding)

    if doc_id:
        with client_errors(doc_id, conflict_is_duplicate=True):
            response = client.create(index=index, id=doc_id, document=encode_without_id(record), refresh=refresh)
    else:
        body = encode_without_id(record) if binding.present else encode(record)
        with client_errors():
            response = client.index(index=index, document=body, refresh=refresh)

    parsed = parse_response(WriteResponse, response)
    logger.debug("Created document %s in %s (result=%s, version=%d)", parsed.id, index, parsed.result, parsed.version)
    return parsed.version


def _update(client: Elasticsearch, index: str, doc_id: str, doc: dict[str, Any], refresh: RefreshPolicy, upsert: bool) -> int:
    with client_errors(doc_id, missing_is_error=True):
        response = client.update(index=index, id=doc_id, doc=doc, doc_as_upsert=upsert, refresh=refresh)
    return parse_response(WriteResponse, response).shards.successful


def update_one(client: Elasticsearch, index: str, record: Any, refresh: RefreshPolicy = "true") -> int:
    """Update the document keyed by the record's identifier.

    Returns:
        Number of shard copies that acknowledged the write.

    Raises:
        MissingIdentifierError: Before any request, if the record has no identifier value.
        NotFoundError: If the document does not exist.
    """
    binding = find_identifier(type(record))
    if not binding.present:
        raise MissingIdentifierError(f"{type(record).__name__} has no field mapped to '{ID_PROPERTY}'.")
    doc_id = identifier_value(record, binding)
    if not doc_id:
        raise MissingIdentifierError(f"Missing document ID in {type(record).__name__}.{binding.name}.")
    return _update(client, index, doc_id, encode_without_id(record), refresh, upsert=False)


def upsert_one(client: Elasticsearch, index: str, doc_id: str, record: Any, refresh: RefreshPolicy = "true") -> int:
    """Write ``record`` under ``doc_id``, creating the document if needed.

    Returns:
        Number of shard copies that acknowledged the write.
    """
    if not doc_id:
        raise MissingIdentifierError("Missing document ID for upsert.")
    return _update(client, index, doc_id, encode_without_id(record), refresh, upsert=True)


def patch_one(
    client: Elasticsearch,
    index: str,
    fields: Mapping[str, Any],
    model_type: type | None = None,
    refresh: RefreshPolicy = "true",
    upsert: bool = False,
) -> int:
    """Partially update a document from a field mapping.

    The document key is read from ``fields["_id"]``; the remaining entries
    become the partial document. ``fields`` is not modified.

    Args:
        fields: Property values plus ``_id``.
        model_type: If given, keys are treated as structural field names and
            renamed to their property names.
        upsert: Create the document from the partial fields if it does not exist.

    Returns:
        Number of shard copies that acknowledged the write.

    Raises:
        MissingIdentifierError: If ``_id`` is missing or empty.
        NotFoundError: If the document does not exist.
    """
    doc = dict(fields)
    doc_id = doc.pop(ID_PROPERTY, None)
    if not doc_id:
        raise MissingIdentifierError(f"Missing document ID in the map (key '{ID_PROPERTY}').")
    if model_type is not None:
        doc = map_to_document(doc, make_property_map(model_type))
    return _update(client, index, str(doc_id), doc, refresh, upsert=upsert)


def delete_one(client: Elasticsearch, index: str, doc_id: str, refresh: RefreshPolicy = "true") -> int:
    """Delete a document.

    Returns:
        Number of shard copies that acknowledged the delete.

    Raises:
        NotFoundError: If the document does not exist.
    """
    with client_errors(doc_id, missing_is_error=True):
        response = client.delete(index=index, id=doc_id, refresh=refresh)
    return parse_response(WriteResponse, response).shards.successful
