"""Translation of ``elasticsearch`` client errors into esmapper exceptions."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from elastic_transport import SerializationError
from elastic_transport import TransportError as ESTransportError
from elasticsearch import ApiError
from elasticsearch.exceptions import ConflictError as ESConflictError
from elasticsearch.exceptions import NotFoundError as ESNotFoundError

from esmapper.exceptions import (
    DecodeError,
    DuplicateKeyError,
    EsMapperError,
    NotFoundError,
    ResponseError,
    TransportError,
)


def response_error(e: ApiError) -> ResponseError:
    """Wrap an ``ApiError`` keeping the cluster's status and body verbatim."""
    meta = getattr(e, "meta", None)
    status = getattr(meta, "status", 0)
    return ResponseError(f"Elasticsearch returned an error: {e}", status=status, body=e.body)


def translate_client_error(e: Exception) -> Exception:
    """Map an exception raised by the ``elasticsearch`` client to esmapper's taxonomy.

    Exceptions that are already esmapper errors, or that do not come from
    the client, are returned unchanged.
    """
    if isinstance(e, EsMapperError):
        return e
    if isinstance(e, ApiError):
        return response_error(e)
    if isinstance(e, SerializationError):
        return DecodeError(f"Failed to (de)serialize payload: {e}")
    if isinstance(e, ESTransportError):
        return TransportError(f"Elasticsearch transport failure: {e}")
    return e


@contextmanager
def client_errors(
    doc_id: str = "",
    *,
    missing_is_error: bool = False,
    conflict_is_duplicate: bool = False,
) -> Iterator[None]:
    """Translate client exceptions raised inside the block.

    Args:
        doc_id: Document ID used in error messages.
        missing_is_error: Raise ``NotFoundError`` for a 404 instead of ``ResponseError``.
        conflict_is_duplicate: Raise ``DuplicateKeyError`` for a 409 instead of ``ResponseError``.
    """
    try:
        yield
    except ESConflictError as e:
        if conflict_is_duplicate:
            raise DuplicateKeyError(f"Document ID '{doc_id}' already exists in the index.") from e
        raise response_error(e) from e
    except ESNotFoundError as e:
        if missing_is_error:
            raise NotFoundError(f"Document ID '{doc_id}' does not exist in the index.") from e
        raise response_error(e) from e
    except (ApiError, ESTransportError) as e:
        raise translate_client_error(e) from e
