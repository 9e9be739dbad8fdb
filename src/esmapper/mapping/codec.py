"""Document codec — Records to document bodies and back.

Encoding copies field values as-is under their property names; values are
not coerced, so they must be something the client's JSON serializer
accepts. Decoding goes through pydantic validation, which is where a
payload that does not fit the target type is rejected.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import cache
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from esmapper.exceptions import DecodeError
from esmapper.mapping.fields import ID_PROPERTY, find_identifier, is_record, resolve_fields

T = TypeVar("T")


def encode(record: Any) -> dict[str, Any]:
    """Encode every field of a record, keyed by property name."""
    return {d.property_name: getattr(record, d.name) for d in resolve_fields(type(record))}


def encode_without_id(record: Any) -> dict[str, Any]:
    """Encode a record for a write request, leaving the identifier out.

    The identifier travels as the document key instead. When the record type
    has no identifier field, nothing is excluded.
    """
    model_type = type(record)
    id_index = find_identifier(model_type).index
    return {
        d.property_name: getattr(record, d.name)
        for d in resolve_fields(model_type)
        if d.index != id_index
    }


def source_of(payload: Any) -> dict[str, Any]:
    """Extract the document properties from a hit or a raw ``_source`` document.

    A hit's ``_id`` is folded into the result under ``_id`` so that it can
    populate the record's identifier field.

    Raises:
        DecodeError: If the payload is not a mapping, or ``_source`` is not one.
    """
    if not isinstance(payload, Mapping):
        raise DecodeError(f"Expected a document object, got {type(payload).__name__}.")
    if "_source" not in payload:
        return dict(payload)

    source = payload["_source"]
    if not isinstance(source, Mapping):
        raise DecodeError(f"Expected '_source' to be an object, got {type(source).__name__}.")
    result = dict(source)
    if ID_PROPERTY in payload:
        result.setdefault(ID_PROPERTY, payload[ID_PROPERTY])
    return result


@cache
def _dataclass_adapter(model_type: type) -> TypeAdapter[Any]:
    return TypeAdapter(model_type)


def decode(payload: Any, model_type: type[T]) -> T:
    """Decode a hit or ``_source`` document into a new record of ``model_type``.

    Args:
        payload: A search/get hit (carrying ``_source``) or a raw source document.
        model_type: The record type to build.

    Returns:
        A validated record instance.

    Raises:
        DecodeError: If the payload does not match the record's layout.
    """
    source = source_of(payload)
    values: dict[str, Any] = {}
    for d in resolve_fields(model_type):
        if d.property_name in source:
            values[d.name] = source[d.property_name]

    try:
        if issubclass(model_type, BaseModel):
            return model_type.model_validate(values, by_alias=False, by_name=True)
        return _dataclass_adapter(model_type).validate_python(values)
    except ValidationError as e:
        raise DecodeError(f"Cannot decode document into {model_type.__name__}: {e}") from e


def _is_frozen(model_type: type) -> bool:
    if issubclass(model_type, BaseModel):
        return bool(model_type.model_config.get("frozen"))
    return model_type.__dataclass_params__.frozen  # type: ignore[attr-defined]


def decode_into(payload: Any, target: Any) -> None:
    """Decode a document into an existing target.

    Record targets get every field overwritten with the decoded values;
    ``dict`` targets are updated with the document's properties.

    Raises:
        DecodeError: If the payload does not fit, or the target is neither a
            record nor a dict, or is frozen.
    """
    if isinstance(target, dict):
        target.update(source_of(payload))
        return
    if not is_record(target):
        raise DecodeError(f"Cannot decode into {type(target).__name__}: not a record or dict.")
    if _is_frozen(type(target)):
        raise DecodeError(f"Cannot decode into {type(target).__name__}: record type is frozen.")

    record = decode(payload, type(target))
    for d in resolve_fields(type(target)):
        setattr(target, d.name, getattr(record, d.name))


def decode_many(hits: Iterable[Any], model_type: type[T]) -> list[T]:
    return [decode(hit, model_type) for hit in hits]


def map_to_document(values: Mapping[str, Any], property_map: Mapping[str, str]) -> dict[str, Any]:
    """Rename structural field names to property names.

    Keys absent from ``property_map`` are kept as they are.
    """
    return {property_map.get(key, key): value for key, value in values.items()}


def build_query(index_name: str, query: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Query builder entry point.

    Query construction is left to callers, who pass literal query documents;
    this always returns an empty query, which Elasticsearch treats as
    ``match_all``.
    """
    return {}
