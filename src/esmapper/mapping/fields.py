"""Field resolver — Maps record fields to document property names.

A record type is either a pydantic model or a dataclass. Each field's
document property name is the first comma-delimited token of its
serialization annotation, falling back to the field's own name:

  - pydantic: ``Field(alias="_id")`` or ``Field(serialization_alias="title")``
  - dataclass: ``field(metadata={"json": "title,omitempty"})``

The field whose property name is ``_id`` is the record's identifier. It
supplies the document key and never travels inside the document body.

Descriptors are derived once per type and memoised, so every lookup below
reads the same table.
"""

from __future__ import annotations

import dataclasses
from functools import cache
from typing import Any

from pydantic import BaseModel, ConfigDict

from esmapper.exceptions import InvalidInputError

ID_PROPERTY = "_id"
"""Reserved document property bound to the identifier field."""

ANNOTATION_KEY = "json"
"""Dataclass field metadata key holding the serialization annotation."""


class FieldDescriptor(BaseModel):
    """One field of a record type."""

    model_config = ConfigDict(frozen=True)

    name: str
    property_name: str
    index: int


class IdentifierBinding(BaseModel):
    """Which field supplies the document key; ``index == -1`` when none does."""

    model_config = ConfigDict(frozen=True)

    index: int = -1
    name: str = ID_PROPERTY

    @property
    def present(self) -> bool:
        return self.index >= 0


def is_record_type(model_type: Any) -> bool:
    """Return True if ``model_type`` is a pydantic model class or a dataclass type."""
    if not isinstance(model_type, type):
        return False
    return issubclass(model_type, BaseModel) or dataclasses.is_dataclass(model_type)


def is_record(value: Any) -> bool:
    """Return True if ``value`` is a record instance (addressable field by field)."""
    return not isinstance(value, type) and is_record_type(type(value))


def _property_name(annotation: str | None, name: str) -> str:
    if annotation:
        head = annotation.split(",")[0]
        if head:
            return head
    return name


@cache
def resolve_fields(model_type: type) -> tuple[FieldDescriptor, ...]:
    """Return the field descriptors of a record type in declaration order.

    Args:
        model_type: A pydantic model class or a dataclass type.

    Returns:
        One descriptor per field. Calling this twice for the same type
        returns the same tuple.

    Raises:
        InvalidInputError: If ``model_type`` is not a record type.
    """
    if not is_record_type(model_type):
        raise InvalidInputError(f"{model_type!r} is not a pydantic model or dataclass type.")

    if issubclass(model_type, BaseModel):
        return tuple(
            FieldDescriptor(
                name=name,
                property_name=_property_name(info.serialization_alias or info.alias, name),
                index=i,
            )
            for i, (name, info) in enumerate(model_type.model_fields.items())
        )

    return tuple(
        FieldDescriptor(
            name=f.name,
            property_name=_property_name(f.metadata.get(ANNOTATION_KEY), f.name),
            index=i,
        )
        for i, f in enumerate(dataclasses.fields(model_type))
    )


def find_identifier(model_type: type) -> IdentifierBinding:
    """Find the identifier field: the first field whose property name is ``_id``.

    Absence is not an error; check ``binding.present`` before relying on it.
    """
    index, name = find_field_by_property(model_type, ID_PROPERTY)
    if index < 0:
        return IdentifierBinding()
    return IdentifierBinding(index=index, name=name)


def find_field_by_name(model_type: type, name: str) -> tuple[int, str]:
    """Look up a field by structural name.

    Returns:
        ``(index, property_name)``, or ``(-1, name)`` if there is no such field.
    """
    for d in resolve_fields(model_type):
        if d.name == name:
            return d.index, d.property_name
    return -1, name


def find_field_by_property(model_type: type, property_name: str) -> tuple[int, str]:
    """Look up a field by document property name (first match wins).

    Returns:
        ``(index, name)``, or ``(-1, property_name)`` if no field maps to it.
    """
    for d in resolve_fields(model_type):
        if d.property_name == property_name:
            return d.index, d.name
    return -1, property_name


def find_field_by_index(model_type: type, index: int) -> tuple[str, str]:
    """Look up a field by position.

    Returns:
        ``(name, property_name)``, or ``("", "")`` if out of range.
    """
    fields = resolve_fields(model_type)
    if 0 <= index < len(fields):
        d = fields[index]
        return d.name, d.property_name
    return "", ""


def make_property_map(model_type: type) -> dict[str, str]:
    """Map every structural field name to its document property name."""
    return {d.name: d.property_name for d in resolve_fields(model_type)}


def identifier_value(record: Any, binding: IdentifierBinding | None = None) -> str:
    """Return the record's document key as a string.

    Args:
        record: A record instance.
        binding: The record type's identifier binding; resolved if omitted.

    Returns:
        The identifier value, or ``""`` when the type has no identifier
        field or its value is ``None``.
    """
    if binding is None:
        binding = find_identifier(type(record))
    if not binding.present:
        return ""
    value = getattr(record, binding.name, None)
    return "" if value is None else str(value)
