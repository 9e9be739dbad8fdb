"""Typed response envelopes for the Elasticsearch requests esmapper issues.

Each request kind is parsed into its own schema so that a missing or
malformed field surfaces as a ``DecodeError`` naming that field, rather
than a ``KeyError`` deep inside an operation.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from esmapper.exceptions import DecodeError

R = TypeVar("R", bound=BaseModel)


class _Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ShardsInfo(_Envelope):
    """Replica acknowledgement counts of a write."""

    total: int = Field(default=0, description="Shard copies the write was sent to")
    successful: int = Field(description="Shard copies that acknowledged the write")
    failed: int = Field(default=0, description="Shard copies that rejected the write")


class WriteResponse(_Envelope):
    """Response of create / index / update / delete."""

    id: str = Field(default="", alias="_id")
    index: str = Field(default="", alias="_index")
    version: int = Field(default=0, alias="_version")
    result: str = Field(default="", description="created, updated, deleted, noop")
    shards: ShardsInfo = Field(alias="_shards")


class GetResponse(_Envelope):
    """Response of a get-by-id."""

    id: str = Field(alias="_id")
    index: str = Field(default="", alias="_index")
    found: bool
    version: int | None = Field(default=None, alias="_version")
    source: dict[str, Any] | None = Field(default=None, alias="_source")

    def as_hit(self) -> dict[str, Any]:
        return {"_id": self.id, "_source": self.source or {}}


class Hit(_Envelope):
    """A single search hit."""

    id: str = Field(alias="_id")
    index: str = Field(default="", alias="_index")
    score: float | None = Field(default=None, alias="_score")
    source: dict[str, Any] = Field(default_factory=dict, alias="_source")

    def as_hit(self) -> dict[str, Any]:
        return {"_id": self.id, "_source": self.source}


class HitsTotal(_Envelope):
    value: int
    relation: str = "eq"


class Hits(_Envelope):
    total: HitsTotal
    hits: list[Hit] = Field(default_factory=list)


class SearchResponse(_Envelope):
    """Response of a search issued with ``track_total_hits``."""

    took: int = 0
    hits: Hits


def parse_response(schema: type[R], response: Any) -> R:
    """Validate a client response against ``schema``.

    Accepts ``ObjectApiResponse`` objects as well as plain dicts.

    Raises:
        DecodeError: Naming the first missing or malformed field.
    """
    body = getattr(response, "body", response)
    try:
        return schema.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "<root>"
        raise DecodeError(f"Malformed {schema.__name__}: '{location}' {first['msg'].lower()}") from e
