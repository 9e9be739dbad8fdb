"""Record types and client response builders shared by the unit tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from unittest.mock import MagicMock

from elasticsearch import ApiError
from pydantic import BaseModel, ConfigDict, Field

# ── Record types ─────────────────────────────────────────────────────────────


class User(BaseModel):
    """Pydantic record with an identifier field."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default="", alias="_id")
    name: str = ""
    email: str = Field(default="", serialization_alias="emailAddress")
    age: int = 0


@dataclass
class Article:
    """Dataclass record using ``json`` metadata annotations."""

    id: str = field(default="", metadata={"json": "_id"})
    title: str = field(default="", metadata={"json": "title,omitempty"})
    created_at: str = field(default="", metadata={"json": "createdAt"})
    views: int = 0


class Event(BaseModel):
    """Record without an identifier field."""

    kind: str = ""
    payload: dict[str, Any] = Field(default_factory=dict)


# ── Client responses ─────────────────────────────────────────────────────────


def api_error(cls: type[ApiError], status: int, body: Any = None) -> ApiError:
    """Build a client ``ApiError`` subclass the way the transport raises it."""
    return cls(message=f"HTTP {status}", meta=MagicMock(status=status), body=body if body is not None else {})


def write_response(doc_id: str = "u1", result: str = "created", version: int = 1, successful: int = 1) -> dict[str, Any]:
    return {
        "_index": "users",
        "_id": doc_id,
        "_version": version,
        "result": result,
        "_shards": {"total": 2, "successful": successful, "failed": 0},
    }


def search_response(*hits: dict[str, Any], total: int | None = None) -> dict[str, Any]:
    return {
        "took": 3,
        "hits": {
            "total": {"value": len(hits) if total is None else total, "relation": "eq"},
            "hits": [{"_index": "users", "_score": 1.0, **hit} for hit in hits],
        },
    }
