"""Bulk write models."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class BulkAction(str, Enum):
    """Bulk operation applied to every item of a submission."""

    CREATE = "create"
    INDEX = "index"


class BulkResponseItem(BaseModel):
    """Per-item outcome reported by the bulk API."""

    action: str = Field(description="Bulk action the outcome belongs to")
    document_id: str = Field(default="", description="Document ID reported by the cluster")
    status: int = Field(default=0, description="HTTP status of the item")
    result: str = Field(default="", description="created, updated, ...")
    error: Any = Field(default=None, description="Error object or message on failure")

    @classmethod
    def from_info(cls, info: dict[str, Any]) -> BulkResponseItem:
        """Build from a ``{action: {...}}`` item as yielded by the bulk helpers."""
        action, data = next(iter(info.items()))
        return cls(
            action=action,
            document_id=str(data.get("_id") or ""),
            status=int(data.get("status") or 0),
            result=str(data.get("result") or ""),
            error=data.get("error"),
        )


@dataclass
class BulkItem:
    """An item queued on a ``BulkIndexer``.

    Exactly one of the callbacks is invoked once the cluster has answered
    for this item. Callbacks run on the indexer's worker thread.
    """

    action: BulkAction
    document_id: str
    body: dict[str, Any]
    on_success: Callable[[BulkItem, BulkResponseItem], None] | None = field(default=None, repr=False)
    on_failure: Callable[[BulkItem, BulkResponseItem], None] | None = field(default=None, repr=False)


class BulkIndexerStats(BaseModel):
    """Counters of a bulk indexer."""

    added: int = 0
    flushed: int = 0
    failed: int = 0


class BulkResult(BaseModel):
    """Outcome of a bulk write by input position.

    Every position of the input collection appears in exactly one of the
    two lists.
    """

    succeeded: list[int] = Field(default_factory=list, description="Positions written successfully")
    failed: list[int] = Field(default_factory=list, description="Positions skipped or rejected")

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)
