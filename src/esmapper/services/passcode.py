"""Passcode service — Stores one passcode and its expiry per document ID."""

from __future__ import annotations

from datetime import datetime

from elasticsearch import Elasticsearch

from esmapper.exceptions import DecodeError
from esmapper.operations import documents


class PasscodeService:
    """Reads and writes ``{passcode, expiredAt}`` documents in ``index_name``.

    Args:
        client: Elasticsearch client.
        index_name: Index holding the passcodes.
        passcode_name: Property name of the passcode.
        expired_at_name: Property name of the expiry timestamp.
    """

    def __init__(
        self,
        client: Elasticsearch,
        index_name: str,
        passcode_name: str = "passcode",
        expired_at_name: str = "expiredAt",
    ) -> None:
        self.client = client
        self.index_name = index_name
        self.passcode_name = passcode_name
        self.expired_at_name = expired_at_name

    def save(self, id: str, passcode: str, expired_at: datetime) -> int:
        """Store a passcode, creating the document if needed.

        Returns:
            Number of shard copies that acknowledged the write.
        """
        fields = {
            "_id": id,
            self.passcode_name: passcode,
            self.expired_at_name: expired_at,
        }
        return documents.patch_one(self.client, self.index_name, fields, upsert=True)

    def load(self, id: str) -> tuple[str, datetime] | None:
        """Return ``(passcode, expired_at)``, or None if nothing is stored for ``id``.

        Raises:
            DecodeError: If the stored document lacks either property.
        """
        source: dict = {}
        if not documents.find_one_by_id_and_decode(self.client, self.index_name, id, source):
            return None
        try:
            passcode = source[self.passcode_name]
            expired_at = source[self.expired_at_name]
        except KeyError as e:
            raise DecodeError(f"Passcode document '{id}' has no '{e.args[0]}' property.") from e

        if isinstance(expired_at, str):
            try:
                expired_at = datetime.fromisoformat(expired_at.replace("Z", "+00:00"))
            except ValueError as e:
                raise DecodeError(f"Passcode document '{id}' has an invalid expiry: {expired_at!r}") from e
        if not isinstance(expired_at, datetime):
            raise DecodeError(f"Passcode document '{id}' has an invalid expiry: {expired_at!r}")
        return str(passcode), expired_at

    def delete(self, id: str) -> int:
        return documents.delete_one(self.client, self.index_name, id)
