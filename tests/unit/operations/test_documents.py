"""Tests for single-document operations."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from elastic_transport import ConnectionError as ESConnectionError
from elasticsearch import BadRequestError, ConflictError, NotFoundError as ESNotFoundError
from support import Article, Event, User, api_error, search_response, write_response

from esmapper.exceptions import (
    DecodeError,
    DuplicateKeyError,
    MissingIdentifierError,
    NotFoundError,
    ResponseError,
    TransportError,
)
from esmapper.operations import documents

# ── Reads ────────────────────────────────────────────────────────────────────


class TestExists:
    def test_exists(self, es: MagicMock) -> None:
        es.exists.return_value = True
        assert documents.exists(es, "users", "u1") is True
        es.exists.assert_called_once_with(index="users", id="u1")

    def test_missing(self, es: MagicMock) -> None:
        es.exists.return_value = False
        assert documents.exists(es, "users", "u1") is False

    def test_transport_failure(self, es: MagicMock) -> None:
        es.exists.side_effect = ESConnectionError("refused")
        with pytest.raises(TransportError):
            documents.exists(es, "users", "u1")


class TestFindOneById:
    """Tests for get-by-id."""

    def test_found(self, es: MagicMock) -> None:
        es.get.return_value = {
            "_index": "users",
            "_id": "u1",
            "_version": 2,
            "found": True,
            "_source": {"name": "Ada", "emailAddress": "ada@example.com", "age": 36},
        }
        user = documents.find_one_by_id(es, "users", "u1", User)
        assert user == User(id="u1", name="Ada", email="ada@example.com", age=36)
        es.get.assert_called_once_with(index="users", id="u1")

    def test_missing_document_is_none(self, es: MagicMock) -> None:
        es.get.side_effect = api_error(ESNotFoundError, 404, {"_index": "users", "_id": "u1", "found": False})
        assert documents.find_one_by_id(es, "users", "u1", User) is None

    def test_missing_index_is_an_error(self, es: MagicMock) -> None:
        body = {"error": {"type": "index_not_found_exception"}, "status": 404}
        es.get.side_effect = api_error(ESNotFoundError, 404, body)
        with pytest.raises(ResponseError) as exc_info:
            documents.find_one_by_id(es, "nope", "u1", User)
        assert exc_info.value.status == 404
        assert exc_info.value.body == body

    def test_found_false_in_body(self, es: MagicMock) -> None:
        es.get.return_value = {"_index": "users", "_id": "u1", "found": False}
        assert documents.find_one_by_id(es, "users", "u1", User) is None

    def test_malformed_response(self, es: MagicMock) -> None:
        es.get.return_value = {"_index": "users", "_id": "u1"}
        with pytest.raises(DecodeError, match="found"):
            documents.find_one_by_id(es, "users", "u1", User)

    def test_decode_into_record(self, es: MagicMock) -> None:
        es.get.return_value = {"_id": "a1", "found": True, "_source": {"title": "Hello", "createdAt": "2024"}}
        article = Article()
        assert documents.find_one_by_id_and_decode(es, "articles", "a1", article) is True
        assert article == Article(id="a1", title="Hello", created_at="2024")

    def test_decode_into_missing(self, es: MagicMock) -> None:
        es.get.side_effect = api_error(ESNotFoundError, 404, {"found": False})
        target: dict = {}
        assert documents.find_one_by_id_and_decode(es, "users", "u1", target) is False
        assert target == {}


class TestSearch:
    """Tests for query-based reads."""

    def test_find_decodes_all_hits(self, es: MagicMock) -> None:
        es.search.return_value = search_response(
            {"_id": "u1", "_source": {"name": "Ada"}},
            {"_id": "u2", "_source": {"name": "Grace"}},
        )
        users = documents.find(es, "users", {"query": {"match_all": {}}}, User)
        assert [(u.id, u.name) for u in users] == [("u1", "Ada"), ("u2", "Grace")]
        es.search.assert_called_once_with(
            index="users", body={"query": {"match_all": {}}}, track_total_hits=True
        )

    def test_multiple_indices(self, es: MagicMock) -> None:
        es.search.return_value = search_response()
        documents.find(es, ("a", "b"), {}, User)
        assert es.search.call_args.kwargs["index"] == ["a", "b"]

    def test_find_with_total(self, es: MagicMock) -> None:
        es.search.return_value = search_response({"_id": "u1", "_source": {}}, total=42)
        users, total = documents.find_with_total(es, "users", {}, User)
        assert len(users) == 1
        assert total == 42

    def test_find_one(self, es: MagicMock) -> None:
        es.search.return_value = search_response(
            {"_id": "u1", "_source": {"name": "Ada"}},
            {"_id": "u2", "_source": {"name": "Grace"}},
        )
        assert documents.find_one(es, "users", {}, User).id == "u1"

    def test_find_one_no_hits(self, es: MagicMock) -> None:
        es.search.return_value = search_response()
        assert documents.find_one(es, "users", {}, User) is None
        assert documents.find_one_and_decode(es, "users", {}, User()) is False

    def test_find_one_and_decode(self, es: MagicMock) -> None:
        es.search.return_value = search_response({"_id": "u1", "_source": {"name": "Ada"}})
        user = User()
        assert documents.find_one_and_decode(es, "users", {}, user) is True
        assert user.name == "Ada"

    def test_find_and_decode_appends(self, es: MagicMock) -> None:
        es.search.return_value = search_response({"_id": "u1", "_source": {"name": "Ada"}})
        raw: list = [{"existing": True}]
        assert documents.find_and_decode(es, "users", {}, raw) is True
        assert raw == [{"existing": True}, {"_id": "u1", "name": "Ada"}]

        typed: list = []
        documents.find_and_decode(es, "users", {}, typed, User)
        assert typed == [User(id="u1", name="Ada")]

    def test_malformed_search_response(self, es: MagicMock) -> None:
        es.search.return_value = {"took": 1}
        with pytest.raises(DecodeError, match="hits"):
            documents.find(es, "users", {}, User)

    def test_bad_query(self, es: MagicMock) -> None:
        es.search.side_effect = api_error(BadRequestError, 400, {"error": {"type": "parsing_exception"}})
        with pytest.raises(ResponseError) as exc_info:
            documents.find(es, "users", {"query": {"bogus": {}}}, User)
        assert exc_info.value.status == 400


# ── Writes ───────────────────────────────────────────────────────────────────


class TestInsertOne:
    """Tests for single-document create."""

    def test_with_identifier(self, es: MagicMock) -> None:
        es.create.return_value = write_response("u1", version=1)
        version = documents.insert_one(es, "users", User(id="u1", name="Ada"))
        assert version == 1
        es.create.assert_called_once_with(
            index="users",
            id="u1",
            document={"name": "Ada", "emailAddress": "", "age": 0},
            refresh="true",
        )

    def test_duplicate(self, es: MagicMock) -> None:
        es.create.side_effect = api_error(ConflictError, 409)
        with pytest.raises(DuplicateKeyError, match="u1"):
            documents.insert_one(es, "users", User(id="u1"))

    def test_cluster_assigned_key(self, es: MagicMock) -> None:
        es.index.return_value = write_response("generated")
        documents.insert_one(es, "users", User(name="Ada"), refresh="wait_for")
        es.create.assert_not_called()
        kwargs = es.index.call_args.kwargs
        assert "id" not in kwargs
        assert kwargs["document"] == {"name": "Ada", "emailAddress": "", "age": 0}
        assert kwargs["refresh"] == "wait_for"

    def test_type_without_identifier(self, es: MagicMock) -> None:
        es.index.return_value = write_response("generated")
        documents.insert_one(es, "events", Event(kind="login"))
        assert es.index.call_args.kwargs["document"] == {"kind": "login", "payload": {}}


class TestUpdate:
    """Tests for update / upsert / patch."""

    def test_update_one(self, es: MagicMock) -> None:
        es.update.return_value = write_response("a1", result="updated", successful=2)
        acknowledged = documents.update_one(es, "articles", Article(id="a1", title="New"))
        assert acknowledged == 2
        es.update.assert_called_once_with(
            index="articles",
            id="a1",
            doc={"title": "New", "createdAt": "", "views": 0},
            doc_as_upsert=False,
            refresh="true",
        )

    def test_update_missing_identifier_value(self, es: MagicMock) -> None:
        with pytest.raises(MissingIdentifierError):
            documents.update_one(es, "users", User(name="Ada"))
        es.update.assert_not_called()

    def test_update_type_without_identifier(self, es: MagicMock) -> None:
        with pytest.raises(MissingIdentifierError):
            documents.update_one(es, "events", Event())
        es.update.assert_not_called()

    def test_update_missing_document(self, es: MagicMock) -> None:
        es.update.side_effect = api_error(ESNotFoundError, 404)
        with pytest.raises(NotFoundError, match="a1"):
            documents.update_one(es, "articles", Article(id="a1"))

    def test_upsert_one(self, es: MagicMock) -> None:
        es.update.return_value = write_response("k", result="created")
        assert documents.upsert_one(es, "events", "k", Event(kind="x")) == 1
        kwargs = es.update.call_args.kwargs
        assert kwargs["id"] == "k"
        assert kwargs["doc_as_upsert"] is True
        assert kwargs["doc"] == {"kind": "x", "payload": {}}

    def test_upsert_requires_key(self, es: MagicMock) -> None:
        with pytest.raises(MissingIdentifierError):
            documents.upsert_one(es, "events", "", Event())

    def test_patch_one(self, es: MagicMock) -> None:
        es.update.return_value = write_response("a1", result="updated")
        fields = {"_id": "a1", "created_at": "2024", "views": 5}
        documents.patch_one(es, "articles", fields, Article)
        kwargs = es.update.call_args.kwargs
        assert kwargs["id"] == "a1"
        assert kwargs["doc"] == {"createdAt": "2024", "views": 5}
        assert fields == {"_id": "a1", "created_at": "2024", "views": 5}

    def test_patch_without_model_passes_keys_through(self, es: MagicMock) -> None:
        es.update.return_value = write_response("a1", result="updated")
        documents.patch_one(es, "articles", {"_id": "a1", "createdAt": "2024"}, upsert=True)
        kwargs = es.update.call_args.kwargs
        assert kwargs["doc"] == {"createdAt": "2024"}
        assert kwargs["doc_as_upsert"] is True

    def test_patch_requires_id(self, es: MagicMock) -> None:
        with pytest.raises(MissingIdentifierError):
            documents.patch_one(es, "articles", {"views": 1})
        with pytest.raises(MissingIdentifierError):
            documents.patch_one(es, "articles", {"_id": "", "views": 1})
        es.update.assert_not_called()


class TestDeleteOne:
    def test_delete(self, es: MagicMock) -> None:
        es.delete.return_value = write_response("u1", result="deleted", successful=1)
        assert documents.delete_one(es, "users", "u1") == 1
        es.delete.assert_called_once_with(index="users", id="u1", refresh="true")

    def test_delete_missing(self, es: MagicMock) -> None:
        es.delete.side_effect = api_error(ESNotFoundError, 404, {"result": "not_found"})
        with pytest.raises(NotFoundError):
            documents.delete_one(es, "users", "u1")

    def test_delete_transport_failure(self, es: MagicMock) -> None:
        es.delete.side_effect = ESConnectionError("timed out")
        with pytest.raises(TransportError):
            documents.delete_one(es, "users", "u1")
