# ==============================================
# Tests for MongoStore
# ==============================================
#
# pymongo is replaced with unittest.mock; no server is needed.
# ==============================================

from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import BulkWriteError, OperationFailure, ServerSelectionTimeoutError

from dump2mongo.errors import FatalConnectionError, StoreError
from dump2mongo.schema.ddl_processor import build_descriptor, parse_tables
from dump2mongo.schema.definitions import IndexRequest
from dump2mongo.schema.type_mapper import FieldMapping, FieldType, cast_value
from dump2mongo.storage.mongo_store import MongoStore, build_validator


DESCRIPTOR = {
    "id": FieldMapping(FieldType.INTEGER, required=True),
    "email": FieldMapping(FieldType.STRING),
    "active": FieldMapping(FieldType.BOOLEAN, required=True, default=1, has_default=True),
    "status": FieldMapping(FieldType.ENUM, enum_values=("new", "paid")),
    "meta": FieldMapping(FieldType.OPAQUE),
}


@pytest.fixture
def client_cls():
    with patch("dump2mongo.storage.mongo_store.PyMongoClient") as cls:
        yield cls


@pytest.fixture
def db(client_cls):
    database = MagicMock()
    database.name = "shop"
    client_cls.return_value.get_default_database.return_value = database
    return database


@pytest.fixture
def connected(client_cls, db):
    store = MongoStore("mongodb://localhost:27017/shop", timeout_ms=5000)
    store.connect()
    return store


# ==============================================
# Connection Tests
# ==============================================

class TestConnection:
    """Tests for connect / disconnect."""

    def test_connect_pings_and_selects_database(self, client_cls, db):
        store = MongoStore("mongodb://localhost:27017/shop", timeout_ms=5000)
        store.connect()
        client_cls.assert_called_once_with(
            "mongodb://localhost:27017/shop",
            connectTimeoutMS=5000,
            socketTimeoutMS=5000,
            serverSelectionTimeoutMS=5000,
        )
        client_cls.return_value.admin.command.assert_called_once_with("ping")
        client_cls.return_value.get_default_database.assert_called_once_with(default="dump2mongo")
        assert store.db is db

    def test_unreachable_server_is_fatal(self, client_cls):
        client_cls.return_value.admin.command.side_effect = ServerSelectionTimeoutError("timed out")
        store = MongoStore("mongodb://nowhere:27017/shop")
        with pytest.raises(FatalConnectionError):
            store.connect()
        client_cls.return_value.close.assert_called_once()
        assert store.client is None

    def test_context_manager_disconnects(self, client_cls, db):
        with MongoStore("mongodb://localhost:27017/shop") as store:
            assert store.db is db
        client_cls.return_value.close.assert_called_once()
        assert store.db is None

    def test_operations_need_connection(self):
        with pytest.raises(StoreError):
            MongoStore("mongodb://localhost:27017/shop").clear("Orders")


# ==============================================
# Collection & Index Tests
# ==============================================

class TestCollections:
    """Tests for define_collection / create_index / clear."""

    def test_new_collection_gets_validator(self, connected, db):
        db.list_collection_names.return_value = []
        connected.define_collection("Accounts", DESCRIPTOR)
        db.create_collection.assert_called_once_with("Accounts", validator=build_validator(DESCRIPTOR))

    def test_existing_collection_validator_replaced(self, connected, db):
        db.list_collection_names.return_value = ["Accounts"]
        connected.define_collection("Accounts", DESCRIPTOR)
        db.create_collection.assert_not_called()
        db.command.assert_called_once_with("collMod", "Accounts", validator=build_validator(DESCRIPTOR))

    def test_validation_disabled(self, connected, db):
        db.list_collection_names.return_value = []
        connected.define_collection("Accounts", DESCRIPTOR, validate=False)
        db.create_collection.assert_called_once_with("Accounts")

    def test_define_failure_is_store_error(self, connected, db):
        db.list_collection_names.return_value = []
        db.create_collection.side_effect = OperationFailure("not authorized")
        with pytest.raises(StoreError):
            connected.define_collection("Accounts", DESCRIPTOR)

    def test_create_index(self, connected, db):
        request = IndexRequest("accounts", "Accounts", ("email",), True, "email_unique")
        connected.create_index(request)
        db["Accounts"].create_index.assert_called_once_with(
            [("email", 1)], unique=True, name="email_unique"
        )

    def test_clear_returns_deleted_count(self, connected, db):
        db["Orders"].delete_many.return_value.deleted_count = 4
        assert connected.clear("Orders") == 4
        db["Orders"].delete_many.assert_called_once_with({})


# ==============================================
# Insert Tests
# ==============================================

class TestInsertMany:
    """Tests for unordered bulk inserts."""

    def test_all_inserted(self, connected, db):
        db["Orders"].insert_many.return_value.inserted_ids = [1, 2]
        result = connected.insert_many("Orders", [{"a": 1}, {"a": 2}])
        assert (result.inserted, result.failed) == (2, 0)
        db["Orders"].insert_many.assert_called_once_with([{"a": 1}, {"a": 2}], ordered=False)

    def test_partial_failure(self, connected, db):
        details = {"nInserted": 3, "writeErrors": [{"errmsg": "E11000 duplicate key"}]}
        db["Orders"].insert_many.side_effect = BulkWriteError(details)
        result = connected.insert_many("Orders", [{}, {}, {}, {}])
        assert (result.inserted, result.failed) == (3, 1)
        assert "duplicate key" in result.message
        assert not result.ok

    def test_driver_error_is_store_error(self, connected, db):
        db["Orders"].insert_many.side_effect = OperationFailure("connection reset")
        with pytest.raises(StoreError):
            connected.insert_many("Orders", [{"a": 1}])

    def test_empty_batch_skips_driver(self, connected, db):
        assert connected.insert_many("Orders", []).inserted == 0
        db["Orders"].insert_many.assert_not_called()


# ==============================================
# Validator Tests
# ==============================================

class TestBuildValidator:
    """Tests for descriptor -> $jsonSchema."""

    def test_required_only_without_default(self):
        schema = build_validator(DESCRIPTOR)["$jsonSchema"]
        assert schema["required"] == ["id"]

    def test_nullable_fields_accept_null(self):
        properties = build_validator(DESCRIPTOR)["$jsonSchema"]["properties"]
        assert properties["id"]["bsonType"] == ["int", "long"]
        assert "null" in properties["email"]["bsonType"]

    def test_enum_values(self):
        properties = build_validator(DESCRIPTOR)["$jsonSchema"]["properties"]
        assert properties["status"]["enum"] == ["new", "paid", None]

    def test_opaque_unconstrained(self):
        properties = build_validator(DESCRIPTOR)["$jsonSchema"]["properties"]
        assert "meta" not in properties

    def test_no_required_list_when_empty(self):
        schema = build_validator({"x": FieldMapping(FieldType.STRING)})["$jsonSchema"]
        assert "required" not in schema

    def test_auto_increment_key_not_required(self):
        """INSERTs may leave out an AUTO_INCREMENT primary key."""
        tables, _ = parse_tables(
            "CREATE TABLE t (id int NOT NULL AUTO_INCREMENT, name varchar(9) NOT NULL, PRIMARY KEY (id))"
        )
        schema = build_validator(build_descriptor(tables[0]))["$jsonSchema"]
        assert schema["required"] == ["name"]
        assert schema["properties"]["id"]["bsonType"] == ["int", "long"]

    def test_zero_date_accepted_by_not_null_timestamp(self):
        tables, _ = parse_tables(
            "CREATE TABLE t (created_at datetime NOT NULL DEFAULT '0000-00-00 00:00:00')"
        )
        descriptor = build_descriptor(tables[0])
        rule = build_validator(descriptor)["$jsonSchema"]["properties"]["created_at"]
        assert cast_value("0000-00-00 00:00:00", descriptor["created_at"]) is None
        assert "null" in rule["bsonType"]
        assert "date" in rule["bsonType"]
