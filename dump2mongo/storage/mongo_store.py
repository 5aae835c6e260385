# ==============================================
# MongoStore
# ==============================================
#
# PURPOSE:
#   Manages the MongoDB connection and every write the migration
#   makes: collections with a $jsonSchema validator, indexes,
#   clearing and unordered bulk inserts.
#
# WHY THIS CLASS EXISTS:
#   The DDL and Insert processors only talk to a "store" with six
#   operations. Keeping pymongo behind this class means those
#   processors can be tested against an in-memory store, and all
#   driver exceptions are translated in one place:
#     - at connect time  → FatalConnectionError (run ends)
#     - afterwards       → StoreError (one unit fails, run goes on)
#
# CLASS: MongoStore
# -----------------
#   Stateful - holds the pymongo client and database handle.
#
#   Constructor:
#   ------------
#   - __init__(uri, timeout_ms=30000, database=None)
#       Store connection params. Don't connect yet.
#       `database` is used only when the URI names none.
#
#   Methods:
#   --------
#   - connect() -> None
#   - disconnect() -> None
#   - define_collection(name, descriptor, validate=True) -> None
#   - create_index(request: IndexRequest) -> str
#   - clear(name) -> int
#   - insert_many(name, documents) -> BatchWriteResult
#   - count(name) -> int
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MongoStore(...) as store:` usage.
#
# ==============================================

import logging

from pymongo import MongoClient as PyMongoClient
from pymongo.errors import BulkWriteError, PyMongoError

from dump2mongo.errors import FatalConnectionError, StoreError
from dump2mongo.results import BatchWriteResult
from dump2mongo.schema.definitions import IndexRequest, SchemaDescriptor
from dump2mongo.schema.type_mapper import FieldType

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "dump2mongo"

BSON_TYPES = {
    FieldType.INTEGER: ["int", "long"],
    FieldType.FLOAT: ["double", "int", "long"],
    FieldType.DECIMAL: ["decimal"],
    FieldType.STRING: ["string"],
    FieldType.BINARY: ["binData"],
    FieldType.TIMESTAMP: ["date"],
    FieldType.BOOLEAN: ["bool"],
    FieldType.ENUM: ["string"],
    FieldType.STRING_LIST: ["array"],
}


def build_validator(descriptor: SchemaDescriptor) -> dict:
    """
    Build a $jsonSchema validator for a collection.

    Extra fields are allowed and OPAQUE fields are unconstrained. NOT NULL
    columns without a DEFAULT (or AUTO_INCREMENT) must be present. NOT NULL
    columns may not be null, except TIMESTAMP fields: cast_value() stores
    MySQL zero dates ("0000-00-00") as null.
    """
    properties = {}
    required = []
    for name, mapping in descriptor.items():
        bson_types = BSON_TYPES.get(mapping.target_type)
        if bson_types is None:
            continue
        must_exist = mapping.required and not mapping.has_default
        nullable = not mapping.required or mapping.target_type == FieldType.TIMESTAMP
        rule = {"bsonType": list(bson_types) + ["null"] if nullable else list(bson_types)}
        if mapping.target_type == FieldType.ENUM and mapping.enum_values:
            rule["enum"] = list(mapping.enum_values) + ([None] if nullable else [])
        if mapping.target_type == FieldType.STRING_LIST:
            rule["items"] = {"bsonType": "string"}
        properties[name] = rule
        if must_exist:
            required.append(name)

    schema = {"bsonType": "object", "properties": properties}
    if required:
        schema["required"] = required
    return {"$jsonSchema": schema}


class MongoStore:
    def __init__(self, uri, timeout_ms=30000, database=None):
        # Store connection params. Don't connect yet.
        self.uri = uri
        self.timeout_ms = timeout_ms
        self.database = database
        self.client = None
        self.db = None

    def connect(self):
        # Establish connection to MongoDB; any failure here ends the run.
        try:
            self.client = PyMongoClient(
                self.uri,
                connectTimeoutMS=self.timeout_ms,
                socketTimeoutMS=self.timeout_ms,
                serverSelectionTimeoutMS=self.timeout_ms,
            )
            self.client.admin.command("ping")
            self.db = self.client.get_default_database(default=self.database or DEFAULT_DATABASE)
        except PyMongoError as e:
            self.disconnect()
            raise FatalConnectionError(f"MongoDB connection error: {e}") from e
        logger.info(f"✅ Connected to MongoDB ({self.db.name})")

    def disconnect(self):
        if self.client:
            self.client.close()
            logger.debug("Disconnected from MongoDB.")
        self.client = None
        self.db = None

    def _require_db(self):
        if self.db is None:
            raise StoreError("Not connected to MongoDB.")
        return self.db

    def define_collection(self, name: str, descriptor: SchemaDescriptor, validate: bool = True) -> None:
        db = self._require_db()
        validator = build_validator(descriptor) if validate else None
        try:
            if name not in db.list_collection_names():
                if validator:
                    db.create_collection(name, validator=validator)
                else:
                    db.create_collection(name)
            elif validator:
                # Collection survives from an earlier run: replace its validator
                db.command("collMod", name, validator=validator)
        except PyMongoError as e:
            raise StoreError(str(e)) from e

    def create_index(self, request: IndexRequest) -> str:
        db = self._require_db()
        try:
            return db[request.collection].create_index(
                request.keys,
                unique=request.unique,
                name=request.name,
            )
        except PyMongoError as e:
            raise StoreError(str(e)) from e

    def clear(self, name: str) -> int:
        db = self._require_db()
        try:
            return db[name].delete_many({}).deleted_count
        except PyMongoError as e:
            raise StoreError(str(e)) from e

    def insert_many(self, name: str, documents: list[dict]) -> BatchWriteResult:
        # Unordered: one rejected document doesn't stop the rest of the batch.
        if not documents:
            return BatchWriteResult()
        db = self._require_db()
        try:
            result = db[name].insert_many(documents, ordered=False)
            return BatchWriteResult(inserted=len(result.inserted_ids))
        except BulkWriteError as e:
            details = e.details or {}
            write_errors = details.get("writeErrors") or []
            message = write_errors[0].get("errmsg", "") if write_errors else str(e)
            return BatchWriteResult(
                inserted=details.get("nInserted", 0),
                failed=len(write_errors) or 1,
                message=message,
            )
        except PyMongoError as e:
            raise StoreError(str(e)) from e

    def count(self, name: str) -> int:
        db = self._require_db()
        try:
            return db[name].count_documents({})
        except PyMongoError as e:
            raise StoreError(str(e)) from e

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
