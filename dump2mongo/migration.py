# ==============================================
# DumpMigrator - Final Orchestrator
# ==============================================
#
# PURPOSE:
#   This is the MAIN CLASS that ties all 4 topics together into
#   a single run. The CLI interacts with this class only.
#
# HOW IT CONNECTS THE 4 TOPICS:
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                      DumpMigrator                        │
#   │                                                          │
#   │   dump file (text)                                       │
#   │        │                                                 │
#   │        ▼                                                 │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 1: PREPROCESSING                       │        │
#   │  │  clean() → split_statements()                │        │
#   │  └──────┬───────────────────────────┬───────────┘        │
#   │         │ DDL text                  │ INSERT text        │
#   │         ▼                           │                    │
#   │  ┌──────────────────────────────┐   │                    │
#   │  │ TOPIC 2: SCHEMA              │   │                    │
#   │  │  DDLProcessor.process_schema │   │                    │
#   │  └──────┬───────────────────────┘   │                    │
#   │         │ table bindings            │                    │
#   │         ▼                           ▼                    │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 3: LOADING                             │        │
#   │  │  InsertProcessor.load_inserts                │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ every write                            │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 4: STORAGE                             │        │
#   │  │  MongoStore                                  │        │
#   │  └──────────────────────────────────────────────┘        │
#   └──────────────────────────────────────────────────────────┘
#
# CLASS: DumpMigrator
# -------------------
#
#   Constructor:
#   ------------
#   - __init__(config: AppConfig, store=None)
#       `store` defaults to a MongoStore built from config.mongo.
#       Tests pass an in-memory store instead.
#
#   Public Methods:
#   ---------------
#   - run() -> MigrationSummary
#       1. Read the dump file          (DumpReadError)
#       2. Clean + split               (never fails)
#       3. Connect to MongoDB          (FatalConnectionError)
#       4. Process the schema          (SchemaParseError)
#       5. Load the INSERT data        (never raises for bad data)
#       6. Count documents per collection  (StoreError -> warning)
#       7. Disconnect, whatever happened
#
# ==============================================

import logging
from dataclasses import dataclass, field
from pathlib import Path

from dump2mongo.config import AppConfig
from dump2mongo.errors import DumpReadError, StoreError
from dump2mongo.loading.insert_processor import InsertProcessor, LoadOptions, LoadResult
from dump2mongo.preprocess.cleaner import clean, split_statements
from dump2mongo.results import UnitFailure
from dump2mongo.schema.ddl_processor import DDLProcessor
from dump2mongo.storage.mongo_store import MongoStore

logger = logging.getLogger(__name__)


@dataclass
class MigrationSummary:
    documents_written: int = 0
    error_count: int = 0
    collections: dict[str, str] = field(default_factory=dict)  # lowercase table -> collection
    indexes_created: int = 0
    document_counts: dict[str, int] = field(default_factory=dict)  # collection -> documents after the run
    schema_failures: list[UnitFailure] = field(default_factory=list)
    load: LoadResult = field(default_factory=LoadResult)

    @property
    def failures(self) -> list[UnitFailure]:
        return self.schema_failures + self.load.failures


def read_dump(path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise DumpReadError(f"Could not read SQL file {path}: {e}") from e


class DumpMigrator:
    """Runs one dump file through preprocessing, schema, loading and storage."""

    def __init__(self, config: AppConfig, store=None):
        self._config = config
        self._store = store or MongoStore(
            uri=config.mongo.uri,
            timeout_ms=config.mongo.timeout_ms,
        )

    def run(self) -> MigrationSummary:
        logger.info("🚀 Starting SQL to MongoDB migration")

        # TOPIC 1: Preprocessing
        logger.info(f"📂 Loading SQL file: {self._config.dump_path}")
        raw = read_dump(self._config.dump_path)
        ddl_text, insert_text = split_statements(clean(raw))

        self._store.connect()
        try:
            # TOPIC 2: Schema
            logger.info("🛠️ Processing database schema...")
            schema = DDLProcessor(
                self._store,
                validate_schema=self._config.validate_schema,
            ).process_schema(ddl_text)

            # TOPIC 3: Loading
            logger.info("💾 Importing data...")
            options = LoadOptions(
                clear_existing=self._config.load.clear_collections,
                batch_size=self._config.load.batch_size,
                report_interval_ms=self._config.load.report_interval_ms,
            )
            load = InsertProcessor(self._store, options).load_inserts(insert_text, schema.bindings)
            counts = self._count_documents(schema.collections.values())
        finally:
            self._store.disconnect()

        summary = MigrationSummary(
            documents_written=load.documents_written,
            error_count=load.error_count,
            collections=schema.collections,
            indexes_created=schema.indexes_created,
            document_counts=counts,
            schema_failures=schema.failures,
            load=load,
        )
        logger.info("🎉 Migration completed!")
        return summary

    def _count_documents(self, collections) -> dict[str, int]:
        counts = {}
        for collection in collections:
            try:
                counts[collection] = self._store.count(collection)
            except StoreError as e:
                logger.warning(f"⚠️ Could not count documents in {collection}: {e}")
                continue
            logger.debug(f"  ↳ {collection}: {counts[collection]} documents")
        return counts
