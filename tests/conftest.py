# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# This file contains shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - store           → RecordingStore, an in-memory stand-in for MongoStore
# - shops_dump      → path of the customers/orders/products dump (no data)
# - write_dump      → factory writing a dump text to tmp_path
# - clean_env       → removes every dump2mongo environment variable
#
# NOTES:
# ------
# - No live MongoDB is needed; MongoStore itself is tested with mocks
# - The package logger is reset after every test so handlers never
#   hold on to a captured stdout
# ==============================================

import logging
from collections import defaultdict
from pathlib import Path

import pytest

from dump2mongo.errors import StoreError
from dump2mongo.logger import PACKAGE_LOGGER
from dump2mongo.results import BatchWriteResult

FIXTURES_DIR = Path(__file__).parent / "fixtures"

ENV_VARS = [
    "MONGODB_URI",
    "MONGO_TIMEOUT_MS",
    "SQL_DUMP_PATH",
    "CLEAR_COLLECTIONS",
    "BATCH_SIZE",
    "REPORT_INTERVAL_MS",
    "LOG_LEVEL",
    "VALIDATE_SCHEMA",
]


class RecordingStore:
    """
    In-memory store with the same operations as MongoStore.

    Every call is appended to `calls` as (operation, target) so tests
    can check ordering. Failures are injected per target name.
    """

    def __init__(self):
        self.calls = []
        self.collections = {}
        self.validated = {}
        self.indexes = []
        self.documents = defaultdict(list)
        self.connected = False
        self.fail_define = set()
        self.fail_index = set()
        self.fail_insert = set()
        self.fail_clear = set()
        self.fail_count = set()
        self.reject_per_batch = 0

    def connect(self):
        self.calls.append(("connect", None))
        self.connected = True

    def disconnect(self):
        self.calls.append(("disconnect", None))
        self.connected = False

    def define_collection(self, name, descriptor, validate=True):
        self.calls.append(("define_collection", name))
        if name in self.fail_define:
            raise StoreError(f"cannot create {name}")
        self.collections[name] = descriptor
        self.validated[name] = validate

    def create_index(self, request):
        self.calls.append(("create_index", request.name))
        if request.name in self.fail_index:
            raise StoreError(f"cannot create index {request.name}")
        self.indexes.append(request)
        return request.name

    def clear(self, name):
        self.calls.append(("clear", name))
        if name in self.fail_clear:
            raise StoreError(f"cannot clear {name}")
        deleted = len(self.documents[name])
        self.documents[name] = []
        return deleted

    def insert_many(self, name, documents):
        self.calls.append(("insert_many", name))
        if name in self.fail_insert:
            raise StoreError(f"cannot write to {name}")
        rejected = min(self.reject_per_batch, len(documents))
        accepted = documents[rejected:]
        self.documents[name].extend(accepted)
        return BatchWriteResult(
            inserted=len(accepted),
            failed=rejected,
            message="duplicate key" if rejected else "",
        )

    def count(self, name):
        if name in self.fail_count:
            raise StoreError(f"cannot count {name}")
        return len(self.documents[name])

    def operations(self, operation):
        return [target for op, target in self.calls if op == operation]


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def shops_dump():
    return FIXTURES_DIR / "shops.sql"


@pytest.fixture
def write_dump(tmp_path):
    def _write(text, name="dump.sql"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so delenv records a value and monkeypatch undoes
    # whatever load_dotenv writes during the test
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
