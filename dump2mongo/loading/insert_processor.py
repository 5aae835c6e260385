# ==============================================
# InsertProcessor
# ==============================================
#
# PURPOSE:
#   Reads the INSERT statements of a dump, turns every value tuple
#   into a document and bulk-writes the documents into the
#   collection created for the statement's table.
#
# CLASS: InsertProcessor
# ----------------------
#   Stateful during one load - holds a per-table buffer of pending
#   documents and the time of the last progress report.
#
#   Constructor:
#   ------------
#   - __init__(store, options=None, progress_callback=None)
#
#   Methods:
#   --------
#   - load_inserts(insert_text, bindings) -> LoadResult
#       1. Clear every bound collection (if options.clear_existing)
#       2. For each statement: look up the table binding, decode
#          each tuple, build + cast a document, buffer it
#       3. Write buffers in chunks of options.batch_size
#          (unordered bulk insert, per-table order preserved)
#       4. Flush what is left at the end
#
# ERROR POLICY:
#   Nothing in here raises for bad data. A bad tuple costs one error,
#   a rejected batch costs its rejected documents (or one error when
#   the count is unknown), an unknown table costs nothing but a
#   warning. Failed writes are never retried.
#
# ==============================================

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from dump2mongo.errors import StoreError
from dump2mongo.loading.value_decoder import iter_rows
from dump2mongo.preprocess.cleaner import STATEMENT_TERMINATOR, strip_leading_comments
from dump2mongo.results import FailureKind, UnitFailure
from dump2mongo.schema.definitions import SchemaDescriptor, TableBinding
from dump2mongo.schema.type_mapper import cast_value

logger = logging.getLogger(__name__)

INSERT_PATTERN = re.compile(
    r"^INSERT\s+INTO\s+"
    r"(?:`?[\w$]+`?\s*\.\s*)?"  # optional database qualifier
    r"`?([\w$]+)`?\s*"
    r"(?:\(([^)]*)\))?\s*"
    r"VALUES?\s*(.*)$",
    re.IGNORECASE | re.DOTALL,
)


@dataclass
class LoadOptions:
    clear_existing: bool = True
    batch_size: int = 500
    report_interval_ms: int = 1000


@dataclass
class InsertStatement:
    table: str
    columns: Optional[list[str]]
    values: str


@dataclass
class LoadResult:
    documents_written: int = 0
    error_count: int = 0
    statements_seen: int = 0
    statements_skipped: int = 0
    failures: list[UnitFailure] = field(default_factory=list)


def parse_insert(statement: str) -> Optional[InsertStatement]:
    match = INSERT_PATTERN.match(strip_leading_comments(statement).strip())
    if not match:
        return None
    table, columns_text, values = match.groups()
    columns = None
    if columns_text is not None:
        columns = [c.strip().strip("`").strip() for c in columns_text.split(",")]
    return InsertStatement(table=table, columns=columns, values=values)


def build_document(values: list[Any], columns: Optional[list[str]], binding: TableBinding) -> dict:
    """
    Zip values with the statement's column list, or with the table's
    declared column order when the statement has none. Extra values are
    dropped; missing values leave their field unset.
    """
    names = columns if columns is not None else binding.field_order
    return {name: value for name, value in zip(names, values)}


def cast_document(document: dict, descriptor: SchemaDescriptor) -> dict:
    """Raises ValueError when a value does not fit its field."""
    return {
        name: cast_value(value, descriptor[name]) if name in descriptor else value
        for name, value in document.items()
    }


class InsertProcessor:
    """Loads INSERT statements into already-created collections."""

    def __init__(
        self,
        store,
        options: Optional[LoadOptions] = None,
        progress_callback: Optional[Callable[[LoadResult], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store = store
        self._options = options or LoadOptions()
        self._progress_callback = progress_callback
        self._clock = clock
        self._last_report: Optional[float] = None

    def load_inserts(self, insert_text: str, bindings: dict[str, TableBinding]) -> LoadResult:
        result = LoadResult()
        self._last_report = None

        if self._options.clear_existing:
            self._clear_collections(bindings, result)

        buffers: dict[str, list[dict]] = {}
        for text in insert_text.split(STATEMENT_TERMINATOR):
            if not text.strip():
                continue
            result.statements_seen += 1

            statement = parse_insert(text)
            if statement is None:
                self._skip_statement(result, text.strip()[:60], "not a recognizable INSERT statement")
                continue

            key = statement.table.lower()
            binding = bindings.get(key)
            if binding is None:
                self._skip_statement(result, statement.table, "no collection found for table")
                continue

            buffer = buffers.setdefault(key, [])
            for row in iter_rows(statement.values):
                if not row.ok:
                    self._tuple_failed(result, binding, row.source, row.error)
                    continue
                try:
                    document = cast_document(
                        build_document(row.values, statement.columns, binding),
                        binding.descriptor,
                    )
                except ValueError as e:
                    self._tuple_failed(result, binding, row.source, str(e))
                    continue

                buffer.append(document)
                if len(buffer) >= self._options.batch_size:
                    self._write_batch(binding, buffer, result)
                    buffer.clear()

        for key, buffer in buffers.items():
            if buffer:
                self._write_batch(bindings[key], buffer, result)

        return result

    # ----------------------------------------------
    # Internals
    # ----------------------------------------------

    def _clear_collections(self, bindings: dict[str, TableBinding], result: LoadResult) -> None:
        logger.info("🧹 Clearing existing collections...")
        for binding in bindings.values():
            try:
                deleted = self._store.clear(binding.collection)
                logger.debug(f"  ↳ Cleared collection {binding.collection} ({deleted} documents)")
            except StoreError as e:
                failure = UnitFailure(FailureKind.CLEAR, binding.collection, str(e))
                result.failures.append(failure)
                logger.warning(f"❌ Failed to clear {binding.collection}: {e}")

    def _skip_statement(self, result: LoadResult, unit: str, reason: str) -> None:
        result.statements_skipped += 1
        result.failures.append(UnitFailure(FailureKind.STATEMENT, unit, reason))
        logger.warning(f"⚠️ Skipped INSERT for {unit}: {reason}")

    def _tuple_failed(self, result: LoadResult, binding: TableBinding, source: str, reason: str) -> None:
        result.error_count += 1
        result.failures.append(UnitFailure(FailureKind.TUPLE, f"{binding.table} ({source[:60]})", reason))
        logger.debug(f"Value parsing error ({binding.table}): {reason}")

    def _write_batch(self, binding: TableBinding, documents: list[dict], result: LoadResult) -> None:
        chunk = list(documents)
        try:
            outcome = self._store.insert_many(binding.collection, chunk)
        except StoreError as e:
            # how many documents made it is unknown
            result.error_count += 1
            result.failures.append(UnitFailure(FailureKind.BATCH, binding.collection, str(e)))
            logger.debug(f"Insert error ({binding.table}): {e}")
            return

        result.documents_written += outcome.inserted
        if not outcome.ok:
            result.error_count += outcome.failed
            reason = f"{outcome.failed} of {len(chunk)} documents rejected"
            if outcome.message:
                reason = f"{reason}: {outcome.message}"
            result.failures.append(UnitFailure(FailureKind.BATCH, binding.collection, reason))
            logger.debug(f"Insert error ({binding.table}): {reason}")

        self._report_progress(result)

    def _report_progress(self, result: LoadResult) -> None:
        now = self._clock()
        interval = self._options.report_interval_ms / 1000.0
        if self._last_report is not None and now - self._last_report < interval:
            return
        self._last_report = now
        logger.info(f"📊 Progress: {result.documents_written} documents inserted ({result.error_count} errors)")
        if self._progress_callback is not None:
            self._progress_callback(result)
