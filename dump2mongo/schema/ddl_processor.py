# ==============================================
# DDLProcessor
# ==============================================
#
# PURPOSE:
#   Reads the CREATE TABLE statements of a dump, infers one
#   SchemaDescriptor per table, creates the matching collections
#   and then their indexes.
#
# WHY THIS CLASS EXISTS:
#   The Insert Processor needs, for every table, the collection
#   to write into and the declared column order (for INSERTs
#   without a column list). Both come from here, so DDL processing
#   must finish completely before any row is loaded.
#
# FUNCTIONS:
# ----------
# - parse_tables(ddl_text) -> (list[TableDefinition], list[UnitFailure])
#       Parse with sqlglot (MySQL dialect). A parse error on the text
#       raises SchemaParseError. A table that can't be interpreted is
#       skipped and reported, never fatal.
#
# - build_descriptor(table) -> SchemaDescriptor
# - collection_name_for(table_name) -> str      ("orders" -> "Orders")
# - build_index_requests(table, collection, descriptor)
#       -> (list[IndexRequest], list[UnitFailure])
#
# CLASS: DDLProcessor
# -------------------
#   - __init__(store, validate_schema=True)
#   - process_schema(ddl_text) -> SchemaResult
#       Pass 1: define every collection.
#       Pass 2: create every non-primary index. One failed index
#               does not block the others.
#
# ==============================================

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Optional

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from dump2mongo.errors import SchemaParseError, StoreError
from dump2mongo.results import FailureKind, UnitFailure
from dump2mongo.schema.definitions import (
    ColumnDefinition,
    ForeignKeyDefinition,
    IndexDefinition,
    IndexKind,
    IndexRequest,
    SchemaDescriptor,
    TableBinding,
    TableDefinition,
)
from dump2mongo.schema.type_mapper import map_type

logger = logging.getLogger(__name__)

DIALECT = "mysql"

# sqlglot type names that differ from the MySQL spelling
SQLGLOT_TYPE_NAMES = {
    "uint": "int",
    "ubigint": "bigint",
    "usmallint": "smallint",
    "umediumint": "mediumint",
    "utinyint": "tinyint",
    "udecimal": "decimal",
    "udouble": "double",
    "ufloat": "float",
    "timestamptz": "timestamp",
    "timestampltz": "timestamp",
    "nchar": "char",
    "nvarchar": "varchar",
}


# ----------------------------------------------
# sqlglot AST helpers
# ----------------------------------------------

def _identifier_name(node: Any) -> Optional[str]:
    if node is None:
        return None
    if isinstance(node, str):
        return node or None
    if isinstance(node, exp.Ordered):
        node = node.this
    name = node.name
    if not name:
        ident = node.find(exp.Identifier)
        name = ident.name if ident is not None else ""
    return name or None


def _names(nodes) -> tuple[str, ...]:
    names = (_identifier_name(node) for node in nodes or [])
    return tuple(name for name in names if name)


def _number(text: str):
    try:
        return int(text)
    except ValueError:
        return float(text)


def _literal_value(node: Any) -> Any:
    """Python value of a DEFAULT expression; non-literals keep their SQL text."""
    if node is None or isinstance(node, exp.Null):
        return None
    if isinstance(node, exp.Boolean):
        return node.this
    if isinstance(node, exp.Literal):
        return node.this if node.is_string else _number(node.this)
    if isinstance(node, exp.Neg) and isinstance(node.this, exp.Literal) and not node.this.is_string:
        return -_number(node.this.this)
    return node.sql(dialect=DIALECT)


def _describe_type(kind: Any) -> tuple[str, tuple[str, ...]]:
    """(mysql type name, type parameters) of a column's DataType node."""
    if not isinstance(kind, exp.DataType):
        return "", ()

    if kind.this == exp.DataType.Type.USERDEFINED:
        type_name = str(kind.args.get("kind") or "")
    elif isinstance(kind.this, exp.DataType.Type):
        type_name = kind.this.value
    else:
        type_name = str(kind.this or "")
    type_name = type_name.lower()

    if type_name in ("boolean", "bool"):
        # BOOL is an alias for TINYINT(1) in MySQL
        return "tinyint", ("1",)

    params = tuple(p.name or p.sql(dialect=DIALECT) for p in kind.expressions)
    return SQLGLOT_TYPE_NAMES.get(type_name, type_name), params


def _column_from_def(node: exp.ColumnDef) -> Optional[ColumnDefinition]:
    name = _identifier_name(node.this)
    if not name:
        return None

    source_type, params = _describe_type(node.args.get("kind"))
    options = dict(
        nullable=True,
        has_default=False,
        default_value=None,
        is_unique=False,
        is_primary_key=False,
        auto_increment=False,
    )

    for constraint in node.args.get("constraints") or []:
        kind = constraint.args.get("kind") if isinstance(constraint, exp.ColumnConstraint) else constraint
        if isinstance(kind, exp.NotNullColumnConstraint):
            options["nullable"] = bool(kind.args.get("allow_null"))
        elif isinstance(kind, exp.DefaultColumnConstraint):
            options["has_default"] = True
            options["default_value"] = _literal_value(kind.this)
        elif isinstance(kind, exp.UniqueColumnConstraint):
            options["is_unique"] = True
        elif isinstance(kind, exp.PrimaryKeyColumnConstraint):
            options["is_primary_key"] = True
        elif isinstance(kind, exp.AutoIncrementColumnConstraint):
            options["auto_increment"] = True

    is_enum = source_type in ("enum", "set")
    return ColumnDefinition(
        name=name,
        source_type=source_type,
        length=None if is_enum or not params else params[0],
        scale=params[1] if not is_enum and len(params) > 1 else None,
        enum_values=tuple(v.replace("'", "") for v in params) if is_enum else None,
        **options,
    )


def _default_index_name(fields: tuple[str, ...]) -> str:
    # same naming MongoDB uses for unnamed indexes
    return "_".join(f"{name}_1" for name in fields)


def _collect_constraint(node, constraint_name, indexes: list, foreign_keys: list) -> None:
    if isinstance(node, exp.Constraint):
        name = _identifier_name(node.this)
        for inner in node.expressions:
            _collect_constraint(inner, name, indexes, foreign_keys)

    elif isinstance(node, exp.PrimaryKey):
        indexes.append(IndexDefinition(IndexKind.PRIMARY, "PRIMARY", _names(node.expressions)))

    elif isinstance(node, exp.UniqueColumnConstraint):
        target = node.this
        if isinstance(target, exp.Schema):
            fields = _names(target.expressions)
            name = _identifier_name(target.this) if target.this is not None else None
        else:
            fields = ()
            name = None
        if fields:
            name = name or constraint_name or _default_index_name(fields)
            indexes.append(IndexDefinition(IndexKind.UNIQUE, name, fields))

    elif isinstance(node, exp.IndexColumnConstraint):
        fields = _names(node.expressions)
        if fields:
            kind = str(node.args.get("kind") or "").upper()
            name = _identifier_name(node.this) or constraint_name or _default_index_name(fields)
            index_kind = IndexKind.UNIQUE if kind == "UNIQUE" else IndexKind.PLAIN
            indexes.append(IndexDefinition(index_kind, name, fields))

    elif isinstance(node, exp.ForeignKey):
        reference = node.args.get("reference")
        referenced_table = None
        referenced_fields: tuple[str, ...] = ()
        if reference is not None:
            table = reference.find(exp.Table)
            referenced_table = table.name if table is not None else None
            if isinstance(reference.this, exp.Schema):
                referenced_fields = _names(reference.this.expressions)
        foreign_keys.append(ForeignKeyDefinition(
            name=constraint_name,
            fields=_names(node.expressions),
            referenced_table=referenced_table,
            referenced_fields=referenced_fields,
        ))


def _table_from_create(statement: exp.Create) -> TableDefinition:
    """Raises ValueError when the statement carries no usable table structure."""
    schema = statement.this
    table = schema.this if isinstance(schema, exp.Schema) else schema
    name = table.name if isinstance(table, exp.Table) else ""
    if not name:
        raise ValueError("missing table name")
    if not isinstance(schema, exp.Schema):
        raise ValueError(f"table {name} has no column definitions")

    columns: list[ColumnDefinition] = []
    indexes: list[IndexDefinition] = []
    foreign_keys: list[ForeignKeyDefinition] = []
    seen: set[str] = set()

    for node in schema.expressions:
        if isinstance(node, exp.ColumnDef):
            column = _column_from_def(node)
            if column is None:
                logger.debug(f"  ↳ Skipped unnamed column in {name}")
                continue
            if column.name in seen:
                logger.debug(f"  ↳ Skipped duplicate column {column.name} in {name}")
                continue
            seen.add(column.name)
            columns.append(column)
        else:
            _collect_constraint(node, None, indexes, foreign_keys)

    if not columns:
        raise ValueError(f"table {name} has no column definitions")

    # column-level PRIMARY KEY / UNIQUE become indexes like their table-level forms
    has_primary = any(index.kind == IndexKind.PRIMARY for index in indexes)
    for column in columns:
        if column.is_primary_key and not has_primary:
            indexes.append(IndexDefinition(IndexKind.PRIMARY, "PRIMARY", (column.name,)))
            has_primary = True
        if column.is_unique and not any(index.fields == (column.name,) for index in indexes):
            indexes.append(IndexDefinition(IndexKind.UNIQUE, column.name, (column.name,)))

    return TableDefinition(
        name=name,
        columns=tuple(columns),
        indexes=tuple(indexes),
        foreign_keys=tuple(foreign_keys),
    )


# ----------------------------------------------
# Public functions
# ----------------------------------------------

def parse_tables(ddl_text: str) -> tuple[list[TableDefinition], list[UnitFailure]]:
    """
    Parse every CREATE TABLE statement in ddl_text.

    Returns:
        (tables in statement order, per-table failures)

    Raises:
        SchemaParseError: if sqlglot cannot parse the text
    """
    if not ddl_text or not ddl_text.strip():
        return [], []

    try:
        statements = sqlglot.parse(ddl_text, read=DIALECT)
    except SqlglotError as e:
        raise SchemaParseError(f"SQL parse error: {e}") from e

    tables: list[TableDefinition] = []
    failures: list[UnitFailure] = []
    for statement in statements:
        if not isinstance(statement, exp.Create):
            continue
        if str(statement.args.get("kind") or "").upper() != "TABLE":
            continue
        try:
            tables.append(_table_from_create(statement))
        except ValueError as e:
            failures.append(UnitFailure(FailureKind.TABLE, _identifier_name(statement.this) or "<unnamed>", str(e)))
    return tables, failures


def collection_name_for(table_name: str) -> str:
    return table_name[:1].upper() + table_name[1:]


def build_descriptor(table: TableDefinition) -> SchemaDescriptor:
    descriptor: SchemaDescriptor = {}
    for column in table.columns:
        descriptor[column.name] = replace(
            map_type(column.source_type, column),
            required=not column.nullable,
            default=column.default_value,
            # AUTO_INCREMENT columns may be omitted from an INSERT
            has_default=column.has_default or column.auto_increment,
            unique=column.is_unique,
        )
    return descriptor


def build_index_requests(
    table: TableDefinition,
    collection: str,
    descriptor: SchemaDescriptor,
) -> tuple[list[IndexRequest], list[UnitFailure]]:
    requests: list[IndexRequest] = []
    failures: list[UnitFailure] = []
    for index in table.indexes:
        # _id already gives every collection a unique identity index
        if index.kind == IndexKind.PRIMARY:
            continue
        missing = [name for name in index.fields if name not in descriptor]
        if missing:
            failures.append(UnitFailure(
                FailureKind.INDEX,
                f"{collection}.{index.name}",
                f"references unknown field(s) {', '.join(missing)}",
            ))
            continue
        requests.append(IndexRequest(
            table=table.name,
            collection=collection,
            fields=index.fields,
            unique=index.kind == IndexKind.UNIQUE,
            name=index.name,
        ))
    return requests, failures


@dataclass
class SchemaResult:
    tables: list[TableDefinition] = field(default_factory=list)
    descriptors: dict[str, SchemaDescriptor] = field(default_factory=dict)  # by table name as written
    bindings: dict[str, TableBinding] = field(default_factory=dict)  # by lowercase table name
    index_requests: list[IndexRequest] = field(default_factory=list)
    indexes_created: int = 0
    failures: list[UnitFailure] = field(default_factory=list)

    @property
    def collections(self) -> dict[str, str]:
        return {key: binding.collection for key, binding in self.bindings.items()}


class DDLProcessor:
    """Turns DDL text into collections, descriptors and indexes on a store."""

    def __init__(self, store, validate_schema: bool = True):
        self._store = store
        self._validate_schema = validate_schema

    def process_schema(self, ddl_text: str) -> SchemaResult:
        tables, failures = parse_tables(ddl_text)
        result = SchemaResult(tables=tables)
        for failure in failures:
            self._record(result, failure)

        # Pass 1: collections
        pending: list[IndexRequest] = []
        for table in tables:
            descriptor = build_descriptor(table)
            result.descriptors[table.name] = descriptor
            collection = collection_name_for(table.name)

            try:
                self._store.define_collection(collection, descriptor, validate=self._validate_schema)
            except StoreError as e:
                self._record(result, UnitFailure(
                    FailureKind.TABLE, table.name, f"could not create collection {collection}: {e}"
                ))
                continue

            key = table.name.lower()
            if key in result.bindings:
                logger.warning(f"⚠️ Table {table.name} replaces {result.bindings[key].table} for INSERT dispatch")
            result.bindings[key] = TableBinding(table.name, collection, descriptor)
            logger.info(f"🔹 Created collection {collection} for table: {table.name}")

            for fk in table.foreign_keys:
                logger.debug(
                    f"  ↳ Dropped foreign key {fk.name or ''} ({', '.join(fk.fields)}) "
                    f"-> {fk.referenced_table}"
                )

            requests, index_failures = build_index_requests(table, collection, descriptor)
            pending.extend(requests)
            for failure in index_failures:
                self._record(result, failure)

        # Pass 2: indexes, only once every collection exists
        result.index_requests = pending
        for request in pending:
            try:
                self._store.create_index(request)
                result.indexes_created += 1
                logger.debug(f"  ↳ Created index {request.name} on {request.collection}")
            except StoreError as e:
                self._record(result, UnitFailure(
                    FailureKind.INDEX, f"{request.collection}.{request.name}", str(e)
                ))

        return result

    @staticmethod
    def _record(result: SchemaResult, failure: UnitFailure) -> None:
        result.failures.append(failure)
        logger.warning(f"❌ Skipped {failure}")
