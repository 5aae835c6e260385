# ==============================================
# Definitions (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes for what the DDL Processor reads out of a dump
#   (tables, columns, indexes, foreign keys) and for what it hands
#   to the store and to the Insert Processor.
#
# ENUMS:
# ------
# - IndexKind(Enum): PRIMARY, UNIQUE, PLAIN
#
# CLASSES:
# --------
# - ColumnDefinition     → one column clause of a CREATE TABLE
# - IndexDefinition      → PRIMARY KEY / UNIQUE KEY / KEY clause
# - ForeignKeyDefinition → FOREIGN KEY clause (recorded, never migrated)
# - TableDefinition      → one CREATE TABLE statement
# - IndexRequest         → an index the store must create
# - TableBinding         → table → (collection, descriptor), used to
#                          dispatch INSERT rows
#
# A SchemaDescriptor is a plain ordered dict[str, FieldMapping]; the
# key order is the column declaration order and is what positional
# INSERTs (no column list) are zipped against.
#
# ==============================================

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Optional

from dump2mongo.schema.type_mapper import FieldMapping


SchemaDescriptor = dict[str, FieldMapping]


class IndexKind(Enum):
    PRIMARY = "primary"
    UNIQUE = "unique"
    PLAIN = "plain"


@dataclass(frozen=True)
class ColumnDefinition:
    name: str
    source_type: str  # lowercased, parameters stripped, e.g. "varchar"
    length: Optional[str] = None  # first type parameter as written, "1" for tinyint(1)
    scale: Optional[str] = None  # second type parameter, "2" for decimal(10,2)
    nullable: bool = True
    has_default: bool = False
    default_value: Any = None
    is_unique: bool = False
    enum_values: Optional[tuple[str, ...]] = None
    is_primary_key: bool = False
    auto_increment: bool = False


@dataclass(frozen=True)
class IndexDefinition:
    kind: IndexKind
    name: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class ForeignKeyDefinition:
    name: Optional[str]
    fields: tuple[str, ...]
    referenced_table: Optional[str]
    referenced_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class TableDefinition:
    name: str
    columns: tuple[ColumnDefinition, ...]
    indexes: tuple[IndexDefinition, ...] = ()
    foreign_keys: tuple[ForeignKeyDefinition, ...] = ()


@dataclass(frozen=True)
class IndexRequest:
    table: str
    collection: str
    fields: tuple[str, ...]
    unique: bool
    name: str

    @property
    def keys(self) -> list[tuple[str, int]]:
        """Index specification in pymongo's [(field, direction)] form, all ascending."""
        return [(name, 1) for name in self.fields]


@dataclass
class TableBinding:
    table: str
    collection: str
    descriptor: SchemaDescriptor = field(default_factory=dict)

    @property
    def field_order(self) -> list[str]:
        return list(self.descriptor)
