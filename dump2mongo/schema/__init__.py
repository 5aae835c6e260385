# ==============================================
# TOPIC 2: SCHEMA (DDL -> collections)
# ==============================================
#
# This package reads CREATE TABLE statements and decides what
# the documents of every table look like in MongoDB.
#
# Modules:
# --------
# - type_mapper.py    → MySQL column type -> FieldMapping, value casting
# - definitions.py    → Table / column / index data classes
# - ddl_processor.py  → Parse DDL, build descriptors, create collections + indexes
#
# ==============================================

from .type_mapper import FieldType, FieldMapping, map_type, cast_value
from .definitions import (
    ColumnDefinition,
    TableDefinition,
    IndexDefinition,
    IndexKind,
    ForeignKeyDefinition,
    IndexRequest,
    TableBinding,
    SchemaDescriptor,
)
from .ddl_processor import DDLProcessor, SchemaResult, parse_tables, build_descriptor, collection_name_for

__all__ = [
    "FieldType",
    "FieldMapping",
    "map_type",
    "cast_value",
    "ColumnDefinition",
    "TableDefinition",
    "IndexDefinition",
    "IndexKind",
    "ForeignKeyDefinition",
    "IndexRequest",
    "TableBinding",
    "SchemaDescriptor",
    "DDLProcessor",
    "SchemaResult",
    "parse_tables",
    "build_descriptor",
    "collection_name_for",
]
