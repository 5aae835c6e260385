# ==============================================
# Errors
# ==============================================
#
# PURPOSE:
#   Exceptions that END a migration run. Anything that only affects
#   one table, index, tuple or batch is NOT an exception here; those
#   are collected as UnitFailure values (see results.py).
#
# CLASSES:
# --------
# - MigrationError          → base class, caught by the CLI (exit code 1)
# - FatalConnectionError    → MongoDB unreachable / bad URI at startup
# - SchemaParseError        → the DDL text could not be parsed at all
# - DumpReadError           → the dump file could not be read
# - ConfigError             → invalid configuration value
# - StoreError              → a single store operation failed at runtime
#                             (recoverable, turned into a UnitFailure)
#
# ==============================================


class MigrationError(Exception):
    """Base class for errors that abort the whole migration."""


class FatalConnectionError(MigrationError):
    """Could not connect to the document store."""


class SchemaParseError(MigrationError):
    """The DDL text is not parsable as a whole."""


class DumpReadError(MigrationError):
    """The dump file is missing or unreadable."""


class ConfigError(MigrationError, ValueError):
    """A configuration value is out of range or malformed."""


class StoreError(Exception):
    """A single store operation (define, index, clear, insert) failed."""
