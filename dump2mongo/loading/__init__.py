# ==============================================
# TOPIC 3: LOADING (INSERT -> documents)
# ==============================================
#
# This package turns INSERT statements into documents and
# writes them, in batches, through the document store.
#
# Modules:
# --------
# - value_decoder.py     → Tokenize VALUES tuples, decode SQL literals
# - insert_processor.py  → Build, cast, batch and write documents
#
# ==============================================

from .value_decoder import decode_token, iter_rows, scan_tuples, DecodedRow, TupleDecodeError, MalformedValues
from .insert_processor import InsertProcessor, InsertStatement, LoadOptions, LoadResult, parse_insert

__all__ = [
    "decode_token",
    "iter_rows",
    "scan_tuples",
    "DecodedRow",
    "TupleDecodeError",
    "MalformedValues",
    "InsertProcessor",
    "InsertStatement",
    "LoadOptions",
    "LoadResult",
    "parse_insert",
]
