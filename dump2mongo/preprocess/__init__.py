# ==============================================
# TOPIC 1: PREPROCESSING
# ==============================================
#
# This package turns a raw dump file into two texts that the
# rest of the pipeline can consume: the DDL (CREATE TABLE ...)
# and the row data (INSERT INTO ...).
#
# Modules:
# --------
# - cleaner.py  → Strip comments / session statements, split DDL vs INSERT
#
# ==============================================

from .cleaner import clean, split_statements, is_insert, strip_leading_comments

__all__ = ["clean", "split_statements", "is_insert", "strip_leading_comments"]
