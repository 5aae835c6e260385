# ==============================================
# TOPIC 4: STORAGE (MongoDB)
# ==============================================
#
# This package owns the connection to MongoDB and every write
# the migration makes: collections, validators, indexes, documents.
#
# Modules:
# --------
# - mongo_store.py  → MongoDB connection and operations
#
# ==============================================

from .mongo_store import MongoStore, build_validator

__all__ = ["MongoStore", "build_validator"]
