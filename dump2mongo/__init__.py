# ==============================================
# dump2mongo - MySQL dump to MongoDB converter
# ==============================================
#
# Package Structure (4 Topics + Orchestrator):
#
# dump2mongo/
# ├── preprocess/     # Topic 1: Clean the dump, split DDL vs INSERT
# ├── schema/         # Topic 2: CREATE TABLE -> descriptors, collections, indexes
# ├── loading/        # Topic 3: INSERT -> documents, batched writes
# ├── storage/        # Topic 4: MongoDB connection and operations
# ├── config.py       # Configuration management
# ├── errors.py       # Fatal error types
# ├── results.py      # Per-unit failure / write result types
# ├── logger.py       # Logging setup
# ├── migration.py    # Final orchestrator class
# └── cli.py          # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
