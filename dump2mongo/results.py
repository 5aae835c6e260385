# ==============================================
# Results (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes describing the OUTCOME of a unit of work.
#   A failed table, index, tuple or batch is recorded here as a value
#   instead of being raised, so one bad unit can never stop the others.
#
# ENUMS:
# ------
# - FailureKind(Enum): TABLE, INDEX, STATEMENT, TUPLE, BATCH, CLEAR
#
# CLASSES:
# --------
# - UnitFailure (dataclass)
#     kind: FailureKind   → what kind of unit failed
#     unit: str           → which unit (table name, index name, ...)
#     reason: str         → human-readable explanation
#
# - BatchWriteResult (dataclass)
#     inserted: int       → documents accepted by the store
#     failed: int         → documents rejected by the store
#     message: str        → first rejection reason, if any
#
# ==============================================

from enum import Enum
from dataclasses import dataclass


class FailureKind(Enum):
    """
    Granularity at which a failure was isolated.

    Only TUPLE and BATCH failures count towards the error total;
    the others are reported but do not represent lost rows.
    """
    TABLE = "table"
    INDEX = "index"
    STATEMENT = "statement"
    TUPLE = "tuple"
    BATCH = "batch"
    CLEAR = "clear"


@dataclass(frozen=True)
class UnitFailure:
    kind: FailureKind
    unit: str
    reason: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.unit}: {self.reason}"


@dataclass(frozen=True)
class BatchWriteResult:
    inserted: int = 0
    failed: int = 0
    message: str = ""  # first rejection reason reported by the store

    @property
    def ok(self) -> bool:
        return self.failed == 0
