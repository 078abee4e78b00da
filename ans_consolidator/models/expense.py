from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

"""Expense domain models: normalized entries, consolidation keys and records.

ExpenseEntry is transient (one accepted source row). ConsolidatedRecord is
owned by the Consolidator for the duration of one run and is the unit of
export.
"""

__all__ = [
    "DiscardReason",
    "ExpenseEntry",
    "NormalizationOutcome",
    "ConsolidationKey",
    "RecordStatus",
    "ConsolidatedRecord",
]


class DiscardReason(Enum):
    """Why a data row did not produce an ExpenseEntry."""
    MISSING_DATE = "missing_date"
    MISSING_ID = "missing_id"
    BAD_DATE = "bad_date"
    ZERO_MOVEMENT = "zero_movement"
    PARSE_FAILURE = "parse_failure"


@dataclass(frozen=True)
class ExpenseEntry:
    """One accepted source row after normalization."""
    operator_id: str  # regulator-assigned code (REG_ANS), trimmed
    operator_name: str  # directory name or REG_ANS_<id> fallback
    year: int
    quarter: int  # 1-4
    amount: float  # |closing - opening|


@dataclass(frozen=True)
class NormalizationOutcome:
    """Result of normalizing a row: exactly one of entry / reason is set."""
    entry: ExpenseEntry | None = None
    reason: DiscardReason | None = None
    detail: str | None = None

    @property
    def accepted(self) -> bool:
        return self.entry is not None

    @staticmethod
    def accept(entry: ExpenseEntry) -> NormalizationOutcome:
        return NormalizationOutcome(entry=entry)

    @staticmethod
    def discard(reason: DiscardReason, detail: str | None = None) -> NormalizationOutcome:
        return NormalizationOutcome(reason=reason, detail=detail)


class ConsolidationKey(NamedTuple):
    """(operator, year, quarter); tuple ordering gives the export order."""
    operator_id: str
    year: int
    quarter: int


class RecordStatus(Enum):
    OK = "OK"
    NEGATIVE_AMOUNT = "NEGATIVE_AMOUNT"
    NAME_CONFLICT = "NAME_CONFLICT"


@dataclass
class ConsolidatedRecord:
    """Running aggregate for one ConsolidationKey.

    Status is decided by the sign of the first amount only; later entries
    can move it to NAME_CONFLICT, which is never cleared.
    """
    operator_id: str
    operator_name: str
    year: int
    quarter: int
    amount: float
    status: RecordStatus = RecordStatus.OK

    @property
    def key(self) -> ConsolidationKey:
        return ConsolidationKey(self.operator_id, self.year, self.quarter)
