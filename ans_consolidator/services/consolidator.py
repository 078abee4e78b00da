from __future__ import annotations

import logging
from dataclasses import replace

from ..models.expense import (
    ConsolidatedRecord,
    ConsolidationKey,
    ExpenseEntry,
    RecordStatus,
)

"""Consolidation of expense entries into one record per operator/year/quarter.

Status rules:
- first entry for a key: NEGATIVE_AMOUNT if its amount is negative, else OK
- later entries only add to the running sum; the sign of the sum is never
  re-evaluated
- a later entry whose name differs (case-insensitive) sets NAME_CONFLICT,
  which overrides any other status and is never cleared
"""

logger = logging.getLogger(__name__)

__all__ = [
    "Consolidator",
]


def _same_name(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


class Consolidator:
    """Owns every ConsolidatedRecord of a run.

    Not thread-safe: in parallel runs each worker fills its own instance and
    the partial instances are folded together with merge() by one thread.
    """

    def __init__(self) -> None:
        self._records: dict[ConsolidationKey, ConsolidatedRecord] = {}
        self.ignored_entries = 0

    def add(
        self,
        operator_id: str,
        operator_name: str,
        year: int,
        quarter: int,
        amount: float,
    ) -> None:
        """Accumulate one entry. Invalid input is ignored without error."""
        if not operator_id:
            self.ignored_entries += 1
            return
        if quarter not in (1, 2, 3, 4):
            self.ignored_entries += 1
            return
        if amount == 0:
            self.ignored_entries += 1
            return

        key = ConsolidationKey(operator_id, year, quarter)
        record = self._records.get(key)
        if record is None:
            self._records[key] = ConsolidatedRecord(
                operator_id=operator_id,
                operator_name=operator_name,
                year=year,
                quarter=quarter,
                amount=amount,
                status=RecordStatus.NEGATIVE_AMOUNT if amount < 0 else RecordStatus.OK,
            )
            return

        record.amount += amount
        if not _same_name(record.operator_name, operator_name):
            if record.status is not RecordStatus.NAME_CONFLICT:
                logger.debug(
                    "name conflict key=%s stored=%r incoming=%r",
                    key, record.operator_name, operator_name,
                )
            record.status = RecordStatus.NAME_CONFLICT

    def add_entry(self, entry: ExpenseEntry) -> None:
        self.add(entry.operator_id, entry.operator_name, entry.year, entry.quarter, entry.amount)

    def merge(self, other: Consolidator) -> None:
        """Fold ``other``'s records into this one.

        Applies the same rules as add(): a key seen for the first time keeps
        the partial record as-is (including its status); an existing key sums
        amounts and flags NAME_CONFLICT on a name mismatch or when the partial
        record was already in conflict.
        """
        for key, incoming in other._records.items():
            record = self._records.get(key)
            if record is None:
                self._records[key] = replace(incoming)
                continue
            record.amount += incoming.amount
            if incoming.status is RecordStatus.NAME_CONFLICT or not _same_name(
                record.operator_name, incoming.operator_name
            ):
                record.status = RecordStatus.NAME_CONFLICT
        self.ignored_entries += other.ignored_entries

    def get(self, key: ConsolidationKey) -> ConsolidatedRecord | None:
        return self._records.get(key)

    def records(self) -> list[ConsolidatedRecord]:
        """All records sorted by (operator_id, year, quarter)."""
        return [self._records[key] for key in sorted(self._records)]

    def total_records(self) -> int:
        """Number of distinct keys (not the number of entries added)."""
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)
