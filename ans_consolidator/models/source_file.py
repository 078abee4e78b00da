from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from .expense import DiscardReason

"""SourceFile domain model and FileStatus enum.

The SourceFile represents the processing context for a single input file,
tracking its status from discovery through success, skip or failure, along
with accepted and discarded row counts.
"""


class FileStatus(Enum):
    """Status enum for SourceFile processing lifecycle.

    State transitions: pending -> processing -> (success | skipped | failed)

    - PENDING: File discovered but not yet processed
    - PROCESSING: File is currently being processed
    - SUCCESS: Header mapped and every data row normalized or discarded
    - SKIPPED: Header lacks a required column role (structural mismatch)
    - FAILED: File could not be read
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class SourceFile:
    """Processing context for a single tabular input file."""
    path: Path
    name: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: FileStatus = FileStatus.PENDING
    accepted_rows: int = 0  # rows handed to the consolidator
    discarded: dict[DiscardReason, int] = field(default_factory=dict)
    error: str | None = None  # failure / skip reason summary

    @property
    def discarded_rows(self) -> int:
        return sum(self.discarded.values())

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
