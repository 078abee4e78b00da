from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

"""Processing result models.

Aggregates per-file statistics and run-level metrics used for the SUMMARY
output line and the CLI exit code.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics (internal helper for ProcessingResult)."""
    file_name: str
    status: str  # success/skipped/failed
    accepted_rows: int
    discarded_rows: int
    elapsed_seconds: float


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of one consolidation run."""
    success_files: int
    skipped_files: int  # structural mismatch
    failed_files: int  # unreadable
    accepted_rows: int
    discarded_rows: int
    total_records: int  # distinct consolidation keys
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float  # (accepted + discarded) / elapsed
    output_file: Path | None = None
    archive_file: Path | None = None
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.skipped_files + self.failed_files
