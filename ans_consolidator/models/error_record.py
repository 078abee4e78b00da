from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

"""ErrorRecord model for error logging.

This module defines the ErrorRecord dataclass used for structured error logging
during consolidation. It supports row=-1 as a sentinel value for file-level
events (structural mismatch, unreadable file, corrupt archive) where no single
row is at fault.
"""

__all__ = [
    "FILE_LEVEL_ROW",
    "ErrorRecord",
]

FILE_LEVEL_ROW = -1


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Source filename being processed
        row: Row number (1-based, header is row 1). -1 for file-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def for_file(file: str, error_type: str, message: str) -> ErrorRecord:
        """File-level event: no single row is at fault."""
        return ErrorRecord.create(file, FILE_LEVEL_ROW, error_type, message)

    def to_json_line(self) -> str:
        # fixed key set: dataclass -> dict -> json
        return json.dumps(asdict(self), ensure_ascii=False)
