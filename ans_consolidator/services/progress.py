from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.source_file import FileStatus, SourceFile

"""Progress display with tqdm (TTY only).

One bar counts finished files; its postfix carries the running row and
record totals. Disabled when stdout is not a TTY so CI logs stay free of
control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """File-level progress bar; a no-op without a TTY."""

    def __init__(self, total_files: int, *, description: str = "Consolidating files") -> None:
        self.total_files = total_files
        self.description = description
        self.files_done = 0
        self.problem_files = 0

        self.pbar: TqdmType[Any] | None = None
        if is_tty_enabled() and total_files > 0:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                ncols=80,
                ascii=True,
            )

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    def advance(self, source: SourceFile, *, rows: int, records: int) -> None:
        """Account for one finished file (any status)."""
        self.files_done += 1
        if source.status is not FileStatus.SUCCESS:
            self.problem_files += 1
        if self.pbar is None:
            return
        self.pbar.set_description(f"{self.description} ({source.name})")
        postfix = {"rows": rows, "records": records}
        if self.problem_files:
            postfix["problems"] = self.problem_files
        self.pbar.set_postfix(postfix)
        self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.set_description(self.description)
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
