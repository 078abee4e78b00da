from __future__ import annotations

from ..models.processing_result import ProcessingResult
from ..models.source_file import SourceFile

"""Summary line rendering.

Format:
SUMMARY files={total} success={success} skipped={skipped} failed={failed}
rows={accepted} discarded={discarded} records={records} elapsed_sec={elapsed}
throughput_rps={throughput}
"""


def _format_number(value: float) -> str:
    # integers without decimals, tiny values without scientific notation
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2025, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2025, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, skipped_files=0, failed_files=0, accepted_rows=1000,
        ...     discarded_rows=0, total_records=10, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, throughput_rows_per_sec=500.0,
        ... )
        >>> render_summary_line(result)  # doctest: +ELLIPSIS
        'SUMMARY files=1 success=1 skipped=0 failed=0 rows=1000 discarded=0 records=10 ...'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"skipped={result.skipped_files} "
        f"failed={result.failed_files} "
        f"rows={result.accepted_rows} "
        f"discarded={result.discarded_rows} "
        f"records={result.total_records} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_rows_per_sec)}"
    )


def render_file_line(source: SourceFile) -> str:
    """Per-file line: ``file=<name> processed=<n> discarded=<m> [reason=count ...]``."""
    parts = [
        f"file={source.name}",
        f"processed={source.accepted_rows}",
        f"discarded={source.discarded_rows}",
    ]
    for reason, count in sorted(source.discarded.items(), key=lambda kv: kv[0].value):
        if count:
            parts.append(f"{reason.value}={count}")
    return " ".join(parts)
