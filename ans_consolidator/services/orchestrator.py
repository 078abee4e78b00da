from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path

from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import ConsolidationConfig
from ..models.processing_result import FileStat, ProcessingResult
from ..models.source_file import FileStatus, SourceFile
from ..tabular.reader import SUPPORTED_EXTENSIONS, TabularReadError, open_source
from .archive import expand_archives
from .consolidator import Consolidator
from .exporter import ExportError, package, serialize
from .normalizer import normalize_row
from .progress import ProgressTracker
from .schema_mapper import map_columns
from .summary import render_file_line

logger = logging.getLogger(__name__)

"""Service orchestration for the consolidation run.

Coordinates the whole run: archive expansion, file discovery, per-file
normalization, consolidation, export and packaging.

Each file is normalized into its own partial Consolidator, which is merged
into the run's Consolidator only when the file completes. A file that fails
half way therefore contributes nothing, and parallel runs (workers > 1)
produce exactly the output of a sequential run because partial results are
merged in discovery order.
"""


class ProcessingError(Exception):
    """Fatal condition that aborts the run."""
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def scan_source_files(directory: Path, exclude: set[Path] | None = None) -> list[Path]:
    """Recursively list .csv/.txt/.xlsx files under ``directory``, sorted by path.

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    excluded = {p.resolve() for p in exclude} if exclude else set()
    try:
        return sorted(
            p for p in directory.rglob("*")
            if p.is_file()
            and p.suffix.lower() in SUPPORTED_EXTENSIONS
            and p.resolve() not in excluded
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def process_file(
    file_path: Path,
    config: ConsolidationConfig,
    error_log: ErrorLogBuffer,
) -> tuple[SourceFile, Consolidator | None]:
    """Normalize one file into a fresh Consolidator.

    Never raises. Returns the file context and, on success, the partial
    consolidator holding that file's entries (None when skipped or failed).
    """
    start_time = _now()
    name = file_path.name
    discarded: Counter = Counter()
    accepted = 0
    partial = Consolidator()

    try:
        rows = iter(open_source(file_path, config.encoding))
        header = next(rows, None)
        if header is None:
            logger.warning("file=%s is empty, skipped", name)
            error_log.append(ErrorRecord.for_file(name, "STRUCTURAL_MISMATCH", "empty file"))
            return SourceFile(
                path=file_path,
                name=name,
                start_time=start_time,
                end_time=_now(),
                status=FileStatus.SKIPPED,
                error="empty file",
            ), None

        role_map = map_columns(header)
        logger.debug("file=%s header=%s", name, header)
        logger.info("file=%s mapping: %s", name, role_map.describe())

        if not role_map.is_complete:
            missing = ", ".join(r.value for r in role_map.missing_roles)
            logger.warning("file=%s structural mismatch (missing %s), skipped", name, missing)
            error_log.append(
                ErrorRecord.for_file(name, "STRUCTURAL_MISMATCH", f"missing column roles: {missing}")
            )
            return SourceFile(
                path=file_path,
                name=name,
                start_time=start_time,
                end_time=_now(),
                status=FileStatus.SKIPPED,
                error=f"missing column roles: {missing}",
            ), None

        # header is row 1
        for row_number, row in enumerate(rows, start=2):
            outcome = normalize_row(row, role_map, config.operators)
            if outcome.entry is None:
                discarded[outcome.reason] += 1
                if config.log_discarded_rows:
                    error_log.append(
                        ErrorRecord.create(
                            name,
                            row_number,
                            outcome.reason.name,
                            outcome.detail or outcome.reason.value,
                        )
                    )
                continue
            partial.add_entry(outcome.entry)
            accepted += 1

    except TabularReadError as e:
        logger.warning("file=%s unreadable: %s", name, e)
        error_log.append(ErrorRecord.for_file(name, "FILE_READ_ERROR", str(e)))
        return SourceFile(
            path=file_path,
            name=name,
            start_time=start_time,
            end_time=_now(),
            status=FileStatus.FAILED,
            error=str(e),
        ), None
    except Exception as e:
        logger.warning("file=%s failed: %s", name, e)
        logger.debug("file=%s failure details", name, exc_info=True)
        error_log.append(ErrorRecord.for_file(name, "UNEXPECTED_ERROR", f"{type(e).__name__}: {e}"))
        return SourceFile(
            path=file_path,
            name=name,
            start_time=start_time,
            end_time=_now(),
            status=FileStatus.FAILED,
            error=str(e),
        ), None

    source = SourceFile(
        path=file_path,
        name=name,
        start_time=start_time,
        end_time=_now(),
        status=FileStatus.SUCCESS,
        accepted_rows=accepted,
        discarded=dict(discarded),
    )
    logger.info(render_file_line(source))
    return source, partial


def _iter_file_results(
    file_paths: list[Path],
    config: ConsolidationConfig,
    error_log: ErrorLogBuffer,
) -> Iterator[tuple[SourceFile, Consolidator | None]]:
    """Yield per-file results in discovery order, sequentially or from a thread pool."""
    if config.workers <= 1 or len(file_paths) <= 1:
        for file_path in file_paths:
            yield process_file(file_path, config, error_log)
        return

    with ThreadPoolExecutor(max_workers=config.workers) as executor:
        futures = [executor.submit(process_file, p, config, error_log) for p in file_paths]
        for future in futures:
            yield future.result()


def process_all(config: ConsolidationConfig) -> ProcessingResult:
    """Run the whole consolidation described by ``config``.

    1. Expand downloaded archives (when a downloads directory is configured)
    2. Discover source files
    3. Normalize each file and merge its partial consolidator
    4. Serialize the consolidated records and package them

    Raises:
        ProcessingError: missing source directory or output that cannot be written
    """
    start_time = _now()
    error_log = ErrorLogBuffer()
    source_dir = Path(config.source_directory)

    if config.downloads_directory:
        expansion = expand_archives(Path(config.downloads_directory), source_dir)
        for archive, message in expansion.failed.items():
            error_log.append(ErrorRecord.for_file(archive.name, "ARCHIVE_ERROR", message))

    try:
        file_paths = scan_source_files(source_dir, exclude={config.output_path})
        logger.info("found %d source files in %s", len(file_paths), source_dir)

        consolidator = Consolidator()
        file_stats: list[FileStat] = []
        status_counts: Counter = Counter()
        accepted_rows = 0
        discarded_rows = 0

        with ProgressTracker(len(file_paths)) as progress:
            for source, partial in _iter_file_results(file_paths, config, error_log):
                status_counts[source.status] += 1
                if source.status is FileStatus.SUCCESS and partial is not None:
                    consolidator.merge(partial)
                    accepted_rows += source.accepted_rows
                    discarded_rows += source.discarded_rows
                file_stats.append(
                    FileStat(
                        file_name=source.name,
                        status=source.status.value,
                        accepted_rows=source.accepted_rows,
                        discarded_rows=source.discarded_rows,
                        elapsed_seconds=source.elapsed_seconds,
                    )
                )
                progress.advance(source, rows=accepted_rows, records=consolidator.total_records())

        logger.info("consolidated records: %d", consolidator.total_records())

        output_file = serialize(consolidator.records(), config.output_path)
        archive_file = package(output_file, config.archive_path)
    except ExportError as e:
        raise ProcessingError(str(e)) from e
    finally:
        try:
            log_path = error_log.flush()
            if log_path is not None:
                logger.info("error log written to %s", log_path)
        except OSError as e:
            logger.warning("could not write error log: %s", e)

    end_time = _now()
    elapsed_seconds = (end_time - start_time).total_seconds()
    total_rows = accepted_rows + discarded_rows
    throughput_rps = total_rows / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_files=status_counts[FileStatus.SUCCESS],
        skipped_files=status_counts[FileStatus.SKIPPED],
        failed_files=status_counts[FileStatus.FAILED],
        accepted_rows=accepted_rows,
        discarded_rows=discarded_rows,
        total_records=consolidator.total_records(),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        output_file=output_file,
        archive_file=archive_file,
        file_stats=file_stats,
    )
