from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path

import pytest

from ans_consolidator.models.expense import DiscardReason
from ans_consolidator.models.processing_result import ProcessingResult
from ans_consolidator.models.source_file import FileStatus, SourceFile
from ans_consolidator.services.summary import render_file_line, render_summary_line

"""Unit tests for the SUMMARY and per-file line renderers."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY files=([0-9]+) success=([0-9]+) skipped=([0-9]+) failed=([0-9]+) "
    r"rows=([0-9]+) discarded=([0-9]+) records=([0-9]+) "
    r"elapsed_sec=([0-9]+\.?[0-9]*) throughput_rps=([0-9]+\.?[0-9]*)$"
)

START = datetime(2025, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def _result(**overrides) -> ProcessingResult:
    values = dict(
        success_files=2,
        skipped_files=0,
        failed_files=0,
        accepted_rows=1000,
        discarded_rows=20,
        total_records=12,
        start_time=START,
        end_time=datetime(2025, 1, 1, 10, 0, 2, tzinfo=timezone.utc),
        elapsed_seconds=2.0,
        throughput_rows_per_sec=510.0,
    )
    values.update(overrides)
    return ProcessingResult(**values)


def test_render_summary_line_all_success():
    line = render_summary_line(_result())
    match = SUMMARY_PATTERN.match(line)
    assert match, line
    assert match.groups() == ("2", "2", "0", "0", "1000", "20", "12", "2", "510")


def test_render_summary_line_partial_failure():
    line = render_summary_line(_result(success_files=1, skipped_files=1, failed_files=1))
    match = SUMMARY_PATTERN.match(line)
    assert match
    assert match.group(1) == "3"
    assert (match.group(3), match.group(4)) == ("1", "1")


@pytest.mark.parametrize(
    "elapsed,throughput,expected",
    [
        (0.0, 0.0, "elapsed_sec=0 throughput_rps=0"),
        (1.25, 810.04, "elapsed_sec=1.25 throughput_rps=810.04"),
        (0.0012, 12345.678, "elapsed_sec=0.0012 throughput_rps=12345.678"),
    ],
)
def test_number_formatting(elapsed, throughput, expected):
    line = render_summary_line(_result(elapsed_seconds=elapsed, throughput_rows_per_sec=throughput))
    assert line.endswith(expected)
    assert "e-" not in line


def test_render_file_line_with_discard_breakdown():
    source = SourceFile(
        path=Path("extracted/1T2025.csv"),
        name="1T2025.csv",
        status=FileStatus.SUCCESS,
        accepted_rows=10,
        discarded={DiscardReason.ZERO_MOVEMENT: 3, DiscardReason.BAD_DATE: 1, DiscardReason.MISSING_ID: 0},
    )
    assert render_file_line(source) == "file=1T2025.csv processed=10 discarded=4 bad_date=1 zero_movement=3"


def test_render_file_line_without_discards():
    source = SourceFile(path=Path("a.csv"), name="a.csv", status=FileStatus.SUCCESS, accepted_rows=1)
    assert render_file_line(source) == "file=a.csv processed=1 discarded=0"
