from __future__ import annotations

import re
from pathlib import Path

from ans_consolidator.cli import main as cli_main

"""SUMMARY line format contract.

SUMMARY files=<n> success=<n> skipped=<n> failed=<n> rows=<n> discarded=<n>
records=<n> elapsed_sec=<num> throughput_rps=<num>
"""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY files=([0-9]+) success=([0-9]+) skipped=([0-9]+) failed=([0-9]+) "
    r"rows=([0-9]+) discarded=([0-9]+) records=([0-9]+) "
    r"elapsed_sec=([0-9]+\.?[0-9]*) throughput_rps=([0-9]+\.?[0-9]*)$"
)


def test_summary_pattern_example_line():
    line = (
        "SUMMARY files=3 success=2 skipped=1 failed=0 rows=1204 discarded=17 records=96 "
        "elapsed_sec=0.84 throughput_rps=1453.6"
    )
    assert SUMMARY_PATTERN.match(line)


def test_cli_emits_exactly_one_summary_line(write_config, ans_text_file: Path, capsys):
    cli_main([])
    lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("SUMMARY")]
    assert len(lines) == 1
    match = SUMMARY_PATTERN.match(lines[0])
    assert match, lines[0]
    files, success, skipped, failed = (int(g) for g in match.groups()[:4])
    assert files == success + skipped + failed == 1
