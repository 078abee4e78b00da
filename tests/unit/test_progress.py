from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from ans_consolidator.models.source_file import FileStatus, SourceFile
from ans_consolidator.services.progress import ProgressTracker


def _source(name: str, status: FileStatus = FileStatus.SUCCESS) -> SourceFile:
    return SourceFile(path=Path("extracted") / name, name=name, status=status)


def test_progress_disabled_without_tty():
    with patch("sys.stdout.isatty", return_value=False):
        tracker = ProgressTracker(3)
    assert tracker.enabled is False
    tracker.advance(_source("a.csv"), rows=1, records=1)
    tracker.advance(_source("b.csv", FileStatus.SKIPPED), rows=1, records=1)
    tracker.close()
    assert tracker.files_done == 2
    assert tracker.problem_files == 1


def test_progress_disabled_for_empty_run():
    with patch("ans_consolidator.services.progress.is_tty_enabled", return_value=True):
        with patch("ans_consolidator.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(0)
    mock_tqdm.assert_not_called()
    assert tracker.enabled is False


def test_progress_updates_with_tty():
    with patch("ans_consolidator.services.progress.is_tty_enabled", return_value=True):
        with patch("ans_consolidator.services.progress.tqdm") as mock_tqdm:
            bar = mock_tqdm.return_value
            with ProgressTracker(2) as tracker:
                tracker.advance(_source("1T2025.csv"), rows=10, records=3)
                tracker.advance(_source("broken.xlsx", FileStatus.FAILED), rows=10, records=3)
    assert mock_tqdm.call_args.kwargs["total"] == 2
    assert mock_tqdm.call_args.kwargs["unit"] == "file"
    bar.set_description.assert_any_call("Consolidating files (1T2025.csv)")
    bar.set_postfix.assert_any_call({"rows": 10, "records": 3})
    bar.set_postfix.assert_any_call({"rows": 10, "records": 3, "problems": 1})
    assert bar.update.call_count == 2
    bar.close.assert_called_once()
    assert tracker.enabled is False
