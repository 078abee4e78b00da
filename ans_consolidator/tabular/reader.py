from __future__ import annotations

import csv
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

from charset_normalizer import from_bytes
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

"""Tabular reader: one lazy row sequence for delimited text and spreadsheets.

Every source yields lists of strings; the first list is the header row.

- Text (.csv/.txt): delimiter inferred from the first line only, encoding
  detected from the leading bytes when encoding="auto".
- Spreadsheet (.xlsx): first worksheet only, streamed in read-only mode;
  cells coerced to text so the normalizer sees one representation.
"""

__all__ = [
    "TEXT_EXTENSIONS",
    "SPREADSHEET_EXTENSIONS",
    "SUPPORTED_EXTENSIONS",
    "TabularReadError",
    "UnsupportedFormatError",
    "TabularSource",
    "choose_delimiter",
    "detect_delimiter",
    "detect_encoding",
    "format_cell",
    "iter_text_rows",
    "iter_spreadsheet_rows",
    "open_source",
]

TEXT_EXTENSIONS = frozenset({".csv", ".txt"})
SPREADSHEET_EXTENSIONS = frozenset({".xlsx"})
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | SPREADSHEET_EXTENSIONS

# Priority order matters: ties go to the earlier candidate.
DELIMITER_CANDIDATES = (";", ",", "|", "\t")
DEFAULT_DELIMITER = ","

ENCODING_SAMPLE_BYTES = 64 * 1024
UTF8_BOM = b"\xef\xbb\xbf"


class TabularReadError(Exception):
    """Raised when a source file cannot be opened or decoded."""


class UnsupportedFormatError(TabularReadError):
    """Raised for extensions other than .csv, .txt and .xlsx."""


def choose_delimiter(first_line: str) -> str:
    """Pick the candidate with the strictly highest count in ``first_line``."""
    best = DEFAULT_DELIMITER
    best_count = 0
    for candidate in DELIMITER_CANDIDATES:
        count = first_line.count(candidate)
        if count > best_count:
            best, best_count = candidate, count
    return best


def detect_encoding(path: Path) -> str:
    """Best-effort encoding guess from the first bytes of ``path``.

    UTF-8 with BOM is recognized explicitly so the BOM never reaches the
    header. Plain ASCII samples are widened to UTF-8 since accented text may
    appear after the sample window.
    """
    with path.open("rb") as f:
        sample = f.read(ENCODING_SAMPLE_BYTES)
    if not sample:
        return "utf-8"
    if sample.startswith(UTF8_BOM):
        return "utf-8-sig"
    match = from_bytes(sample).best()
    if match is None:
        return "utf-8"
    encoding = match.encoding
    if encoding.lower() in ("ascii", "us-ascii", "utf_8", "utf-8"):
        return "utf-8"
    return encoding


def detect_delimiter(path: Path, encoding: str = "utf-8") -> str:
    """Infer the field delimiter by reading only the first line of ``path``."""
    with path.open("r", encoding=encoding, errors="replace", newline="") as f:
        first_line = f.readline()
    return choose_delimiter(first_line)


def _resolve_encoding(path: Path, encoding: str) -> str:
    return detect_encoding(path) if encoding == "auto" else encoding


def iter_text_rows(path: Path, encoding: str = "auto") -> Iterator[list[str]]:
    try:
        resolved = _resolve_encoding(path, encoding)
        delimiter = detect_delimiter(path, resolved)
        with path.open("r", encoding=resolved, errors="replace", newline="") as f:
            yield from csv.reader(f, delimiter=delimiter)
    except (OSError, csv.Error, LookupError) as e:
        raise TabularReadError(f"cannot read text file {path.name}: {e}") from e


def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    # decimal comma so the regional amount parser reads the value back as-is
    return format(Decimal(repr(value)), "f").replace(".", ",")


def format_cell(value: Any) -> str:
    """Coerce a spreadsheet cell value to the text form used downstream.

    Date-typed cells become ``YYYY-MM-DD``; numbers are written without
    thousands separators, integral values without a fractional part.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, time):
        return value.isoformat()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return ""
        return _format_number(value)
    return str(value)


def iter_spreadsheet_rows(path: Path) -> Iterator[list[str]]:
    try:
        wb = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, OSError, KeyError) as e:
        raise TabularReadError(f"cannot open spreadsheet {path.name}: {e}") from e
    try:
        if not wb.worksheets:
            return
        sheet = wb.worksheets[0]
        is_header = True
        for values in sheet.iter_rows(values_only=True):
            cells = [format_cell(v) for v in values]
            if is_header:
                is_header = False
                yield cells
                continue
            # blank data rows carry nothing to normalize
            if not any(c.strip() for c in cells):
                continue
            yield cells
    except (BadZipFile, OSError, KeyError, ValueError) as e:
        raise TabularReadError(f"cannot read spreadsheet {path.name}: {e}") from e
    finally:
        wb.close()


@dataclass(frozen=True)
class TabularSource:
    """Re-openable row sequence over one file.

    Each iteration reopens the file and streams rows again; nothing is
    cached between iterations.
    """
    path: Path
    encoding: str = "auto"

    @property
    def is_spreadsheet(self) -> bool:
        return self.path.suffix.lower() in SPREADSHEET_EXTENSIONS

    def __iter__(self) -> Iterator[list[str]]:
        if self.is_spreadsheet:
            return iter_spreadsheet_rows(self.path)
        return iter_text_rows(self.path, self.encoding)


def open_source(path: Path, encoding: str = "auto") -> TabularSource:
    """Return a TabularSource for ``path`` or raise UnsupportedFormatError."""
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(f"unsupported file type: {path.name}")
    return TabularSource(path=path, encoding=encoding)
