from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

import pandas as pd

from ..models.expense import ConsolidatedRecord

"""Export of consolidated records.

Output shape is fixed (six fields per line, no quoting):

    CNPJ,RazaoSocial,Trimestre,Ano,ValorDespesas,Status

Commas inside names are replaced by a space and nothing else is escaped.
Amounts carry two decimals, rounded half-up from the shortest decimal
form of the value (0.125 -> 0.13).
"""

logger = logging.getLogger(__name__)

__all__ = [
    "OUTPUT_COLUMNS",
    "ExportError",
    "records_to_frame",
    "format_amount",
    "serialize",
    "package",
]

OUTPUT_COLUMNS = ["CNPJ", "RazaoSocial", "Trimestre", "Ano", "ValorDespesas", "Status"]

_CENTS = Decimal("0.01")


class ExportError(Exception):
    """Output directory or file could not be written (fatal for the run)."""


def records_to_frame(records: Iterable[ConsolidatedRecord]) -> pd.DataFrame:
    rows = [
        (
            r.operator_id,
            r.operator_name.replace(",", " "),
            r.quarter,
            r.year,
            float(r.amount),
            r.status.value,
        )
        for r in records
    ]
    df = pd.DataFrame(rows, columns=OUTPUT_COLUMNS)
    return df.astype(
        {
            "CNPJ": "object",
            "RazaoSocial": "object",
            "Trimestre": "int64",
            "Ano": "int64",
            "ValorDespesas": "float64",
            "Status": "object",
        }
    )


def format_amount(value: float) -> str:
    return str(Decimal(repr(float(value))).quantize(_CENTS, rounding=ROUND_HALF_UP))


def _format_line(row: tuple) -> str:
    operator_id, name, quarter, year, amount, status = row
    return f"{operator_id},{name},{quarter},{year},{format_amount(amount)},{status}"


def serialize(records: Iterable[ConsolidatedRecord], path: Path) -> Path:
    """Write ``records`` (in the given order) as the canonical CSV at ``path``."""
    df = records_to_frame(records)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(f"cannot create output directory {path.parent}: {e}") from e
    try:
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(",".join(OUTPUT_COLUMNS) + "\n")
            for row in df.itertuples(index=False, name=None):
                f.write(_format_line(row) + "\n")
    except OSError as e:
        raise ExportError(f"cannot write output file {path}: {e}") from e
    logger.info("wrote %d records to %s", len(df), path)
    return path


def package(csv_path: Path, archive_path: Path | None = None) -> Path:
    """Zip ``csv_path`` as the single entry (named after its base name)."""
    if archive_path is None:
        archive_path = csv_path.with_suffix(".zip")
    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.write(csv_path, csv_path.name)
    except OSError as e:
        raise ExportError(f"cannot write archive {archive_path}: {e}") from e
    logger.info("packaged %s into %s", csv_path.name, archive_path)
    return archive_path
