#!/usr/bin/env python3
"""Dataset generation script for performance testing.

Generates synthetic quarterly accounting statements in the layout published
by the regulator:
- Header: DATA;REG_ANS;CD_CONTA_CONTABIL;DESCRICAO;VL_SALDO_INICIAL;VL_SALDO_FINAL
- Dates in one of the accepted shapes (YYYY-MM-DD, DD/MM/YYYY, YYYYMM)
- Balances in the regional format (thousands '.', decimal ',')

Text files are written as Latin-1 with ';' separators, spreadsheets through
pandas/openpyxl. A small share of rows is deliberately discardable (blank
operator id, zero movement) so the discard paths are exercised too.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

HEADER = [
    "DATA",
    "REG_ANS",
    "CD_CONTA_CONTABIL",
    "DESCRICAO",
    "VL_SALDO_INICIAL",
    "VL_SALDO_FINAL",
]

ACCOUNTS = [
    ("46411", "DESPESAS COM PUBLICIDADE"),
    ("41111", "EVENTOS INDENIZÁVEIS LÍQUIDOS"),
    ("46111", "DESPESAS ADMINISTRATIVAS"),
    ("44111", "DESPESAS DE COMERCIALIZAÇÃO"),
]


def format_brl(value: float) -> str:
    """1234567.8 -> '1.234.567,80'"""
    text = f"{value:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_date(year: int, month: int, style: int) -> str:
    if style == 0:
        return f"{year:04d}-{month:02d}-01"
    if style == 1:
        return f"15/{month:02d}/{year:04d}"
    return f"{year:04d}{month:02d}"


def generate_statement(
    rows: int,
    year: int,
    quarter: int,
    operators: int = 50,
    seed: int = 42,
) -> pd.DataFrame:
    """Generate one quarter of statement rows as strings.

    Args:
        rows: Number of data rows
        year: Competency year
        quarter: Competency quarter (1-4)
        operators: Number of distinct operator ids
        seed: Random seed for reproducible data

    Returns:
        DataFrame with the HEADER columns, every cell already rendered as text
    """
    rng = np.random.default_rng(seed)
    operator_ids = [str(300000 + i * 37) for i in range(operators)]
    first_month = (quarter - 1) * 3 + 1

    opening = np.round(rng.uniform(0, 5_000_000, rows), 2)
    movement = np.round(rng.uniform(-250_000, 250_000, rows), 2)
    closing = opening + movement
    # ~2% zero movement, ~1% blank operator id
    zero_mask = rng.random(rows) < 0.02
    closing[zero_mask] = opening[zero_mask]
    blank_mask = rng.random(rows) < 0.01

    data: dict[str, list[str]] = {name: [] for name in HEADER}
    for i in range(rows):
        account, description = ACCOUNTS[i % len(ACCOUNTS)]
        month = first_month + int(rng.integers(0, 3))
        data["DATA"].append(format_date(year, month, i % 3))
        data["REG_ANS"].append("" if blank_mask[i] else operator_ids[int(rng.integers(0, operators))])
        data["CD_CONTA_CONTABIL"].append(account)
        data["DESCRICAO"].append(description)
        data["VL_SALDO_INICIAL"].append(format_brl(float(opening[i])))
        data["VL_SALDO_FINAL"].append(format_brl(float(closing[i])))
    return pd.DataFrame(data, columns=HEADER)


def create_text_file(output_path: Path, df: pd.DataFrame) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, sep=";", index=False, encoding="latin-1", lineterminator="\n")


def create_excel_file(output_path: Path, df: pd.DataFrame) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Demonstrativo", index=False)


def generate_dataset(
    output_dir: Path,
    *,
    years: list[int],
    rows: int,
    operators: int = 50,
    excel_every: int = 0,
    seed: int = 42,
) -> list[Path]:
    """Write one file per quarter under ``output_dir/<year>/``.

    Every ``excel_every``-th file is written as .xlsx (0 disables spreadsheets).
    """
    written: list[Path] = []
    index = 0
    for year in years:
        for quarter in range(1, 5):
            df = generate_statement(rows, year, quarter, operators, seed + index)
            index += 1
            if excel_every and index % excel_every == 0:
                path = output_dir / str(year) / f"{quarter}T{year}.xlsx"
                create_excel_file(path, df)
            else:
                path = output_dir / str(year) / f"{quarter}T{year}.csv"
                create_text_file(path, df)
            written.append(path)
    return written


def main() -> int:
    """Main CLI interface for dataset generation."""
    parser = argparse.ArgumentParser(
        description="Generate synthetic ANS quarterly statements for performance testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Two years, 50k rows per quarter, text files only
  %(prog)s ./extracted --years 2024 2025

  # Larger files, every second quarter as a spreadsheet
  %(prog)s ./extracted --rows 200000 --excel-every 2
        """,
    )
    parser.add_argument("output_dir", type=Path, help="Directory to write the quarterly files into")
    parser.add_argument("--years", type=int, nargs="+", default=[2025], help="Competency years (default: 2025)")
    parser.add_argument("--rows", type=int, default=50000, help="Rows per quarter (default: 50000)")
    parser.add_argument("--operators", type=int, default=50, help="Distinct operator ids (default: 50)")
    parser.add_argument("--excel-every", type=int, default=0, help="Write every Nth file as .xlsx (default: 0, never)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0 or args.operators <= 0:
        print("Error: --rows and --operators must be positive", file=sys.stderr)
        return 1

    written = generate_dataset(
        args.output_dir,
        years=args.years,
        rows=args.rows,
        operators=args.operators,
        excel_every=args.excel_every,
        seed=args.seed,
    )
    for path in written:
        print(f"Created: {path}")
    print(f"  Files: {len(written)}  Rows per file: {args.rows:,}  Total rows: {len(written) * args.rows:,}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
