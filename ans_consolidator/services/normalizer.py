from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence

from ..models.column_roles import ColumnRole, ColumnRoleMap
from ..models.expense import DiscardReason, ExpenseEntry, NormalizationOutcome

"""Row normalization: one mapped data row -> ExpenseEntry or a discard.

Discards are ordinary outcomes, never exceptions. Checks run in this order:
missing date, missing operator id, unrecognized date, zero movement. Anything
unexpected while parsing a row becomes PARSE_FAILURE for that row only.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "parse_competency_date",
    "quarter_of_month",
    "parse_amount",
    "resolve_operator_name",
    "cell_value",
    "normalize_row",
]

_ISO_DATE = re.compile(r"(\d{4})-(\d{2})-\d{2}", re.ASCII)  # YYYY-MM-DD
_BR_DATE = re.compile(r"\d{2}/(\d{2})/(\d{4})", re.ASCII)  # DD/MM/YYYY
_YEAR_MONTH = re.compile(r"(\d{4})(\d{2})", re.ASCII)  # YYYYMM

_NON_NUMERIC = re.compile(r"[^0-9.\-]")

FALLBACK_NAME_PREFIX = "REG_ANS_"


def parse_competency_date(text: str) -> tuple[int, int]:
    """Return (year, month) from one of the accepted date shapes.

    Accepted: ``YYYY-MM-DD``, ``DD/MM/YYYY`` and ``YYYYMM``. The month is not
    range-checked here; see quarter_of_month.

    Raises:
        ValueError: for any other shape
    """
    value = text.strip()
    m = _ISO_DATE.fullmatch(value)
    if m:
        return int(m.group(1)), int(m.group(2))
    m = _BR_DATE.fullmatch(value)
    if m:
        return int(m.group(2)), int(m.group(1))
    m = _YEAR_MONTH.fullmatch(value)
    if m:
        return int(m.group(1)), int(m.group(2))
    raise ValueError(f"unrecognized date format: {text!r}")


def quarter_of_month(month: int) -> int:
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    return (month - 1) // 3 + 1


def parse_amount(text: str | None) -> float:
    """Parse a regional (pt-BR) monetary value.

    ``.`` is a thousands separator and ``,`` the decimal point; currency
    symbols and spaces are dropped. Blank or unparseable input yields 0.0.

    >>> parse_amount("4.212.815,67")
    4212815.67
    >>> parse_amount("R$ 1.000,50")
    1000.5
    """
    if text is None:
        return 0.0
    cleaned = str(text).replace(".", "").replace(",", ".")
    cleaned = _NON_NUMERIC.sub("", cleaned)
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def resolve_operator_name(operator_id: str, operators: Mapping[str, str]) -> str:
    key = operator_id.strip()
    name = operators.get(key)
    if name is None:
        return f"{FALLBACK_NAME_PREFIX}{key}"
    return name


def cell_value(row: Sequence[str | None], role_map: ColumnRoleMap, role: ColumnRole) -> str:
    """Trimmed cell for ``role``; "" when the role is unmapped or the row is short."""
    index = role_map.get(role)
    if index is None or index >= len(row):
        return ""
    value = row[index]
    return value.strip() if value is not None else ""


def _normalize(
    row: Sequence[str | None], role_map: ColumnRoleMap, operators: Mapping[str, str]
) -> NormalizationOutcome:
    date_text = cell_value(row, role_map, ColumnRole.DATE)
    if not date_text:
        return NormalizationOutcome.discard(DiscardReason.MISSING_DATE)

    operator_id = cell_value(row, role_map, ColumnRole.OPERATOR_ID)
    if not operator_id:
        return NormalizationOutcome.discard(DiscardReason.MISSING_ID)

    try:
        year, month = parse_competency_date(date_text)
        quarter = quarter_of_month(month)
    except ValueError as e:
        return NormalizationOutcome.discard(DiscardReason.BAD_DATE, str(e))

    opening = parse_amount(cell_value(row, role_map, ColumnRole.OPENING_BALANCE))
    closing = parse_amount(cell_value(row, role_map, ColumnRole.CLOSING_BALANCE))
    amount = abs(closing - opening)
    if amount == 0:
        return NormalizationOutcome.discard(DiscardReason.ZERO_MOVEMENT)

    return NormalizationOutcome.accept(
        ExpenseEntry(
            operator_id=operator_id,
            operator_name=resolve_operator_name(operator_id, operators),
            year=year,
            quarter=quarter,
            amount=amount,
        )
    )


def normalize_row(
    row: Sequence[str | None], role_map: ColumnRoleMap, operators: Mapping[str, str]
) -> NormalizationOutcome:
    """Normalize one data row; never raises."""
    try:
        return _normalize(row, role_map, operators)
    except Exception as e:
        logger.debug("row normalization failed: %s", e, exc_info=True)
        return NormalizationOutcome.discard(DiscardReason.PARSE_FAILURE, f"{type(e).__name__}: {e}")
