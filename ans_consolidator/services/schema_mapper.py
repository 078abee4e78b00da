from __future__ import annotations

from collections.abc import Sequence

from ..models.column_roles import ColumnRole, ColumnRoleMap

"""Header inference for regulator statement files.

Publishers rename columns between quarters (DATA vs DT_COMPETENCIA,
REG_ANS vs REGISTRO_ANS, ...), so roles are matched by name patterns rather
than fixed positions.
"""

__all__ = [
    "normalize_header_cell",
    "match_role",
    "map_columns",
]


def normalize_header_cell(cell: str | None) -> str:
    if cell is None:
        return ""
    return str(cell).replace("\ufeff", "").strip().upper()


def _is_date(name: str) -> bool:
    return name in ("DATA", "DT_COMPETENCIA") or name.startswith("DT_")


def _is_operator_id(name: str) -> bool:
    return name in ("REG_ANS", "REGISTRO_ANS")


def _is_opening_balance(name: str) -> bool:
    return name == "VL_SALDO_INICIAL" or (
        "SALDO" in name and "INICIAL" in name and "FINAL" not in name
    )


def _is_closing_balance(name: str) -> bool:
    return name == "VL_SALDO_FINAL" or (
        "SALDO" in name and "FINAL" in name and "INICIAL" not in name
    )


_MATCHERS = (
    (ColumnRole.DATE, _is_date),
    (ColumnRole.OPERATOR_ID, _is_operator_id),
    (ColumnRole.OPENING_BALANCE, _is_opening_balance),
    (ColumnRole.CLOSING_BALANCE, _is_closing_balance),
)


def match_role(cell: str | None) -> ColumnRole | None:
    """Return the first role (in precedence order) whose pattern matches ``cell``."""
    name = normalize_header_cell(cell)
    if not name:
        return None
    for role, matches in _MATCHERS:
        if matches(name):
            return role
    return None


def map_columns(header: Sequence[str | None]) -> ColumnRoleMap:
    """Build the role map for one header row.

    Each column is claimed by at most one role, and each role keeps only the
    first column that matched it. The result may be incomplete; callers check
    ``ColumnRoleMap.is_complete`` before processing rows.
    """
    indices: dict[ColumnRole, int] = {}
    for index, cell in enumerate(header):
        role = match_role(cell)
        if role is not None and role not in indices:
            indices[role] = index
    return ColumnRoleMap(indices)
