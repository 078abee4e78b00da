from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum

"""Column role model for header inference.

A ColumnRoleMap is built once per source file from its header row and is
immutable afterwards. A file is usable only when every role resolves.
"""

__all__ = [
    "ColumnRole",
    "ColumnRoleMap",
]


class ColumnRole(Enum):
    """Semantic roles a source column can play.

    Declaration order is the precedence used when a header cell could match
    more than one role.
    """
    DATE = "date"
    OPERATOR_ID = "operator_id"
    OPENING_BALANCE = "opening_balance"
    CLOSING_BALANCE = "closing_balance"


@dataclass(frozen=True)
class ColumnRoleMap(Mapping[ColumnRole, int]):
    """Immutable role -> column index mapping for one file."""
    indices: Mapping[ColumnRole, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # detach from the caller's dict
        object.__setattr__(self, "indices", dict(self.indices))

    def __getitem__(self, role: ColumnRole) -> int:
        return self.indices[role]

    def __iter__(self) -> Iterator[ColumnRole]:
        return iter(self.indices)

    def __len__(self) -> int:
        return len(self.indices)

    @property
    def missing_roles(self) -> list[ColumnRole]:
        return [role for role in ColumnRole if role not in self.indices]

    @property
    def is_complete(self) -> bool:
        return not self.missing_roles

    def describe(self) -> str:
        """Render as ``date=0, operator_id=1, ...`` (None for unresolved roles)."""
        return ", ".join(f"{role.value}={self.indices.get(role)}" for role in ColumnRole)
