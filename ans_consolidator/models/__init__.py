"""Domain models for the ANS expense consolidator.

This package contains the domain model classes used throughout the
application: configuration, column roles, expense entries and consolidated
records, per-file processing context and run results.
"""

from .column_roles import ColumnRole, ColumnRoleMap
from .config_models import ConsolidationConfig
from .expense import (
    ConsolidatedRecord,
    ConsolidationKey,
    DiscardReason,
    ExpenseEntry,
    NormalizationOutcome,
    RecordStatus,
)
from .source_file import FileStatus, SourceFile

__all__ = [
    # Configuration models
    "ConsolidationConfig",
    # Schema models
    "ColumnRole",
    "ColumnRoleMap",
    # Expense models
    "ConsolidatedRecord",
    "ConsolidationKey",
    "DiscardReason",
    "ExpenseEntry",
    "NormalizationOutcome",
    "RecordStatus",
    # Processing models
    "FileStatus",
    "SourceFile",
]
