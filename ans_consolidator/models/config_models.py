from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

"""Configuration dataclasses for the consolidation run.

Produced by ``ans_consolidator.config.loader.load_config`` after schema
validation; consumed by the orchestrator.
"""

# Operator directory used when the configuration does not provide one.
DEFAULT_OPERATORS: dict[str, str] = {
    "316458": "Operadora 316458",
    "421723": "Operadora 421723",
    "344800": "Operadora 344800",
}

DEFAULT_OUTPUT_FILE = "consolidado_despesas.csv"
DEFAULT_ARCHIVE_FILE = "consolidado_despesas.zip"


@dataclass(frozen=True)
class ConsolidationConfig:
    """Root configuration object for one consolidation run."""
    source_directory: str  # tree of expanded .csv/.txt/.xlsx files
    downloads_directory: str | None = None  # .zip archives expanded into source_directory
    output_directory: str = "."
    output_file: str = DEFAULT_OUTPUT_FILE
    archive_file: str = DEFAULT_ARCHIVE_FILE
    encoding: str = "auto"  # "auto" -> charset detection
    workers: int = 1
    log_discarded_rows: bool = False
    operators: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_OPERATORS))

    @property
    def output_path(self) -> Path:
        return Path(self.output_directory) / self.output_file

    @property
    def archive_path(self) -> Path:
        return Path(self.output_directory) / self.archive_file
