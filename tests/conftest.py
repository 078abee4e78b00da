# Shared pytest fixtures
from __future__ import annotations
import logging
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from ans_consolidator.logging.init import APP_LOGGER_NAME, reset_logging

ANS_HEADER = "DATA;REG_ANS;CD_CONTA_CONTABIL;DESCRICAO;VL_SALDO_INICIAL;VL_SALDO_FINAL"


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "extracted").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        # keep developer .env / shell overrides out of the tests
        for name in ("ANS_SOURCE_DIRECTORY", "ANS_DOWNLOADS_DIRECTORY", "ANS_OUTPUT_DIRECTORY"):
            monkeypatch.delenv(name, raising=False)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    # drop handlers bound to a capsys stream that is about to close
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./extracted
output_directory: ./out
encoding: utf-8
operators:
  "316458": Unimed Teste
  "421723": Bradesco Saude
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "consolidation.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def write_text_file(directory: Path, name: str, lines: list[str], encoding: str = "utf-8") -> Path:
    p = directory / name
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("\n".join(lines) + "\n", encoding=encoding)
    return p


def make_excel(directory: Path, name: str, rows: list[list[object]], sheet: str = "Sheet1") -> Path:
    p = directory / name
    p.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(p, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return p


@pytest.fixture()
def ans_text_file(temp_workdir: Path) -> Path:
    return write_text_file(
        temp_workdir / "extracted",
        "1T2025.csv",
        [ANS_HEADER, "2025-01-01;316458;46411;PUBLICIDADE;0;1070"],
    )
