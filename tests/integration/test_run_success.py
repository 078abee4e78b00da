from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any, Dict

import pytest

from ans_consolidator.cli import main as cli_main
from conftest import ANS_HEADER, make_excel, write_text_file

"""Integration test: successful multi-file run (text + spreadsheet, two quarters).

Runs the CLI end to end on real files and checks the exported report, its
archive, and the SUMMARY line.
"""


@pytest.fixture
def multi_file_setup(temp_workdir: Path, write_config: Any) -> Dict[str, Any]:
    extracted = temp_workdir / "extracted"
    write_text_file(
        extracted / "2025" / "1T2025",
        "1T2025.csv",
        [
            ANS_HEADER,
            "2025-01-01;316458;46411;PUBLICIDADE;0;1070",
            "2025-02-01;421723;46411;PUBLICIDADE;3094590,67;4212815,67",
            "2025-03-01;316458;46411;PUBLICIDADE;100;100",  # zero movement
        ],
    )
    make_excel(
        extracted / "2024",
        "4T2024.xlsx",
        [
            ["DATA", "REG_ANS", "CD_CONTA_CONTABIL", "DESCRICAO", "VL_SALDO_INICIAL", "VL_SALDO_FINAL"],
            ["2024-10-01", "316458", "46411", "PUBLICIDADE", 10, 20.5],
            ["2024-11-01", "999999", "46411", "PUBLICIDADE", 0, 7],
        ],
    )
    return {"expected_files": 2, "expected_rows": 4, "expected_discarded": 1}


def test_successful_run_integration(temp_workdir: Path, multi_file_setup: Dict[str, Any], capsys: Any) -> None:
    code = cli_main([])
    out = capsys.readouterr().out

    assert code == 0, out
    report = temp_workdir / "out" / "consolidado_despesas.csv"
    lines = report.read_bytes().decode("utf-8").splitlines()
    assert lines == [
        "CNPJ,RazaoSocial,Trimestre,Ano,ValorDespesas,Status",
        "316458,Unimed Teste,4,2024,10.50,OK",
        "316458,Unimed Teste,1,2025,1070.00,OK",
        "421723,Bradesco Saude,1,2025,1118225.00,OK",
        "999999,REG_ANS_999999,4,2024,7.00,OK",
    ]

    with zipfile.ZipFile(temp_workdir / "out" / "consolidado_despesas.zip") as zf:
        assert zf.namelist() == ["consolidado_despesas.csv"]

    assert "file=1T2025.csv processed=2 discarded=1 zero_movement=1" in out
    assert "file=4T2024.xlsx processed=2 discarded=0" in out
    assert (
        "SUMMARY files=2 success=2 skipped=0 failed=0 rows=4 discarded=1 records=4"
        in out
    )
    # nothing went wrong, so no error log
    assert not list((temp_workdir / "logs").glob("errors-*.log"))


def test_mixed_delimiters_and_date_shapes(temp_workdir: Path, write_config: Any, capsys: Any) -> None:
    extracted = temp_workdir / "extracted"
    write_text_file(
        extracted,
        "a.csv",
        [
            "DATA,REG_ANS,VL_SALDO_INICIAL,VL_SALDO_FINAL",
            "2025-04-01,316458,0,50",
        ],
    )
    write_text_file(
        extracted,
        "b.txt",
        [
            "DATA|REG_ANS|VL_SALDO_INICIAL|VL_SALDO_FINAL",
            "15/05/2025|316458|0|25",
            "202506|421723|0|5",
        ],
    )

    assert cli_main([]) == 0
    lines = (temp_workdir / "out" / "consolidado_despesas.csv").read_text(encoding="utf-8").splitlines()
    assert lines[1:] == [
        "316458,Unimed Teste,2,2025,75.00,OK",
        "421723,Bradesco Saude,2,2025,5.00,OK",
    ]
