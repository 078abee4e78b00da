from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Any

from ans_consolidator.cli import main as cli_main
from conftest import ANS_HEADER

"""Integration test: downloaded archives are expanded before consolidation."""


def _zip_bytes(entries: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


def test_run_from_downloads(temp_workdir: Path, write_config: Any, capsys: Any) -> None:
    text = write_config.read_text(encoding="utf-8") + "downloads_directory: ./downloads\n"
    write_config.write_text(text, encoding="utf-8")

    downloads = temp_workdir / "downloads" / "2025"
    downloads.mkdir(parents=True)
    q1 = (ANS_HEADER + "\n" + "2025-01-01;316458;46411;PUBLICIDADE;0;1070\n").encode("latin-1")
    q2 = (ANS_HEADER + "\n" + "2025-04-01;421723;46411;PUBLICIDADE;0;10,5\n").encode("latin-1")
    (downloads / "1T2025.zip").write_bytes(_zip_bytes({"1T2025.csv": q1}))
    # nested archive
    (downloads / "2T2025.zip").write_bytes(_zip_bytes({"inner/2T2025.zip": _zip_bytes({"2T2025.csv": q2})}))
    (downloads / "3T2025.zip").write_bytes(b"truncated download")

    code = cli_main([])
    out = capsys.readouterr().out

    # corrupt archive is logged, not a file failure
    assert code == 0, out
    assert (temp_workdir / "extracted" / "1T2025.csv").exists()
    assert (temp_workdir / "extracted" / "inner" / "2T2025.csv").exists()
    lines = (temp_workdir / "out" / "consolidado_despesas.csv").read_text(encoding="utf-8").splitlines()
    assert lines[1:] == [
        "316458,Unimed Teste,1,2025,1070.00,OK",
        "421723,Bradesco Saude,2,2025,10.50,OK",
    ]
    log_text = next((temp_workdir / "logs").glob("errors-*.log")).read_text(encoding="utf-8")
    assert '"error_type": "ARCHIVE_ERROR"' in log_text
    assert "3T2025.zip" in log_text
