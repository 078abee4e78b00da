from __future__ import annotations

import json

import jsonschema
import pytest
import yaml
from jsonschema.exceptions import ValidationError

from ans_consolidator.config.loader import SCHEMA_PATH

"""Config schema contract test (shipped schema.json)."""


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_valid_example():
    config = {
        "source_directory": "./extracted",
        "downloads_directory": "./downloads",
        "output_directory": "./out",
        "output_file": "consolidado_despesas.csv",
        "archive_file": "consolidado_despesas.zip",
        "encoding": "auto",
        "workers": 4,
        "log_discarded_rows": True,
        "operators": {"316458": "Operadora 316458"},
    }
    jsonschema.validate(config, _schema())


def test_config_schema_minimal_example():
    jsonschema.validate({"source_directory": "./extracted"}, _schema())


@pytest.mark.parametrize(
    "config",
    [
        {},
        {"source_directory": ""},
        {"source_directory": "./x", "output_file": "report.txt"},
        {"source_directory": "./x", "archive_file": "report.tar"},
        {"source_directory": "./x", "workers": 0},
        {"source_directory": "./x", "workers": "2"},
        {"source_directory": "./x", "operators": {"316458": 1}},
        {"source_directory": "./x", "database": {}},
    ],
)
def test_config_schema_rejects(config):
    with pytest.raises(ValidationError):
        jsonschema.validate(config, _schema())


def test_sample_config_file_is_valid():
    # the repository sample must stay loadable
    sample = SCHEMA_PATH.parents[2] / "config" / "consolidation.yml"
    data = yaml.safe_load(sample.read_text(encoding="utf-8"))
    data["operators"] = {str(k): v for k, v in data.get("operators", {}).items()}
    jsonschema.validate(data, _schema())
