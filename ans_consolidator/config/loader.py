from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_ARCHIVE_FILE,
    DEFAULT_OPERATORS,
    DEFAULT_OUTPUT_FILE,
    ConsolidationConfig,
)

"""Config loader.

Responsibilities:
- Load the YAML configuration (default config/consolidation.yml)
- Validate it against the JSON schema shipped next to this module
- Apply defaults and environment overrides (ANS_* variables, usually from .env)
"""

SCHEMA_PATH = Path(__file__).with_name("schema.json")

DEFAULT_CONFIG_PATH = Path("config/consolidation.yml")

# environment variable -> config key
ENV_OVERRIDES = {
    "ANS_SOURCE_DIRECTORY": "source_directory",
    "ANS_DOWNLOADS_DIRECTORY": "downloads_directory",
    "ANS_OUTPUT_DIRECTORY": "output_directory",
}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails validation (missing required keys, wrong types,
            unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            merged[key] = value
    return merged


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ConsolidationConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    # YAML reads unquoted operator ids as integers
    if isinstance(data.get("operators"), dict):
        data["operators"] = {str(k).strip(): v for k, v in data["operators"].items()}

    data = _apply_env_overrides(data)
    _validate_config_schema(data)

    operators = data.get("operators")
    return ConsolidationConfig(
        source_directory=data["source_directory"],
        downloads_directory=data.get("downloads_directory"),
        output_directory=data.get("output_directory", "."),
        output_file=data.get("output_file", DEFAULT_OUTPUT_FILE),
        archive_file=data.get("archive_file", DEFAULT_ARCHIVE_FILE),
        encoding=data.get("encoding", "auto"),
        workers=data.get("workers", 1),
        log_discarded_rows=data.get("log_discarded_rows", False),
        operators=dict(operators) if operators is not None else dict(DEFAULT_OPERATORS),
    )
