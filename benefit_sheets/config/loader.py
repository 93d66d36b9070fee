from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import ConvertConfig, HeaderStyleConfig

"""Config loader.

Responsibilities:
- Load YAML config (default config/convert.yml)
- Validate against the bundled JSON schema (schema.json next to this module)
- Apply defaults for missing keys
- Apply BENEFIT_SHEETS_* environment overrides (populated from .env by the CLI)
"""

SCHEMA_PATH = Path(__file__).with_name("schema.json")

# 環境変数 -> 設定キー (環境変数が最優先)
ENV_OVERRIDES = {
    "BENEFIT_SHEETS_JSON_INPUT_DIR": "json_input_directory",
    "BENEFIT_SHEETS_EXCEL_OUTPUT_DIR": "excel_output_directory",
    "BENEFIT_SHEETS_EXCEL_INPUT_DIR": "excel_input_directory",
    "BENEFIT_SHEETS_JSON_OUTPUT_DIR": "json_output_directory",
    "BENEFIT_SHEETS_PLACEHOLDER": "placeholder",
}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: if the schema file is missing or invalid, or the data
            fails validation (unknown keys, wrong types, bad enum values).
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


def _apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    merged = dict(data)
    for env_name, key in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            merged[key] = value
    return merged


def build_config(data: dict[str, Any], environ: Mapping[str, str] | None = None) -> ConvertConfig:
    """Validate a raw mapping and turn it into a ConvertConfig."""
    _validate_config_schema(data)
    data = _apply_env_overrides(data, os.environ if environ is None else environ)
    defaults = ConvertConfig()
    style_raw = data.get("header_style", {})
    style = HeaderStyleConfig(
        enabled=style_raw.get("enabled", True),
        fill_color=style_raw.get("fill_color", HeaderStyleConfig.fill_color).upper(),
        bold=style_raw.get("bold", True),
        borders=style_raw.get("borders", True),
    )
    return ConvertConfig(
        json_input_directory=data.get("json_input_directory", defaults.json_input_directory),
        excel_output_directory=data.get("excel_output_directory", defaults.excel_output_directory),
        excel_input_directory=data.get("excel_input_directory", defaults.excel_input_directory),
        json_output_directory=data.get("json_output_directory", defaults.json_output_directory),
        placeholder=data.get("placeholder", defaults.placeholder),
        output_format=data.get("output_format", defaults.output_format),
        header_style=style,
        auto_size_columns=data.get("auto_size_columns", defaults.auto_size_columns),
    )


def load_config(path: Path, environ: Mapping[str, str] | None = None) -> ConvertConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return build_config(data, environ)


def default_config(environ: Mapping[str, str] | None = None) -> ConvertConfig:
    """Defaults plus environment overrides (used when no config file is present)."""
    return build_config({}, environ)
