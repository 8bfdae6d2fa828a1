from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from statement_enricher.models.config_models import EnricherConfig, ExtractionConfig

"""Config loader.

Responsibilities:
- Load YAML config (default location: config/enricher.yml)
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults for every optional key
- Check cross-field constraints the schema cannot express
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/enricher.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails schema validation (missing keys, wrong types,
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


def _build_extraction(raw: dict[str, Any]) -> ExtractionConfig:
    defaults = ExtractionConfig()
    return ExtractionConfig(
        model=raw.get("model", defaults.model),
        api_base=str(raw.get("api_base", defaults.api_base)).rstrip("/"),
        timeout_seconds=float(raw.get("timeout_seconds", defaults.timeout_seconds)),
        instruction=raw.get("instruction", defaults.instruction),
        no_match_sentinel=raw.get("no_match_sentinel", defaults.no_match_sentinel),
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> EnricherConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    defaults = EnricherConfig()
    headers = tuple(str(h).strip() for h in data["expected_headers"])
    width = data.get("header_fingerprint_width", defaults.header_fingerprint_width)
    if width > len(headers):
        raise ConfigError(
            f"header_fingerprint_width={width} exceeds expected_headers length {len(headers)}"
        )
    description = data.get("description_column", defaults.description_column)
    if description.casefold() not in {h.casefold() for h in headers}:
        raise ConfigError(f"description_column '{description}' is not one of expected_headers")

    return EnricherConfig(
        expected_headers=headers,
        header_fingerprint_width=width,
        description_column=description,
        output_directory=data.get("output_directory", defaults.output_directory),
        output_suffix=data.get("output_suffix", defaults.output_suffix),
        max_upload_bytes=data.get("max_upload_bytes", defaults.max_upload_bytes),
        extraction=_build_extraction(data.get("extraction") or {}),
    )
