from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from pricing_profiles.app.models.config import ServiceConfig
from pricing_profiles.util.errors import ConfigError

SUPPORTED_SCHEMA_VERSIONS = {1}


def parse_service_config(data: Dict[str, Any]) -> ServiceConfig:
    try:
        config = ServiceConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config: {exc}") from exc
    if config.schema_version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ConfigError(f"Unsupported schema_version {config.schema_version}")
    if config.output.format != "csv":
        raise ConfigError(f"Unsupported output format {config.output.format}")
    return config


def load_service_config(path: str | Path) -> ServiceConfig:
    data: Dict[str, Any]
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Unable to read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")
    config = parse_service_config(data)
    if config.catalog.path and not Path(config.catalog.path).is_absolute():
        resolved = Path(path).resolve().parent / config.catalog.path
        config.catalog.path = str(resolved)
    return config
