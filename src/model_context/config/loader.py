from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from model_context.config.models import AppConfig

SUPPORTED_VERSIONS = {1}


# ConfigError is raised for invalid configuration (fail fast at startup).
class ConfigError(ValueError):
    pass


def load_config(path: Path) -> AppConfig:
    # YAML file -> validated AppConfig; every failure surfaces as ConfigError.
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return parse_config(raw)


def parse_config(raw: dict[str, Any]) -> AppConfig:
    version = raw.get("version", 1)
    if version not in SUPPORTED_VERSIONS:
        raise ConfigError(f"Unsupported config version: {version!r}")
    try:
        return AppConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def default_config() -> AppConfig:
    # Defaults used when no config file is given: port 12345, stdout logging.
    return AppConfig()
