"""Settings loader with environment overlay and validation."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from kagiyama.config.models import AppSettings
from kagiyama.errors import ConfigFileNotFoundError, ConfigValidationError

DEFAULT_CONFIG_DIR = Path("config")
DEFAULT_BASE_FILE = "watcher.json"
ENV_VAR_NAME = "KAGIYAMA_ENV"
DEFAULT_ENV = "development"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries. Override values take precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any]:
    """Load and parse a JSON settings file.

    Raises:
        ConfigFileNotFoundError: If the file does not exist.
    """
    if not path.exists():
        raise ConfigFileNotFoundError(str(path))

    with path.open(encoding="utf-8") as f:
        return json.load(f)


def settings_from_mapping(values: Mapping[str, Any]) -> AppSettings:
    """Validate an in-memory mapping into ``AppSettings``."""
    try:
        return AppSettings.model_validate(dict(values))
    except ValidationError as e:
        errors = [
            {"loc": " -> ".join(str(loc) for loc in err["loc"]), "msg": err["msg"]}
            for err in e.errors()
        ]
        raise ConfigValidationError(errors) from e


def load_config(
    *,
    config_dir: Path | str | None = None,
    env: str | None = None,
) -> AppSettings:
    """Load watcher settings.

    Sources, later ones overriding earlier:
    1. <config_dir>/watcher.json
    2. <config_dir>/watcher.<environment>.json, when present

    Args:
        config_dir: Directory containing the files. Defaults to "config".
        env: Environment name. Defaults to KAGIYAMA_ENV or "development".

    Raises:
        ConfigFileNotFoundError: If the base file is missing.
        ConfigValidationError: If validation fails.
    """
    config_dir = DEFAULT_CONFIG_DIR if config_dir is None else Path(config_dir)

    if env is None:
        env = os.environ.get(ENV_VAR_NAME, DEFAULT_ENV)

    config = load_json_file(config_dir / DEFAULT_BASE_FILE)

    env_path = config_dir / f"watcher.{env}.json"
    if env_path.exists():
        config = deep_merge(config, load_json_file(env_path))

    return settings_from_mapping(config)
