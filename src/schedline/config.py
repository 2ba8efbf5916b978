"""Configuration file (schedline_config.yaml) loading and discovery."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from . import context
from .exceptions import ParseError, ValidationError
from .parser import DEFAULT_PROJECT_START

CONFIG_FILENAME = "schedline_config.yaml"


class InterpreterConfig(BaseModel):
    """Tuning for the natural-language command interpreter."""

    fuzzy_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    exact_match_boost: float = Field(default=0.05, ge=0.0, le=1.0)


class ExportConfig(BaseModel):
    """Options for JSON export."""

    indent: int = 2
    default_level: int = Field(default=3, ge=1, le=3)


class SchedlineConfig(BaseModel):
    """Top-level configuration. Every section is optional."""

    default_project_start: date = DEFAULT_PROJECT_START
    interpreter: InterpreterConfig = InterpreterConfig()
    export: ExportConfig = ExportConfig()


def load_config(config_path: Path | str) -> SchedlineConfig:
    """Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ParseError: If the file is not valid YAML
        ValidationError: If the values don't match the schema
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse config {config_path}: {e}") from e

    if data is None:
        return SchedlineConfig()
    if not isinstance(data, dict):
        raise ParseError(f"Config {config_path} must contain a mapping at the root level")

    try:
        return SchedlineConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid config {config_path}: {e}") from e


def discover_config(
    spec_path: Path | str | None = None,
    config_path: Path | None = None,
) -> SchedlineConfig:
    """Find and load configuration, falling back to defaults.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. Specification file directory / schedline_config.yaml
    4. Current directory / schedline_config.yaml
    """
    if config_path and config_path.exists():
        return load_config(config_path)

    ctx_config = context.get_config_path()
    if ctx_config and ctx_config.exists():
        return load_config(ctx_config)

    if spec_path is not None:
        dir_config = Path(spec_path).parent / CONFIG_FILENAME
        if dir_config.exists():
            return load_config(dir_config)

    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return SchedlineConfig()
