"""
Configuration loading.

Settings are read once from a YAML file (``configs/default.yaml`` unless
``$MODELTIDY_CONFIG`` points elsewhere) and validated with pydantic.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from modeltidy.utils.errors import ConfigurationError
from modeltidy.utils.logger import configure_logging

CONFIG_ENV = "MODELTIDY_CONFIG"
DEFAULT_CONFIG_PATH = "configs/default.yaml"


class TidySettings(BaseModel):
    """Runtime settings shared by the tidiers, validator and CLI."""

    conf_level: float = Field(0.95, gt=0.0, lt=1.0, description="Default confidence level")
    validate_output: bool = Field(True, description="Validate every produced table")
    log_level: Optional[str] = Field(None, description="Logging level name")
    log_file: Optional[str] = Field(None, description="Optional JSON log file")
    # model_type -> {"component_columns": [...], "summary_columns": [...]}
    schemas: Dict[str, Dict[str, List[str]]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate logging level name."""
        if v is None:
            return v
        valid = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid:
            raise ValueError(f"log_level must be one of {valid}")
        return v.upper()


def load_settings(path: Optional[str] = None) -> TidySettings:
    """
    Load settings from a YAML file.

    A missing file at the default location yields default settings; a
    missing file at an explicitly requested location is an error.

    Args:
        path: Config file path; falls back to $MODELTIDY_CONFIG, then the default

    Returns:
        Validated settings
    """
    explicit = path or os.environ.get(CONFIG_ENV)
    config_path = Path(explicit or DEFAULT_CONFIG_PATH)

    if not config_path.exists():
        if explicit:
            raise ConfigurationError("Configuration file not found",
                                     config_file=str(config_path))
        return TidySettings()

    with open(config_path, 'r') as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}", config_file=str(config_path)) from e

    if not isinstance(raw, dict):
        raise ConfigurationError("Configuration root must be a mapping",
                                 config_file=str(config_path))

    try:
        return TidySettings(**(raw.get('modeltidy', raw) or {}))
    except ValidationError as e:
        key = '.'.join(str(p) for p in e.errors()[0]['loc']) if e.errors() else None
        raise ConfigurationError(f"Invalid configuration: {e}", config_key=key,
                                 config_file=str(config_path)) from e


@lru_cache(maxsize=1)
def get_settings() -> TidySettings:
    """Process-wide settings, loaded on first use. Also configures package logging."""
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_file)
    return settings
