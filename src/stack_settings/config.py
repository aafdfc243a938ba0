"""Settings configuration helpers."""

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import CONFIG_FILE, DEFAULT_PROTECTED_FILES, DEFAULT_PROTECTED_PACKAGES
from .errors import ConfigError


class SettingsConfig(BaseModel):
    """Safety configuration (stored in .stack-settings.yaml at the repo root)."""

    model_config = ConfigDict(extra="forbid")

    protected_files: List[str] = Field(default_factory=lambda: list(DEFAULT_PROTECTED_FILES))
    protected_packages: List[str] = Field(default_factory=lambda: list(DEFAULT_PROTECTED_PACKAGES))
    require_clean: bool = True


def load_settings_config(root: Path) -> SettingsConfig:
    """Load settings configuration from .stack-settings.yaml if present."""

    cfg_path = root / CONFIG_FILE
    if not cfg_path.exists():
        return SettingsConfig()

    try:
        data = yaml.safe_load(cfg_path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {cfg_path}, got {type(data).__name__}")

    try:
        return SettingsConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {cfg_path}:\n{e}") from e

