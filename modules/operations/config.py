"""Configuration for the operations engine.

Loads from a YAML file with environment variable overrides.
Pattern: OPS__{SECTION}__{KEY} overrides nested YAML keys.
Example: OPS__URGENCY__WARNING_DAYS=21
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

from .models import Currency

DEFAULT_CONFIG_PATH = "config/operations.yml"


class UrgencyConfig(BaseModel):
    urgent_days: int = Field(default=7, ge=0, description="J-n at or below which a deadline is urgent")
    warning_days: int = Field(default=30, ge=0, description="J-n at or below which a deadline is a warning")


class TimelineConfig(BaseModel):
    pending_lead_months: int = Field(default=2, ge=0)
    validated_lead_months: int = Field(default=1, ge=0)
    trailing_months: int = Field(default=1, ge=0)
    default_window_months: int = Field(default=3, ge=1)


class VisibilityConfig(BaseModel):
    # Roles that also see departures still pending validation
    pending_visible_roles: list[str] = ["administrator", "travel_designer"]


class StorageConfig(BaseModel):
    backend: Literal["memory", "json", "sqlite"] = "memory"
    json_path: str = "data/operations.json"
    database_url: str = "sqlite:///data/operations.db"


class OperationsConfig(BaseModel):
    urgency: UrgencyConfig = UrgencyConfig()
    timeline: TimelineConfig = TimelineConfig()
    visibility: VisibilityConfig = VisibilityConfig()
    storage: StorageConfig = StorageConfig()
    default_land_currency: Currency = Currency.DZD
    catalog_path: Optional[str] = None


def _apply_env_overrides(config_dict: dict, prefix: str = "OPS") -> dict:
    """Apply environment variable overrides to config dict.

    Pattern: OPS__SECTION__KEY=value maps to config[section][key] = value
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}__"):
            continue
        parts = key[len(prefix) + 2:].lower().split("__")
        target = config_dict
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        # Type coercion for common cases
        if value.lower() in ("true", "false"):
            value = value.lower() == "true"
        elif value.isdigit():
            value = int(value)
        elif "," in value:
            value = [v.strip() for v in value.split(",") if v.strip()]
        target[parts[-1]] = value
    return config_dict


def load_config(config_path: Optional[str] = None) -> OperationsConfig:
    """Load configuration from YAML file with env overrides.

    Priority: env vars > YAML file > defaults
    """
    config_dict = {}

    if config_path is None:
        config_path = os.getenv("OPS_CONFIG_PATH", DEFAULT_CONFIG_PATH)
    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}

    config_dict = _apply_env_overrides(config_dict)
    return OperationsConfig(**config_dict)


_config: Optional[OperationsConfig] = None


def get_config() -> OperationsConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Optional[str] = None) -> OperationsConfig:
    global _config
    _config = load_config(config_path)
    return _config
