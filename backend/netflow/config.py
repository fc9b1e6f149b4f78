"""Configuration loader for NetFlow Monitor."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class PollingConfig(BaseModel):
    enabled: bool = True
    interval: int = 30  # seconds


class LinkThresholds(BaseModel):
    """Utilization percentages above which a link changes health tier."""

    warning: float = 75
    critical: float = 90


class CanvasConfig(BaseModel):
    width: int = 1200
    height: int = 700
    device_radius: float = 30
    flow_dots: int = 3
    flow_steps: int = 10
    frame_period: int = 360


class PlacementConfig(BaseModel):
    """Random placement window for newly added devices."""

    x_min: float = 300
    x_span: float = 400
    y_min: float = 200
    y_span: float = 300


class AppConfig(BaseModel):
    polling: PollingConfig = PollingConfig()
    link_thresholds: LinkThresholds = LinkThresholds()
    canvas: CanvasConfig = CanvasConfig()
    placement: PlacementConfig = PlacementConfig()
    seed_on_empty: bool = True


class Settings(BaseSettings):
    """Environment-based settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    store_url: str = "redis://localhost:6379"
    store_service_key: str = ""
    dev_mode: bool = True
    config_path: str = "../config/config.yaml"
    topology_path: str = "../config/topology.yaml"


def load_yaml_config(path: str) -> dict[str, Any]:
    """Load a YAML configuration file."""
    config_path = Path(path)
    if not config_path.is_absolute():
        config_path = Path(__file__).parent.parent / path

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def get_config() -> AppConfig:
    """Load and return the application configuration."""
    settings = Settings()
    yaml_config = load_yaml_config(settings.config_path)
    return AppConfig(**yaml_config)


def get_topology_config() -> dict[str, Any]:
    """Load and return the seed topology configuration."""
    settings = Settings()
    return load_yaml_config(settings.topology_path)


# Singleton instances
settings = Settings()
config = get_config()
