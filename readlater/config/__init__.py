"""Configuration management."""

from .loader import Config, default_config_path, load_config, save_config
from .models import ConfigModel, ExtractionConfig, IngestionConfig, PostgresConfig

__all__ = [
    "Config",
    "ConfigModel",
    "ExtractionConfig",
    "IngestionConfig",
    "PostgresConfig",
    "default_config_path",
    "load_config",
    "save_config",
]
