"""Configuration loader."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .models import ConfigModel

CONFIG_ENV = "READLATER_CONFIG"


def default_config_path() -> Path:
    """Config path from READLATER_CONFIG, else ~/.config/readlater/config.yaml."""
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "readlater" / "config.yaml"


class Config:
    """Configuration manager."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """Initialize config manager."""
        if config_path is None:
            config_path = default_config_path()
        self.config_path = config_path
        self._config: Optional[ConfigModel] = None

    @property
    def config(self) -> ConfigModel:
        """Get loaded config."""
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    def get_db_config(self) -> Dict[str, Any]:
        """Get database configuration dict."""
        db_config = self.config.postgres.model_dump()

        # Handle password from environment if specified
        if db_config.get("password_env"):
            password = os.environ.get(db_config["password_env"])
            if password:
                db_config["password"] = password

        return db_config

    def get_extraction_config(self) -> Dict[str, Any]:
        """Get extraction configuration dict."""
        extraction_config = self.config.extraction.model_dump()

        # Handle API key from environment if specified
        if extraction_config.get("api_key_env"):
            api_key = os.environ.get(extraction_config["api_key_env"])
            if api_key:
                extraction_config["api_key"] = api_key

        return extraction_config


def load_config(config_path: Path) -> ConfigModel:
    """Load configuration from YAML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}

        return ConfigModel(**config_data)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}")


def save_config(config: ConfigModel, config_path: Path) -> None:
    """Save configuration to YAML file."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
