"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import AvailabilityConfig


class DefaultsConfig(BaseModel):
    """Fallbacks for settings a fetched availability document omits; a missing document is the empty Scheduler."""
    session_duration_minutes: int = 30
    max_slots_per_day: int = 4

    @field_validator("session_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        problem = AvailabilityConfig.check_session_duration(value)
        if problem:
            raise ValueError(problem)
        return value

    @field_validator("max_slots_per_day")
    @classmethod
    def validate_max_slots(cls, value: int) -> int:
        problem = AvailabilityConfig.check_max_slots_per_day(value)
        if problem:
            raise ValueError(problem)
        return value


class ApiConfig(BaseModel):
    """Connection settings for the marketplace REST backend."""
    base_url: str = "http://localhost:5000"
    token: str = ""
    timeout_seconds: int = 30

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got {value}")
        return value.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    expert_id: str = ""
    api: ApiConfig = Field(default_factory=ApiConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    timezone: str = "local"
    mock_data_file: Path | None = None
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def get_mock_data_file(self) -> Path:
        """Where the mock store keeps its state between CLI runs."""
        return self.mock_data_file or Path.home() / ".slotplanner_mock_store.json"


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
