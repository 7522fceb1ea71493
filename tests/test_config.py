"""
Tests for YAML configuration loading.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from slotplanner.config import ApiConfig, AppConfig, DefaultsConfig


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()
        assert config.api.base_url == "http://localhost:5000"
        assert config.defaults.max_slots_per_day == 4
        assert config.timezone == "local"
        assert config.log_level == "WARNING"

    def test_load_from_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "expert_id: expert-1\n"
            "api:\n"
            "  base_url: https://api.example.com/\n"
            "  token: secret\n"
            "defaults:\n"
            "  session_duration_minutes: 60\n"
            "timezone: Europe/Berlin\n"
            "log_level: debug\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(config_file)

        assert config.expert_id == "expert-1"
        assert config.api.base_url == "https://api.example.com"
        assert config.defaults.session_duration_minutes == 60
        assert config.log_level == "DEBUG"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_non_mapping_root(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            AppConfig.load_from_yaml(config_file)

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("api: [unclosed\n", encoding="utf-8")
        with pytest.raises(ValueError):
            AppConfig.load_from_yaml(config_file)

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            AppConfig(log_level="chatty")

    def test_mock_data_file(self, tmp_path):
        assert AppConfig().get_mock_data_file() == Path.home() / ".slotplanner_mock_store.json"
        assert AppConfig(mock_data_file=tmp_path / "m.json").get_mock_data_file() == tmp_path / "m.json"


class TestSectionValidation:

    def test_base_url_scheme(self):
        with pytest.raises(ValidationError):
            ApiConfig(base_url="ftp://example.com")

    def test_timeout_positive(self):
        with pytest.raises(ValidationError):
            ApiConfig(timeout_seconds=0)

    def test_defaults_use_domain_rules(self):
        with pytest.raises(ValidationError):
            DefaultsConfig(session_duration_minutes=45)
        with pytest.raises(ValidationError):
            DefaultsConfig(max_slots_per_day=0)
