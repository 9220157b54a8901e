"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from surprise_app.config.defaults import get_default_config
from surprise_app.config.loader import ConfigLoader, load_config
from surprise_app.config.validation import ConfigValidator
from surprise_app.errors import ConfigurationError


def write_config(tmp_path: Path, text: str) -> Path:
    (tmp_path / "client.yaml").write_text(text)
    return tmp_path


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        config = get_default_config()
        assert config.api.base_url == ""
        assert config.loading.escalation_delay_seconds == 15.0
        assert config.export.delimiter == ","
        assert config.selection.indicator == "CPI"
        assert config.selection.market == "S&P 500"
        assert config.selection.horizon == "Same day"


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        loader = ConfigLoader.create()
        assert isinstance(loader.config_dir, Path)

    def test_repository_config_loads(self) -> None:
        """The shipped config/client.yaml is valid."""
        config = ConfigLoader.create(environ={}).load()
        assert config.api.timeout_seconds == 30
        assert config.loading.escalation_delay_seconds == 15

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = ConfigLoader.create(tmp_path, environ={}).load()
        assert config == get_default_config()

    def test_file_overrides_defaults(self, tmp_path: Path) -> None:
        write_config(tmp_path, "loading:\n  escalation_delay_seconds: 5\nexport:\n  delimiter: ';'\n")

        config = ConfigLoader.create(tmp_path, environ={}).load()

        assert config.loading.escalation_delay_seconds == 5
        assert config.export.delimiter == ";"
        # Other defaults should remain
        assert config.export.download_dir == "downloads"

    def test_env_overrides_file(self, tmp_path: Path) -> None:
        write_config(tmp_path, "api:\n  base_url: http://from-file\n")
        environ = {"SURPRISE_API_URL": "https://from-env.example.com"}

        config = ConfigLoader.create(tmp_path, environ=environ).load()

        assert config.api.base_url == "https://from-env.example.com"

    def test_explicit_overrides_win(self, tmp_path: Path) -> None:
        environ = {"SURPRISE_API_URL": "https://from-env.example.com"}

        config = ConfigLoader.create(tmp_path, environ=environ).load(
            {"api": {"base_url": "http://override"}}
        )

        assert config.api.base_url == "http://override"

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        write_config(tmp_path, "loading:\n  escalation_delay_seconds: -1\n")

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.create(tmp_path, environ={}).load()

        assert exc_info.value.field == "loading.escalation_delay_seconds"

    def test_non_mapping_file_raises(self, tmp_path: Path) -> None:
        write_config(tmp_path, "- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            ConfigLoader.create(tmp_path, environ={}).load()

    def test_load_config_helper(self, tmp_path: Path) -> None:
        config = load_config(tmp_path, {"selection": {"market": "VIX"}})
        assert config.selection.market == "VIX"


class TestConfigValidator:
    """Test suite for configuration validator."""

    def test_unknown_section(self) -> None:
        errors = ConfigValidator.validate_config({"breakout": {}})
        assert [e.field for e in errors] == ["breakout"]

    def test_unknown_key(self) -> None:
        errors = ConfigValidator.validate_config({"api": {"token": "x"}})
        assert [e.field for e in errors] == ["api.token"]

    def test_base_url_must_be_absolute(self) -> None:
        assert ConfigValidator.validate_api_params({"base_url": "localhost:8000"})
        assert not ConfigValidator.validate_api_params({"base_url": ""})
        assert not ConfigValidator.validate_api_params({"base_url": "https://api.example.com"})

    def test_selection_outside_domain(self) -> None:
        errors = ConfigValidator.validate_selection_params({"indicator": "GDP"})
        assert errors[0].field == "selection.indicator"

    def test_delimiter_single_character(self) -> None:
        assert ConfigValidator.validate_export_params({"delimiter": ";;"})
        assert ConfigValidator.validate_export_params({"delimiter": '"'})
        assert not ConfigValidator.validate_export_params({"delimiter": "\t"})

    def test_logging_level(self) -> None:
        assert ConfigValidator.validate_logging_params({"level": "LOUD"})
        assert not ConfigValidator.validate_logging_params({"level": "debug"})
