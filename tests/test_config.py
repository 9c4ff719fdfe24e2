"""Test configuration loading and validation"""

from pathlib import Path

import pytest

from snag.core.config import (
    API_HOSTS,
    Config,
    load_config,
    parse_config,
)
from snag.core.exceptions import ConfigError


class TestLoadConfig:
    """Test config.yaml discovery and parsing"""

    def test_missing_default_file_uses_defaults(self, temp_dir, monkeypatch):
        """Test that no config.yaml in the CWD means built-in defaults"""
        monkeypatch.chdir(temp_dir)
        config = load_config()

        assert config.api.host == API_HOSTS[0]
        assert config.api.page_size == 100
        assert config.download.max_attempts == 3
        assert config.download.image_timeout == 10.0
        assert config.archive.compression_level == 6

    def test_missing_explicit_file_raises(self, temp_dir):
        """Test that an explicit path must exist"""
        with pytest.raises(ConfigError) as exc_info:
            load_config(temp_dir / "nope.yaml")
        assert "not found" in exc_info.value.message
        assert exc_info.value.details["file_path"].endswith("nope.yaml")

    def test_empty_file_uses_defaults(self, temp_dir):
        """Test an empty YAML document"""
        path = temp_dir / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == Config()

    def test_invalid_yaml_raises(self, temp_dir):
        """Test YAML syntax errors become ConfigError"""
        path = temp_dir / "config.yaml"
        path.write_text("api: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping_raises(self, temp_dir):
        """Test a YAML list at the top level is rejected"""
        path = temp_dir / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="dictionary"):
            load_config(path)

    def test_full_file(self, temp_dir):
        """Test every section is read"""
        path = temp_dir / "config.yaml"
        path.write_text(
            "api:\n"
            "  host: 'https://discovery.example/'\n"
            "  app_name: my-app\n"
            "  page_size: 50\n"
            "download:\n"
            "  image_timeout: 5\n"
            "  max_attempts: 2\n"
            "  retry_base_delay: 0\n"
            "  concurrency: 8\n"
            f"output:\n"
            f"  directory: '{temp_dir / 'out'}'\n"
            "archive:\n"
            "  compression_level: 9\n",
            encoding="utf-8"
        )
        config = load_config(path)

        assert config.api.host == "https://discovery.example"
        assert config.api.app_name == "my-app"
        assert config.api.page_size == 50
        assert config.download.image_timeout == 5.0
        assert config.download.max_attempts == 2
        assert config.download.retry_base_delay == 0.0
        assert config.download.concurrency == 8
        assert config.output.directory == (temp_dir / "out").resolve()
        assert config.archive.compression_level == 9


class TestParseConfig:
    """Test field validation"""

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigError, match="'download' must be a dictionary"):
            parse_config({"download": 3})

    def test_host_must_be_http(self):
        with pytest.raises(ConfigError, match="api.host"):
            parse_config({"api": {"host": "ftp://example"}})

    def test_zero_attempts_rejected(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_config({"download": {"max_attempts": 0}})
        assert exc_info.value.details == {"field": "download.max_attempts", "value": 0}

    def test_boolean_is_not_a_number(self):
        with pytest.raises(ConfigError):
            parse_config({"download": {"concurrency": True}})

    def test_negative_delay_rejected(self):
        with pytest.raises(ConfigError, match="retry_base_delay"):
            parse_config({"download": {"retry_base_delay": -1}})

    def test_compression_level_range(self):
        with pytest.raises(ConfigError, match="compression_level"):
            parse_config({"archive": {"compression_level": 10}})

    def test_request_timeout_may_be_null(self):
        config = parse_config({"api": {"request_timeout": None}})
        assert config.api.request_timeout is None

    def test_output_directory_expands_home(self):
        config = parse_config({"output": {"directory": "~/snag-out"}})
        assert config.output.directory == (Path.home() / "snag-out").resolve()
