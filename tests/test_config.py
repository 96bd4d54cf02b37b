"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest

from blkiostat.core.config import build_config, load_config
from blkiostat.core.errors import ConfigError
from blkiostat.core.schemas import OutputFormat


class TestLoadConfig:
    """Tests for load_config."""

    def test_yaml(self, tmp_path: Path):
        """Test loading a YAML configuration."""
        path = tmp_path / "blkiostat.yaml"
        path.write_text(
            "extended_mode: true\n"
            "interval_seconds: 5\n"
            "count: 3\n"
            "name_filter: [sdb, sda]\n"
        )
        config = load_config(path)
        assert config.extended_mode is True
        assert config.interval_seconds == 5.0
        assert config.count == 3
        assert config.name_filter == ["sdb", "sda"]

    def test_json(self, tmp_path: Path):
        path = tmp_path / "blkiostat.json"
        path.write_text(json.dumps({"output_format": "json", "registry_capacity": 8}))
        config = load_config(path)
        assert config.output_format == OutputFormat.JSON
        assert config.registry_capacity == 8

    def test_empty_yaml_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_config(path).interval_seconds == 1.0

    def test_overrides_take_precedence(self, tmp_path: Path):
        """Test that command-line values win over the file."""
        path = tmp_path / "blkiostat.yaml"
        path.write_text("interval_seconds: 5\ncpu_reporting_enabled: false\n")
        config = load_config(path, {"interval_seconds": 2, "cpu_reporting_enabled": True})
        assert config.interval_seconds == 2.0
        assert config.cpu_reporting_enabled is True

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path: Path):
        path = tmp_path / "blkiostat.toml"
        path.write_text("count = 1\n")
        with pytest.raises(ConfigError, match="Unsupported"):
            load_config(path)

    def test_malformed_yaml(self, tmp_path: Path):
        path = tmp_path / "broken.yaml"
        path.write_text("count: [1, 2\n")
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        """Test that a top-level list is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- sda\n- sdb\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_values(self, tmp_path: Path):
        path = tmp_path / "blkiostat.yaml"
        path.write_text("registry_capacity: 0\n")
        with pytest.raises(ConfigError, match="registry_capacity"):
            load_config(path)


class TestBuildConfig:
    """Tests for build_config."""

    def test_valid(self):
        assert build_config({"count": 2}).count == 2

    def test_errors_are_summarized(self):
        with pytest.raises(ConfigError) as exc_info:
            build_config({"count": 0, "bogus": 1})
        message = str(exc_info.value)
        assert message.startswith("Invalid configuration:")
        assert "count" in message
        assert "bogus" in message
