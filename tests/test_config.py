"""
Unit tests for configuration loading and validation.

Tests strict validation and defaults for status line configs.
"""

import os
import tempfile

import pytest
import yaml

from session_statusline.config.loader import (
    DEFAULT_WINDOWS,
    StatuslineConfig,
    WindowConfig,
    load_or_default,
    load_statusline_config,
)
from session_statusline.storage.db import DEFAULT_DB_PATH


class TestConfigLoading:
    """Test configuration loading and validation."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, config_data, filename: str = "config.yaml") -> str:
        """Write configuration data to temporary file."""
        config_path = os.path.join(self.temp_dir, filename)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f)
        return config_path

    def test_valid_config_loads_correctly(self):
        config_data = {
            "database": "/tmp/usage.db",
            "bar_width": 12,
            "git_timeout": 1.5,
            "windows": {
                "five_hour": {"label": "L", "hours": 5, "limit": 1_000_000},
                "weekly": {"label": "W", "hours": 168, "limit": 9_000_000},
            }
        }

        config = load_statusline_config(self._write_config(config_data))

        assert config.database == "/tmp/usage.db"
        assert config.bar_width == 12
        assert config.git_timeout == 1.5
        assert [w.name for w in config.windows] == ["five_hour", "weekly"]
        assert config.windows[0].limit == 1_000_000
        assert config.windows[1].duration_ms == 7 * 24 * 60 * 60 * 1000

    def test_partial_config_keeps_defaults(self):
        config = load_statusline_config(self._write_config({"bar_width": 8}))

        assert config.bar_width == 8
        assert config.database == DEFAULT_DB_PATH
        assert config.windows == DEFAULT_WINDOWS

    def test_empty_file_gives_defaults(self):
        config_path = os.path.join(self.temp_dir, "empty.yaml")
        open(config_path, 'w').close()

        assert load_statusline_config(config_path) == StatuslineConfig()

    def test_label_defaults_to_initial(self):
        config = load_statusline_config(self._write_config({
            "windows": {"daily": {"hours": 24, "limit": 100}}
        }))

        assert config.windows[0].label == "D"

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            load_statusline_config(os.path.join(self.temp_dir, "missing.yaml"))

    def test_load_or_default_without_file(self):
        config = load_or_default(os.path.join(self.temp_dir, "missing.yaml"))

        assert config == StatuslineConfig()

    def test_invalid_yaml_raises(self):
        config_path = os.path.join(self.temp_dir, "bad.yaml")
        with open(config_path, 'w', encoding='utf-8') as f:
            f.write("windows: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            load_statusline_config(config_path)

    def test_unknown_top_level_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            load_statusline_config(self._write_config({"colour": "blue"}))

    def test_non_mapping_rejected(self):
        with pytest.raises(ValueError, match="must be a dictionary"):
            load_statusline_config(self._write_config(["a", "b"]))

    def test_unknown_window_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown keys in windows.weekly"):
            load_statusline_config(self._write_config({
                "windows": {"weekly": {"hours": 168, "limit": 10, "reset": "monday"}}
            }))

    def test_missing_window_limit_rejected(self):
        with pytest.raises(ValueError, match="Missing required 'limit'"):
            load_statusline_config(self._write_config({
                "windows": {"weekly": {"hours": 168}}
            }))

    @pytest.mark.parametrize("limit", [0, -1, 2.5, "lots", True])
    def test_invalid_window_limit_rejected(self, limit):
        with pytest.raises(ValueError, match="limit"):
            load_statusline_config(self._write_config({
                "windows": {"weekly": {"hours": 168, "limit": limit}}
            }))

    @pytest.mark.parametrize("hours", [0, -3, "five"])
    def test_invalid_window_hours_rejected(self, hours):
        with pytest.raises(ValueError, match="hours"):
            load_statusline_config(self._write_config({
                "windows": {"short": {"hours": hours, "limit": 10}}
            }))

    def test_empty_windows_rejected(self):
        with pytest.raises(ValueError, match="'windows' must be a non-empty dictionary"):
            load_statusline_config(self._write_config({"windows": {}}))

    @pytest.mark.parametrize("bar_width", [0, "wide", 3.5])
    def test_invalid_bar_width_rejected(self, bar_width):
        with pytest.raises(ValueError, match="bar_width"):
            load_statusline_config(self._write_config({"bar_width": bar_width}))


class TestConfigModel:
    """Test derived configuration values."""

    def test_retention_is_longest_window(self):
        config = StatuslineConfig(windows=(
            WindowConfig(name="a", label="A", hours=1, limit=10),
            WindowConfig(name="b", label="B", hours=48, limit=10),
        ))

        assert config.retention_ms == 48 * 60 * 60 * 1000

    def test_default_retention_is_seven_days(self):
        assert StatuslineConfig().retention_ms == 7 * 24 * 60 * 60 * 1000

    def test_window_rejects_non_positive_limit(self):
        with pytest.raises(ValueError, match="limit must be > 0"):
            WindowConfig(name="a", label="A", hours=1, limit=0)
