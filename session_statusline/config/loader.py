"""
Configuration management and loading.

Handles status line settings: tracked windows, quota limits and storage.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple

import yaml

from session_statusline.storage.db import DEFAULT_DB_PATH

DEFAULT_CONFIG_PATH = "~/.config/session-statusline/config.yaml"
CONFIG_ENV_VAR = "SESSION_STATUSLINE_CONFIG"

_MS_PER_HOUR = 60 * 60 * 1000


@dataclass(frozen=True)
class WindowConfig:
    """A trailing window and its token quota."""
    name: str
    label: str
    hours: float
    limit: int

    def __post_init__(self):
        """Validate window values are positive."""
        if self.hours <= 0:
            raise ValueError(f"window '{self.name}' hours must be > 0")
        if self.limit <= 0:
            raise ValueError(f"window '{self.name}' limit must be > 0")

    @property
    def duration_ms(self) -> int:
        """Window length in milliseconds."""
        return int(self.hours * _MS_PER_HOUR)


# ~5M tokens per 5 hours and ~45M per week approximate the Pro plan
DEFAULT_WINDOWS = (
    WindowConfig(name="five_hour", label="L", hours=5, limit=5_000_000),
    WindowConfig(name="weekly", label="W", hours=7 * 24, limit=45_000_000),
)


@dataclass(frozen=True)
class StatuslineConfig:
    """Complete status line configuration."""
    database: str = DEFAULT_DB_PATH
    bar_width: int = 10
    git_timeout: float = 2.0
    windows: Tuple[WindowConfig, ...] = field(default=DEFAULT_WINDOWS)

    def __post_init__(self):
        """Validate configuration values."""
        if self.bar_width <= 0:
            raise ValueError("bar_width must be > 0")
        if self.git_timeout <= 0:
            raise ValueError("git_timeout must be > 0")
        if not self.windows:
            raise ValueError("at least one window is required")

    @property
    def retention_ms(self) -> int:
        """Events older than the longest window are no longer needed."""
        return max(w.duration_ms for w in self.windows)


def load_statusline_config(path: str) -> StatuslineConfig:
    """Load and validate status line configuration from a YAML file.

    Validation is strict: unknown keys and out-of-range values are errors
    rather than being silently ignored.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated StatuslineConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Statusline config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if raw_config is None:
        return StatuslineConfig()
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'database', 'bar_width', 'git_timeout', 'windows'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    kwargs = {}

    if 'database' in raw_config:
        database = raw_config['database']
        if not isinstance(database, str) or not database.strip():
            raise ValueError("'database' must be a non-empty string")
        kwargs['database'] = database

    if 'bar_width' in raw_config:
        bar_width = raw_config['bar_width']
        if isinstance(bar_width, bool) or not isinstance(bar_width, int):
            raise ValueError("'bar_width' must be an integer")
        kwargs['bar_width'] = bar_width

    if 'git_timeout' in raw_config:
        kwargs['git_timeout'] = _positive_number(raw_config['git_timeout'], 'git_timeout')

    if 'windows' in raw_config:
        windows_data = raw_config['windows']
        if not isinstance(windows_data, dict) or not windows_data:
            raise ValueError("'windows' must be a non-empty dictionary")
        kwargs['windows'] = tuple(
            _parse_window_config(name, data)
            for name, data in windows_data.items()
        )

    return StatuslineConfig(**kwargs)


def load_or_default(path: str = DEFAULT_CONFIG_PATH) -> StatuslineConfig:
    """Load configuration if the file exists, otherwise use defaults."""
    if not Path(path).expanduser().exists():
        return StatuslineConfig()
    return load_statusline_config(path)


def _parse_window_config(name: str, data: Dict) -> WindowConfig:
    """Parse and validate one window definition.

    Args:
        name: Window key in the configuration
        data: Window configuration data

    Returns:
        Validated WindowConfig

    Raises:
        ValueError: If configuration is invalid
    """
    path = f"windows.{name}"
    if not isinstance(data, dict):
        raise ValueError(f"Window '{name}' must be a dictionary")

    allowed_keys = {'label', 'hours', 'limit'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    for required in ('hours', 'limit'):
        if required not in data:
            raise ValueError(f"Missing required '{required}' in {path}")

    limit = data['limit']
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValueError(f"'limit' in {path} must be a positive integer")

    label = data.get('label', str(name)[:1].upper())
    if not isinstance(label, str) or not label:
        raise ValueError(f"'label' in {path} must be a non-empty string")

    return WindowConfig(
        name=str(name),
        label=label,
        hours=_positive_number(data['hours'], f"{path}.hours"),
        limit=limit
    )


def _positive_number(value, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"'{path}' must be > 0")
    return float(value)
