"""Simple YAML configuration loader for speechpractice."""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

from ..models.audio import CaptureConstraints
from ..models.session import SessionConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "audio": {
        "sample_rate": 44100,
        "fft_size": 512,
        "smoothing_time_constant": 0.8,
        "channels": 1,
        "echo_cancellation": True,
        "noise_suppression": True,
        "auto_gain_control": False,
    },
    "loudness": {
        "target_volume": 40,
        "smoothing_factor": 0.5,
        "tick_interval": 1 / 60,
    },
    "storage": {
        "data_directory": "data",
    },
    "logging": {
        "level": "INFO",
        "file_path": "data/logs/speechpractice.log",
        "console_output": True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


class SpeechPracticeConfig:
    """speechpractice configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file over the defaults."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _merge(copy.deepcopy(DEFAULT_CONFIG), loaded)
        self._resolve_paths(config, loaded)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any], loaded: Dict[str, Any]) -> None:
        """Resolve relative paths given in the file against its directory."""
        config_dir = self.config_file.parent

        if 'data_directory' in loaded.get('storage', {}):
            data_dir = config['storage']['data_directory']
            if not os.path.isabs(data_dir):
                config['storage']['data_directory'] = str(config_dir / data_dir)

        if 'file_path' in loaded.get('logging', {}):
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'loudness.target_volume').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_capture_constraints(self) -> CaptureConstraints:
        return CaptureConstraints(
            echo_cancellation=bool(self.get('audio.echo_cancellation', True)),
            noise_suppression=bool(self.get('audio.noise_suppression', True)),
            auto_gain_control=bool(self.get('audio.auto_gain_control', False)),
        )

    def get_session_config(self, sensitivity_boost: Optional[float] = None,
                           target_volume: Optional[float] = None) -> SessionConfig:
        """Build a validated SessionConfig, raising ValueError on bad values."""
        return SessionConfig(
            target_volume=(target_volume if target_volume is not None
                           else self.get('loudness.target_volume', 40)),
            sensitivity_boost=(sensitivity_boost if sensitivity_boost is not None
                               else self.get('loudness.sensitivity_boost', 2.0)),
            smoothing_factor=self.get('loudness.smoothing_factor', 0.5),
        )
