"""Small persisted user preferences, kept apart from practice stats."""

import json
import logging
from pathlib import Path
from typing import Any

from ..models.session import SENSITIVITY_MAX, SENSITIVITY_MIN

logger = logging.getLogger(__name__)

PREFERENCES_FILENAME = "preferences.json"
SENSITIVITY_KEY = "micSensitivity"
DEFAULT_SENSITIVITY = 2.0


class PreferencesStore:
    """Key-value preferences stored as one JSON object."""

    def __init__(self, data_dir: str = "./data", filename: str = PREFERENCES_FILENAME):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.preferences_file = self.data_dir / filename

    def _load(self) -> dict:
        if not self.preferences_file.exists():
            return {}
        try:
            with open(self.preferences_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading preferences: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        with open(self.preferences_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        logger.debug(f"Preference '{key}' set to: {value}")

    def get_sensitivity(self) -> float:
        """Saved sensitivity boost, falling back to the default when unusable."""
        try:
            value = float(self.get(SENSITIVITY_KEY, DEFAULT_SENSITIVITY))
        except (TypeError, ValueError):
            return DEFAULT_SENSITIVITY
        if not SENSITIVITY_MIN <= value <= SENSITIVITY_MAX:
            return DEFAULT_SENSITIVITY
        return value

    def set_sensitivity(self, value: float) -> None:
        if not SENSITIVITY_MIN <= value <= SENSITIVITY_MAX:
            raise ValueError(
                f"sensitivity must be between {SENSITIVITY_MIN} and {SENSITIVITY_MAX}")
        self.set(SENSITIVITY_KEY, value)
