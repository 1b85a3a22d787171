"""Persistence for practice statistics and preferences."""

from .preferences import PreferencesStore
from .stats_store import DEFAULT_STATS, StatsStore

__all__ = ["StatsStore", "PreferencesStore", "DEFAULT_STATS"]
