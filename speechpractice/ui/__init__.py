"""Console user interface."""

from .meter_screen import loudness_bar, render_loudness, render_stats

__all__ = ["loudness_bar", "render_loudness", "render_stats"]
