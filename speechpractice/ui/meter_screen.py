"""Console rendering of the exercises with rich."""

import logging
from typing import Any, Dict, Optional

from rich.align import Align
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..feedback.messages import format_time, sensitivity_hint, volume_color, volume_message
from ..models.session import LoudnessReading

logger = logging.getLogger(__name__)

BAR_WIDTH = 50


def loudness_bar(volume: float, target: float, width: int = BAR_WIDTH) -> Text:
    """Horizontal meter with a target marker."""
    filled = int(round(min(100.0, max(0.0, volume)) / 100 * width))
    marker = min(width - 1, int(round(target / 100 * width)))
    bar = Text()
    for i in range(width):
        if i == marker:
            bar.append("|", style="bold white")
        elif i < filled:
            bar.append("█", style=volume_color(volume, target))
        else:
            bar.append("░", style="dim")
    bar.append(f" {volume:5.1f}%")
    return bar


def render_loudness(reading: Optional[LoudnessReading], elapsed: float,
                    target: float, sensitivity_boost: float,
                    breath_exercise: bool = False) -> Panel:
    """Build the loudness meter panel for the latest reading."""
    if reading is None:
        body = Text("Waiting for microphone...", style="dim")
        return Panel(Align.center(body), title="Loudness Meter")

    stats = Table.grid(padding=(0, 3))
    stats.add_column()
    stats.add_column()
    stats.add_column()
    stats.add_row(
        f"Time {format_time(elapsed)}",
        f"Targets hit {reading.targets_hit}",
        f"Target {target:.0f}%  Sensitivity {sensitivity_boost:.1f}x "
        f"({sensitivity_hint(sensitivity_boost)})",
    )

    parts = [
        loudness_bar(reading.smoothed, target),
        Text(volume_message(reading.smoothed, target),
             style=volume_color(reading.smoothed, target)),
        stats,
    ]
    if breath_exercise:
        hold = Text(f"Hold {reading.breath_hold_time:.1f}s   Best {reading.best_breath_hold:.1f}s",
                    style="bold cyan" if reading.breath_holding else "cyan")
        parts.append(hold)

    return Panel(Group(*parts), title="Loudness Meter")


def render_stats(summary: Dict[str, Any]) -> Table:
    """Table of headline progress numbers."""
    table = Table(title="Your Progress")
    table.add_column("Measure", style="cyan")
    table.add_column("Value", justify="right")

    def show(value, suffix=""):
        return "-" if value is None else f"{value}{suffix}"

    table.add_row("Sessions completed", show(summary["sessions_completed"]))
    table.add_row("Day streak", show(summary["streak_days"]))
    table.add_row("Practice minutes", show(summary["total_practice_minutes"]))
    table.add_row("Best breath hold", show(summary["best_breath_hold"], "s"))
    table.add_row("Volume targets hit", show(summary["volume_targets_hit"]))
    table.add_row("Average reading consistency", show(summary["average_consistency"], "%"))
    table.add_row("Latest syllable time", show(summary["latest_syllable_time"], "ms"))
    table.add_row("Recordings made", show(summary["recordings_made"]))
    return table
