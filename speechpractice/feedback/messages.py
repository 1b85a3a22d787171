"""Display cues derived from loudness and pace."""

from typing import Tuple


def volume_color(volume: float, target: float) -> str:
    """Rich colour name for the meter bar."""
    if volume >= target:
        return "green"
    if volume >= target * 0.7:
        return "yellow"
    return "red"


def volume_message(volume: float, target: float) -> str:
    if volume >= target:
        return "Great volume! Keep it up!"
    if volume >= target * 0.7:
        return "Almost there! Speak louder!"
    if volume >= target * 0.3:
        return "Try to be louder!"
    return "Speak up so the meter can hear you"


def sensitivity_hint(sensitivity_boost: float) -> str:
    if sensitivity_boost < 1.5:
        return "Less sensitive"
    if sensitivity_boost > 3:
        return "Very sensitive"
    return "Normal"


def pace_feedback(interval_count: int, average_ms: float,
                  target_ms: float = 500) -> Tuple[str, str]:
    """Return (message, colour) for the pacing board."""
    if interval_count < 2:
        return "Start tapping...", "dim"
    if average_ms < target_ms - 100:
        return "Too fast! Slow down", "yellow"
    if average_ms > target_ms + 200:
        return "Good pace!", "green"
    return "Great rhythm!", "cyan"


def format_time(seconds: float) -> str:
    """Format whole seconds as m:ss."""
    seconds = int(seconds)
    return f"{seconds // 60}:{seconds % 60:02d}"
