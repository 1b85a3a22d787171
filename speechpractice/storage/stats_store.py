"""JSON-backed practice statistics store."""

import copy
import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

STATS_FILENAME = "speechpractice_stats.json"
MAX_RECORDS = 100
MAX_DAILY_LOGS = 200

DEFAULT_STATS: Dict[str, Any] = {
    "sessions_completed": 0,
    "streak_days": 0,
    "last_practice": None,
    "total_practice_minutes": 0,

    # Pacing board
    "pacing_sessions": 0,
    "avg_syllable_time": 0,
    "syllable_times": [],

    # Loudness meter
    "loudness_sessions": 0,
    "breath_hold_records": [],
    "volume_targets_hit": 0,

    # Reading aloud
    "reading_sessions": 0,
    "reading_records": [],

    # Articulation mirror
    "articulation_sessions": 0,
    "recordings_made": 0,

    "daily_logs": [],
}


def default_stats() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_STATS)


def _records(stats: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    """Dict entries of a record list; null or malformed lists read as empty."""
    records = stats.get(key)
    if not isinstance(records, list):
        return []
    return [r for r in records if isinstance(r, dict)]


class StatsStore:
    """Read-merge-write store for practice statistics.

    Writes are not atomic across processes; two writers can lose each
    other's updates.
    """

    def __init__(self, data_dir: str = "./data", filename: str = STATS_FILENAME):
        """Initialize the store.

        Args:
            data_dir: Directory holding the statistics file
            filename: Name of the JSON file inside data_dir
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.stats_file = self.data_dir / filename
        logger.info(f"StatsStore initialized with file: {self.stats_file}")

    def read(self) -> Dict[str, Any]:
        """Return the stored stats merged over the defaults."""
        stats = default_stats()
        if not self.stats_file.exists():
            return stats

        try:
            with open(self.stats_file, 'r', encoding='utf-8') as f:
                saved = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading stats: {e}")
            return stats

        if isinstance(saved, dict):
            stats.update(saved)
        else:
            logger.warning(f"Ignoring malformed stats file: {self.stats_file}")
        return stats

    def _save(self, stats: Dict[str, Any]) -> Dict[str, Any]:
        try:
            with open(self.stats_file, 'w', encoding='utf-8') as f:
                json.dump(stats, f, indent=2)
        except (OSError, TypeError) as e:
            logger.error(f"Error saving stats: {e}")
            raise
        return stats

    def write(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Merge ``partial`` into the stored stats and persist the result."""
        current = self.read()
        current.update(partial)
        return self._save(current)

    def increment(self, key: str, amount: float = 1) -> Dict[str, Any]:
        current = self.read()
        current[key] = (current.get(key) or 0) + amount
        logger.debug(f"Incremented {key} by {amount}")
        return self._save(current)

    def add_record(self, key: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Append a dated record to a list stat, keeping the newest 100."""
        current = self.read()
        records = list(current.get(key) or [])[-(MAX_RECORDS - 1):]
        records.append({**record, "date": datetime.now().isoformat()})
        current[key] = records
        return self._save(current)

    def log_session(self, tool: str, duration_seconds: float,
                    today: Optional[date] = None) -> Dict[str, Any]:
        """Count a finished practice session and update the daily streak."""
        current = self.read()
        today = today or date.today()
        last_practice = current.get("last_practice")

        streak = current.get("streak_days") or 0
        if last_practice:
            diff_days = (today - date.fromisoformat(last_practice)).days
            if diff_days == 1:
                streak += 1
            elif diff_days != 0:
                streak = 1
        else:
            streak = 1

        daily_log = {
            "date": today.isoformat(),
            "tool": tool,
            "duration": duration_seconds,
            "timestamp": datetime.now().isoformat(),
        }

        current.update({
            "sessions_completed": (current.get("sessions_completed") or 0) + 1,
            "streak_days": streak,
            "last_practice": today.isoformat(),
            "total_practice_minutes": (current.get("total_practice_minutes") or 0)
            + duration_seconds / 60,
            "daily_logs": list(current.get("daily_logs") or [])[-(MAX_DAILY_LOGS - 1):]
            + [daily_log],
        })
        logger.info(f"Logged {tool} session ({duration_seconds:.0f}s), streak {streak}")
        return self._save(current)

    def add_reading_session(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        current = self.read()
        records = list(current.get("reading_records") or [])[-(MAX_RECORDS - 1):]
        records.append({**session_data, "date": datetime.now().isoformat()})
        current["reading_sessions"] = (current.get("reading_sessions") or 0) + 1
        current["reading_records"] = records
        return self._save(current)

    def reset(self) -> None:
        """Delete all stored statistics."""
        if self.stats_file.exists():
            self.stats_file.unlink()
        logger.info("Stats reset")

    @staticmethod
    def export_filename(day: Optional[date] = None) -> str:
        return f"speechpractice-stats-{(day or date.today()).isoformat()}.json"

    def export_to(self, filepath: str) -> str:
        """Write the current stats as pretty-printed JSON to filepath."""
        path = Path(filepath)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.read(), f, indent=2)
        logger.info(f"Stats exported to {path}")
        return str(path)

    def import_from(self, json_text: str) -> bool:
        """Replace stored stats with an export, merged over the defaults."""
        try:
            imported = json.loads(json_text)
        except ValueError as e:
            logger.error(f"Error importing stats: {e}")
            return False
        if not isinstance(imported, dict):
            logger.error("Error importing stats: top level is not an object")
            return False

        merged = default_stats()
        merged.update(imported)
        self._save(merged)
        logger.info(f"Imported stats with {len(imported)} keys")
        return True

    def summary(self) -> Dict[str, Any]:
        """Headline numbers for the progress screen."""
        stats = self.read()
        holds = [r.get("duration", 0) for r in _records(stats, "breath_hold_records")]
        scores = [r.get("consistencyScore", 0) for r in _records(stats, "reading_records")]
        syllables = [r.get("avg", 0) for r in _records(stats, "syllable_times")]
        return {
            "sessions_completed": stats["sessions_completed"],
            "streak_days": stats["streak_days"],
            "total_practice_minutes": round(stats["total_practice_minutes"] or 0, 1),
            "best_breath_hold": max(holds) if holds else 0,
            "volume_targets_hit": stats["volume_targets_hit"],
            "average_consistency": round(sum(scores) / len(scores)) if scores else None,
            "latest_syllable_time": syllables[-1] if syllables else None,
            "recordings_made": stats["recordings_made"],
        }
