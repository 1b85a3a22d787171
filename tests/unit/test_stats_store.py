"""Unit tests for StatsStore."""

import json
from datetime import date
from pathlib import Path

import pytest

from speechpractice.storage.stats_store import (
    DEFAULT_STATS,
    MAX_DAILY_LOGS,
    MAX_RECORDS,
    StatsStore,
)


@pytest.fixture
def store(temp_data_dir):
    return StatsStore(temp_data_dir)


@pytest.mark.unit
class TestStatsStoreReadWrite:
    """Reading, merging and writing the stats file."""

    def test_initialization_creates_directory(self, temp_data_dir):
        data_dir = Path(temp_data_dir) / "nested" / "data"
        store = StatsStore(str(data_dir))
        assert data_dir.exists()
        assert store.stats_file == data_dir / "speechpractice_stats.json"

    def test_missing_file_reads_defaults(self, store):
        assert store.read() == DEFAULT_STATS

    def test_defaults_are_not_shared(self, store):
        stats = store.read()
        stats["syllable_times"].append({"avg": 1})
        assert DEFAULT_STATS["syllable_times"] == []

    def test_write_merges_over_stored_values(self, store):
        store.write({"streak_days": 3})
        store.write({"recordings_made": 2})

        stats = store.read()
        assert stats["streak_days"] == 3
        assert stats["recordings_made"] == 2
        assert stats["sessions_completed"] == 0

    def test_stored_file_missing_keys_gets_defaults(self, store):
        store.stats_file.write_text(json.dumps({"streak_days": 7}))
        stats = store.read()
        assert stats["streak_days"] == 7
        assert stats["daily_logs"] == []

    def test_corrupt_file_reads_defaults(self, store):
        store.stats_file.write_text("{not json")
        assert store.read() == DEFAULT_STATS

    def test_non_object_file_reads_defaults(self, store):
        store.stats_file.write_text("[1, 2, 3]")
        assert store.read() == DEFAULT_STATS

    def test_increment(self, store):
        store.increment("volume_targets_hit", 3)
        store.increment("volume_targets_hit")
        assert store.read()["volume_targets_hit"] == 4

    def test_unserialisable_value_raises(self, store):
        with pytest.raises(TypeError):
            store.write({"bad": object()})


@pytest.mark.unit
class TestStatsStoreRecords:
    """Bounded record lists."""

    def test_add_record_stamps_date(self, store):
        store.add_record("breath_hold_records", {"duration": 2.4})
        records = store.read()["breath_hold_records"]
        assert records[0]["duration"] == 2.4
        assert "date" in records[0]

    def test_records_capped_keeping_newest(self, store):
        for i in range(MAX_RECORDS + 5):
            store.add_record("syllable_times", {"avg": i})

        records = store.read()["syllable_times"]
        assert len(records) == MAX_RECORDS
        assert records[0]["avg"] == 5
        assert records[-1]["avg"] == MAX_RECORDS + 4

    def test_add_reading_session(self, store):
        store.add_reading_session({"consistencyScore": 80, "averageVolume": 45})
        stats = store.read()
        assert stats["reading_sessions"] == 1
        assert stats["reading_records"][0]["consistencyScore"] == 80


@pytest.mark.unit
class TestStatsStoreStreak:
    """Session logging and the daily streak."""

    def test_first_session_starts_streak(self, store):
        stats = store.log_session("loudness", 90, today=date(2024, 3, 1))
        assert stats["streak_days"] == 1
        assert stats["sessions_completed"] == 1
        assert stats["last_practice"] == "2024-03-01"
        assert stats["total_practice_minutes"] == pytest.approx(1.5)
        assert stats["daily_logs"][0]["tool"] == "loudness"
        assert stats["daily_logs"][0]["duration"] == 90

    def test_same_day_keeps_streak(self, store):
        store.log_session("loudness", 60, today=date(2024, 3, 1))
        stats = store.log_session("pacing", 60, today=date(2024, 3, 1))
        assert stats["streak_days"] == 1
        assert stats["sessions_completed"] == 2

    def test_next_day_extends_streak(self, store):
        store.log_session("loudness", 60, today=date(2024, 3, 1))
        store.log_session("loudness", 60, today=date(2024, 3, 2))
        stats = store.log_session("loudness", 60, today=date(2024, 3, 3))
        assert stats["streak_days"] == 3

    def test_gap_resets_streak(self, store):
        store.log_session("loudness", 60, today=date(2024, 3, 1))
        store.log_session("loudness", 60, today=date(2024, 3, 2))
        stats = store.log_session("loudness", 60, today=date(2024, 3, 5))
        assert stats["streak_days"] == 1

    def test_daily_logs_capped(self, store):
        store.write({"daily_logs": [{"tool": "old"}] * MAX_DAILY_LOGS})
        stats = store.log_session("reading", 30, today=date(2024, 3, 1))
        assert len(stats["daily_logs"]) == MAX_DAILY_LOGS
        assert stats["daily_logs"][-1]["tool"] == "reading"


@pytest.mark.unit
class TestStatsStoreExportImport:
    """Export, import and reset."""

    def test_export_filename(self):
        assert (StatsStore.export_filename(date(2024, 3, 1))
                == "speechpractice-stats-2024-03-01.json")

    def test_export_then_import_into_fresh_store(self, store, temp_data_dir):
        store.increment("recordings_made", 4)
        export_path = Path(temp_data_dir) / "export.json"
        store.export_to(str(export_path))

        other = StatsStore(str(Path(temp_data_dir) / "other"))
        assert other.import_from(export_path.read_text()) is True
        assert other.read()["recordings_made"] == 4

    def test_import_fills_missing_keys(self, store):
        assert store.import_from('{"streak_days": 9}') is True
        stats = store.read()
        assert stats["streak_days"] == 9
        assert stats["reading_records"] == []

    @pytest.mark.parametrize("text", ["not json", "[]", "42"])
    def test_import_rejects_invalid(self, store, text):
        store.increment("recordings_made", 2)
        assert store.import_from(text) is False
        assert store.read()["recordings_made"] == 2

    def test_reset(self, store):
        store.increment("recordings_made")
        store.reset()
        assert not store.stats_file.exists()
        assert store.read() == DEFAULT_STATS
        store.reset()


@pytest.mark.unit
class TestStatsSummary:
    """Headline numbers."""

    def test_empty_summary(self, store):
        summary = store.summary()
        assert summary["best_breath_hold"] == 0
        assert summary["average_consistency"] is None
        assert summary["latest_syllable_time"] is None

    def test_summary_values(self, store):
        store.add_record("breath_hold_records", {"duration": 2.5})
        store.add_record("breath_hold_records", {"duration": 4.1})
        store.add_reading_session({"consistencyScore": 70})
        store.add_reading_session({"consistencyScore": 81})
        store.add_record("syllable_times", {"avg": 620})
        store.add_record("syllable_times", {"avg": 540})

        summary = store.summary()
        assert summary["best_breath_hold"] == 4.1
        assert summary["average_consistency"] == 76
        assert summary["latest_syllable_time"] == 540

    def test_summary_tolerates_null_and_malformed_records(self, store):
        assert store.import_from(json.dumps({
            "breath_hold_records": None,
            "reading_records": "oops",
            "syllable_times": [{"avg": 500}, 7],
            "total_practice_minutes": None,
        })) is True

        summary = store.summary()
        assert summary["best_breath_hold"] == 0
        assert summary["average_consistency"] is None
        assert summary["latest_syllable_time"] == 500
        assert summary["total_practice_minutes"] == 0
