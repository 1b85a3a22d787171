"""Integration tests: exercises feeding the stats store through pubsub."""

import time
from pathlib import Path

import pytest

from speechpractice.audio.capture import AudioCapture
from speechpractice.audio.recorder import VoiceRecorder
from speechpractice.feedback.publisher import FeedbackPublisher
from speechpractice.models.session import SessionConfig
from speechpractice.services.articulation_session import ArticulationSession
from speechpractice.services.loudness_session import LoudnessSession
from speechpractice.services.reading_session import ReadingSession
from speechpractice.services.session_recorder import SessionRecorder
from speechpractice.services.tick_loop import TickLoop
from speechpractice.storage.stats_store import StatsStore


def wait_until(predicate, timeout=2.0):
    deadline = time.time() + timeout
    while not predicate():
        if time.time() > deadline:
            return False
        time.sleep(0.01)
    return True


@pytest.fixture
def store(temp_data_dir):
    return StatsStore(temp_data_dir)


@pytest.fixture
def recorder(store):
    recorder = SessionRecorder(store)
    yield recorder
    recorder.close()


@pytest.mark.integration
class TestLoudnessRecording:
    """Loudness sessions on a real tick loop, recorded via pubsub."""

    def test_session_logged_on_stop(self, store, recorder, mock_pyaudio,
                                    sample_audio_chunk, fake_clock):
        mock_pyaudio['stream'].read.return_value = sample_audio_chunk
        capture = AudioCapture()
        session = LoudnessSession(capture, publisher=FeedbackPublisher(),
                                  tick_loop=TickLoop(interval=0.005), clock=fake_clock)

        session.start()
        assert wait_until(lambda: capture.total_frames >= 5)
        fake_clock.advance(30)
        session.stop()

        assert not capture.is_open
        mock_pyaudio['stream'].close.assert_called_once()
        stats = store.read()
        assert stats["loudness_sessions"] == 1
        assert stats["sessions_completed"] == 1
        assert stats["streak_days"] == 1
        assert stats["daily_logs"][0]["tool"] == "loudness"
        assert stats["daily_logs"][0]["duration"] == 30

    def test_stream_failure_still_logs_session(self, store, recorder, mock_pyaudio,
                                               fake_clock):
        capture = AudioCapture()
        session = LoudnessSession(capture, tick_loop=TickLoop(interval=0.005),
                                  clock=fake_clock)
        session.start()
        assert wait_until(lambda: capture.total_frames >= 2)

        fake_clock.advance(20)
        mock_pyaudio['stream'].is_active.return_value = False
        assert wait_until(lambda: store.read()["loudness_sessions"] == 1)

        assert not session.is_running
        assert "no longer active" in session.stop_reason
        assert not capture.is_open
        session.stop()
        assert store.read()["loudness_sessions"] == 1

    def test_short_session_not_logged(self, store, recorder, mock_pyaudio, fake_clock):
        session = LoudnessSession(AudioCapture(), tick_loop=TickLoop(interval=0.005),
                                  clock=fake_clock)
        session.start()
        fake_clock.advance(0.5)
        session.stop()
        assert store.read()["sessions_completed"] == 0

    @pytest.mark.slow
    def test_breath_hold_and_hits_recorded(self, store, recorder, fake_capture, frame_of):
        fake_capture.default_frame = frame_of(64)
        session = LoudnessSession(
            fake_capture,
            config=SessionConfig(smoothing_factor=0.0),
            tick_loop=TickLoop(interval=0.01),
        )
        session.start()
        session.start_breath_exercise()
        time.sleep(1.3)
        fake_capture.default_frame = frame_of(0)

        assert wait_until(lambda: store.read()["breath_hold_records"])
        session.stop()

        holds = store.read()["breath_hold_records"]
        assert len(holds) == 1
        assert holds[0]["duration"] >= 1.0
        assert store.read()["volume_targets_hit"] == 1


@pytest.mark.integration
class TestOtherExercisesRecording:
    """Reading and articulation results reaching the store."""

    def test_reading_session_recorded(self, store, recorder, fake_capture,
                                      manual_tick_loop, frame_of):
        session = ReadingSession(fake_capture, ["One.", "Two."], recorder=recorder,
                                 config=SessionConfig(sensitivity_boost=2.55),
                                 tick_loop=manual_tick_loop, story_id="numbers")
        session.start()
        for level in (40, 44):
            fake_capture.queue(frame_of(level))
            manual_tick_loop.current.run_once()
            session.next_sentence()

        stats = store.read()
        assert stats["reading_sessions"] == 1
        record = stats["reading_records"][0]
        assert record["storyId"] == "numbers"
        assert record["sentencesRead"] == 2
        assert record["consistencyScore"] == session.summary.consistency_score
        assert "date" in record

    def test_articulation_recordings(self, store, recorder, mock_pyaudio, temp_data_dir):
        output_dir = Path(temp_data_dir) / "recordings"
        voice_recorder = VoiceRecorder()
        session = ArticulationSession(str(output_dir), recorder=recorder,
                                      voice_recorder=voice_recorder)

        for _ in range(2):
            session.start_recording()
            assert wait_until(lambda: voice_recorder.total_chunks > 0)
            assert session.stop_recording() is not None

        assert session.end() == 2
        assert sorted(p.name for p in output_dir.iterdir()) == [
            "recording_001.wav", "recording_002.wav"]
        stats = store.read()
        assert stats["articulation_sessions"] == 1
        assert stats["recordings_made"] == 2
