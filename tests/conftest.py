"""Pytest configuration and fixtures for speechpractice tests."""

import pytest
import tempfile
import logging
from collections import deque
from unittest.mock import Mock, patch

import numpy as np
from pubsub import pub

from speechpractice.audio.errors import CaptureClosedUnexpectedly
from speechpractice.models.audio import AudioFrame
from speechpractice.services.tick_loop import TaskHandle


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    for marker in ("unit", "integration", "slow", "hardware"):
        config.addinivalue_line("markers", f"{marker}: {marker} tests")


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop listeners left behind by a test."""
    yield
    pub.unsubAll()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """512 samples of a 440 Hz sine at half scale, 16-bit."""
    sample_rate = 44100
    t = np.arange(512) / sample_rate
    wave_data = 0.5 * np.sin(2 * np.pi * 440 * t)
    return (wave_data * 32767).astype(np.int16).tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.read.return_value = b'\x00' * 1024  # 512 silent samples
        mock_stream.get_read_available.return_value = 512
        mock_stream.is_active.return_value = True
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.get_default_input_device_info.return_value = {"index": 0}
        mock_pyaudio_instance.terminate.return_value = None

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


def constant_frame(value: int, bins: int = 256) -> np.ndarray:
    """Frame whose loudness is value / 255 * 100 * boost."""
    return np.full(bins, value, dtype=np.uint8)


class FakeCapture:
    """Capture double that replays queued frames."""

    def __init__(self, open_error=None):
        self.open_error = open_error
        self.frames = deque()
        self.default_frame = constant_frame(0)
        self.poll_error = None
        self.is_open = False
        self.open_calls = 0
        self.close_calls = 0
        self.polls = 0
        self.constraints = None

    def queue(self, *frames):
        self.frames.extend(frames)

    def open(self, constraints=None):
        self.open_calls += 1
        if self.open_error:
            raise self.open_error
        self.constraints = constraints
        self.is_open = True
        return self

    def poll(self):
        if not self.is_open:
            raise CaptureClosedUnexpectedly("Capture is not open")
        if self.poll_error:
            raise self.poll_error
        self.polls += 1
        bins = self.frames.popleft() if self.frames else self.default_frame
        return AudioFrame(bins=bins, timestamp=float(self.polls), frame_number=self.polls)

    def close(self):
        if not self.is_open:
            return
        self.is_open = False
        self.close_calls += 1


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class ManualTickLoop:
    """Tick loop that never runs on its own; tests call run_once()."""

    def __init__(self):
        self.handles = []

    def start(self, tick_fn):
        handle = TaskHandle(tick_fn, name="manual")
        self.handles.append(handle)
        return handle

    def cancel(self, handle):
        handle.cancel()

    @property
    def current(self):
        return self.handles[-1]


class EventCollector:
    """Records everything published on a topic."""

    def __init__(self, topic: str):
        self.topic = topic
        self.events = []
        pub.subscribe(self.on_event, topic)

    def on_event(self, event):
        self.events.append(event)


@pytest.fixture
def fake_capture():
    return FakeCapture()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def manual_tick_loop():
    return ManualTickLoop()


@pytest.fixture
def collect_events():
    """Factory fixture: collect_events(topic) -> EventCollector."""
    collectors = []

    def make(topic: str) -> EventCollector:
        collector = EventCollector(topic)
        collectors.append(collector)
        return collector

    yield make


@pytest.fixture
def restore_logging():
    """Undo root logger changes made by setup_logging()."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def frame_of():
    """Factory fixture: frame_of(value, bins=256) -> constant uint8 frame."""
    return constant_frame
