"""Background voice recording to WAV for articulation self-review."""

import logging
import wave
from datetime import datetime
from threading import Event, Lock, Thread
from typing import List, Optional

import pyaudio

from ..models.audio import CaptureConstraints
from .capture import open_error

logger = logging.getLogger(__name__)


class VoiceRecorder:
    """Records microphone audio in a background thread and saves it as WAV."""

    def __init__(
        self,
        sample_rate: int = 44100,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        self.audio_data: List[bytes] = []
        self.lock = Lock()
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    def start_recording(self, constraints: Optional[CaptureConstraints] = None) -> None:
        """Open the microphone and record until stop_recording() is called.

        Raises:
            PermissionDenied: The OS refused microphone access
            DeviceUnavailable: No usable input device exists
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.debug(f"Recording constraints (advisory): {constraints or CaptureConstraints()}")
        self.__open_audio_stream()

        logger.info("Starting voice recording")
        self.stop_event.clear()
        with self.lock:
            self.audio_data = []
        self.start_time = datetime.now()
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "VoiceRecorderThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> None:
        """Stop recording and release the microphone."""
        if not self.is_recording:
            logger.warning("No recording in progress")
            return

        logger.info("Stopping voice recording")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        self.__close_audio_stream()
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}")

    def __open_audio_stream(self) -> None:
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            self.stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                stream_callback=None
            )
        except OSError as e:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            raise open_error(e) from e
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")

    def __close_audio_stream(self) -> None:
        if self.stream:
            self.stream.stop_stream()
            self.stream.close()
            self.stream = None
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        while not self.stop_event.is_set():
            try:
                audio_chunk = self.stream.read(self.chunk_size, exception_on_overflow=False)
            except OSError as e:
                logger.error(f"Recording stopped by stream error: {e}")
                self.stop_event.set()
                break
            with self.lock:
                self.audio_data.append(audio_chunk)
            self.total_chunks += 1

    @property
    def duration_seconds(self) -> float:
        with self.lock:
            total_bytes = sum(len(chunk) for chunk in self.audio_data)
        bytes_per_second = self.sample_rate * self.channels * 2
        return total_bytes / bytes_per_second

    def save_to_file(self, filepath: str) -> bool:
        """Save recorded audio to WAV file.

        Args:
            filepath: Path to save the WAV file

        Returns:
            False if there was nothing to save
        """
        with self.lock:
            chunks = list(self.audio_data)
        if not chunks:
            logger.warning("No audio data to save")
            return False

        try:
            with wave.open(filepath, 'wb') as wf:
                wf.setnchannels(self.channels)
                wf.setsampwidth(pyaudio.get_sample_size(self.format))
                wf.setframerate(self.sample_rate)

                for chunk in chunks:
                    wf.writeframes(chunk)

            logger.info(f"Audio saved to {filepath}")
            return True

        except Exception as e:
            logger.error(f"Error saving audio file: {e}")
            raise

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if self.is_recording:
            self.stop_recording()
