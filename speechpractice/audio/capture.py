"""Microphone capture that yields frequency frames on demand."""

import errno
import logging
import time
from datetime import datetime
from typing import Optional

import numpy as np
import pyaudio

from ..models.audio import AudioFrame, AudioStats, CaptureConstraints
from .analyser import FrequencyAnalyser
from .errors import CaptureClosedUnexpectedly, DeviceUnavailable, PermissionDenied

logger = logging.getLogger(__name__)

# PortAudio error codes reported through OSError.errno
PA_INVALID_DEVICE = -9996
PA_DEVICE_UNAVAILABLE = -9985
PA_NO_DEFAULT_DEVICE = -9998
DEVICE_ERRORS = (PA_INVALID_DEVICE, PA_DEVICE_UNAVAILABLE, PA_NO_DEFAULT_DEVICE)


def open_error(exc: OSError) -> Exception:
    """Translate a PortAudio open failure into the matching audio error."""
    message = str(exc)
    if exc.errno in DEVICE_ERRORS:
        return DeviceUnavailable(f"Input device unavailable: {message}")
    if exc.errno == errno.EACCES or "permission" in message.lower():
        return PermissionDenied(f"Microphone access denied: {message}")
    return DeviceUnavailable(f"Could not open input device: {message}")


class AudioCapture:
    """Polled microphone capture producing byte frequency frames."""

    def __init__(
        self,
        sample_rate: int = 44100,
        fft_size: int = 512,
        smoothing_time_constant: float = 0.8,
        channels: int = 1,
        format: int = pyaudio.paInt16,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            sample_rate: Audio sample rate
            fft_size: Number of samples analysed per frame
            smoothing_time_constant: Per-bin spectral smoothing, see FrequencyAnalyser
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
        """
        self.sample_rate = sample_rate
        self.fft_size = fft_size
        self.channels = channels
        self.format = format
        self.analyser = FrequencyAnalyser(fft_size, smoothing_time_constant)
        self.constraints: Optional[CaptureConstraints] = None

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_frames = 0

    @property
    def is_open(self) -> bool:
        return self.stream is not None

    def open(self, constraints: Optional[CaptureConstraints] = None) -> "AudioCapture":
        """Open the default input device.

        Raises:
            PermissionDenied: The OS refused microphone access
            DeviceUnavailable: No usable input device exists
        """
        if self.is_open:
            logger.warning("Capture already open")
            return self

        self.constraints = constraints or CaptureConstraints()
        # PortAudio exposes no echo/noise/gain processing switches.
        logger.debug(f"Capture constraints (advisory): {self.constraints}")

        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            self.pyaudio_instance.get_default_input_device_info()
        except (IOError, OSError) as e:
            self._terminate()
            raise DeviceUnavailable(f"No default input device: {e}") from e

        try:
            self.stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.fft_size,
                stream_callback=None
            )
        except OSError as e:
            self._terminate()
            raise open_error(e) from e

        self.analyser.reset()
        self.start_time = datetime.now()
        self.total_frames = 0
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"fft_size {self.fft_size}")
        return self

    def _read_available(self) -> np.ndarray:
        available = self.stream.get_read_available()
        if available <= 0:
            return np.zeros(0, dtype=np.float64)
        audio_chunk = self.stream.read(available, exception_on_overflow=False)
        samples = np.frombuffer(audio_chunk, dtype=np.int16)
        if self.channels > 1:
            samples = samples.reshape(-1, self.channels).mean(axis=1)
        return samples.astype(np.float64) / 32768.0

    def poll(self) -> AudioFrame:
        """Read whatever audio is buffered and return the current spectrum.

        Raises:
            CaptureClosedUnexpectedly: The stream is closed or failed
        """
        if not self.is_open:
            raise CaptureClosedUnexpectedly("Capture is not open")

        try:
            if not self.stream.is_active():
                raise CaptureClosedUnexpectedly("Input stream is no longer active")
            samples = self._read_available()
        except OSError as e:
            raise CaptureClosedUnexpectedly(f"Input stream failed: {e}") from e

        self.analyser.push_samples(samples)
        self.total_frames += 1
        return AudioFrame(
            bins=self.analyser.byte_frequency_data(),
            timestamp=time.time(),
            frame_number=self.total_frames
        )

    def close(self) -> None:
        """Release the stream and PyAudio. Safe to call when not open."""
        if not self.is_open and self.pyaudio_instance is None:
            return

        stream, self.stream = self.stream, None
        if stream is not None:
            try:
                stream.stop_stream()
                stream.close()
            except OSError as e:
                logger.warning(f"Error closing input stream: {e}")
        self._terminate()
        logger.info(f"Audio capture closed. Total frames: {self.total_frames}")

    def _terminate(self) -> None:
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def get_capture_stats(self) -> AudioStats:
        """Get current capture statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_open=self.is_open,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            fft_size=self.fft_size,
            total_frames=self.total_frames,
        )

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if self.is_open:
            self.close()
