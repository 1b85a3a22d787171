"""Frequency analysis of the most recent block of microphone samples.

Mirrors the behaviour of a Web Audio ``AnalyserNode``: the last ``fft_size``
samples are Blackman-windowed, transformed, smoothed over time per bin,
converted to decibels and finally mapped onto unsigned bytes.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


class FrequencyAnalyser:
    """Turns a rolling window of samples into byte frequency data."""

    def __init__(
        self,
        fft_size: int = 512,
        smoothing_time_constant: float = 0.8,
        min_decibels: float = -100.0,
        max_decibels: float = -30.0,
    ):
        """Initialize the analyser.

        Args:
            fft_size: Window length in samples, a power of two
            smoothing_time_constant: Weight of the previous spectrum, in [0, 1]
            min_decibels: Level mapped to byte 0
            max_decibels: Level mapped to byte 255
        """
        if fft_size < 32 or fft_size & (fft_size - 1):
            raise ValueError(f"fft_size must be a power of two >= 32, got {fft_size}")
        if not 0.0 <= smoothing_time_constant <= 1.0:
            raise ValueError(
                f"smoothing_time_constant must be in [0, 1], got {smoothing_time_constant}")
        if min_decibels >= max_decibels:
            raise ValueError("min_decibels must be lower than max_decibels")

        self.fft_size = fft_size
        self.smoothing_time_constant = smoothing_time_constant
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels

        self._window = np.blackman(fft_size)
        self._samples = np.zeros(fft_size, dtype=np.float64)
        self._previous = np.zeros(self.frequency_bin_count, dtype=np.float64)

    @property
    def frequency_bin_count(self) -> int:
        return self.fft_size // 2

    def push_samples(self, samples: np.ndarray) -> None:
        """Append float samples in [-1, 1], keeping only the newest fft_size."""
        if samples.size == 0:
            return
        if samples.size >= self.fft_size:
            self._samples = samples[-self.fft_size:].astype(np.float64)
        else:
            self._samples = np.concatenate((self._samples[samples.size:], samples))

    def byte_frequency_data(self) -> np.ndarray:
        """Compute the current spectrum as uint8 values, one per bin."""
        spectrum = np.fft.rfft(self._samples * self._window)[:self.frequency_bin_count]
        magnitude = np.abs(spectrum) / self.fft_size

        tau = self.smoothing_time_constant
        self._previous = tau * self._previous + (1.0 - tau) * magnitude

        with np.errstate(divide="ignore"):
            decibels = 20.0 * np.log10(self._previous)

        scale = 255.0 / (self.max_decibels - self.min_decibels)
        scaled = np.floor(scale * (decibels - self.min_decibels))
        return np.clip(np.nan_to_num(scaled, neginf=0.0), 0, 255).astype(np.uint8)

    def reset(self) -> None:
        """Forget buffered samples and the smoothed spectrum."""
        self._samples.fill(0.0)
        self._previous.fill(0.0)
        logger.debug("Frequency analyser reset")
