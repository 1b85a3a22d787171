"""Audio-related data models."""

from dataclasses import dataclass

import numpy as np


@dataclass
class CaptureConstraints:
    """Processing requested from the input device."""
    echo_cancellation: bool = True
    noise_suppression: bool = True
    auto_gain_control: bool = False


@dataclass
class AudioFrame:
    """Frequency-bin energies for a single sampling tick."""
    bins: np.ndarray  # uint8, one value per frequency bin
    timestamp: float  # Time when this frame was polled
    frame_number: int


@dataclass
class AudioStats:
    """Audio capture statistics."""
    is_open: bool
    duration_seconds: float
    sample_rate: int
    fft_size: int
    total_frames: int
