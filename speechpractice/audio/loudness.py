"""Loudness estimation from frequency-bin energies."""

import numpy as np

from .errors import InvalidFrame

MAX_LOUDNESS = 100.0


def estimate_loudness(bins: np.ndarray, sensitivity_boost: float) -> float:
    """Convert byte frequency data into a loudness value in [0, 100].

    Each bin is normalised to [0, 1], the root-mean-square is taken across
    all bins and the result is scaled by ``100 * sensitivity_boost`` and
    capped at 100.

    Args:
        bins: One-dimensional array of bin energies in [0, 255]
        sensitivity_boost: Non-negative microphone gain compensation

    Raises:
        InvalidFrame: The frame is empty or holds out-of-range values
        ValueError: sensitivity_boost is negative
    """
    if sensitivity_boost < 0:
        raise ValueError(f"sensitivity_boost must be >= 0, got {sensitivity_boost}")

    values = np.asarray(bins)
    if values.ndim != 1:
        raise InvalidFrame(f"Expected a one-dimensional frame, got shape {values.shape}")
    if values.size == 0:
        raise InvalidFrame("Frame has no frequency bins")
    if values.min() < 0 or values.max() > 255:
        raise InvalidFrame("Frame values must be within [0, 255]")

    normalized = values.astype(np.float64) / 255.0
    rms = float(np.sqrt(np.mean(normalized * normalized)))
    return min(MAX_LOUDNESS, rms * 100.0 * sensitivity_boost)
