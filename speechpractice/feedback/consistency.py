"""Volume consistency scoring for reading-aloud sessions."""

from typing import Optional, Sequence

import numpy as np

VOICED_THRESHOLD = 10.0


def voiced_average(readings: Sequence[float],
                   threshold: float = VOICED_THRESHOLD) -> Optional[float]:
    """Mean of the readings above the silence threshold, None if all silent."""
    values = np.asarray(readings, dtype=np.float64)
    voiced = values[values > threshold]
    if voiced.size == 0:
        return None
    return float(voiced.mean())


def consistency_score(sentence_averages: Sequence[float]) -> Optional[int]:
    """Score in [0, 100] from the coefficient of variation of sentence volumes.

    A CV of 0 scores 100 and a CV of 50% or more scores 0. At least two
    sentences are needed; fewer yields None.
    """
    values = np.asarray(sentence_averages, dtype=np.float64)
    if values.size < 2:
        return None
    mean = values.mean()
    if mean <= 0:
        return 0
    cv = values.std() / mean * 100.0
    return int(round(max(0.0, min(100.0, 100.0 - cv * 2))))
