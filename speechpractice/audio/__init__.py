"""Audio capture and loudness processing module."""

from .analyser import FrequencyAnalyser
from .capture import AudioCapture
from .errors import (
    AudioError,
    CaptureClosedUnexpectedly,
    DeviceUnavailable,
    InvalidFrame,
    PermissionDenied,
    SpeechPracticeError,
)
from .loudness import estimate_loudness
from .smoothing import LoudnessSmoother

__all__ = [
    'AudioCapture',
    'FrequencyAnalyser',
    'LoudnessSmoother',
    'estimate_loudness',
    'SpeechPracticeError',
    'AudioError',
    'PermissionDenied',
    'DeviceUnavailable',
    'InvalidFrame',
    'CaptureClosedUnexpectedly',
]
