"""Errors raised by the audio pipeline."""


class SpeechPracticeError(Exception):
    """Base class for recoverable application errors."""


class AudioError(SpeechPracticeError):
    """Base class for microphone and frame errors."""


class PermissionDenied(AudioError):
    """The operating system refused access to the microphone."""


class DeviceUnavailable(AudioError):
    """No compatible input device could be opened."""


class InvalidFrame(AudioError):
    """A frequency frame was empty or malformed."""


class CaptureClosedUnexpectedly(AudioError):
    """The input stream stopped delivering audio mid-session."""
