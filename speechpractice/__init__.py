"""Speech therapy practice exercises driven by live microphone loudness."""

__version__ = "0.1.0"
