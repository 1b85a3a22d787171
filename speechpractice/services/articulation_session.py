"""Articulation mirror: record phrases and play them back for self-review."""

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional

from ..audio.recorder import VoiceRecorder
from ..models.audio import CaptureConstraints
from .session_recorder import SessionRecorder

logger = logging.getLogger(__name__)


class ArticulationSession:
    """Counts self-recordings made during one practice session."""

    name = "articulation"

    def __init__(self, output_dir: str,
                 recorder: Optional[SessionRecorder] = None,
                 voice_recorder: Optional[VoiceRecorder] = None,
                 constraints: Optional[CaptureConstraints] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.recorder = recorder
        self.voice_recorder = voice_recorder or VoiceRecorder()
        self.constraints = constraints
        self.clock = clock

        self.is_active = False
        self.started_at: Optional[float] = None
        self.recordings: List[str] = []

    @property
    def recordings_count(self) -> int:
        return len(self.recordings)

    def start(self) -> None:
        self.is_active = True
        self.started_at = self.clock()
        self.recordings = []
        logger.info("Articulation session started")

    def start_recording(self) -> None:
        """Begin recording; starts the session on first use.

        Raises:
            PermissionDenied: The OS refused microphone access
            DeviceUnavailable: No usable input device exists
        """
        if not self.is_active:
            self.start()
        self.voice_recorder.start_recording(self.constraints)

    def stop_recording(self, filename: Optional[str] = None) -> Optional[str]:
        """Stop recording and save it as WAV, returning the file path."""
        if not self.voice_recorder.is_recording:
            return None
        self.voice_recorder.stop_recording()

        if filename is None:
            filename = f"recording_{len(self.recordings) + 1:03d}.wav"
        if not filename.endswith('.wav'):
            filename += '.wav'
        filepath = self.output_dir / filename

        if not self.voice_recorder.save_to_file(str(filepath)):
            return None
        self.recordings.append(str(filepath))
        return str(filepath)

    def end(self) -> int:
        """Finish the session, recording stats when anything was recorded."""
        if self.voice_recorder.is_recording:
            self.voice_recorder.stop_recording()
        if not self.is_active:
            return 0
        self.is_active = False

        count = self.recordings_count
        duration = int(self.clock() - self.started_at)
        logger.info(f"Articulation session ended: {count} recordings in {duration}s")
        if count > 0 and self.recorder:
            self.recorder.increment_session_counter("articulation_sessions")
            self.recorder.increment_session_counter("recordings_made", count)
            self.recorder.log_session(self.name, duration)
        return count
