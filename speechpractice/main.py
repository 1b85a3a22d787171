"""Main application entry point for speechpractice."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.live import Live

from . import __version__
from .audio.capture import AudioCapture
from .audio.errors import SpeechPracticeError
from .audio.recorder import VoiceRecorder
from .config import SpeechPracticeConfig
from .feedback.publisher import FeedbackPublisher
from .services.articulation_session import ArticulationSession
from .services.loudness_session import LoudnessSession
from .services.pacing_session import PacingSession
from .services.reading_session import ReadingSession
from .services.session_recorder import SessionRecorder
from .services.tick_loop import TickLoop
from .storage.preferences import PreferencesStore
from .storage.stats_store import StatsStore
from .ui.meter_screen import render_loudness, render_stats

logger = logging.getLogger(__name__)


class PracticeApp:

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None,
                 data_dir: Optional[str] = None):
        # Load configuration
        self.config = SpeechPracticeConfig(config_path)
        if data_dir:
            self.config.set('storage.data_directory', data_dir)
            self.config.set('logging.file_path', str(Path(data_dir) / "logs" / "speechpractice.log"))
        # Set up logging (override config with command line if specified)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))

        self.console = Console()
        data_directory = self.config.get_data_directory()
        self.stats_store = StatsStore(data_directory)
        self.preferences = PreferencesStore(data_directory)
        self.recorder = SessionRecorder(self.stats_store)
        self.publisher = FeedbackPublisher()

    def _capture(self) -> AudioCapture:
        return AudioCapture(
            sample_rate=self.config.get('audio.sample_rate', 44100),
            fft_size=self.config.get('audio.fft_size', 512),
            smoothing_time_constant=self.config.get('audio.smoothing_time_constant', 0.8),
            channels=self.config.get('audio.channels', 1),
        )

    def _tick_loop(self) -> TickLoop:
        return TickLoop(self.config.get('loudness.tick_interval', 1 / 60))

    def run_loudness(self, target: Optional[float], sensitivity: Optional[float],
                     breath: bool, duration: Optional[int]) -> None:
        if sensitivity is None:
            sensitivity = self.preferences.get_sensitivity()
        session_config = self.config.get_session_config(sensitivity, target)
        self.preferences.set_sensitivity(session_config.sensitivity_boost)

        session = LoudnessSession(
            capture=self._capture(),
            config=session_config,
            publisher=self.publisher,
            tick_loop=self._tick_loop(),
            constraints=self.config.get_capture_constraints(),
        )
        session.start()
        if breath:
            session.start_breath_exercise()

        self.console.print("Speak into the microphone. Press Ctrl+C to finish.", style="blue")
        deadline = time.monotonic() + duration if duration else None
        try:
            with Live(console=self.console, refresh_per_second=15) as live:
                while session.is_running and (deadline is None or time.monotonic() < deadline):
                    live.update(render_loudness(
                        session.last_reading, session.elapsed_seconds,
                        session.config.target_volume, session.config.sensitivity_boost,
                        session.breath_exercise))
                    time.sleep(0.05)
        except KeyboardInterrupt:
            pass
        finally:
            session.stop()

        reading = session.last_reading
        targets_hit = reading.targets_hit if reading else 0
        best = reading.best_breath_hold if reading else 0.0
        if session.stop_reason:
            self.console.print(f"Session ended early: {session.stop_reason}", style="red")
        self.console.print(f"Targets hit: {targets_hit}", style="green")
        if breath:
            self.console.print(f"Best breath hold: {best:.1f}s", style="green")

    def run_reading(self, text_file: str, sensitivity: Optional[float]) -> None:
        sentences = [line.strip() for line in
                     Path(text_file).read_text(encoding='utf-8').splitlines() if line.strip()]
        if sensitivity is None:
            sensitivity = self.preferences.get_sensitivity()
        session = ReadingSession(
            capture=self._capture(),
            sentences=sentences,
            recorder=self.recorder,
            config=self.config.get_session_config(sensitivity),
            tick_loop=self._tick_loop(),
            constraints=self.config.get_capture_constraints(),
            story_id=Path(text_file).stem,
            story_title=Path(text_file).stem.replace('_', ' ').title(),
        )
        session.start()
        try:
            more = True
            while more and session.is_running:
                self.console.print(
                    f"[{session.sentence_index + 1}/{len(sentences)}] {session.current_sentence}",
                    style="bold")
                input("Read the sentence aloud, then press Enter... ")
                more = session.next_sentence()
        except KeyboardInterrupt:
            session.stop()
            return

        if session.stop_reason:
            self.console.print(f"Session ended early: {session.stop_reason}", style="red")
        if session.summary:
            self.console.print(f"Consistency score: {session.summary.consistency_score}%  "
                               f"Average volume: {session.summary.average_volume}%",
                               style="green")
        else:
            self.console.print("Not enough voiced sentences to score.", style="yellow")

    def run_pacing(self, words: List[str], target_ms: float) -> None:
        session = PacingSession(recorder=self.recorder, target_ms=target_ms)
        session.start()
        self.console.print("Press Enter once per syllable. Ctrl+C to finish.", style="blue")
        try:
            for word in words:
                syllables = word.split('-')
                self.console.print(f"Word: {''.join(syllables)} ({len(syllables)} syllables)",
                                   style="bold")
                while True:
                    input()
                    if session.tap(len(syllables)):
                        break
                session.next_word()
                message, colour = session.feedback()
                self.console.print(f"{message} (avg {session.average_interval}ms)", style=colour)
        except KeyboardInterrupt:
            pass
        record = session.end()
        if record:
            self.console.print(f"Average syllable time: {record['avg']}ms over "
                               f"{record['count']} taps", style="green")

    def run_recording(self, output_dir: str, duration: int, count: int) -> None:
        session = ArticulationSession(
            output_dir,
            recorder=self.recorder,
            voice_recorder=VoiceRecorder(
                sample_rate=self.config.get('audio.sample_rate', 44100)),
            constraints=self.config.get_capture_constraints(),
        )
        try:
            for _ in range(count):
                input("Press Enter and say your phrase... ")
                session.start_recording()
                time.sleep(duration)
                path = session.stop_recording()
                if path:
                    seconds = session.voice_recorder.duration_seconds
                    self.console.print(f"Saved {path} ({seconds:.1f}s)", style="green")
        except KeyboardInterrupt:
            pass
        finally:
            session.end()

    def show_stats(self) -> None:
        self.console.print(render_stats(self.stats_store.summary()))

    def export_stats(self, path: Optional[str]) -> None:
        target = self.stats_store.export_to(path or self.stats_store.export_filename())
        self.console.print(f"Exported stats to {target}", style="green")

    def import_stats(self, path: str) -> bool:
        if self.stats_store.import_from(Path(path).read_text(encoding='utf-8')):
            self.console.print("Stats imported", style="green")
            return True
        self.console.print("Invalid file format", style="red")
        return False

    def reset_stats(self) -> None:
        self.stats_store.reset()
        self.console.print("All stats cleared", style="yellow")

    def cleanup(self) -> None:
        self.recorder.close()


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    # Get log file path from config
    log_file_path = config.get('logging.file_path', 'data/logs/speechpractice.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("speechpractice starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="speechpractice",
        description="speechpractice - guided speech therapy exercises",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        help="Directory for stats, preferences and logs (overrides config)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"speechpractice v{__version__}"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    loudness = commands.add_parser("loudness", help="Live loudness meter")
    loudness.add_argument("--target", type=float, help="Target volume, 10-80 in steps of 5")
    loudness.add_argument("--sensitivity", type=float, help="Sensitivity boost, 0.5-4.0")
    loudness.add_argument("--breath", action="store_true", help="Run the breath hold exercise")
    loudness.add_argument("--duration", type=int, help="Stop after this many seconds")

    reading = commands.add_parser("reading", help="Read sentences aloud at a steady volume")
    reading.add_argument("text_file", help="Text file with one sentence per line")
    reading.add_argument("--sensitivity", type=float, help="Sensitivity boost, 0.5-4.0")

    pacing = commands.add_parser("pacing", help="Tap once per syllable")
    pacing.add_argument("words", nargs="+", help="Words split into syllables, e.g. but-ter-fly")
    pacing.add_argument("--target-ms", type=float, default=500, help="Target ms per syllable")

    record = commands.add_parser("record", help="Record phrases for articulation review")
    record.add_argument("output_dir", help="Directory for WAV recordings")
    record.add_argument("--duration", type=int, default=5, help="Seconds per recording")
    record.add_argument("--count", type=int, default=1, help="Number of recordings")

    commands.add_parser("stats", help="Show progress")
    export = commands.add_parser("export", help="Export stats as JSON")
    export.add_argument("path", nargs="?", help="Output file (default: dated file name)")
    import_ = commands.add_parser("import", help="Import stats from a JSON export")
    import_.add_argument("path", help="JSON file to import")
    commands.add_parser("reset", help="Delete all stats")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for speechpractice."""
    args = build_parser().parse_args(argv)

    app = None
    try:
        app = PracticeApp(args.config, args.log_level, args.data_dir)
        if args.command == "loudness":
            app.run_loudness(args.target, args.sensitivity, args.breath, args.duration)
        elif args.command == "reading":
            app.run_reading(args.text_file, args.sensitivity)
        elif args.command == "pacing":
            app.run_pacing(args.words, args.target_ms)
        elif args.command == "record":
            app.run_recording(args.output_dir, args.duration, args.count)
        elif args.command == "stats":
            app.show_stats()
        elif args.command == "export":
            app.export_stats(args.path)
        elif args.command == "import":
            if not app.import_stats(args.path):
                sys.exit(1)
        elif args.command == "reset":
            app.reset_stats()
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except (SpeechPracticeError, ValueError, OSError) as e:
        Console(stderr=True).print(f"Error: {e}", style="red")
        logging.error(f"Application error: {e}")
        sys.exit(1)
    finally:
        if app:
            app.cleanup()


if __name__ == "__main__":
    main()
