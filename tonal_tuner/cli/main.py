"""Main entry point for the Tonal Tuner CLI."""

import argparse
import sys
import time
from typing import List, Optional

from ..core.config import ConfigManager, TunerConfig
from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import FrameResult

logger = get_logger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--min-freq", type=float, default=None, help="Lowest frequency to detect in Hz"
    )
    parser.add_argument(
        "--max-freq", type=float, default=None, help="Highest frequency to detect in Hz"
    )
    parser.add_argument(
        "--window", type=int, default=None, help="Analysis window size in samples"
    )
    parser.add_argument(
        "--hop", type=int, default=None, help="Samples between analyses"
    )
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Directory holding tuner.json (default: ~/.config/tonal_tuner)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tonal Tuner - Pitch and Cents Meter")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    file_parser = subparsers.add_parser("file", help="Tune against a sound file")
    file_parser.add_argument("path", help="Path to a WAV/FLAC/OGG file")
    file_parser.add_argument(
        "--gain", type=float, default=1.0, help="Linear gain applied to the samples"
    )
    _add_common_arguments(file_parser)

    live_parser = subparsers.add_parser("live", help="Tune against an input device")
    live_parser.add_argument(
        "--device", type=int, default=None, help="Audio input device ID"
    )
    live_parser.add_argument(
        "--duration", type=float, default=30.0, help="Session length in seconds"
    )
    live_parser.add_argument(
        "--sample-rate", type=int, default=None, help="Audio sample rate in Hz"
    )
    _add_common_arguments(live_parser)

    return parser


def load_config(args: argparse.Namespace) -> TunerConfig:
    """Load the saved configuration and apply command line overrides."""
    config = ConfigManager(args.config_dir).get_config()
    return config.with_updates(
        min_freq=args.min_freq,
        max_freq=args.max_freq,
        window_size=args.window,
        hop_size=args.hop,
        sample_rate=getattr(args, "sample_rate", None),
    )


class ChangePrinter:
    """Prints a frame's reading only when its text differs from the last one."""

    def __init__(self):
        self._last_line: Optional[str] = None
        self.frames = 0

    def __call__(self, result: FrameResult) -> None:
        self.frames += 1
        line = result.describe()
        if line != self._last_line:
            print(line, flush=True)
            self._last_line = line


def run_file(args: argparse.Namespace, config: TunerConfig) -> int:
    from ..services.tuner_service import analyze_file

    printer = ChangePrinter()
    for result in analyze_file(args.path, config, gain=args.gain):
        printer(result)
    if printer.frames == 0:
        logger.warning(f"{args.path} is shorter than one analysis window")
    return 0


def run_live(args: argparse.Namespace, config: TunerConfig) -> int:
    # Imported here so file analysis works without PortAudio installed
    from ..services.live_provider import LiveAudioProvider
    from ..services.tuner_service import TunerService

    provider = LiveAudioProvider(
        device_id=args.device,
        sample_rate=config.sample_rate,
        chunk_size=config.hop_size,
    )
    service = TunerService(provider, config)
    service.start(ChangePrinter())
    try:
        time.sleep(args.duration)
    except KeyboardInterrupt:
        logger.info("Session interrupted by user")
    finally:
        service.stop()
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help()
        return 1

    setup_logging("DEBUG" if parsed_args.debug else None)

    try:
        config = load_config(parsed_args)
        if parsed_args.command == "file":
            return run_file(parsed_args, config)
        return run_live(parsed_args, config)
    except (ValueError, OSError, RuntimeError) as e:
        logger.error(f"{parsed_args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
