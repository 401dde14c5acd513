from typing import Callable, List, Optional

import numpy as np

from ..core.config import TunerConfig
from ..detection.pitch_estimator import lag_window
from ..logger import get_logger
from ..note_types import FrameResult
from ..tuner import TunerPipeline
from .file_provider import WavFileAudioProvider
from .interfaces import IAudioProvider

logger = get_logger(__name__)

ResultCallback = Callable[[FrameResult], None]


class SlidingWindow:
    """Keeps the most recent window_size samples and counts samples since the last read."""

    def __init__(self, window_size: int, hop_size: int):
        self._buffer = np.zeros(window_size, dtype=np.float32)
        self._hop_size = hop_size
        self._filled = 0
        self._pending = 0

    def push(self, block: np.ndarray) -> Optional[np.ndarray]:
        """Add a block; return a copy of the window once full and a hop has elapsed."""
        size = self._buffer.size
        n = int(block.size)
        if n == 0:
            return None

        if n >= size:
            self._buffer[:] = block[-size:]
        else:
            self._buffer[:-n] = self._buffer[n:]
            self._buffer[-n:] = block
        self._filled = min(size, self._filled + n)
        self._pending += n

        if self._filled < size or self._pending < self._hop_size:
            return None
        self._pending = 0
        return self._buffer.copy()

    def clear(self) -> None:
        self._buffer[:] = 0.0
        self._filled = 0
        self._pending = 0


class TunerService:
    """Drives a TunerPipeline from an audio provider, one session per start/stop."""

    def __init__(
        self, audio_provider: IAudioProvider, config: Optional[TunerConfig] = None
    ) -> None:
        self._audio_provider = audio_provider
        self._pipeline = TunerPipeline(config)
        cfg = self._pipeline.config
        # Fail before any audio flows if the window cannot resolve min_freq
        lag_window(
            audio_provider.sample_rate, cfg.window_size, cfg.min_freq, cfg.max_freq
        )
        self._window = SlidingWindow(cfg.window_size, cfg.hop_size)
        self._on_result: Optional[ResultCallback] = None
        self._running = False

    @property
    def pipeline(self) -> TunerPipeline:
        return self._pipeline

    def is_running(self) -> bool:
        return self._running

    def process_block(self, block: np.ndarray) -> Optional[FrameResult]:
        """Feed one block of samples, returning a result whenever a window is analysed."""
        frame = self._window.push(block)
        if frame is None:
            return None
        return self._pipeline.process_frame(frame, self._audio_provider.sample_rate)

    def start(self, on_result: ResultCallback) -> None:
        """Start a tuning session, calling on_result for every analysed window."""
        if self._running:
            logger.warning("Tuner service is already running")
            return

        self._on_result = on_result
        self._running = True
        logger.info(
            f"Starting tuner at {self._audio_provider.sample_rate}Hz "
            f"(window {self._pipeline.config.window_size}, hop {self._pipeline.config.hop_size})"
        )
        try:
            self._audio_provider.start(self._audio_callback)
        except Exception:
            self._running = False
            self._on_result = None
            raise

    def _audio_callback(self, block: np.ndarray) -> None:
        if not self._running:
            return
        try:
            result = self.process_block(block)
        except Exception as e:
            logger.error(f"Error processing audio block: {e}", exc_info=True)
            raise
        if result is not None and self._on_result:
            self._on_result(result)

    def stop(self) -> None:
        """Stop the audio stream and end the session."""
        if not self._running:
            logger.debug("Tuner service is not running, nothing to stop")
            return

        self._running = False
        self._audio_provider.stop()
        self._on_result = None
        self._window.clear()
        self._pipeline.reset()
        logger.info("Tuner stopped")


def analyze_file(
    file_path: str, config: Optional[TunerConfig] = None, gain: float = 1.0
) -> List[FrameResult]:
    """Run a whole sound file through a fresh tuning session.

    Args:
        file_path: Path to any format soundfile can read
        config: Pipeline configuration, the sample rate comes from the file
        gain: Linear gain applied to the samples

    Returns:
        One FrameResult per analysed window, in order
    """
    config = config or TunerConfig()
    provider = WavFileAudioProvider(
        file_path, chunk_size=config.hop_size, gain=gain, realtime=False
    )
    service = TunerService(provider, config)

    results = []
    for block in provider.blocks():
        result = service.process_block(block)
        if result is not None:
            results.append(result)

    logger.info(f"Analysed {len(results)} frames from {file_path}")
    return results
