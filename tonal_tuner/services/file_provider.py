import threading
import time
from typing import Iterator, Optional

import numpy as np
import soundfile as sf

from ..logger import get_logger
from .interfaces import AudioCallback, IAudioProvider

logger = get_logger(__name__)


def to_mono(data: np.ndarray) -> np.ndarray:
    """Average a (frames, channels) block down to one float32 channel."""
    if data.ndim == 1:
        return data.astype(np.float32, copy=False)
    return data.mean(axis=1, dtype=np.float32)


class WavFileAudioProvider(IAudioProvider):
    """Provides audio data by reading from a sound file."""

    def __init__(
        self,
        file_path: str,
        chunk_size: int,
        loop: bool = False,
        gain: float = 1.0,
        realtime: bool = True,
    ):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self._file_path = file_path
        self._chunk_size = chunk_size
        self._loop = loop
        self._gain = gain
        self._realtime = realtime
        self._on_data_callback: Optional[AudioCallback] = None
        self._is_running = False
        self._thread: Optional[threading.Thread] = None

        with sf.SoundFile(self._file_path) as f:
            self._sample_rate = f.samplerate
            self._channels = f.channels

    def blocks(self) -> Iterator[np.ndarray]:
        """Yield mono blocks of up to chunk_size samples, looping if configured."""
        with sf.SoundFile(self._file_path) as f:
            while True:
                data = f.read(self._chunk_size, dtype="float32", always_2d=True)
                if len(data) == 0:
                    if self._loop and f.frames > 0:
                        f.seek(0)
                        continue
                    return

                block = to_mono(data)
                # Apply gain if specified
                if self._gain != 1.0:
                    block = block * np.float32(self._gain)
                yield block

    def start(self, on_data_callback: AudioCallback) -> None:
        if self._is_running:
            return

        self._on_data_callback = on_data_callback
        self._is_running = True
        self._thread = threading.Thread(target=self._stream_data, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._is_running = False
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None

    @property
    def is_running(self) -> bool:
        """Returns True if the provider is currently streaming data."""
        return self._is_running

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until a non-looping file has been fully delivered."""
        if self._thread:
            self._thread.join(timeout)

    def _stream_data(self) -> None:
        try:
            for block in self.blocks():
                if not self._is_running:
                    break
                if self._on_data_callback:
                    self._on_data_callback(block)
                if self._realtime:
                    # Simulate real-time playback speed
                    time.sleep(len(block) / self.sample_rate)
        except Exception as e:
            logger.error(f"Error streaming {self._file_path}: {e}", exc_info=True)
        finally:
            self._is_running = False  # Ensure flag is reset on exit

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels
