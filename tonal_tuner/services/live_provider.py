from typing import Optional

import numpy as np
import sounddevice as sd

from ..logger import get_logger
from .interfaces import AudioCallback, IAudioProvider

logger = get_logger(__name__)


class LiveAudioProvider(IAudioProvider):
    """Provides live audio from an input device using sounddevice."""

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: int = 44100,
        channels: int = 1,
        chunk_size: int = 1024,
    ):
        self._device_id = device_id
        self._sample_rate = sample_rate
        self._channels = channels
        self._chunk_size = chunk_size
        self._stream: Optional[sd.InputStream] = None
        self._on_data_callback: Optional[AudioCallback] = None

    def start(self, on_data_callback: AudioCallback) -> None:
        self._on_data_callback = on_data_callback
        self._stream = sd.InputStream(
            device=self._device_id,
            channels=self._channels,
            samplerate=self._sample_rate,
            blocksize=self._chunk_size,
            callback=self._audio_callback,
            dtype="float32",  # Standard for audio processing
        )
        self._stream.start()
        logger.info(
            f"Listening on device {self._device_id if self._device_id is not None else 'default'} "
            f"at {self._sample_rate}Hz"
        )

    def stop(self) -> None:
        if self._stream:
            try:
                self._stream.stop()
                self._stream.close()
                logger.info("Audio stream stopped and closed")
            finally:
                self._stream = None

    def _audio_callback(
        self, indata: np.ndarray, _frames: int, _time_info, status: sd.CallbackFlags
    ) -> None:
        if status:
            logger.warning(f"Audio status: {status}")
        if self._on_data_callback:
            # Only the first channel is analysed; PortAudio reuses indata
            self._on_data_callback(indata[:, 0].copy())

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels
