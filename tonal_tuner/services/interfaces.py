from abc import ABC, abstractmethod
from typing import Callable

import numpy as np

# Receives mono float32 blocks on a [-1, 1] scale
AudioCallback = Callable[[np.ndarray], None]


class IAudioProvider(ABC):
    """An abstract interface for audio providers."""

    @abstractmethod
    def start(self, on_data_callback: AudioCallback) -> None:
        """Starts the audio stream, calling the callback with blocks of mono samples."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stops the audio stream."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the audio stream."""
        pass

    @property
    @abstractmethod
    def channels(self) -> int:
        """The number of channels in the source, before down-mixing."""
        pass
