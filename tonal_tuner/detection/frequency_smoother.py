from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional

from ..core.config import TunerConfig
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass
class SmootherState:
    """Per-session history of raw frequencies and the last emitted frequency."""

    capacity: int = 5
    history: Deque[float] = field(init=False)
    last_frequency: Optional[float] = None

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {self.capacity}")
        self.history = deque(maxlen=self.capacity)

    def reset(self) -> None:
        """Forget everything, as when a tuning session stops."""
        self.history.clear()
        self.last_frequency = None


def _upper_median(values) -> float:
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


def smooth(
    raw_freq: float, state: SmootherState, config: Optional[TunerConfig] = None
) -> float:
    """
    Stabilize a raw frequency against the session's recent history.

    A reading about an octave away from the last output is treated as an
    octave error and only nudges the output. Small variations are smoothed
    exponentially. Larger jumps are taken as a note change and answered with
    the median of the history once enough readings exist.

    Args:
        raw_freq: Positive frequency from the pitch estimator
        state: Session state, updated in place
        config: Smoothing constants, defaults to TunerConfig()

    Returns:
        The stabilized frequency in Hz
    """
    if raw_freq <= 0:
        raise ValueError(f"Cannot smooth non-positive frequency {raw_freq}")
    config = config or TunerConfig()

    # The median below includes the reading being smoothed
    state.history.append(raw_freq)

    last = state.last_frequency
    if last is None:
        output = raw_freq
    else:
        ratio = raw_freq / last
        if (
            abs(ratio - 0.5) < config.octave_down_band
            or abs(ratio - 2.0) < config.octave_up_band
        ):
            output = last * config.octave_weight + raw_freq * (1 - config.octave_weight)
            logger.debug(f"Suspected octave error: ratio {ratio:.3f}")
        elif abs(ratio - 1.0) < config.variation_band:
            output = last * config.smoothing_factor + raw_freq * (
                1 - config.smoothing_factor
            )
        elif len(state.history) >= config.median_min_history:
            output = _upper_median(state.history)
            logger.debug(f"Large jump: ratio {ratio:.3f}, using history median")
        else:
            output = raw_freq

    state.last_frequency = output
    return output


class FrequencySmoother:
    """
    Owns the smoothing state of one tuning session.
    """

    def __init__(self, config: Optional[TunerConfig] = None):
        self._config = config or TunerConfig()
        self._state = SmootherState(capacity=self._config.history_capacity)

    @property
    def state(self) -> SmootherState:
        return self._state

    @property
    def last_frequency(self) -> Optional[float]:
        return self._state.last_frequency

    def smooth(self, raw_freq: float) -> float:
        return smooth(raw_freq, self._state, self._config)

    def reset(self) -> None:
        self._state.reset()
