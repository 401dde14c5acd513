"""Per-frame tuning pipeline: gate, estimate, smooth, map to a note."""

from __future__ import annotations
from typing import Optional

from .core.config import TunerConfig
from .detection.frequency_smoother import FrequencySmoother
from .detection.pitch_estimator import estimate_pitch
from .detection.signal_gate import Frame, as_frame, calculate_rms
from .logger import get_logger
from .note_types import FrameResult
from .note_utils import cents, map_to_note, tuning_status

logger = get_logger(__name__)


class TunerPipeline:
    """Turns audio frames into note and cents readings for one tuning session.

    Each instance owns its smoothing history, so independent audio streams
    need independent pipelines.
    """

    def __init__(self, config: Optional[TunerConfig] = None) -> None:
        self._config = (config or TunerConfig()).validate()
        self._smoother = FrequencySmoother(self._config)

    @property
    def config(self) -> TunerConfig:
        return self._config

    @property
    def smoother(self) -> FrequencySmoother:
        return self._smoother

    def process_frame(
        self, frame: Frame, sample_rate: Optional[float] = None
    ) -> FrameResult:
        """Analyse one frame.

        Args:
            frame: Audio samples on a [-1, 1] scale
            sample_rate: Sample rate in Hz, defaults to the configured one

        Returns:
            FrameResult; frames without signal or without a pitch leave the
            smoothing history untouched

        Raises:
            ValueError: If the frame or sample rate violates the estimator's contract
        """
        if sample_rate is None:
            sample_rate = self._config.sample_rate
        samples = as_frame(frame)

        rms = calculate_rms(samples)
        if rms < self._config.rms_threshold:
            return FrameResult(has_signal=False)

        raw_frequency = estimate_pitch(samples, sample_rate, self._config, rms=rms)
        if raw_frequency is None:
            return FrameResult(has_signal=True)

        frequency = self._smoother.smooth(raw_frequency)
        note = map_to_note(frequency)
        deviation = cents(frequency, note.ideal_frequency)
        logger.debug(
            f"{note} raw={raw_frequency:.2f}Hz smoothed={frequency:.2f}Hz "
            f"cents={deviation}"
        )

        return FrameResult(
            has_signal=True,
            note=note,
            frequency_hz=frequency,
            cents=deviation,
            raw_frequency_hz=raw_frequency,
            status=tuning_status(deviation, self._config.in_tune_cents),
        )

    def reset(self) -> None:
        """Clear the smoothing history, as when a session stops or restarts."""
        self._smoother.reset()
        logger.debug("Tuner session reset")
