"""Pitch pipeline stages: signal gate, pitch estimator and frequency smoother."""

from .signal_gate import calculate_rms, gate
from .pitch_estimator import estimate_pitch
from .frequency_smoother import FrequencySmoother, SmootherState, smooth

__all__ = [
    "calculate_rms",
    "gate",
    "estimate_pitch",
    "FrequencySmoother",
    "SmootherState",
    "smooth",
]
