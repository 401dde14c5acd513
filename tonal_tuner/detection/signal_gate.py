"""RMS gate deciding whether a frame carries enough energy to analyse."""

from typing import Sequence, Union

import numpy as np

from ..logger import get_logger

logger = get_logger(__name__)

# Minimum RMS on a [-1, 1] sample scale
DEFAULT_RMS_THRESHOLD: float = 0.01

Frame = Union[np.ndarray, Sequence[float]]


def as_frame(frame: Frame) -> np.ndarray:
    """Convert samples to a 1D float64 array, rejecting empty input.

    Raises:
        ValueError: If the frame is empty, not one-dimensional or not finite
    """
    samples = np.asarray(frame, dtype=np.float64)
    if samples.ndim != 1:
        raise ValueError(f"Frame must be one-dimensional, got shape {samples.shape}")
    if samples.size == 0:
        raise ValueError("Frame is empty")
    if not np.all(np.isfinite(samples)):
        raise ValueError("Frame contains NaN or infinite samples")
    return samples


def calculate_rms(frame: Frame) -> float:
    """Root mean square of the frame's samples."""
    samples = as_frame(frame)
    return float(np.sqrt(np.mean(samples**2)))


def gate(frame: Frame, threshold: float = DEFAULT_RMS_THRESHOLD) -> bool:
    """Return True when the frame's RMS reaches the threshold."""
    rms = calculate_rms(frame)
    logger.debug(f"Signal: {rms:.4f}")
    return rms >= threshold
