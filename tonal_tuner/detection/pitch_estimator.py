"""Autocorrelation pitch estimation for a single audio frame."""

from __future__ import annotations
import math
from typing import Optional, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..core.config import TunerConfig
from ..logger import get_logger
from .signal_gate import Frame, as_frame

logger = get_logger(__name__)


def lag_window(
    sample_rate: float, frame_length: int, min_freq: float, max_freq: float
) -> Tuple[int, int]:
    """Compute the closed range of lags to search.

    Args:
        sample_rate: Sample rate in Hz
        frame_length: Number of samples in the frame
        min_freq: Lowest frequency to detect, sets the longest lag
        max_freq: Highest frequency to detect, sets the shortest lag

    Returns:
        (min_offset, max_offset) where lags in [min_offset, max_offset] are searched

    Raises:
        ValueError: If the sample rate or frame length cannot resolve the range
    """
    if not math.isfinite(sample_rate) or sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}")

    min_offset = math.floor(sample_rate / max_freq)
    max_offset = math.floor(sample_rate / min_freq)

    if min_offset < 1:
        raise ValueError(
            f"Sample rate {sample_rate}Hz is too low to resolve {max_freq}Hz"
        )
    if frame_length < 2 * max_offset:
        raise ValueError(
            f"Frame of {frame_length} samples is too short to resolve {min_freq}Hz "
            f"at {sample_rate}Hz (need at least {2 * max_offset})"
        )

    # Lags past half the frame leave too few overlapping samples
    max_offset = min(max_offset, frame_length // 2)
    if max_offset < min_offset:
        raise ValueError(
            f"Empty lag window [{min_offset}, {max_offset}] "
            f"for {min_freq}-{max_freq}Hz"
        )
    return min_offset, max_offset


def autocorrelate(normalized: np.ndarray, first: int, last: int) -> np.ndarray:
    """Mean lagged product of the first half of the frame for each lag in [first, last]."""
    overlap = normalized.size // 2
    windows = sliding_window_view(normalized, overlap)[first : last + 1]
    return windows @ normalized[:overlap] / overlap


def select_peak(
    scores: np.ndarray,
    tolerance: float,
    before: Optional[float] = None,
    after: Optional[float] = None,
) -> Optional[int]:
    """Index of the earliest local peak scoring within tolerance of the maximum.

    Multiples of the period correlate almost as well as the period itself, and
    window edge effects decide between them at random. Settling near-ties on
    the shortest lag keeps a clean tone from reading an octave or more low.
    With tolerance 0 this is the first occurrence of the maximum.

    Args:
        scores: Correlation per lag
        tolerance: How far below the maximum a peak may score
        before: Score of the lag just before the window, if known
        after: Score of the lag just after the window, if known

    Returns:
        The index, or None when the best scores only climb out of the window
    """
    best = float(np.max(scores))
    is_peak = np.ones(scores.size, dtype=bool)
    is_peak[1:] &= scores[1:] >= scores[:-1]
    is_peak[:-1] &= scores[:-1] >= scores[1:]
    # An edge lag is only a peak if the scores do not keep rising past it
    if before is not None and scores[0] < before:
        is_peak[0] = False
    if after is not None and scores[-1] < after:
        is_peak[-1] = False
    candidates = np.flatnonzero(is_peak & (scores >= best - tolerance))
    if candidates.size == 0:
        return None
    return int(candidates[0])


def parabolic_offset(c1: float, c2: float, c3: float) -> Optional[float]:
    """Offset of the vertex of the parabola through (-1, c1), (0, c2), (1, c3).

    Returns None when the vertex is undefined or more than a sample away.
    """
    denominator = c1 - 2 * c2 + c3
    if denominator == 0:
        return None
    delta = 0.5 * (c1 - c3) / denominator
    if not math.isfinite(delta) or abs(delta) >= 1:
        return None
    return delta


def estimate_pitch(
    frame: Frame,
    sample_rate: float,
    config: Optional[TunerConfig] = None,
    rms: Optional[float] = None,
) -> Optional[float]:
    """Estimate the fundamental frequency of a frame.

    Args:
        frame: Audio samples on a [-1, 1] scale
        sample_rate: Sample rate in Hz
        config: Frequency bounds and thresholds, defaults to TunerConfig()
        rms: RMS of the frame if the caller already computed it

    Returns:
        Frequency in Hz, or None if the frame is too quiet or has no
        reliable period within the configured range

    Raises:
        ValueError: If the frame is empty or too short, or the sample rate is invalid

    The search runs over lags in [sr / max_freq, sr / min_freq] on a frame
    normalized to unit RMS, so correlation scores are comparable across
    loudness. The lags just outside the window are scored too, so a tone
    whose period lies beyond either bound has no peak instead of snapping to
    the edge. The best integer lag is refined with parabolic interpolation
    when it has neighbours on both sides inside the window.
    """
    config = config or TunerConfig()
    samples = as_frame(frame)
    min_offset, max_offset = lag_window(
        sample_rate, samples.size, config.min_freq, config.max_freq
    )

    if rms is None:
        rms = float(np.sqrt(np.mean(samples**2)))
    if rms < config.rms_threshold or rms == 0:
        return None

    normalized = samples / rms
    first = min_offset - 1
    last = min(max_offset + 1, normalized.size - normalized.size // 2)
    padded = autocorrelate(normalized, first, last)
    scores = padded[1 : max_offset - first + 1]
    before = float(padded[0])
    after = float(padded[-1]) if last > max_offset else None

    max_correlation = float(np.max(scores))
    if max_correlation <= config.correlation_threshold:
        logger.debug(f"Max correlation {max_correlation:.3f} is below threshold")
        return None

    best_index = select_peak(scores, config.peak_tolerance, before, after)
    if best_index is None:
        logger.debug(f"No peak inside lag window [{min_offset}, {max_offset}]")
        return None

    best_offset = min_offset + best_index
    best_correlation = float(scores[best_index])
    logger.debug(
        f"Best lag: {best_offset} (correlation {best_correlation:.3f}) "
        f"in [{min_offset}, {max_offset}]"
    )

    refined_offset = float(best_offset)
    if min_offset < best_offset < max_offset:
        delta = parabolic_offset(
            float(scores[best_index - 1]),
            best_correlation,
            float(scores[best_index + 1]),
        )
        if delta is not None:
            refined_offset += delta

    frequency = sample_rate / refined_offset
    if not config.min_freq <= frequency <= config.max_freq:
        logger.debug(f"Refined frequency {frequency:.2f}Hz is out of range")
        return None

    logger.debug(f"Pitch: {frequency:.2f}Hz (lag {refined_offset:.3f})")
    return frequency
