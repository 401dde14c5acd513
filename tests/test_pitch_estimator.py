import unittest
from unittest.mock import patch

import numpy as np
import pytest

from tonal_tuner.core.config import TunerConfig
from tonal_tuner.detection.pitch_estimator import (
    estimate_pitch,
    lag_window,
    parabolic_offset,
    select_peak,
)


def sine(freq, sample_rate=44100, size=8192, amplitude=0.5, phase=0.0):
    t = np.arange(size) / sample_rate
    return amplitude * np.sin(2 * np.pi * freq * t + phase)


@pytest.mark.parametrize(
    "freq", [82.41, 110.0, 146.83, 196.0, 246.94, 329.63, 440.0, 659.25, 880.0, 990.0]
)
@pytest.mark.parametrize("phase", [0.0, 1.3])
def test_sine_frequency_within_one_percent(freq, phase):
    detected = estimate_pitch(sine(freq, phase=phase), 44100)
    assert detected is not None
    assert abs(detected - freq) / freq < 0.01


@pytest.mark.parametrize("sample_rate", [22050, 48000, 96000])
def test_sine_at_other_sample_rates(sample_rate):
    size = 2 * int(sample_rate / 82.0) + 2048
    detected = estimate_pitch(sine(261.63, sample_rate, size), sample_rate)
    assert detected == pytest.approx(261.63, rel=0.01)


class TestPitchEstimator(unittest.TestCase):
    def test_harmonic_tone_reports_fundamental(self):
        # Strong second and third harmonics must not pull the reading up an octave
        frame = sine(110.0) + sine(220.0, amplitude=0.4) + sine(330.0, amplitude=0.3)
        detected = estimate_pitch(frame, 44100)
        self.assertIsNotNone(detected)
        self.assertAlmostEqual(detected, 110.0, delta=1.1)

    def test_amplitude_does_not_change_estimate(self):
        loud = estimate_pitch(sine(330.0, amplitude=0.9), 44100)
        quiet = estimate_pitch(sine(330.0, amplitude=0.05), 44100)
        self.assertAlmostEqual(loud, quiet, places=6)

    def test_silence_returns_none(self):
        self.assertIsNone(estimate_pitch(np.zeros(8192), 44100))

    def test_below_rms_threshold_returns_none(self):
        self.assertIsNone(estimate_pitch(sine(440.0, amplitude=0.005), 44100))

    def test_white_noise_has_no_pitch(self):
        rng = np.random.default_rng(42)
        frame = 0.3 * rng.standard_normal(8192)
        self.assertIsNone(estimate_pitch(frame, 44100))

    def test_out_of_range_tone_has_no_pitch(self):
        # 40Hz has no period inside the default 82-1000Hz window
        self.assertIsNone(estimate_pitch(sine(40.0), 44100))

    def test_upper_bound_is_inclusive(self):
        # 48000 / 1000 is a whole number of samples, so the lag lands exactly
        frame = sine(1000.0, sample_rate=48000, size=4800)
        self.assertEqual(estimate_pitch(frame, 48000), 1000.0)

    def test_just_above_upper_bound_is_rejected(self):
        frame = sine(1000.0, sample_rate=48000, size=4800)
        config = TunerConfig(max_freq=999.9)
        self.assertIsNone(estimate_pitch(frame, 48000, config))

    def test_lower_bound_is_inclusive(self):
        # The 600 sample period is the longest lag searched for min_freq=80
        frame = sine(80.0, sample_rate=48000, size=4800)
        config = TunerConfig(min_freq=80.0)
        self.assertEqual(estimate_pitch(frame, 48000, config), 80.0)

    def test_just_below_lower_bound_is_rejected(self):
        # The window ends at lag 599 while the correlation is still rising
        frame = sine(80.0, sample_rate=48000, size=4800)
        config = TunerConfig(min_freq=80.01)
        self.assertIsNone(estimate_pitch(frame, 48000, config))

    @patch("tonal_tuner.detection.pitch_estimator.autocorrelate")
    def test_threshold_gates_on_maximum_correlation(self, mock_autocorrelate):
        # Lags 43..538 are scored; the earlier near-tie at lag 100 sits below
        # the threshold but the maximum at lag 200 clears it
        padded = np.zeros(538 - 43 + 1)
        padded[100 - 43] = 0.498
        padded[200 - 43] = 0.505
        mock_autocorrelate.return_value = padded
        self.assertEqual(estimate_pitch(sine(440.0), 44100), 441.0)

    @patch("tonal_tuner.detection.pitch_estimator.autocorrelate")
    def test_maximum_at_threshold_is_rejected(self, mock_autocorrelate):
        padded = np.zeros(538 - 43 + 1)
        padded[100 - 43] = 0.5
        mock_autocorrelate.return_value = padded
        self.assertIsNone(estimate_pitch(sine(440.0), 44100))

    def test_precomputed_rms_is_used(self):
        frame = sine(440.0)
        self.assertIsNone(estimate_pitch(frame, 44100, rms=0.001))

    def test_correlation_threshold_is_configurable(self):
        rng = np.random.default_rng(7)
        frame = sine(220.0) + 0.6 * rng.standard_normal(8192)
        strict = TunerConfig(correlation_threshold=0.9)
        self.assertIsNone(estimate_pitch(frame, 44100, strict))

    def test_empty_frame_raises(self):
        with self.assertRaises(ValueError):
            estimate_pitch([], 44100)

    def test_short_frame_raises(self):
        # 82Hz at 44.1kHz needs at least 2 * 537 samples
        with self.assertRaises(ValueError):
            estimate_pitch(sine(440.0, size=1000), 44100)

    def test_invalid_sample_rate_raises(self):
        for rate in (0, -44100, float("nan")):
            with self.assertRaises(ValueError):
                estimate_pitch(sine(440.0), rate)

    def test_sample_rate_below_max_frequency_raises(self):
        with self.assertRaises(ValueError):
            estimate_pitch(np.ones(8192), 900)


class TestLagWindow(unittest.TestCase):
    def test_default_bounds(self):
        self.assertEqual(lag_window(44100, 8192, 82.0, 1000.0), (44, 537))

    def test_window_is_clipped_to_half_frame(self):
        self.assertEqual(lag_window(44100, 1074, 82.0, 1000.0), (44, 537))
        self.assertEqual(lag_window(44100, 1075, 82.0, 1000.0), (44, 537))

    def test_narrow_range_is_a_single_lag(self):
        self.assertEqual(lag_window(44100, 8192, 999.0, 1000.0), (44, 44))

    def test_inverted_range_raises(self):
        with self.assertRaises(ValueError):
            lag_window(44100, 8192, 500.0, 100.0)


class TestPeakHelpers(unittest.TestCase):
    def test_parabola_vertex(self):
        # Samples of -(x - 0.25)^2 at -1, 0, 1
        delta = parabolic_offset(-1.5625, -0.0625, -0.5625)
        self.assertAlmostEqual(delta, 0.25)

    def test_flat_parabola_has_no_vertex(self):
        self.assertIsNone(parabolic_offset(1.0, 1.0, 1.0))

    def test_far_vertex_is_rejected(self):
        self.assertIsNone(parabolic_offset(0.0, 0.5, 0.9))

    def test_near_tie_prefers_shortest_lag(self):
        scores = np.array([0.1, 0.98, 0.2, 0.1, 0.985, 0.3])
        self.assertEqual(select_peak(scores, 0.01), 1)

    def test_zero_tolerance_takes_maximum(self):
        scores = np.array([0.1, 0.98, 0.2, 0.1, 0.985, 0.3])
        self.assertEqual(select_peak(scores, 0.0), 4)

    def test_first_of_equal_maxima(self):
        scores = np.array([0.2, 0.9, 0.1, 0.9, 0.1])
        self.assertEqual(select_peak(scores, 0.0), 1)

    def test_rising_last_lag_is_not_a_peak(self):
        scores = np.array([0.1, 0.3, 0.6, 0.9])
        self.assertIsNone(select_peak(scores, 0.01, after=0.95))

    def test_falling_last_lag_is_a_peak(self):
        scores = np.array([0.1, 0.3, 0.6, 0.9])
        self.assertEqual(select_peak(scores, 0.01, after=0.8), 3)

    def test_first_lag_below_outside_neighbour_is_not_a_peak(self):
        scores = np.array([0.9, 0.6, 0.3, 0.1])
        self.assertIsNone(select_peak(scores, 0.01, before=0.95))

    def test_unknown_neighbours_leave_edges_as_peaks(self):
        scores = np.array([0.1, 0.3, 0.6, 0.9])
        self.assertEqual(select_peak(scores, 0.01), 3)


if __name__ == "__main__":
    unittest.main()
