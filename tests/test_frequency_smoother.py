import unittest

from tonal_tuner.core.config import TunerConfig
from tonal_tuner.detection.frequency_smoother import (
    FrequencySmoother,
    SmootherState,
    smooth,
)


class TestSmooth(unittest.TestCase):
    def setUp(self):
        self.state = SmootherState(capacity=5)

    def test_first_reading_passes_through(self):
        self.assertEqual(smooth(220.0, self.state), 220.0)
        self.assertEqual(self.state.last_frequency, 220.0)
        self.assertEqual(list(self.state.history), [220.0])

    def test_small_variation_is_smoothed(self):
        smooth(220.0, self.state)
        output = smooth(230.0, self.state)
        self.assertAlmostEqual(output, 220.0 * 0.7 + 230.0 * 0.3)
        self.assertAlmostEqual(self.state.last_frequency, output)

    def test_octave_jump_moves_only_modestly(self):
        for freq in (220.0, 220.5, 219.8, 220.2):
            smooth(freq, self.state)
        before = self.state.last_frequency

        jumped = smooth(440.0, self.state)
        self.assertAlmostEqual(jumped, before * 0.9 + 440.0 * 0.1)
        self.assertLess(jumped, 250.0)

        recovered = smooth(220.0, self.state)
        self.assertAlmostEqual(recovered, jumped * 0.7 + 220.0 * 0.3)
        self.assertLess(recovered, jumped)

    def test_octave_drop_moves_only_modestly(self):
        smooth(440.0, self.state)
        output = smooth(220.0, self.state)
        self.assertAlmostEqual(output, 440.0 * 0.9 + 220.0 * 0.1)

    def test_octave_check_takes_priority_over_variation(self):
        # 0.55 is inside both the octave-down and normal-variation bands
        smooth(400.0, self.state)
        output = smooth(220.0, self.state)
        self.assertAlmostEqual(output, 400.0 * 0.9 + 220.0 * 0.1)

    def test_large_jump_with_short_history_takes_new_value(self):
        smooth(220.0, self.state)
        self.assertEqual(smooth(600.0, self.state), 600.0)

    def test_large_jump_uses_median_including_new_value(self):
        for freq in (100.0, 101.0, 102.0):
            smooth(freq, self.state)
        # History is [100, 101, 102, 300] once the new reading is appended
        output = smooth(300.0, self.state)
        self.assertEqual(output, 102.0)
        self.assertEqual(self.state.last_frequency, 102.0)

    def test_history_keeps_raw_values_and_is_bounded(self):
        for freq in (100.0, 110.0, 120.0, 130.0, 140.0, 150.0):
            smooth(freq, self.state)
        self.assertEqual(list(self.state.history), [110.0, 120.0, 130.0, 140.0, 150.0])

    def test_reset_clears_state(self):
        smooth(220.0, self.state)
        smooth(221.0, self.state)
        self.state.reset()
        self.assertIsNone(self.state.last_frequency)
        self.assertEqual(len(self.state.history), 0)
        self.assertEqual(smooth(440.0, self.state), 440.0)

    def test_custom_smoothing_factor(self):
        config = TunerConfig(smoothing_factor=0.5)
        smooth(200.0, self.state, config)
        self.assertAlmostEqual(smooth(210.0, self.state, config), 205.0)

    def test_rejects_non_positive_reading(self):
        with self.assertRaises(ValueError):
            smooth(0.0, self.state)
        with self.assertRaises(ValueError):
            SmootherState(capacity=0)


class TestFrequencySmoother(unittest.TestCase):
    def test_instances_do_not_share_state(self):
        first = FrequencySmoother()
        second = FrequencySmoother()
        first.smooth(220.0)
        self.assertIsNone(second.last_frequency)
        self.assertEqual(second.smooth(330.0), 330.0)
        self.assertEqual(first.last_frequency, 220.0)

    def test_history_capacity_from_config(self):
        smoother = FrequencySmoother(TunerConfig(history_capacity=3))
        for freq in (200.0, 201.0, 202.0, 203.0):
            smoother.smooth(freq)
        self.assertEqual(list(smoother.state.history), [201.0, 202.0, 203.0])

    def test_reset(self):
        smoother = FrequencySmoother()
        smoother.smooth(220.0)
        smoother.reset()
        self.assertIsNone(smoother.last_frequency)


if __name__ == "__main__":
    unittest.main()
