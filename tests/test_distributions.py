import math
import unittest

import numpy as np

from carecost.core.distributions import (
    MIN_UNIFORM,
    box_muller,
    lognormal_location,
    sample_lognormal,
    standard_normal,
)
from carecost.core.random_stream import Mulberry32, seed_state, uniform_block


class BoxMullerTests(unittest.TestCase):
    def test_zero_first_uniform_stays_finite(self) -> None:
        value = box_muller(0.0, 0.0)
        self.assertTrue(math.isfinite(value))
        self.assertAlmostEqual(value, math.sqrt(-2.0 * math.log(MIN_UNIFORM)))
        self.assertAlmostEqual(value, math.sqrt(64 * math.log(2)))

    def test_zero_guard_applies_to_arrays(self) -> None:
        values = box_muller(np.array([0.0, 0.5]), np.array([0.0, 0.25]))
        self.assertTrue(np.all(np.isfinite(values)))
        self.assertAlmostEqual(float(values[0]), math.sqrt(64 * math.log(2)))
        self.assertAlmostEqual(float(values[1]), 0.0, places=12)

    def test_known_point(self) -> None:
        self.assertAlmostEqual(box_muller(math.exp(-0.5), 0.5), -1.0)

    def test_array_matches_scalar(self) -> None:
        uniforms, _ = uniform_block(seed_state(5), 20)
        vector = box_muller(uniforms[0::2], uniforms[1::2])
        for index in range(10):
            self.assertAlmostEqual(
                float(vector[index]), box_muller(uniforms[2 * index], uniforms[2 * index + 1])
            )

    def test_standard_normal_consumes_two_draws(self) -> None:
        generator = Mulberry32(42)
        z = standard_normal(generator.random)
        reference = Mulberry32(42)
        self.assertAlmostEqual(z, box_muller(reference.random(), reference.random()))
        self.assertEqual(generator.state, reference.state)

    def test_standard_normal_moments(self) -> None:
        uniforms, _ = uniform_block(seed_state(11), 200_000)
        z = box_muller(uniforms[0::2], uniforms[1::2])
        self.assertAlmostEqual(float(z.mean()), 0.0, delta=0.02)
        self.assertAlmostEqual(float(z.std()), 1.0, delta=0.02)


class LognormalTests(unittest.TestCase):
    def test_location_is_log_of_median(self) -> None:
        self.assertAlmostEqual(lognormal_location(500.0), math.log(500.0))

    def test_zero_draw_returns_median(self) -> None:
        mu = lognormal_location(1234.0)
        self.assertAlmostEqual(sample_lognormal(mu, 0.5, 0.0), 1234.0)

    def test_invalid_median_rejected(self) -> None:
        for median in (0.0, -10.0, float("inf"), float("nan")):
            with self.subTest(median=median):
                with self.assertRaises(ValueError):
                    lognormal_location(median)

    def test_array_samples_positive(self) -> None:
        samples = sample_lognormal(math.log(100.0), 0.5, np.array([-3.0, 0.0, 3.0]))
        self.assertTrue(np.all(samples > 0))
        self.assertAlmostEqual(float(samples[1]), 100.0)


if __name__ == "__main__":
    unittest.main()
