import unittest

import numpy as np

from carecost.core.random_stream import Mulberry32, next_uniform, seed_state, uniform_block


class Mulberry32Tests(unittest.TestCase):
    REFERENCE = {
        42: [0.6011037519201636, 0.44829055899754167, 0.8524657934904099, 0.6697340414393693, 0.17481389874592423],
        0: [0.26642920868471265, 0.0003297457005828619, 0.2232720274478197, 0.1462021479383111, 0.46732782293111086],
        12345: [0.9797282677609473, 0.3067522644996643, 0.484205421525985, 0.817934412509203, 0.5094283693470061],
        -1: [0.8964226141106337, 0.189478256739676, 0.7156526781618595, 0.9440599093213677, 0.8452364315744489],
    }

    def test_reference_sequences(self) -> None:
        for seed, expected in self.REFERENCE.items():
            with self.subTest(seed=seed):
                generator = Mulberry32(seed)
                for value in expected:
                    self.assertAlmostEqual(generator.random(), value, places=15)

    def test_same_seed_same_sequence(self) -> None:
        self.assertEqual(Mulberry32(2024).sample(100), Mulberry32(2024).sample(100))

    def test_seed_reduced_to_32_bits(self) -> None:
        self.assertEqual(seed_state(4294967338), 42)
        self.assertEqual(Mulberry32(4294967338).sample(5), Mulberry32(42).sample(5))

    def test_next_uniform_is_pure(self) -> None:
        first, state = next_uniform(42)
        again, same_state = next_uniform(42)
        self.assertEqual(first, again)
        self.assertEqual(state, same_state)
        second, _ = next_uniform(state)
        self.assertAlmostEqual(second, self.REFERENCE[42][1], places=15)

    def test_block_matches_scalar_draws(self) -> None:
        block, final_state = uniform_block(seed_state(777), 1000)
        generator = Mulberry32(777)
        scalar = generator.sample(1000)
        np.testing.assert_array_equal(block, np.array(scalar))
        self.assertEqual(final_state, generator.state)

    def test_take_continues_the_stream(self) -> None:
        generator = Mulberry32(42)
        head = generator.take(2)
        tail = generator.take(3)
        np.testing.assert_allclose(np.concatenate([head, tail]), self.REFERENCE[42], rtol=0, atol=1e-15)

    def test_values_in_unit_interval(self) -> None:
        values, _ = uniform_block(seed_state(99), 50_000)
        self.assertGreaterEqual(values.min(), 0.0)
        self.assertLess(values.max(), 1.0)
        self.assertAlmostEqual(float(values.mean()), 0.5, delta=0.01)

    def test_negative_count_rejected(self) -> None:
        with self.assertRaises(ValueError):
            uniform_block(0, -1)


if __name__ == "__main__":
    unittest.main()
