import unittest

from carecost.utils.numbers import decimalize, format_currency, round_half_up


class NumberHelperTests(unittest.TestCase):
    def test_round_half_up(self) -> None:
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)
        self.assertEqual(round_half_up(-0.5), 0)

    def test_decimalize_accepts_percent_or_decimal(self) -> None:
        self.assertAlmostEqual(decimalize(20), 0.2)
        self.assertAlmostEqual(decimalize(0.35), 0.35)
        self.assertIsNone(decimalize(None))

    def test_format_currency(self) -> None:
        self.assertEqual(format_currency(1234.5), "$1,235")
        self.assertEqual(format_currency(1234.5, cents=True), "$1,234.50")
        self.assertEqual(format_currency(None), "N/A")

    def test_format_currency_negative_sign_precedes_symbol(self) -> None:
        self.assertEqual(format_currency(-2181.4), "-$2,181")
        self.assertEqual(format_currency(-1234.5, cents=True), "-$1,234.50")
        self.assertEqual(format_currency(-0.2), "$0")
        self.assertEqual(format_currency(-0.001, cents=True), "$0.00")


if __name__ == "__main__":
    unittest.main()
