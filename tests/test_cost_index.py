import unittest

from carecost.core.cost_index import (
    METRO_AREA_INDICES,
    STATE_COST_INDICES,
    adjust_cost_for_location,
    estimate_annual_cost_variance,
    find_metro_by_zip,
    get_cost_adjustment_factor,
    get_metro_cost_index,
    get_state_cost_index,
    state_cost_frame,
    states_by_expense,
    tier_description,
    tier_for_multiplier,
)
from carecost.models.location import CostTier


class ReferenceDataTests(unittest.TestCase):
    def test_table_sizes(self) -> None:
        self.assertEqual(len(STATE_COST_INDICES), 52)
        self.assertEqual(len(METRO_AREA_INDICES), 14)

    def test_tables_are_read_only(self) -> None:
        with self.assertRaises(TypeError):
            STATE_COST_INDICES["ZZ"] = STATE_COST_INDICES["CA"]  # type: ignore[index]

    def test_state_lookup_is_case_insensitive(self) -> None:
        summary = get_state_cost_index(" ca ")
        self.assertIsNotNone(summary)
        self.assertEqual(summary.state_name, "California")
        self.assertIsNone(get_state_cost_index("ZZ"))
        self.assertIsNone(get_state_cost_index(None))


class ResolverTests(unittest.TestCase):
    def test_metro_takes_precedence_over_state(self) -> None:
        self.assertEqual(get_cost_adjustment_factor("CA"), 1.18)
        self.assertEqual(get_cost_adjustment_factor("CA", "94103"), 1.45)
        self.assertEqual(get_cost_adjustment_factor("TX", "77001"), 1.05)
        self.assertEqual(get_cost_adjustment_factor("TX"), 1.01)

    def test_zip_prefix_alone_is_enough(self) -> None:
        self.assertEqual(get_cost_adjustment_factor(None, "10001"), 1.35)
        self.assertEqual(get_cost_adjustment_factor("", "941"), 1.45)

    def test_unknown_zip_falls_back_to_state(self) -> None:
        self.assertEqual(get_cost_adjustment_factor("CA", "96001"), 1.18)

    def test_unknown_location_yields_exactly_one(self) -> None:
        self.assertEqual(get_cost_adjustment_factor("ZZ"), 1.0)
        self.assertEqual(get_cost_adjustment_factor("ZZ", "00000"), 1.0)
        self.assertEqual(get_cost_adjustment_factor(None, None), 1.0)

    def test_find_metro_by_zip(self) -> None:
        metro = find_metro_by_zip("94103")
        self.assertIsNotNone(metro)
        self.assertEqual(metro.county, "San Francisco")
        self.assertIsNone(find_metro_by_zip("99999"))
        self.assertIsNone(find_metro_by_zip(None))

    def test_metro_lookup_by_partial_name(self) -> None:
        exact = get_metro_cost_index("Denver-Aurora-Lakewood, CO")
        self.assertEqual(exact.cost_index, 1.08)
        partial = get_metro_cost_index("seattle")
        self.assertIsNotNone(partial)
        self.assertEqual(partial.state, "WA")
        self.assertIsNone(get_metro_cost_index("Nowhere"))
        self.assertIsNone(get_metro_cost_index("  "))

    def test_adjust_cost_rounds_to_dollars(self) -> None:
        self.assertEqual(adjust_cost_for_location(5000.0, "CA", "94103"), 7250)
        self.assertEqual(adjust_cost_for_location(1000.0, "TX"), 1010)
        self.assertEqual(adjust_cost_for_location(1234.0, "ZZ"), 1234)


class TierTests(unittest.TestCase):
    def test_thresholds(self) -> None:
        self.assertEqual(tier_for_multiplier(1.20), CostTier.VERY_HIGH)
        self.assertEqual(tier_for_multiplier(1.15), CostTier.VERY_HIGH)
        self.assertEqual(tier_for_multiplier(1.10), CostTier.HIGH)
        self.assertEqual(tier_for_multiplier(1.00), CostTier.AVERAGE)
        self.assertEqual(tier_for_multiplier(0.90), CostTier.LOW)
        self.assertEqual(tier_for_multiplier(0.80), CostTier.VERY_LOW)

    def test_descriptions(self) -> None:
        self.assertIn("Average", tier_description(CostTier.AVERAGE))
        self.assertEqual(tier_description("very_high"), tier_description(CostTier.VERY_HIGH))


class SummaryTests(unittest.TestCase):
    def test_states_sorted_by_expense(self) -> None:
        cheapest = states_by_expense()
        self.assertEqual(cheapest[0].state, "PR")
        self.assertEqual(states_by_expense(ascending=False)[0].state, "AK")
        indices = [summary.average_cost_index for summary in cheapest]
        self.assertEqual(indices, sorted(indices))

    def test_state_cost_frame(self) -> None:
        frame = state_cost_frame(ascending=False)
        self.assertEqual(len(frame), 52)
        self.assertEqual(frame.iloc[0]["state"], "AK")
        self.assertIn("tier", frame.columns)
        self.assertTrue(frame["average_cost_index"].is_monotonic_decreasing)

    def test_variance_estimate(self) -> None:
        estimate = estimate_annual_cost_variance(5000.0, "CA", "94103")
        self.assertEqual(estimate.adjusted_cost, 7250)
        self.assertEqual(estimate.variance, 2250)
        self.assertEqual(estimate.percentage_change, 45)
        self.assertEqual(estimate.tier, CostTier.VERY_HIGH)

        national = estimate_annual_cost_variance(5000.0, "ZZ")
        self.assertEqual(national.adjusted_cost, 5000)
        self.assertEqual(national.percentage_change, 0)
        self.assertEqual(national.tier, CostTier.AVERAGE)


if __name__ == "__main__":
    unittest.main()
