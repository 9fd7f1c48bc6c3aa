import unittest

from gymtrack.warmups import (
    WeightUnit,
    PlateLoadingResult,
    calculate_plate_loading,
)


class TestPlateLoading(unittest.TestCase):
    def test_two_plates_per_side_pounds(self):
        result = calculate_plate_loading(225, unit=WeightUnit.POUNDS)
        self.assertEqual(result.plates_per_side, {45.0: 2})
        self.assertEqual(result.achievable_weight, 225)

    def test_three_plates_per_side_pounds(self):
        result = calculate_plate_loading(315, unit=WeightUnit.POUNDS)
        self.assertEqual(result.plates_per_side, {45.0: 3})
        self.assertEqual(result.achievable_weight, 315)

    def test_mixed_plates_pounds(self):
        # 70 per side: 45 + 25
        result = calculate_plate_loading(185, unit=WeightUnit.POUNDS)
        self.assertEqual(result.plates_per_side, {45.0: 1, 25.0: 1})
        self.assertEqual(result.achievable_weight, 185)

    def test_kilograms_default_bar_and_plates(self):
        # 40 per side: 25 + 15
        result = calculate_plate_loading(100, unit=WeightUnit.KILOGRAMS)
        self.assertEqual(result.plates_per_side, {25.0: 1, 15.0: 1})
        self.assertEqual(result.achievable_weight, 100)

    def test_unreachable_target_never_overshoots(self):
        # 46.25 per side, smallest plate is 2.5 -> 45 per side
        result = calculate_plate_loading(137.5, unit=WeightUnit.POUNDS)
        self.assertEqual(result.plates_per_side, {45.0: 1})
        self.assertEqual(result.achievable_weight, 135)
        self.assertLessEqual(result.achievable_weight, 137.5)

    def test_custom_bar_weight(self):
        # 35 lb bar: 50 per side -> 45 + 5
        result = calculate_plate_loading(135, bar_weight=35, unit=WeightUnit.POUNDS)
        self.assertEqual(result.plates_per_side, {45.0: 1, 5.0: 1})
        self.assertEqual(result.achievable_weight, 135)

    def test_greedy_with_non_canonical_plate_set(self):
        # Two 20s per side would hit 100 exactly, greedy takes a 25 first and stops at 70
        result = calculate_plate_loading(100, bar_weight=20, available_plates=[20, 25], unit=WeightUnit.KILOGRAMS)
        self.assertEqual(result.plates_per_side, {25.0: 1})
        self.assertEqual(result.achievable_weight, 70)

    def test_non_positive_plates_are_ignored(self):
        result = calculate_plate_loading(135, available_plates=[45, 0, -5], unit=WeightUnit.POUNDS)
        self.assertEqual(result.plates_per_side, {45.0: 1})
        self.assertEqual(result.achievable_weight, 135)

    def test_target_at_or_below_bar_is_empty_bar(self):
        for target in (0, -20, 30, 45):
            result = calculate_plate_loading(target, unit=WeightUnit.POUNDS)
            self.assertEqual(result.plates_per_side, {})
            self.assertEqual(result.achievable_weight, 45)

    def test_non_finite_target_is_empty_bar(self):
        for target in (float("inf"), float("-inf"), float("nan")):
            result = calculate_plate_loading(target, unit=WeightUnit.POUNDS)
            self.assertEqual(result.plates_per_side, {})
            self.assertEqual(result.achievable_weight, 45)

    def test_non_finite_bar_falls_back_to_standard_bar(self):
        result = calculate_plate_loading(float("nan"), bar_weight=float("inf"), unit=WeightUnit.KILOGRAMS)
        self.assertEqual(result.plates_per_side, {})
        self.assertEqual(result.achievable_weight, 20)

        result = calculate_plate_loading(135, bar_weight=float("nan"), unit=WeightUnit.POUNDS)
        self.assertEqual(result.plates_per_side, {45.0: 1})
        self.assertEqual(result.achievable_weight, 135)

    def test_non_finite_plates_are_ignored(self):
        result = calculate_plate_loading(135, available_plates=[float("inf"), float("nan"), 45], unit=WeightUnit.POUNDS)
        self.assertEqual(result.plates_per_side, {45.0: 1})
        self.assertEqual(result.achievable_weight, 135)

    def test_fine_kilogram_plates(self):
        # 21.25 per side: 20 + 1.25
        result = calculate_plate_loading(62.5, unit=WeightUnit.KILOGRAMS)
        self.assertEqual(result.plates_per_side, {20.0: 1, 1.25: 1})
        self.assertAlmostEqual(result.achievable_weight, 62.5)

    def test_result_is_deterministic_and_serializable(self):
        first = calculate_plate_loading(275, unit=WeightUnit.POUNDS)
        second = calculate_plate_loading(275, unit=WeightUnit.POUNDS)
        self.assertEqual(first, second)
        # 115 per side: 45 + 45 + 25
        self.assertEqual(first.to_dict(), {
            "plates_per_side": [{"plate": 45.0, "count": 2}, {"plate": 25.0, "count": 1}],
            "achievable_weight": 275.0,
        })

    def test_empty_result_defaults(self):
        self.assertEqual(PlateLoadingResult().to_dict(), {"plates_per_side": [], "achievable_weight": 0.0})


if __name__ == "__main__":
    unittest.main()
