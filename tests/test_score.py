import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from score_service import CompositeScoreCalculator


def _inputs(imbalances=0, balance="excellent", consistency=100, per_week=4.0):
    return (
        {"imbalances": [{}] * imbalances},
        {"overall_balance": balance},
        {"metrics": {"consistency_score": consistency, "avg_workouts_per_week": per_week}},
    )


class CompositeScoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.calc = CompositeScoreCalculator()

    def test_perfect_score(self) -> None:
        result = self.calc.calculate(*_inputs())
        self.assertEqual(result["percentage"], 100)
        self.assertEqual(result["rating"], "Elite")
        self.assertEqual(
            result["breakdown"],
            {"muscle_balance": 25, "strength_ratios": 25, "consistency": 25, "frequency": 25},
        )

    def test_mixed_score(self) -> None:
        result = self.calc.calculate(*_inputs(imbalances=2, balance="good", consistency=82, per_week=2.5))
        self.assertEqual(
            result["breakdown"],
            {"muscle_balance": 15, "strength_ratios": 20, "consistency": 21, "frequency": 20},
        )
        self.assertEqual(result["percentage"], 76)
        self.assertEqual(result["rating"], "Intermediate")

    def test_floor_values(self) -> None:
        result = self.calc.calculate(
            *_inputs(imbalances=7, balance="insufficient_data", consistency=0, per_week=0.5)
        )
        self.assertEqual(
            result["breakdown"],
            {"muscle_balance": 5, "strength_ratios": 5, "consistency": 0, "frequency": 5},
        )
        self.assertEqual(result["percentage"], 15)
        self.assertEqual(result["rating"], "Getting Started")

    def test_missing_inputs(self) -> None:
        result = self.calc.calculate(None, None, None)
        self.assertGreaterEqual(result["percentage"], 0)
        self.assertLessEqual(result["percentage"], 100)

    def test_frequency_bands(self) -> None:
        self.assertEqual(self.calc.frequency_points(3), 25)
        self.assertEqual(self.calc.frequency_points(5), 25)
        self.assertEqual(self.calc.frequency_points(2), 20)
        self.assertEqual(self.calc.frequency_points(5.5), 20)
        self.assertEqual(self.calc.frequency_points(6), 20)
        self.assertEqual(self.calc.frequency_points(1.5), 15)
        self.assertEqual(self.calc.frequency_points(6.5), 10)
        self.assertEqual(self.calc.frequency_points(0), 5)

    def test_imbalance_steps(self) -> None:
        self.assertEqual([self.calc.imbalance_points(n) for n in range(6)], [25, 15, 15, 10, 10, 5])

    def test_rating_tiers(self) -> None:
        self.assertEqual(self.calc.rating_for(85), "Advanced")
        self.assertEqual(self.calc.rating_for(90), "Elite")
        self.assertEqual(self.calc.rating_for(70), "Intermediate")
        self.assertEqual(self.calc.rating_for(60), "Beginner+")
        self.assertEqual(self.calc.rating_for(50), "Beginner")
        self.assertEqual(self.calc.rating_for(49), "Getting Started")

    def test_percentage_always_in_bounds(self) -> None:
        for imbalances in (0, 3, 9):
            for balance in ("excellent", "fair", "unknown"):
                for consistency in (-20, 0, 55, 100, 140):
                    for per_week in (0, 1, 2.5, 4, 5.5, 9):
                        result = self.calc.calculate(
                            *_inputs(imbalances, balance, consistency, per_week)
                        )
                        self.assertGreaterEqual(result["percentage"], 0)
                        self.assertLessEqual(result["percentage"], 100)


if __name__ == "__main__":
    unittest.main()
