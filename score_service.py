from __future__ import annotations
from typing import Dict, Optional

from algorithms.math_tools import MathTools
from settings_schema import AnalyticsSettings


class CompositeScoreCalculator:
    """Combine balance, ratio and frequency results into a 0-100 fitness score."""

    def __init__(self, settings: AnalyticsSettings | None = None) -> None:
        self.settings = settings or AnalyticsSettings()

    def calculate(
        self,
        muscle_balance: Optional[dict],
        strength_ratios: Optional[dict],
        frequency_analysis: Optional[dict],
    ) -> Dict[str, object]:
        table = self.settings.score
        metrics = (frequency_analysis or {}).get("metrics") or {}
        imbalances = (muscle_balance or {}).get("imbalances") or []
        label = (strength_ratios or {}).get("overall_balance", "insufficient_data")
        consistency = float(metrics.get("consistency_score") or 0)
        per_week = float(metrics.get("avg_workouts_per_week") or 0)

        breakdown = {
            "muscle_balance": self.imbalance_points(len(imbalances)),
            "strength_ratios": table.balance_points.get(label, table.balance_floor),
            "consistency": self.consistency_points(consistency),
            "frequency": self.frequency_points(per_week),
        }
        max_score = table.component_max * len(breakdown)
        percentage = int(MathTools.round_half_up(sum(breakdown.values()) / max_score * 100))
        percentage = int(MathTools.clamp(percentage, 0, 100))
        return {
            "percentage": percentage,
            "rating": self.rating_for(percentage),
            "breakdown": breakdown,
        }

    def imbalance_points(self, count: int) -> int:
        table = self.settings.score
        for limit, points in table.imbalance_steps:
            if count <= limit:
                return points
        return table.imbalance_floor

    def consistency_points(self, consistency: float) -> int:
        table = self.settings.score
        points = MathTools.round_half_up(
            MathTools.clamp(consistency, 0, 100) * table.consistency_weight
        )
        return int(min(points, table.component_max))

    def frequency_points(self, per_week: float) -> int:
        table = self.settings.score
        for band in table.frequency_bands:
            if per_week >= band.low and (band.high is None or per_week <= band.high):
                return band.points
        return table.frequency_floor

    def rating_for(self, percentage: float) -> str:
        table = self.settings.score
        for tier in sorted(table.rating_tiers, key=lambda t: -t.min_percentage):
            if percentage >= tier.min_percentage:
                return tier.label
        return table.rating_floor
