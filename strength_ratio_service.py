from __future__ import annotations
from typing import Dict, Iterable, List, Optional

from algorithms.math_tools import MathTools
from base_service import BaseAnalyzer
from errors import DataUnavailable
from models import SetFilters, SetRecord
from settings_schema import RatioDefinition


class StrengthRatioAnalyzer(BaseAnalyzer):
    """Compares estimated 1RMs of paired lifts against configured ideals."""

    DEFAULT_RECOMMENDATION = "Monitor this ratio over time"
    EMPTY_RESULT = {"ratios": [], "overall_balance": "insufficient_data"}

    async def analyze(self) -> Dict[str, object]:
        definitions = list(self.settings.strength_ratios)
        try:
            sets = await self._fetch_sets(
                SetFilters(exercise_names=self._names_for(definitions))
            )
        except DataUnavailable:
            return self.empty_result()
        return self.compute(sets, definitions)

    async def analyze_ratio(self, name: str) -> Optional[Dict[str, object]]:
        """Assess a single configured ratio; ``None`` when either lift has no data."""
        definition = self.settings.ratio(name)
        try:
            sets = await self._fetch_sets(
                SetFilters(exercise_names=self._names_for([definition]))
            )
        except DataUnavailable:
            return None
        return self.assess(definition, self.max_one_rep_maxes(sets))

    def _names_for(self, definitions: Iterable[RatioDefinition]) -> tuple:
        names = []
        for d in definitions:
            for n in [d.primary, *d.secondary]:
                for key in self.settings.lift_variants(n):
                    if key and key not in names:
                        names.append(key)
        return tuple(names)

    def compute(
        self,
        sets: List[SetRecord],
        definitions: Optional[List[RatioDefinition]] = None,
    ) -> Dict[str, object]:
        if definitions is None:
            definitions = list(self.settings.strength_ratios)
        maxes = self.max_one_rep_maxes(sets)
        ratios = []
        for definition in definitions:
            assessment = self.assess(definition, maxes)
            if assessment is not None:
                ratios.append(assessment)
        if not ratios:
            return self.empty_result()
        return {"ratios": ratios, "overall_balance": self.overall_balance(ratios)}

    def max_one_rep_maxes(self, sets: List[SetRecord]) -> Dict[str, int]:
        maxes: Dict[str, int] = {}
        for s in sets:
            if not s.is_working_set:
                continue
            key = self.settings.canonical_lift(s.exercise_name)
            estimate = MathTools.epley_1rm(s.weight, s.reps)
            if estimate > maxes.get(key, 0):
                maxes[key] = estimate
        return maxes

    def assess(
        self, definition: RatioDefinition, maxes: Dict[str, int]
    ) -> Optional[Dict[str, object]]:
        primary_max = maxes.get(self.settings.canonical_lift(definition.primary), 0)
        secondary_name = definition.secondary[0]
        secondary_max = 0
        for candidate in definition.secondary:
            value = maxes.get(self.settings.canonical_lift(candidate), 0)
            if value > secondary_max:
                secondary_name, secondary_max = candidate, value
        if primary_max <= 0 or secondary_max <= 0:
            return None

        actual = primary_max / secondary_max
        deviation = abs(actual - definition.ideal) / definition.ideal * 100
        return {
            "name": definition.name,
            "primary_exercise": definition.primary,
            "secondary_exercise": secondary_name,
            "primary_max": primary_max,
            "secondary_max": secondary_max,
            "actual_ratio": round(actual, 2),
            "ideal_ratio": definition.ideal,
            "deviation_percent": round(deviation, 1),
            "status": self.status_for(deviation),
            "recommendation": self.recommendation_for(definition.name, actual, definition.ideal),
        }

    def status_for(self, deviation: float) -> str:
        bands = self.settings.ratio_status
        if deviation < bands.excellent:
            return "excellent"
        if deviation < bands.good:
            return "good"
        if deviation < bands.needs_attention:
            return "needs_attention"
        return "concerning"

    def recommendation_for(self, name: str, actual: float, ideal: float) -> str:
        try:
            definition = self.settings.ratio(name)
        except ValueError:
            return self.DEFAULT_RECOMMENDATION
        if actual < ideal:
            return definition.under_recommendation
        return definition.over_recommendation

    def overall_balance(self, ratios: List[Dict[str, object]]) -> str:
        if not ratios:
            return "insufficient_data"
        bands = self.settings.balance_labels
        total = len(ratios)
        excellent = sum(1 for r in ratios if r["status"] == "excellent")
        good = sum(1 for r in ratios if r["status"] == "good")
        concerning = sum(1 for r in ratios if r["status"] == "concerning")
        if excellent / total * 100 >= bands.excellent_share:
            return "excellent"
        if concerning / total * 100 >= bands.concerning_share:
            return "needs_improvement"
        if (excellent + good) / total * 100 >= bands.good_share:
            return "good"
        return "fair"
