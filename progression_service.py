from __future__ import annotations
import datetime
from typing import Dict, List, Optional

from algorithms.exercise_progress_estimator import ExerciseProgressEstimator
from algorithms.math_tools import MathTools
from base_service import BaseAnalyzer
from errors import DataUnavailable
from models import SetFilters, SetRecord


class ProgressionAnalyzer(BaseAnalyzer):
    """Per-exercise best-set trend, weekly rollup and 1RM projections."""

    EMPTY_RESULT = {
        "trend": "insufficient_data",
        "data_points": [],
        "best_sets": [],
        "metrics": {},
        "projections": {},
    }

    async def analyze(
        self,
        exercise_id: int,
        timeframe_days: int = 90,
        now: Optional[datetime.datetime] = None,
    ) -> Dict[str, object]:
        since = self._window_start(timeframe_days, now)
        try:
            sets = await self._fetch_sets(SetFilters(since=since, exercise_id=exercise_id))
        except DataUnavailable:
            return self.empty_result(exercise_id=exercise_id)
        return self.compute(sets, exercise_id)

    def compute(self, sets: List[SetRecord], exercise_id: Optional[int] = None) -> Dict[str, object]:
        series = self.best_sets(sets)
        if not series:
            return self.empty_result(exercise_id=exercise_id)

        limits = self.settings.trend
        volumes = [p["volume"] for p in series]
        rms = [p["estimated_one_rep_max"] for p in series]
        weights = [p["weight"] for p in series]

        volume_slope = MathTools.index_slope(volumes)
        strength_slope = MathTools.index_slope(rms)
        limit = limits.best_set_limit

        return {
            "exercise_id": exercise_id,
            "trend": self.classify_trend(volume_slope, strength_slope),
            "data_points": self.weekly_rollup(series),
            "best_sets": series[-limit:] if limit > 0 else [],
            "metrics": {
                "volume_change": round(MathTools.percent_change(volumes), 1),
                "strength_change": round(MathTools.percent_change(rms), 1),
                "weight_change": round(MathTools.percent_change(weights), 1),
                "volume_slope": round(volume_slope, 3),
                "strength_slope": round(strength_slope, 3),
                "weight_slope": round(MathTools.index_slope(weights), 3),
                "consistency": round(
                    MathTools.consistency_score(volumes, limits.consistency_min_points), 1
                ),
                "current_one_rep_max": rms[-1],
                "sessions": len(series),
            },
            "projections": ExerciseProgressEstimator.predict_progress(
                rms,
                volumes,
                window=limits.projection_window,
                min_points=limits.projection_min_points,
                month_sessions=limits.month_sessions,
                quarter_sessions=limits.quarter_sessions,
            ),
        }

    @staticmethod
    def best_sets(sets: List[SetRecord]) -> List[Dict[str, object]]:
        """Return the highest-volume working set of each session, oldest first."""
        best: Dict[int, SetRecord] = {}
        order: List[int] = []
        for s in sorted(sets, key=lambda r: (r.session_date, r.session_id, r.set_number, r.set_id)):
            if not s.is_working_set:
                continue
            current = best.get(s.session_id)
            if current is None:
                order.append(s.session_id)
                best[s.session_id] = s
            elif s.volume > current.volume:
                best[s.session_id] = s
        result = []
        for sid in order:
            s = best[sid]
            result.append(
                {
                    "session_id": sid,
                    "date": s.session_date.date().isoformat(),
                    "weight": s.weight,
                    "reps": s.reps,
                    "volume": round(s.volume, 2),
                    "estimated_one_rep_max": MathTools.epley_1rm(s.weight, s.reps),
                }
            )
        return result

    def classify_trend(self, volume_slope: float, strength_slope: float) -> str:
        limits = self.settings.trend
        avg = (volume_slope + strength_slope) / 2
        if abs(avg) < limits.stable:
            return "stable"
        if avg > limits.strong:
            return "improving"
        if avg > 0:
            return "slightly_improving"
        if avg < -limits.strong:
            return "declining"
        return "slightly_declining"

    @staticmethod
    def weekly_rollup(series: List[Dict[str, object]]) -> List[Dict[str, object]]:
        """Keep the max of each metric per ISO week for charting."""
        weeks: Dict[str, Dict[str, object]] = {}
        for point in series:
            day = datetime.date.fromisoformat(point["date"])
            key = MathTools.week_start(day).isoformat()
            entry = weeks.setdefault(
                key,
                {
                    "week_start": key,
                    "volume": 0.0,
                    "weight": 0.0,
                    "reps": 0,
                    "estimated_one_rep_max": 0,
                    "count": 0,
                },
            )
            entry["volume"] = max(entry["volume"], point["volume"])
            entry["weight"] = max(entry["weight"], point["weight"])
            entry["reps"] = max(entry["reps"], point["reps"])
            entry["estimated_one_rep_max"] = max(
                entry["estimated_one_rep_max"], point["estimated_one_rep_max"]
            )
            entry["count"] += 1
        return [weeks[k] for k in sorted(weeks)]
