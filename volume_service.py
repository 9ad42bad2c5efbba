from __future__ import annotations
import datetime
from typing import Dict, List, Optional

from algorithms.math_tools import MathTools
from base_service import BaseAnalyzer
from errors import DataUnavailable
from models import SetFilters, SetRecord


class VolumeDistributionAnalyzer(BaseAnalyzer):
    """Weekly volume buckets, exercise distribution and volume trends."""

    START_TRACKING = "Start tracking workouts to get volume analysis"
    EMPTY_RESULT = {
        "weekly_volume": [],
        "exercise_distribution": [],
        "volume_trends": {},
        "insights": [START_TRACKING],
    }

    async def analyze(
        self,
        timeframe_days: int = 30,
        now: Optional[datetime.datetime] = None,
    ) -> Dict[str, object]:
        since = self._window_start(timeframe_days, now)
        try:
            sets = await self._fetch_sets(SetFilters(since=since))
        except DataUnavailable:
            return self.empty_result(timeframe=timeframe_days)
        return self.compute(sets, timeframe_days)

    def compute(self, sets: List[SetRecord], timeframe_days: int = 30) -> Dict[str, object]:
        rows = self.daily_exercise_rows(sets)
        if not rows:
            return self.empty_result(timeframe=timeframe_days)

        weekly = self.weekly_volume(rows)
        distribution = self.exercise_distribution(rows)
        trends = self.volume_trends(weekly)
        return {
            "weekly_volume": weekly,
            "exercise_distribution": distribution,
            "volume_trends": trends,
            "insights": self.insights(weekly, distribution, trends),
            "timeframe": timeframe_days,
        }

    def daily_exercise_rows(self, sets: List[SetRecord]) -> List[Dict[str, object]]:
        """Fold working sets into one row per (day, exercise)."""
        grouped: Dict[tuple, Dict[str, object]] = {}
        for s in sets:
            if not s.is_working_set:
                continue
            day = s.session_date.date().isoformat()
            row = grouped.setdefault(
                (day, s.exercise_id),
                {
                    "date": day,
                    "exercise_id": s.exercise_id,
                    "exercise_name": s.exercise_name,
                    "muscle_group": self.settings.canonical_muscle_group(s.muscle_group),
                    "set_count": 0,
                    "total_volume": 0.0,
                    "_weight": 0.0,
                    "_reps": 0,
                },
            )
            row["set_count"] += 1
            row["total_volume"] += s.volume
            row["_weight"] += s.weight
            row["_reps"] += s.reps

        rows = []
        for key in sorted(grouped):
            row = grouped[key]
            count = row["set_count"]
            rows.append(
                {
                    "date": row["date"],
                    "exercise_id": row["exercise_id"],
                    "exercise_name": row["exercise_name"],
                    "muscle_group": row["muscle_group"],
                    "set_count": count,
                    "total_volume": round(row["total_volume"], 2),
                    "avg_weight": round(row.pop("_weight") / count, 2),
                    "avg_reps": round(row.pop("_reps") / count, 2),
                }
            )
        return rows

    @staticmethod
    def weekly_volume(rows: List[Dict[str, object]]) -> List[Dict[str, object]]:
        weeks: Dict[str, Dict[str, object]] = {}
        for row in rows:
            day = datetime.date.fromisoformat(row["date"])
            key = MathTools.week_start(day).isoformat()
            week = weeks.setdefault(
                key,
                {"total_volume": 0.0, "days": set(), "exercises": set(), "categories": {}},
            )
            week["total_volume"] += row["total_volume"]
            week["days"].add(row["date"])
            week["exercises"].add(row["exercise_id"])
            categories = week["categories"]
            categories[row["muscle_group"]] = round(
                categories.get(row["muscle_group"], 0.0) + row["total_volume"], 2
            )

        result = []
        for key in sorted(weeks):
            week = weeks[key]
            days = len(week["days"])
            result.append(
                {
                    "week_start": key,
                    "total_volume": round(week["total_volume"], 2),
                    "workout_days": days,
                    "exercise_count": len(week["exercises"]),
                    "avg_volume_per_workout": int(
                        MathTools.round_half_up(week["total_volume"] / days)
                    ),
                    "categories": dict(sorted(week["categories"].items())),
                }
            )
        return result

    @staticmethod
    def exercise_distribution(rows: List[Dict[str, object]]) -> List[Dict[str, object]]:
        exercises: Dict[int, Dict[str, object]] = {}
        for row in rows:
            item = exercises.setdefault(
                row["exercise_id"],
                {
                    "name": row["exercise_name"],
                    "muscle_group": row["muscle_group"],
                    "total_volume": 0.0,
                    "session_count": 0,
                },
            )
            item["total_volume"] += row["total_volume"]
            item["session_count"] += 1

        result = []
        for item in exercises.values():
            result.append(
                {
                    "name": item["name"],
                    "muscle_group": item["muscle_group"],
                    "total_volume": round(item["total_volume"], 2),
                    "session_count": item["session_count"],
                    "avg_volume": int(
                        MathTools.round_half_up(item["total_volume"] / item["session_count"])
                    ),
                }
            )
        result.sort(key=lambda x: (-x["total_volume"], x["name"]))
        return result

    def volume_trends(self, weekly: List[Dict[str, object]]) -> Dict[str, object]:
        if len(weekly) < 2:
            return {}
        volumes = [w["total_volume"] for w in weekly]
        days = [w["workout_days"] for w in weekly]
        return {
            "volume_trend": {
                "slope": round(MathTools.index_slope(volumes), 2),
                "percent_change": round(MathTools.percent_change(volumes), 1),
            },
            "consistency": round(
                MathTools.consistency_score(volumes, self.settings.trend.consistency_min_points), 1
            ),
            "avg_weekly_volume": int(MathTools.round_half_up(MathTools.mean(volumes))),
            "avg_workouts_per_week": round(MathTools.mean(days), 1),
        }

    def insights(
        self,
        weekly: List[Dict[str, object]],
        distribution: List[Dict[str, object]],
        trends: Dict[str, object],
    ) -> List[str]:
        if not weekly:
            return [self.START_TRACKING]

        limits = self.settings.volume_insights
        result: List[str] = []
        if trends:
            change = trends["volume_trend"]["percent_change"]
            if change > limits.increase_percent:
                result.append(
                    f"Great progress! Your weekly volume has increased by {change:.1f}%"
                )
            elif change < limits.decrease_percent:
                result.append(
                    f"Your volume has decreased by {abs(change):.1f}%. "
                    "Consider increasing training intensity."
                )

            consistency = trends["consistency"]
            if consistency > limits.high_consistency:
                result.append("Excellent training consistency! Keep it up.")
            elif consistency < limits.low_consistency:
                result.append(
                    "Your training volume varies significantly. "
                    "Try to maintain more consistent weekly volume."
                )

        top = distribution[: limits.top_exercises]
        if top:
            result.append(f"Your top exercises by volume: {', '.join(e['name'] for e in top)}")

        if trends:
            per_week = trends["avg_workouts_per_week"]
            if per_week < limits.low_frequency:
                result.append("Consider increasing workout frequency for better results")
            elif per_week > limits.high_frequency:
                result.append("High training frequency detected. Ensure adequate recovery time.")
        return result
