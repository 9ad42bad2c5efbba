from __future__ import annotations
import datetime
from typing import Dict, List, Optional

from algorithms.math_tools import MathTools
from base_service import BaseAnalyzer
from errors import DataUnavailable
from models import SetFilters, SetRecord


class PersonalRecordsTracker(BaseAnalyzer):
    """All-time bests per exercise, ranked by estimated one-rep max."""

    EMPTY_RESULT: list = []

    @classmethod
    def empty_result(cls, **overrides) -> list:
        return []

    async def analyze(
        self,
        limit: Optional[int] = None,
        now: Optional[datetime.datetime] = None,
    ) -> List[Dict[str, object]]:
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
        try:
            sets = await self._fetch_sets(SetFilters())
        except DataUnavailable:
            return self.empty_result()
        return self.compute(sets, limit, now)

    def compute(
        self,
        sets: List[SetRecord],
        limit: Optional[int] = None,
        now: Optional[datetime.datetime] = None,
    ) -> List[Dict[str, object]]:
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
        today = self._now(now).date()

        grouped: Dict[int, List[SetRecord]] = {}
        for s in sets:
            if s.is_working_set:
                grouped.setdefault(s.exercise_id, []).append(s)

        records = []
        for exercise_id, items in grouped.items():
            dates = [s.session_date for s in items]
            last = max(dates).date()
            days_since = max(0, (today - last).days)
            records.append(
                {
                    "exercise_id": exercise_id,
                    "exercise": items[0].exercise_name,
                    "muscle_group": self.settings.canonical_muscle_group(items[0].muscle_group),
                    "max_weight": max(s.weight for s in items),
                    "max_reps": max(s.reps for s in items),
                    "max_volume": round(max(s.volume for s in items), 2),
                    "estimated_one_rep_max": max(
                        MathTools.epley_1rm(s.weight, s.reps) for s in items
                    ),
                    "session_count": len({s.session_id for s in items}),
                    "total_sets": len(items),
                    "avg_weight": round(MathTools.mean(s.weight for s in items), 1),
                    "avg_reps": round(MathTools.mean(s.reps for s in items), 1),
                    "first_performed": min(dates).date().isoformat(),
                    "last_performed": last.isoformat(),
                    "days_since_last_performed": days_since,
                    "recency": self.recency_for(days_since),
                }
            )
        records.sort(key=lambda r: (-r["estimated_one_rep_max"], r["exercise"]))
        if limit is not None:
            records = records[:limit]
        return records

    def recency_for(self, days_since: int) -> str:
        bands = self.settings.recency
        if days_since <= bands.recent_days:
            return "recent"
        if days_since <= bands.moderate_days:
            return "moderate"
        return "old"
