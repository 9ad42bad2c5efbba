from __future__ import annotations
import datetime
from typing import Dict, List, Optional, Sequence

from algorithms.math_tools import MathTools
from base_service import BaseAnalyzer
from errors import DataUnavailable
from models import SessionFilters, SessionRecord


class FrequencyAnalyzer(BaseAnalyzer):
    """Workout days, weekly cadence, streaks and scheduling advice."""

    START_TRACKING = "Start tracking workouts to get frequency analysis"
    EMPTY_RESULT = {
        "daily_workouts": [],
        "weekly_stats": [],
        "metrics": {
            "total_workouts": 0,
            "total_sessions": 0,
            "avg_workouts_per_week": 0.0,
            "avg_duration_minutes": 0,
            "consistency_score": 0,
            "longest_streak": 0,
            "current_streak": 0,
            "durations_logged": False,
        },
        "recommendations": [START_TRACKING],
    }

    async def analyze(
        self,
        timeframe_days: int = 90,
        now: Optional[datetime.datetime] = None,
    ) -> Dict[str, object]:
        since = self._window_start(timeframe_days, now)
        try:
            sessions = await self._fetch_sessions(SessionFilters(since=since))
        except DataUnavailable:
            return self.empty_result(timeframe=timeframe_days)
        return self.compute(sessions, timeframe_days, now)

    def compute(
        self,
        sessions: List[SessionRecord],
        timeframe_days: int = 90,
        now: Optional[datetime.datetime] = None,
    ) -> Dict[str, object]:
        now = self._now(now)
        completed = [s for s in sessions if s.is_completed]
        if not completed:
            return self.empty_result(timeframe=timeframe_days)

        daily = self.daily_workouts(completed)
        weekly = self.weekly_stats(daily)
        metrics = self.metrics(completed, daily, weekly, now)
        return {
            "daily_workouts": daily,
            "weekly_stats": weekly,
            "metrics": metrics,
            "recommendations": self.recommendations(metrics),
            "timeframe": timeframe_days,
        }

    @staticmethod
    def daily_workouts(sessions: List[SessionRecord]) -> List[Dict[str, object]]:
        days: Dict[str, List[int]] = {}
        for s in sessions:
            days.setdefault(s.date.date().isoformat(), []).append(s.duration_seconds)
        result = []
        for day in sorted(days):
            durations = days[day]
            total = sum(durations)
            result.append(
                {
                    "date": day,
                    "workout_count": len(durations),
                    "avg_duration": round(total / len(durations), 1),
                    "total_duration": total,
                }
            )
        return result

    @staticmethod
    def weekly_stats(daily: List[Dict[str, object]]) -> List[Dict[str, object]]:
        weeks: Dict[str, Dict[str, int]] = {}
        for day in daily:
            key = MathTools.week_start(datetime.date.fromisoformat(day["date"])).isoformat()
            week = weeks.setdefault(key, {"workout_days": 0, "total_duration": 0})
            week["workout_days"] += 1
            week["total_duration"] += day["total_duration"]
        return [
            {
                "week_start": key,
                "workout_days": weeks[key]["workout_days"],
                "total_duration": weeks[key]["total_duration"],
                "avg_duration": round(
                    weeks[key]["total_duration"] / weeks[key]["workout_days"], 1
                ),
            }
            for key in sorted(weeks)
        ]

    def metrics(
        self,
        sessions: List[SessionRecord],
        daily: List[Dict[str, object]],
        weekly: List[Dict[str, object]],
        now: datetime.datetime,
    ) -> Dict[str, object]:
        days = [datetime.date.fromisoformat(d["date"]) for d in daily]
        first = datetime.datetime.combine(days[0], datetime.time())
        span_days = max(1.0, (now - first).total_seconds() / 86400)
        durations = [s.duration_seconds for s in sessions if s.duration_seconds > 0]
        avg_duration = MathTools.mean(durations) / 60 if durations else 0.0
        consistency = MathTools.consistency_score(
            [w["workout_days"] for w in weekly], min_points=1
        )
        return {
            "total_workouts": len(days),
            "total_sessions": len(sessions),
            "avg_workouts_per_week": round(len(days) / span_days * 7, 1),
            "avg_duration_minutes": int(MathTools.round_half_up(avg_duration)),
            "consistency_score": int(MathTools.round_half_up(consistency)),
            "longest_streak": self.longest_streak(days),
            "current_streak": self.current_streak(days, now),
            "durations_logged": bool(durations),
        }

    def longest_streak(self, days: Sequence[datetime.date]) -> int:
        """Longest run of workout days separated by at most ``streak_gap_days``."""
        if not days:
            return 0
        gap = self.settings.frequency.streak_gap_days
        longest = current = 1
        for diff in MathTools.day_gaps(list(days)):
            if diff <= gap:
                current += 1
            else:
                current = 1
            longest = max(longest, current)
        return longest

    def current_streak(self, days: Sequence[datetime.date], now: datetime.datetime) -> int:
        """Streak ending at the latest workout; 0 once it is older than ``streak_break_days``."""
        if not days:
            return 0
        limits = self.settings.frequency
        last = datetime.datetime.combine(days[-1], datetime.time())
        if (now - last).total_seconds() / 86400 > limits.streak_break_days:
            return 0
        streak = 1
        for diff in reversed(MathTools.day_gaps(list(days))):
            if diff > limits.streak_gap_days:
                break
            streak += 1
        return streak

    def recommendations(self, metrics: Dict[str, object]) -> List[str]:
        if not metrics.get("total_workouts"):
            return [self.START_TRACKING]

        limits = self.settings.frequency
        result: List[str] = []
        per_week = metrics["avg_workouts_per_week"]
        if per_week < limits.low_frequency:
            result.append("Try to workout at least 2-3 times per week for optimal results")
        elif per_week > limits.high_frequency:
            result.append(
                "Very high frequency detected. Ensure adequate recovery between sessions"
            )
        elif limits.ideal_min <= per_week <= limits.ideal_max:
            result.append("Great workout frequency! You're in the optimal range.")

        consistency = metrics["consistency_score"]
        if consistency < limits.low_consistency:
            result.append("Try to maintain more consistent workout scheduling")
        elif consistency > limits.high_consistency:
            result.append("Excellent consistency! Keep up the regular schedule.")

        if metrics.get("durations_logged"):
            minutes = metrics["avg_duration_minutes"]
            if minutes < limits.short_session_minutes:
                result.append("Consider longer workout sessions for better volume")
            elif minutes > limits.long_session_minutes:
                result.append(
                    "Very long workouts detected. "
                    "Consider splitting into shorter, more focused sessions"
                )

        streak = metrics["current_streak"]
        if streak == 0:
            result.append("Time to get back into your routine! Start with a light workout.")
        elif streak >= limits.long_streak:
            result.append(f"Amazing {streak}-day streak! Consider taking a rest day soon.")
        return result
