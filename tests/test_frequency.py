import os
import sys
import datetime
import unittest
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
sys.path.append(os.path.dirname(__file__))
from frequency_service import FrequencyAnalyzer
from record_factory import NOW, FailingStore, MemoryStore, make_session


def _day(n, hour=0):
    return datetime.datetime(2024, 2, n, hour)


STREAK_DAYS = [datetime.date(2024, 2, n) for n in (1, 2, 4, 5, 8)]


class StreakTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.analyzer = FrequencyAnalyzer(MemoryStore())

    def test_longest_streak(self) -> None:
        self.assertEqual(self.analyzer.longest_streak(STREAK_DAYS), 4)
        self.assertEqual(self.analyzer.longest_streak([]), 0)
        self.assertEqual(self.analyzer.longest_streak(STREAK_DAYS[:1]), 1)

    def test_current_streak_broken_after_three_days(self) -> None:
        self.assertEqual(self.analyzer.current_streak(STREAK_DAYS, _day(12, 12)), 0)

    def test_current_streak_walks_back_from_last_day(self) -> None:
        self.assertEqual(self.analyzer.current_streak(STREAK_DAYS, _day(9, 12)), 1)
        self.assertEqual(self.analyzer.current_streak(STREAK_DAYS[:4], _day(6)), 4)

    def test_current_streak_empty(self) -> None:
        self.assertEqual(self.analyzer.current_streak([], _day(9)), 0)


def _sessions():
    sessions = [make_session(_day(n, 18), 3600) for n in (1, 2, 4, 5, 8)]
    sessions.append(make_session(_day(8, 19), 0))
    sessions.append(make_session(_day(7, 18), 3600, is_completed=False))
    return sessions


def test_metrics_and_buckets():
    result = FrequencyAnalyzer(MemoryStore()).compute(_sessions(), 90, _day(9, 12))

    assert [d["date"] for d in result["daily_workouts"]] == [
        "2024-02-01",
        "2024-02-02",
        "2024-02-04",
        "2024-02-05",
        "2024-02-08",
    ]
    last = result["daily_workouts"][-1]
    assert last["workout_count"] == 2
    assert last["total_duration"] == 3600
    assert last["avg_duration"] == 1800.0

    assert result["weekly_stats"] == [
        {"week_start": "2024-01-29", "workout_days": 3, "total_duration": 10800, "avg_duration": 3600.0},
        {"week_start": "2024-02-05", "workout_days": 2, "total_duration": 7200, "avg_duration": 3600.0},
    ]

    metrics = result["metrics"]
    assert metrics["total_workouts"] == 5
    assert metrics["total_sessions"] == 6
    assert metrics["avg_workouts_per_week"] == 4.1
    assert metrics["avg_duration_minutes"] == 60
    assert metrics["consistency_score"] == 80
    assert metrics["longest_streak"] == 4
    assert metrics["current_streak"] == 1
    assert result["recommendations"] == ["Great workout frequency! You're in the optimal range."]


def test_recommendations_for_sparse_training():
    sessions = [make_session(_day(1, 18), 0), make_session(_day(20, 18), 0)]
    result = FrequencyAnalyzer(MemoryStore()).compute(sessions, 90, _day(28, 12))
    assert result["metrics"]["avg_workouts_per_week"] < 2
    assert result["recommendations"] == [
        "Try to workout at least 2-3 times per week for optimal results",
        "Excellent consistency! Keep up the regular schedule.",
        "Time to get back into your routine! Start with a light workout.",
    ]


def test_long_sessions_and_long_streak():
    sessions = [make_session(_day(n, 8), 3 * 3600) for n in range(1, 11)]
    result = FrequencyAnalyzer(MemoryStore()).compute(sessions, 90, _day(10, 20))
    recs = result["recommendations"]
    assert "Very high frequency detected. Ensure adequate recovery between sessions" in recs
    assert (
        "Very long workouts detected. Consider splitting into shorter, more focused sessions"
        in recs
    )
    assert "Amazing 10-day streak! Consider taking a rest day soon." in recs


@pytest.mark.asyncio
async def test_empty_result_has_zeroed_metrics():
    result = await FrequencyAnalyzer(MemoryStore()).analyze(90, NOW)
    assert result["daily_workouts"] == []
    assert result["weekly_stats"] == []
    assert result["metrics"]["total_workouts"] == 0
    assert result["metrics"]["consistency_score"] == 0
    assert result["metrics"]["current_streak"] == 0
    assert result["recommendations"] == ["Start tracking workouts to get frequency analysis"]


@pytest.mark.asyncio
async def test_window_and_store_failure():
    store = MemoryStore([make_session(NOW - datetime.timedelta(days=120), 3600)])
    result = await FrequencyAnalyzer(store).analyze(90, NOW)
    assert result["metrics"]["total_workouts"] == 0

    failing = FrequencyAnalyzer(FailingStore(OSError("gone")))
    assert (await failing.analyze(90, NOW))["metrics"]["total_sessions"] == 0


if __name__ == "__main__":
    unittest.main()
