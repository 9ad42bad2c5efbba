import os
import sys
import asyncio
import datetime
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
sys.path.append(os.path.dirname(__file__))
from analytics_service import AnalyticsOrchestrator
from settings_schema import AnalyticsSettings
from record_factory import NOW, BrokenSetsStore, MemoryStore, SlowStore, make_session, make_set


def _store(cls=MemoryStore):
    sets = []
    names = ["Bench Press", "Barbell Row", "Squat", "Deadlift", "Overhead Press", "Curl"]
    groups = ["Chest", "Back", "Quads", "Hamstrings", "Shoulders", "Biceps"]
    for day in (2, 4, 6, 9, 11, 13):
        for i, (name, group) in enumerate(zip(names, groups)):
            sets.append(
                make_set(
                    day,
                    60 + 10 * i,
                    8,
                    exercise_id=i + 1,
                    exercise_name=name,
                    muscle_group=group,
                    set_number=i + 1,
                )
            )
    sessions = [
        make_session(NOW - datetime.timedelta(days=day), 3600) for day in (2, 4, 6, 9, 11, 13)
    ]
    return cls(sets, sessions)


class ExplodingStore(MemoryStore):
    async def list_sets(self, filters=None):
        raise ZeroDivisionError("bad data")


@pytest.mark.asyncio
async def test_dashboard_shape():
    orchestrator = AnalyticsOrchestrator(_store())
    result = await orchestrator.get_comprehensive_analytics(30, NOW)
    assert set(result) == {
        "overall_score",
        "muscle_balance",
        "volume_distribution",
        "strength_ratios",
        "personal_records",
        "frequency_analysis",
        "last_updated",
    }
    assert result["last_updated"] == "2024-03-01T12:00:00"
    assert len(result["personal_records"]) == 5
    assert len(result["muscle_balance"]["balance"]) == 5
    assert result["frequency_analysis"]["metrics"]["total_workouts"] == 6
    assert 0 <= result["overall_score"]["percentage"] <= 100
    assert result["overall_score"]["rating"]


@pytest.mark.asyncio
async def test_dashboard_is_idempotent():
    orchestrator = AnalyticsOrchestrator(_store())
    first = await orchestrator.get_comprehensive_analytics(30, NOW)
    second = await orchestrator.get_comprehensive_analytics(30, NOW)
    assert first == second


@pytest.mark.asyncio
async def test_failing_analyzers_are_isolated():
    orchestrator = AnalyticsOrchestrator(_store(ExplodingStore))
    result = await orchestrator.get_comprehensive_analytics(30, NOW)
    assert result["muscle_balance"]["recommendations"] == [
        "Start tracking workouts to get muscle group analysis"
    ]
    assert result["strength_ratios"] == {"ratios": [], "overall_balance": "insufficient_data"}
    assert result["personal_records"] == []
    assert result["volume_distribution"]["weekly_volume"] == []
    # sessions are still readable
    assert result["frequency_analysis"]["metrics"]["total_workouts"] == 6


@pytest.mark.asyncio
async def test_slow_store_times_out():
    settings = AnalyticsSettings(fetch_timeout_seconds=0.05)
    orchestrator = AnalyticsOrchestrator(_store(SlowStore), settings)
    result = await orchestrator.get_comprehensive_analytics(30, NOW)
    assert result["muscle_balance"]["balance"] == []
    assert result["frequency_analysis"]["metrics"]["total_workouts"] == 6


@pytest.mark.asyncio
async def test_negative_timeframe_raises_before_fan_out():
    store = _store()
    with pytest.raises(ValueError):
        await AnalyticsOrchestrator(store).get_comprehensive_analytics(-5, NOW)
    assert store.calls == 0


@pytest.mark.asyncio
async def test_records_limit_follows_settings():
    settings = AnalyticsSettings(dashboard_records_limit=2)
    result = await AnalyticsOrchestrator(_store(), settings).get_comprehensive_analytics(30, NOW)
    assert [r["exercise"] for r in result["personal_records"]] == ["Curl", "Overhead Press"]


def _broken_sets_store(exc):
    healthy = _store()
    return BrokenSetsStore(exc, healthy.sets, healthy.sessions)


def _assert_set_analyzers_empty(result):
    assert result["muscle_balance"]["balance"] == []
    assert result["volume_distribution"]["weekly_volume"] == []
    assert result["strength_ratios"] == {"ratios": [], "overall_balance": "insufficient_data"}
    assert result["personal_records"] == []
    assert result["frequency_analysis"]["metrics"]["total_workouts"] == 6


@pytest.mark.asyncio
async def test_unexpected_store_error_is_isolated():
    store = _broken_sets_store(RuntimeError("connection pool closed"))
    result = await AnalyticsOrchestrator(store).get_comprehensive_analytics(30, NOW)
    _assert_set_analyzers_empty(result)


@pytest.mark.asyncio
async def test_cancelled_store_fetch_is_isolated():
    store = _broken_sets_store(asyncio.CancelledError())
    result = await AnalyticsOrchestrator(store).get_comprehensive_analytics(30, NOW)
    _assert_set_analyzers_empty(result)


@pytest.mark.asyncio
async def test_cancelling_the_dashboard_still_cancels():
    orchestrator = AnalyticsOrchestrator(_store(SlowStore))
    task = asyncio.ensure_future(orchestrator.get_comprehensive_analytics(30, NOW))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
