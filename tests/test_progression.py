import os
import sys
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
sys.path.append(os.path.dirname(__file__))
from progression_service import ProgressionAnalyzer
from settings_schema import AnalyticsSettings, TrendThresholds
from record_factory import NOW, FailingStore, MemoryStore, make_set


@pytest.mark.asyncio
async def test_three_session_scenario():
    store = MemoryStore(
        [
            make_set(20, 100, 10),
            make_set(10, 105, 8),
            make_set(1, 110, 6),
        ]
    )
    result = await ProgressionAnalyzer(store).analyze(1, 90, NOW)

    assert [p["estimated_one_rep_max"] for p in result["best_sets"]] == [133, 133, 132]
    assert [p["date"] for p in result["best_sets"]] == ["2024-02-10", "2024-02-20", "2024-02-29"]
    assert result["exercise_id"] == 1
    # volume falls 1000 -> 840 -> 660 while the 1RM stays flat
    assert result["trend"] == "declining"

    metrics = result["metrics"]
    assert metrics["volume_change"] == -34.0
    assert metrics["strength_change"] == -0.8
    assert metrics["weight_change"] == 10.0
    assert metrics["current_one_rep_max"] == 132
    assert metrics["sessions"] == 3
    assert 0 < metrics["consistency"] < 100

    assert result["projections"]["next_month"] == 130
    assert result["projections"]["next_quarter"] == 126

    assert [w["week_start"] for w in result["data_points"]] == [
        "2024-02-05",
        "2024-02-19",
        "2024-02-26",
    ]
    assert all(w["count"] == 1 for w in result["data_points"])


def test_increasing_series_is_never_declining():
    sets = [make_set(30 - i * 5, 100 + 2.5 * i, 8) for i in range(6)]
    result = ProgressionAnalyzer(MemoryStore()).compute(sets, 1)
    assert result["trend"] in ("improving", "slightly_improving")


def test_flat_series_is_stable():
    sets = [make_set(30 - i * 5, 100, 8) for i in range(4)]
    result = ProgressionAnalyzer(MemoryStore()).compute(sets, 1)
    assert result["trend"] == "stable"
    assert result["metrics"]["consistency"] == 100.0


def test_best_set_per_session_first_wins_on_tie():
    sets = [
        make_set(3, 100, 10, session_id=7, set_number=1),
        make_set(3, 125, 8, session_id=7, set_number=2),
        make_set(3, 60, 10, session_id=7, set_number=3),
        make_set(3, 200, 10, session_id=7, set_number=4, is_warmup=True),
    ]
    best = ProgressionAnalyzer.best_sets(sets)
    assert len(best) == 1
    assert best[0]["weight"] == 100
    assert best[0]["reps"] == 10


def test_best_sets_capped_but_metrics_use_full_series():
    sets = [make_set(60 - i * 4, 100 + i, 5) for i in range(12)]
    result = ProgressionAnalyzer(MemoryStore()).compute(sets, 1)
    assert len(result["best_sets"]) == 10
    assert result["metrics"]["sessions"] == 12
    assert result["best_sets"][-1]["weight"] == 111


def test_best_set_limit_is_configurable():
    settings = AnalyticsSettings(trend=TrendThresholds(best_set_limit=2))
    sets = [make_set(10 - i, 100 + i, 5) for i in range(5)]
    result = ProgressionAnalyzer(MemoryStore(), settings).compute(sets, 1)
    assert len(result["best_sets"]) == 2


def test_projections_need_three_points():
    sets = [make_set(10, 100, 5), make_set(5, 105, 5)]
    result = ProgressionAnalyzer(MemoryStore()).compute(sets, 1)
    assert result["projections"] == {}
    assert result["metrics"]["consistency"] == 0.0


@pytest.mark.asyncio
async def test_no_data_returns_sentinel():
    store = MemoryStore([make_set(1, 100, 10, exercise_id=2), make_set(200, 100, 10)])
    result = await ProgressionAnalyzer(store).analyze(1, 90, NOW)
    assert result == {
        "trend": "insufficient_data",
        "data_points": [],
        "best_sets": [],
        "metrics": {},
        "projections": {},
        "exercise_id": 1,
    }


@pytest.mark.asyncio
async def test_store_failure_returns_sentinel():
    analyzer = ProgressionAnalyzer(FailingStore(OSError("disk")))
    result = await analyzer.analyze(3, 90, NOW)
    assert result["trend"] == "insufficient_data"
    assert result["exercise_id"] == 3
