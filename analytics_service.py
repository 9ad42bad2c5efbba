from __future__ import annotations
import asyncio
import datetime
import sqlite3
from typing import Awaitable, Dict, Optional

import structlog

from base_service import BaseAnalyzer, RecordStore
from errors import AnalyticsError
from frequency_service import FrequencyAnalyzer
from muscle_balance_service import MuscleBalanceAnalyzer
from progression_service import ProgressionAnalyzer
from records_service import PersonalRecordsTracker
from score_service import CompositeScoreCalculator
from settings_schema import AnalyticsSettings
from strength_ratio_service import StrengthRatioAnalyzer
from volume_service import VolumeDistributionAnalyzer

logger = structlog.get_logger(__name__)

_ISOLATED_ERRORS = (
    AnalyticsError,
    asyncio.TimeoutError,
    sqlite3.Error,
    OSError,
    ArithmeticError,
)


class AnalyticsOrchestrator:
    """Runs the independent analyzers concurrently and builds the dashboard."""

    def __init__(
        self,
        store: RecordStore,
        settings: AnalyticsSettings | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or AnalyticsSettings()
        self.muscle_balance = MuscleBalanceAnalyzer(store, self.settings)
        self.progression = ProgressionAnalyzer(store, self.settings)
        self.strength_ratios = StrengthRatioAnalyzer(store, self.settings)
        self.volume = VolumeDistributionAnalyzer(store, self.settings)
        self.frequency = FrequencyAnalyzer(store, self.settings)
        self.records = PersonalRecordsTracker(store, self.settings)
        self.scorer = CompositeScoreCalculator(self.settings)

    async def _isolated(self, name: str, call: Awaitable, fallback):
        # Outer bound covers the store reads plus computation of one analyzer.
        timeout = self.settings.fetch_timeout_seconds * 2
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except _ISOLATED_ERRORS as exc:
            logger.warning(
                "analyzer_failed",
                analyzer=name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return fallback

    async def get_comprehensive_analytics(
        self,
        timeframe_days: int = 30,
        now: Optional[datetime.datetime] = None,
    ) -> Dict[str, object]:
        """Return the full analytics dashboard for the trailing window."""
        if timeframe_days < 0:
            raise ValueError("timeframe_days must be non-negative")
        now = BaseAnalyzer._now(now)
        log = logger.bind(timeframe_days=timeframe_days)
        log.info("comprehensive_analytics_started")

        muscle_balance, volume, ratios, records, frequency = await asyncio.gather(
            self._isolated(
                "muscle_balance",
                self.muscle_balance.analyze(timeframe_days, now),
                self.muscle_balance.empty_result(timeframe=timeframe_days),
            ),
            self._isolated(
                "volume_distribution",
                self.volume.analyze(timeframe_days, now),
                self.volume.empty_result(timeframe=timeframe_days),
            ),
            self._isolated(
                "strength_ratios",
                self.strength_ratios.analyze(),
                self.strength_ratios.empty_result(),
            ),
            self._isolated(
                "personal_records",
                self.records.analyze(self.settings.dashboard_records_limit, now),
                self.records.empty_result(),
            ),
            self._isolated(
                "frequency_analysis",
                self.frequency.analyze(timeframe_days, now),
                self.frequency.empty_result(timeframe=timeframe_days),
            ),
        )

        overall = self.scorer.calculate(muscle_balance, ratios, frequency)
        log.info(
            "comprehensive_analytics_finished",
            percentage=overall["percentage"],
            rating=overall["rating"],
        )
        return {
            "overall_score": overall,
            "muscle_balance": muscle_balance,
            "volume_distribution": volume,
            "strength_ratios": ratios,
            "personal_records": records,
            "frequency_analysis": frequency,
            "last_updated": now.isoformat(),
        }
