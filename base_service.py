from __future__ import annotations
import asyncio
import copy
import datetime
from typing import List, Optional, Protocol, runtime_checkable

import structlog

from errors import DataUnavailable
from models import SessionFilters, SessionRecord, SetFilters, SetRecord
from settings_schema import AnalyticsSettings


@runtime_checkable
class RecordStore(Protocol):
    """Read-only source of workout records consumed by the analyzers."""

    async def list_sets(self, filters: SetFilters = ...) -> List[SetRecord]:
        ...

    async def list_sessions(self, filters: SessionFilters = ...) -> List[SessionRecord]:
        ...


class BaseAnalyzer:
    """Shared plumbing for analyzers: settings, clock and guarded store reads."""

    EMPTY_RESULT: dict = {}

    def __init__(
        self,
        store: RecordStore,
        settings: AnalyticsSettings | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or AnalyticsSettings()
        self.logger = structlog.get_logger(self.__class__.__module__).bind(
            analyzer=self.__class__.__name__
        )

    @classmethod
    def empty_result(cls, **overrides) -> dict:
        """Return a fresh copy of the documented empty result."""
        result = copy.deepcopy(cls.EMPTY_RESULT)
        result.update(overrides)
        return result

    @staticmethod
    def _now(now: Optional[datetime.datetime] = None) -> datetime.datetime:
        if now is None:
            return datetime.datetime.now()
        if now.tzinfo is not None:
            now = now.astimezone(datetime.timezone.utc).replace(tzinfo=None)
        return now

    @staticmethod
    def _validate_timeframe(timeframe_days: int) -> None:
        if timeframe_days < 0:
            raise ValueError("timeframe_days must be non-negative")

    def _window_start(
        self, timeframe_days: int, now: Optional[datetime.datetime] = None
    ) -> datetime.datetime:
        self._validate_timeframe(timeframe_days)
        return self._now(now) - datetime.timedelta(days=timeframe_days)

    async def _guarded(self, source: str, call):
        try:
            records = await asyncio.wait_for(call, timeout=self.settings.fetch_timeout_seconds)
        except asyncio.TimeoutError as exc:
            self.logger.warning("record_store_fetch_timeout", source=source)
            raise DataUnavailable(source, "timed out") from exc
        except asyncio.CancelledError as exc:
            # Only a fetch cancelled underneath us is a data failure.
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            self.logger.warning("record_store_fetch_cancelled", source=source)
            raise DataUnavailable(source, "cancelled") from exc
        except Exception as exc:
            self.logger.warning(
                "record_store_fetch_failed",
                source=source,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise DataUnavailable(source, str(exc)) from exc
        if records is None:
            raise DataUnavailable(source, "no records returned")
        return list(records)

    async def _fetch_sets(self, filters: SetFilters) -> List[SetRecord]:
        return await self._guarded("sets", self.store.list_sets(filters))

    async def _fetch_sessions(self, filters: SessionFilters) -> List[SessionRecord]:
        return await self._guarded("sessions", self.store.list_sessions(filters))
