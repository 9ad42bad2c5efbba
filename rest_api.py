import datetime
from typing import Optional

import structlog
from fastapi import APIRouter, FastAPI, HTTPException

from analytics_service import AnalyticsOrchestrator
from config import APP_VERSION, YamlConfig
from db import AsyncRecordStore, ExerciseRepository, SessionRepository, SetRepository

logger = structlog.get_logger(__name__)


class AnalyticsAPI:
    """Provides REST endpoints for workout logging and analytics."""

    def __init__(
        self,
        db_path: str = "workout.db",
        yaml_path: Optional[str] = None,
    ) -> None:
        self.db_path = db_path
        self.config = YamlConfig(yaml_path)
        self.settings = self.config.analytics_settings()
        self.sessions = SessionRepository(db_path)
        self.exercises = ExerciseRepository(db_path)
        self.sets = SetRepository(db_path)
        self.store = AsyncRecordStore(db_path)
        self.analytics = AnalyticsOrchestrator(self.store, self.settings)
        self.app = FastAPI(title="Workout Analytics", version=APP_VERSION)
        self._setup_routes()

    def _setup_routes(self) -> None:
        analytics_router = APIRouter(prefix="/analytics", tags=["Analytics"])

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            """Return API and database connection status."""
            try:
                self.sessions.fetch_all_sessions()
                return {"status": "ok", "version": APP_VERSION}
            except Exception as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.get("/settings")
        def get_settings():
            return self.settings.model_dump(mode="json")

        @self.app.post("/sessions")
        def create_session(
            date: Optional[str] = None,
            user_id: Optional[int] = None,
            name: Optional[str] = None,
        ):
            try:
                day = date or datetime.datetime.now().isoformat(timespec="seconds")
                sid = self.sessions.create(day, user_id=user_id, name=name)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            logger.info("session_created", session_id=sid)
            return {"id": sid}

        @self.app.post("/sessions/{session_id}/complete")
        def complete_session(session_id: int, duration_seconds: int = 0):
            try:
                self.sessions.complete(session_id, duration_seconds)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"status": "completed"}

        @self.app.get("/sessions")
        def list_sessions():
            return [
                {"id": sid, "date": date, "duration": duration, "is_completed": bool(done)}
                for sid, date, duration, done in self.sessions.fetch_all_sessions()
            ]

        @self.app.delete("/sessions/{session_id}")
        def delete_session(session_id: int):
            self.sessions.delete(session_id)
            return {"status": "deleted"}

        @self.app.post("/exercises")
        def add_exercise(name: str, muscle_group: str = "Uncategorized"):
            try:
                eid = self.exercises.ensure(name, muscle_group)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": eid}

        @self.app.get("/exercises")
        def list_exercises():
            return [
                {"id": eid, "name": name, "muscle_group": group}
                for eid, name, group in self.exercises.fetch_all_exercises()
            ]

        @self.app.post("/sessions/{session_id}/sets")
        def add_set(
            session_id: int,
            exercise_id: int,
            weight: float,
            reps: int,
            is_warmup: bool = False,
            is_completed: bool = True,
        ):
            if self.exercises.fetch_detail(exercise_id) is None:
                raise HTTPException(status_code=404, detail="exercise not found")
            try:
                set_id = self.sets.add(
                    session_id,
                    exercise_id,
                    weight,
                    reps,
                    is_warmup=is_warmup,
                    is_completed=is_completed,
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": set_id}

        @analytics_router.get("")
        async def comprehensive(timeframe: int = 30):
            try:
                return await self.analytics.get_comprehensive_analytics(timeframe)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @analytics_router.get("/muscle_balance")
        async def muscle_balance(timeframe: int = 30):
            try:
                return await self.analytics.muscle_balance.analyze(timeframe)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @analytics_router.get("/progression/{exercise_id}")
        async def progression(exercise_id: int, timeframe: int = 90):
            try:
                return await self.analytics.progression.analyze(exercise_id, timeframe)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @analytics_router.get("/strength_ratios")
        async def strength_ratios(name: Optional[str] = None):
            if name is None:
                return await self.analytics.strength_ratios.analyze()
            try:
                result = await self.analytics.strength_ratios.analyze_ratio(name)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            if result is None:
                raise HTTPException(status_code=404, detail="insufficient data for ratio")
            return result

        @analytics_router.get("/volume_distribution")
        async def volume_distribution(timeframe: int = 30):
            try:
                return await self.analytics.volume.analyze(timeframe)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @analytics_router.get("/frequency")
        async def frequency(timeframe: int = 90):
            try:
                return await self.analytics.frequency.analyze(timeframe)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @analytics_router.get("/personal_records")
        async def personal_records(limit: Optional[int] = None):
            try:
                return await self.analytics.records.analyze(limit)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @analytics_router.get("/score")
        async def score(timeframe: int = 30):
            try:
                dashboard = await self.analytics.get_comprehensive_analytics(timeframe)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return dashboard["overall_score"]

        self.app.include_router(analytics_router)


api = AnalyticsAPI()
app = api.app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)
