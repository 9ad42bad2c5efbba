import requests
from typing import Optional

class AnalyticsClient:
    """Simple REST client for the workout analytics API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str, **params):
        resp = requests.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def _post(self, path: str, **params):
        resp = requests.post(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def create_session(self, date: Optional[str] = None, **params) -> int:
        if date is not None:
            params["date"] = date
        return self._post("/sessions", **params)["id"]

    def complete_session(self, session_id: int, duration_seconds: int = 0) -> None:
        self._post(f"/sessions/{session_id}/complete", duration_seconds=duration_seconds)

    def add_exercise(self, name: str, muscle_group: str = "Uncategorized") -> int:
        return self._post("/exercises", name=name, muscle_group=muscle_group)["id"]

    def add_set(
        self,
        session_id: int,
        exercise_id: int,
        weight: float,
        reps: int,
        is_warmup: bool = False,
    ) -> int:
        return self._post(
            f"/sessions/{session_id}/sets",
            exercise_id=exercise_id,
            weight=weight,
            reps=reps,
            is_warmup=is_warmup,
        )["id"]

    def dashboard(self, timeframe: int = 30) -> dict:
        return self._get("/analytics", timeframe=timeframe)

    def progression(self, exercise_id: int, timeframe: int = 90) -> dict:
        return self._get(f"/analytics/progression/{exercise_id}", timeframe=timeframe)

    def score(self, timeframe: int = 30) -> dict:
        return self._get("/analytics/score", timeframe=timeframe)
