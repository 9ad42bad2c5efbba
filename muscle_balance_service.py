from __future__ import annotations
import datetime
from typing import Dict, List, Optional

from algorithms.math_tools import MathTools
from base_service import BaseAnalyzer
from errors import DataUnavailable
from models import SetFilters, SetRecord


class MuscleBalanceAnalyzer(BaseAnalyzer):
    """Working-set volume share per muscle group and imbalance detection."""

    START_TRACKING = "Start tracking workouts to get muscle group analysis"
    EMPTY_RESULT = {
        "balance": [],
        "total_volume": 0,
        "recommendations": [START_TRACKING],
        "imbalances": [],
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
        stats: Dict[str, Dict[str, object]] = {}
        for s in sets:
            if not s.is_working_set:
                continue
            group = self.settings.canonical_muscle_group(s.muscle_group)
            item = stats.setdefault(
                group, {"volume": 0.0, "sets": 0, "sessions": set()}
            )
            item["volume"] += s.volume
            item["sets"] += 1
            item["sessions"].add(s.session_id)

        total_volume = sum(item["volume"] for item in stats.values())
        if total_volume <= 0:
            return self.empty_result(timeframe=timeframe_days)

        balance = []
        for group, data in stats.items():
            balance.append(
                {
                    "muscle_group": group,
                    "volume": round(data["volume"], 2),
                    "sets": data["sets"],
                    "sessions": len(data["sessions"]),
                    "percentage": round(MathTools.share(data["volume"], total_volume), 2),
                    "avg_set_volume": int(
                        MathTools.round_half_up(data["volume"] / data["sets"])
                    ),
                }
            )
        balance.sort(key=lambda x: (-x["volume"], x["muscle_group"]))

        imbalances = self.identify_imbalances(balance)
        return {
            "balance": balance,
            "total_volume": int(MathTools.round_half_up(total_volume)),
            "recommendations": self.recommendations(balance, imbalances),
            "imbalances": imbalances,
            "timeframe": timeframe_days,
        }

    def identify_imbalances(self, balance: List[Dict[str, object]]) -> List[Dict[str, object]]:
        if not balance:
            return []
        limits = self.settings.imbalance
        avg_share = 100.0 / len(balance)
        imbalances = []
        for group in balance:
            share = float(group["percentage"])
            deviation = abs(share - avg_share)
            if deviation > limits.deviation:
                imbalances.append(
                    {
                        "muscle_group": group["muscle_group"],
                        "type": "overworked" if share > avg_share else "underworked",
                        "severity": "high" if deviation > limits.high_severity else "moderate",
                        "percentage": share,
                        "deviation": round(deviation, 1),
                    }
                )
        return imbalances

    def recommendations(
        self,
        balance: List[Dict[str, object]],
        imbalances: List[Dict[str, object]],
    ) -> List[str]:
        if not imbalances:
            return ["Great! Your muscle groups are well balanced."]

        result: List[str] = []
        underworked = [im["muscle_group"] for im in imbalances if im["type"] == "underworked"]
        overworked = [im["muscle_group"] for im in imbalances if im["type"] == "overworked"]
        if underworked:
            result.append(f"Focus more on: {', '.join(underworked)}")
        if overworked:
            result.append(f"Consider reducing volume for: {', '.join(overworked)}")

        limits = self.settings.imbalance
        shares = {g["muscle_group"]: float(g["percentage"]) for g in balance}
        push = shares.get(limits.push_category)
        pull = shares.get(limits.pull_category)
        if push is not None and pull:
            ratio = push / pull
            if ratio > limits.push_pull_high:
                result.append(
                    f"Add more {limits.pull_category.lower()} exercises to balance your push/pull ratio"
                )
            elif ratio < limits.push_pull_low:
                result.append(
                    f"Add more {limits.push_category.lower()} exercises to balance your push/pull ratio"
                )
        return result
