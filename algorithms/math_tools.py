import math
import datetime
from typing import Iterable, List, Sequence
import numpy as np

from errors import ComputationDegenerate


class MathTools:
    """Provides essential mathematical utilities for workout analytics."""

    EPLEY_DIVISOR: float = 30.0

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @staticmethod
    def round_half_up(value: float, ndigits: int = 0) -> float:
        """Round halves away from zero instead of to the nearest even digit."""
        factor = 10**ndigits
        scaled = abs(value) * factor
        rounded = math.floor(scaled + 0.5) / factor
        return math.copysign(rounded, value) if value else 0.0

    @classmethod
    def epley_1rm_raw(cls, weight: float, reps: int) -> float:
        """Return the unrounded one-rep max estimate ``weight * (1 + reps/30)``."""
        if reps < 0:
            raise ValueError("reps must be non-negative")
        if weight < 0:
            raise ValueError("weight must be non-negative")
        return weight * (1 + reps / cls.EPLEY_DIVISOR)

    @classmethod
    def epley_1rm(cls, weight: float, reps: int) -> int:
        """Return the estimated one-rep max using the Epley formula."""
        return int(cls.round_half_up(cls.epley_1rm_raw(weight, reps)))

    @staticmethod
    def share(value: float, total: float) -> float:
        """Return ``value`` as a percentage of ``total``."""
        if total <= 0:
            raise ComputationDegenerate("total must be positive to compute a share")
        return value / total * 100.0

    @staticmethod
    def mean(values: Iterable[float]) -> float:
        data = list(values)
        if not data:
            return 0.0
        return float(np.mean(np.array(data, dtype=float)))

    @staticmethod
    def coefficient_of_variation(values: Iterable[float]) -> float:
        """Return the population coefficient of variation for ``values``."""
        data = list(values)
        if len(data) < 2:
            return 0.0
        arr = np.array(data, dtype=float)
        mean = float(np.mean(arr))
        if mean == 0:
            return 0.0
        std = float(np.std(arr))
        return std / mean

    @classmethod
    def consistency_score(cls, values: Iterable[float], min_points: int = 3) -> float:
        """Return ``100 * (1 - CV)`` clamped to [0, 100].

        Series shorter than ``min_points`` or with a zero mean score 0.
        """
        data = list(values)
        if len(data) < max(min_points, 1):
            return 0.0
        if cls.mean(data) == 0:
            return 0.0
        cv = cls.coefficient_of_variation(data)
        return cls.clamp(100.0 * (1.0 - cv), 0.0, 100.0)

    @staticmethod
    def linear_regression_slope(x: Sequence[float], y: Sequence[float]) -> float:
        """Ordinary least-squares slope of ``y`` against ``x``."""
        if len(x) < 2 or len(x) != len(y):
            return 0.0
        x_arr = np.array(x, dtype=float)
        y_arr = np.array(y, dtype=float)
        x_mean = np.mean(x_arr)
        y_mean = np.mean(y_arr)
        num = np.sum((x_arr - x_mean) * (y_arr - y_mean))
        den = np.sum((x_arr - x_mean) ** 2)
        return float(num / den) if den != 0 else 0.0

    @classmethod
    def index_slope(cls, values: Sequence[float]) -> float:
        """Slope of ``values`` against their position in the series."""
        return cls.linear_regression_slope(list(range(len(values))), list(values))

    @staticmethod
    def percent_change(values: Sequence[float]) -> float:
        """Return ``(last - first) / first * 100``; 0 when undefined."""
        if len(values) < 2:
            return 0.0
        first = values[0]
        if not first:
            return 0.0
        return (values[-1] - first) / first * 100.0

    @staticmethod
    def week_start(day: datetime.date) -> datetime.date:
        """Return the Monday of the ISO week containing ``day``."""
        if isinstance(day, datetime.datetime):
            day = day.date()
        return day - datetime.timedelta(days=day.weekday())

    @staticmethod
    def day_gaps(days: Sequence[datetime.date]) -> List[int]:
        """Return the day differences between consecutive ``days``."""
        return [(b - a).days for a, b in zip(days[:-1], days[1:])]
