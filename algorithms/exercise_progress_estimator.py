from .math_tools import MathTools


class ExerciseProgressEstimator:
    """Utility for forecasting 1RM progression from recent best sets."""

    @classmethod
    def predict_progress(
        cls,
        one_rep_maxes: list[float],
        volumes: list[float],
        *,
        window: int = 5,
        min_points: int = 3,
        month_sessions: int = 4,
        quarter_sessions: int = 12,
    ) -> dict:
        """Project the current 1RM forward using the recent per-session slope.

        The slope is fitted over the last ``window`` sessions. Confidence is
        the consistency score of the volumes in that same window.
        """
        if len(one_rep_maxes) < min_points or len(one_rep_maxes) != len(volumes):
            return {}

        recent_rms = one_rep_maxes[-window:]
        recent_vols = volumes[-window:]
        slope = MathTools.index_slope(recent_rms)
        current = one_rep_maxes[-1]

        return {
            "next_month": int(MathTools.round_half_up(current + slope * month_sessions)),
            "next_quarter": int(
                MathTools.round_half_up(current + slope * quarter_sessions)
            ),
            "confidence": round(
                MathTools.consistency_score(recent_vols, min_points), 1
            ),
        }
