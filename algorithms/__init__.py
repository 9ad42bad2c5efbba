from .math_tools import MathTools
from .exercise_progress_estimator import ExerciseProgressEstimator

__all__ = ["MathTools", "ExerciseProgressEstimator"]
