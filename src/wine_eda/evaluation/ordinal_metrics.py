"""
Error metrics for integer quality scores.

Plain accuracy treats predicting 5 for a 6 the same as predicting 3 for a 9.
These scores use the distance on the quality scale, or the poor / average /
good band a score falls in. All take (y_true, y_pred) so they plug into
sklearn.metrics.make_scorer.
"""
import numpy as np

from ..features.derivations import QUALITY_EDGES


def quality_distance(y_true, y_pred) -> np.ndarray:
    """Absolute distance in quality points, per wine."""
    return np.abs(np.asarray(y_true, dtype=int) - np.asarray(y_pred, dtype=int))


def ordinal_mae(y_true, y_pred) -> float:
    return float(quality_distance(y_true, y_pred).mean())


def severe_error_rate(y_true, y_pred, distance: int = 2) -> float:
    # share of wines scored at least `distance` points off
    return float((quality_distance(y_true, y_pred) >= distance).mean())


def within_one_accuracy(y_true, y_pred) -> float:
    return float((quality_distance(y_true, y_pred) <= 1).mean())


def quality_band(scores) -> np.ndarray:
    """Index of the poor / average / good band of each score ([lower, upper) edges)."""
    inner = np.asarray(QUALITY_EDGES[1:-1], dtype=float)
    return np.digitize(np.asarray(scores, dtype=float), inner, right=False)


def band_accuracy(y_true, y_pred) -> float:
    """Share of wines whose predicted score lands in the true quality band."""
    return float((quality_band(y_true) == quality_band(y_pred)).mean())
