"""
Variable Importance Module

Raw importance per feature (impurity decrease for the forest, |t| for the
linear model), scaled to 0-100 so the two models can be compared.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..exceptions import DegenerateInputError

logger = logging.getLogger(__name__)


def scale_importance(raw: pd.Series) -> pd.Series:
    """Min-max scale to 0-100 (most important = 100, least = 0)."""
    raw = raw.astype(float)
    lo, hi = raw.min(), raw.max()
    if hi == lo:
        return pd.Series(100.0, index=raw.index)
    return 100.0 * (raw - lo) / (hi - lo)


def rank_importance(raw: pd.Series) -> pd.DataFrame:
    """Ranking table: feature, raw, importance (0-100), rank (1 = top)."""
    table = pd.DataFrame({
        "feature": raw.index.astype(str),
        "raw": raw.to_numpy(dtype=float),
        "importance": scale_importance(raw).to_numpy(),
    })
    table = table.sort_values("importance", ascending=False, kind="mergesort").reset_index(drop=True)
    table["rank"] = np.arange(1, len(table) + 1)
    return table


def forest_importance(model: Any, feature_names: Sequence[str]) -> pd.DataFrame:
    """Impurity-based importance of a fitted tree ensemble."""
    if not hasattr(model, "feature_importances_"):
        raise TypeError(f"{model.__class__.__name__} does not expose feature_importances_")
    return rank_importance(pd.Series(model.feature_importances_, index=list(feature_names)))


def linear_t_statistics(X: np.ndarray, y: np.ndarray, coef: np.ndarray, intercept: float) -> np.ndarray:
    """
    t statistic of each OLS coefficient (intercept excluded).

    X must be the design the coefficients were fitted on (here: standardized).
    """
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float)
    n, p = X.shape
    dof = n - p - 1
    if dof <= 0:
        raise DegenerateInputError([], f"Need more than {p + 1} rows to estimate {p} coefficients, got {n}")

    residuals = y - (X @ coef + intercept)
    sigma2 = float(residuals @ residuals) / dof

    design = np.column_stack([np.ones(n), X])
    cov = sigma2 * np.linalg.pinv(design.T @ design)
    se = np.sqrt(np.clip(np.diag(cov)[1:], 0.0, None))
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(se > 0, coef / se, 0.0)
    return t


def linear_importance(X_scaled: np.ndarray,
                      y: np.ndarray,
                      coef: np.ndarray,
                      intercept: float,
                      feature_names: Sequence[str]) -> Tuple[pd.DataFrame, np.ndarray]:
    """|t| importance of a linear model; also returns the signed t statistics."""
    t = linear_t_statistics(X_scaled, y, coef, intercept)
    return rank_importance(pd.Series(np.abs(t), index=list(feature_names))), t


def compare_importance(tables: Sequence[Tuple[str, pd.DataFrame]]) -> pd.DataFrame:
    """
    Side-by-side importance of several models.

    Args:
        tables: (model_name, ranking table) pairs

    Returns:
        One row per feature with <model>_importance and <model>_rank columns,
        sorted by mean importance across models.
    """
    merged: pd.DataFrame | None = None
    importance_cols: List[str] = []
    for name, table in tables:
        part = table[["feature", "importance", "rank"]].rename(
            columns={"importance": f"{name}_importance", "rank": f"{name}_rank"}
        )
        importance_cols.append(f"{name}_importance")
        merged = part if merged is None else merged.merge(part, on="feature", how="outer")

    if merged is None:
        return pd.DataFrame()

    merged["mean_importance"] = merged[importance_cols].mean(axis=1)
    return merged.sort_values("mean_importance", ascending=False, kind="mergesort").reset_index(drop=True)
