"""
Summarizer Module

Descriptive statistics, correlation matrices and category frequencies.
Outputs are read-only summaries; nothing is written back to the table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from ..data_management.schema import (
    BASE_FEATURES,
    CATEGORICAL_DERIVED,
    LOG_DERIVED,
    Col,
    require_columns,
)
from ..exceptions import DataError, DegenerateInputError

logger = logging.getLogger(__name__)

SUMMARY_STATS = ["min", "q25", "median", "mean", "q75", "max", "std"]


def default_numeric_columns(df: pd.DataFrame) -> List[str]:
    """Base features, quality and any log columns present (no id)."""
    cols = BASE_FEATURES + [Col.QUALITY] + [c for c in LOG_DERIVED if c in df.columns]
    return [c for c in cols if c in df.columns]


def _numeric_frame(df: pd.DataFrame, columns: Optional[Sequence[str]]) -> pd.DataFrame:
    columns = list(columns) if columns is not None else default_numeric_columns(df)
    require_columns(df, *columns)
    sub = df[columns]
    non_numeric = [c for c in columns if not pd.api.types.is_numeric_dtype(sub[c])]
    if non_numeric:
        raise DataError(f"Non-numeric columns cannot be summarized: {non_numeric}")
    return sub


def _check_variance(sub: pd.DataFrame) -> None:
    constant = [c for c in sub.columns if sub[c].nunique(dropna=True) <= 1]
    if constant:
        raise DegenerateInputError(constant, f"Correlation undefined for zero-variance column(s): {constant}")


# =====================================================
#  1. DESCRIPTIVE STATISTICS
# =====================================================
def describe_numeric(df: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Per-column min, quartiles, mean, max and std (one row per column)."""
    sub = _numeric_frame(df, columns)
    q = sub.quantile([0.25, 0.5, 0.75])
    table = pd.DataFrame({
        "min": sub.min(),
        "q25": q.loc[0.25],
        "median": q.loc[0.5],
        "mean": sub.mean(),
        "q75": q.loc[0.75],
        "max": sub.max(),
        "std": sub.std(),
    })
    return table[SUMMARY_STATS]


def quality_distribution(df: pd.DataFrame) -> pd.DataFrame:
    require_columns(df, Col.QUALITY)
    counts = df[Col.QUALITY].value_counts().sort_index()
    return pd.DataFrame({"count": counts, "percent": 100.0 * counts / counts.sum()})


def quality_mode(df: pd.DataFrame) -> int:
    require_columns(df, Col.QUALITY)
    return int(df[Col.QUALITY].mode().iloc[0])


def category_counts(df: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> Dict[str, pd.DataFrame]:
    """Frequency counts per categorical column, in category order, empty bins included."""
    if columns is None:
        columns = [c for c in CATEGORICAL_DERIVED if c in df.columns]
    require_columns(df, *columns)

    out: Dict[str, pd.DataFrame] = {}
    for col in columns:
        counts = df[col].value_counts(sort=False)
        total = counts.sum()
        out[col] = pd.DataFrame({
            "count": counts,
            "percent": 100.0 * counts / total if total else 0.0,
        })
    return out


# =====================================================
#  2. CORRELATION
# =====================================================
def correlation_matrix(df: pd.DataFrame,
                       columns: Optional[Sequence[str]] = None,
                       method: str = "pearson") -> pd.DataFrame:
    """
    Pairwise correlation matrix.

    Raises:
        DegenerateInputError: a selected column has zero variance.
    """
    sub = _numeric_frame(df, columns)
    _check_variance(sub)

    corr = sub.corr(method=method).to_numpy(copy=True)
    corr = (corr + corr.T) / 2.0
    np.fill_diagonal(corr, 1.0)
    return pd.DataFrame(corr, index=sub.columns, columns=sub.columns)


def correlations_with_target(df: pd.DataFrame,
                             target: str = Col.QUALITY,
                             columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Pearson r and two-sided p-value of every feature against the target, sorted by |r|."""
    if columns is None:
        columns = [c for c in default_numeric_columns(df) if c != target]
    sub = _numeric_frame(df, list(columns) + [target])
    _check_variance(sub)

    rows = []
    for col in columns:
        r, p = stats.pearsonr(sub[col], sub[target])
        rows.append({"feature": col, "r": float(r), "abs_r": abs(float(r)), "p_value": float(p)})

    return (pd.DataFrame(rows)
            .sort_values("abs_r", ascending=False, kind="mergesort")
            .reset_index(drop=True))


def log_transform_gain(df: pd.DataFrame, target: str = Col.QUALITY) -> pd.DataFrame:
    """Percent change in |r| with the target from each raw column to its log column."""
    pairs = [(Col.CHLORIDES, Col.LOG_CHLORIDES), (Col.FREE_SULFUR_DIOXIDE, Col.LOG_FREE_SULFUR_DIOXIDE)]
    require_columns(df, target, *[c for pair in pairs for c in pair])
    corr = correlations_with_target(df, target, [c for pair in pairs for c in pair]).set_index("feature")

    rows = []
    for raw, logged in pairs:
        raw_r = corr.loc[raw, "abs_r"]
        log_r = corr.loc[logged, "abs_r"]
        rows.append({
            "feature": raw,
            "abs_r_raw": raw_r,
            "abs_r_log": log_r,
            "pct_change": 100.0 * (log_r - raw_r) / raw_r if raw_r > 0 else np.nan,
        })
    return pd.DataFrame(rows)


# =====================================================
#  3. BUNDLE
# =====================================================
@dataclass
class SummaryReport:
    n_rows: int
    n_columns: int
    numeric_summary: pd.DataFrame
    quality_counts: pd.DataFrame
    quality_mode: int
    category_counts: Dict[str, pd.DataFrame]
    correlation: Optional[pd.DataFrame] = None
    target_correlations: Optional[pd.DataFrame] = None
    log_gain: Optional[pd.DataFrame] = None
    skipped: List[str] = field(default_factory=list)


def summarize(df: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> SummaryReport:
    """
    Compute every summary section.

    Zero-variance input only skips the correlation sections; the skip is
    logged and recorded in SummaryReport.skipped.
    """
    logger.info("Computing summary statistics...")
    report = SummaryReport(
        n_rows=int(df.shape[0]),
        n_columns=int(df.shape[1]),
        numeric_summary=describe_numeric(df, columns),
        quality_counts=quality_distribution(df),
        quality_mode=quality_mode(df),
        category_counts=category_counts(df),
    )

    try:
        report.correlation = correlation_matrix(df, columns)
        report.target_correlations = correlations_with_target(df)
    except DegenerateInputError as e:
        logger.warning(f"Skipping correlation section: {e}")
        report.skipped.append(f"Correlation analysis skipped: {e}")

    if all(c in df.columns for c in LOG_DERIVED):
        try:
            report.log_gain = log_transform_gain(df)
        except DegenerateInputError as e:
            logger.warning(f"Skipping log-transform comparison: {e}")
            report.skipped.append(f"Log-transform comparison skipped: {e}")

    logger.info(f"Summary completed for {report.n_rows} rows")
    return report
