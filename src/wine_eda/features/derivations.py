"""
Feature Derivation Module

Derived columns are pure functions of the base columns. Each derivation takes
a DataFrame and returns a new one with its column(s) assigned; the input is
never mutated. Re-running a derivation overwrites its own column, so the
whole chain is idempotent.

Bins are half-open [lower, upper): a value sitting exactly on an edge goes to
the higher bin. Outer edges are -inf / +inf so every finite value lands in
exactly one bin.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..data_management.schema import Col, require_columns
from ..exceptions import DataError

logger = logging.getLogger(__name__)

Derivation = Callable[[pd.DataFrame], pd.DataFrame]


# =====================================================
#  BIN EDGES (fixed, not data-dependent)
# =====================================================
SWEETNESS_EDGES: Tuple[float, ...] = (-np.inf, 4.0, 12.0, 45.0, np.inf)
SWEETNESS_LABELS: Tuple[str, ...] = ("dry", "medium-dry", "medium", "sweet")

ALCOHOL_EDGES: Tuple[float, ...] = (-np.inf, 12.5, 13.5, 14.5, np.inf)
ALCOHOL_LABELS: Tuple[str, ...] = ("very-low", "moderately-low", "high", "very-high")

QUALITY_EDGES: Tuple[float, ...] = (-np.inf, 5.5, 7.5, np.inf)
QUALITY_LABELS: Tuple[str, ...] = ("poor", "average", "good")

DENSITY_START = 0.985
DENSITY_STOP = 1.040
DENSITY_WIDTH = 0.005


def _density_bins() -> Tuple[Tuple[float, ...], Tuple[str, ...]]:
    n = int(round((DENSITY_STOP - DENSITY_START) / DENSITY_WIDTH))
    inner = [round(DENSITY_START + i * DENSITY_WIDTH, 3) for i in range(n + 1)]
    edges = [-np.inf] + inner + [np.inf]
    labels = [f"<{inner[0]:.3f}"]
    labels += [f"[{lo:.3f}, {hi:.3f})" for lo, hi in zip(inner[:-1], inner[1:])]
    labels.append(f">={inner[-1]:.3f}")
    return tuple(edges), tuple(labels)


DENSITY_EDGES, DENSITY_LABELS = _density_bins()


# =====================================================
#  HELPERS
# =====================================================
def _numeric_source(df: pd.DataFrame, column: str) -> pd.Series:
    """Fetch a source column, rejecting non-numeric or missing values."""
    require_columns(df, column)
    series = df[column]
    if not pd.api.types.is_numeric_dtype(series):
        raise DataError(f"Column '{column}' is not numeric (dtype={series.dtype})")
    if series.isnull().any():
        raise DataError(f"Column '{column}' has {int(series.isnull().sum())} missing values")
    return series


def bin_column(series: pd.Series, edges: Sequence[float], labels: Sequence[str]) -> pd.Series:
    """Map each value to one ordered category using [lower, upper) bins."""
    if len(edges) != len(labels) + 1:
        raise ValueError(f"Expected {len(labels) + 1} edges for {len(labels)} labels, got {len(edges)}")
    return pd.cut(series, bins=list(edges), labels=list(labels), right=False, ordered=True)


# =====================================================
#  DERIVATIONS
# =====================================================
def add_sweetness(df: pd.DataFrame) -> pd.DataFrame:
    sugar = _numeric_source(df, Col.RESIDUAL_SUGAR)
    return df.assign(**{Col.SWEETNESS: bin_column(sugar, SWEETNESS_EDGES, SWEETNESS_LABELS)})


def add_alcohol_category(df: pd.DataFrame) -> pd.DataFrame:
    alcohol = _numeric_source(df, Col.ALCOHOL)
    return df.assign(**{Col.ALCOHOL_CATEGORY: bin_column(alcohol, ALCOHOL_EDGES, ALCOHOL_LABELS)})


def add_quality_category(df: pd.DataFrame) -> pd.DataFrame:
    quality = _numeric_source(df, Col.QUALITY)
    return df.assign(**{Col.QUALITY_CATEGORY: bin_column(quality, QUALITY_EDGES, QUALITY_LABELS)})


def add_density_bucket(df: pd.DataFrame) -> pd.DataFrame:
    density = _numeric_source(df, Col.DENSITY)
    return df.assign(**{Col.DENSITY_BUCKET: bin_column(density, DENSITY_EDGES, DENSITY_LABELS)})


def add_log_columns(df: pd.DataFrame, apply_transform: bool = True) -> pd.DataFrame:
    """
    Add log_chlorides and log_free_sulfur_dioxide as log(1 + x).

    log1p keeps a measured zero finite (log1p(0) == 0). Concentrations are
    never negative, so a negative source value is malformed input.

    With apply_transform=False the columns are plain copies of the source,
    which is what the original analysis produced.
    """
    out = {}
    for source, target in ((Col.CHLORIDES, Col.LOG_CHLORIDES),
                           (Col.FREE_SULFUR_DIOXIDE, Col.LOG_FREE_SULFUR_DIOXIDE)):
        values = _numeric_source(df, source).astype(float)
        if not apply_transform:
            out[target] = values
            continue
        if (values < 0).any():
            raise DataError(f"Cannot log-transform '{source}': {int((values < 0).sum())} negative values")
        out[target] = np.log1p(values)
    return df.assign(**out)


def build_derivations(apply_log_transform: bool = True) -> Tuple[Derivation, ...]:
    """Ordered derivation chain."""
    if not apply_log_transform:
        logger.warning("Log transform disabled: log_* columns are untransformed copies")
    return (
        add_sweetness,
        add_alcohol_category,
        add_quality_category,
        add_density_bucket,
        partial(add_log_columns, apply_transform=apply_log_transform),
    )


DERIVATIONS: Tuple[Derivation, ...] = (
    add_sweetness,
    add_alcohol_category,
    add_quality_category,
    add_density_bucket,
    add_log_columns,
)


def derive_features(df: pd.DataFrame, derivations: Sequence[Derivation] = DERIVATIONS) -> pd.DataFrame:
    """Apply each derivation in order, returning a new augmented table."""
    out = df.copy()
    for derive in derivations:
        out = derive(out)

    added: List[str] = [c for c in out.columns if c not in df.columns]
    logger.info(f"Derived {len(added)} new columns: {added}")
    return out
