"""
Column schema for the wine quality table.

`Col` holds every canonical column name as an attribute so callers never
spell column strings by hand; `require_columns` checks a selection up front.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List

import pandas as pd

from ..exceptions import ColumnNotFoundError


class Col:
    ID = "id"

    FIXED_ACIDITY = "fixed_acidity"
    VOLATILE_ACIDITY = "volatile_acidity"
    CITRIC_ACID = "citric_acid"
    RESIDUAL_SUGAR = "residual_sugar"
    CHLORIDES = "chlorides"
    FREE_SULFUR_DIOXIDE = "free_sulfur_dioxide"
    TOTAL_SULFUR_DIOXIDE = "total_sulfur_dioxide"
    DENSITY = "density"
    PH = "pH"
    SULPHATES = "sulphates"
    ALCOHOL = "alcohol"

    QUALITY = "quality"

    # derived
    SWEETNESS = "sweetness"
    ALCOHOL_CATEGORY = "alcohol_category"
    QUALITY_CATEGORY = "quality_category"
    DENSITY_BUCKET = "density_bucket"
    LOG_CHLORIDES = "log_chlorides"
    LOG_FREE_SULFUR_DIOXIDE = "log_free_sulfur_dioxide"


BASE_FEATURES: List[str] = [
    Col.FIXED_ACIDITY,
    Col.VOLATILE_ACIDITY,
    Col.CITRIC_ACID,
    Col.RESIDUAL_SUGAR,
    Col.CHLORIDES,
    Col.FREE_SULFUR_DIOXIDE,
    Col.TOTAL_SULFUR_DIOXIDE,
    Col.DENSITY,
    Col.PH,
    Col.SULPHATES,
    Col.ALCOHOL,
]

SCHEMA_COLUMNS: List[str] = [Col.ID] + BASE_FEATURES + [Col.QUALITY]

CATEGORICAL_DERIVED: List[str] = [
    Col.SWEETNESS,
    Col.ALCOHOL_CATEGORY,
    Col.QUALITY_CATEGORY,
    Col.DENSITY_BUCKET,
]

LOG_DERIVED: List[str] = [Col.LOG_CHLORIDES, Col.LOG_FREE_SULFUR_DIOXIDE]

# Names an id column shows up under (R write.csv leaves it unnamed).
_ID_ALIASES = {"", "x", "id", "unnamed_0", "index"}


def canonical_name(raw: str) -> str:
    """Map 'fixed.acidity', 'fixed acidity', 'Fixed_Acidity' to 'fixed_acidity'."""
    name = re.sub(r"[^0-9a-zA-Z]+", "_", str(raw).strip().strip('"')).strip("_").lower()
    if name in _ID_ALIASES:
        return Col.ID
    if name == "ph":
        return Col.PH
    return name


def canonical_columns(columns: Iterable[str]) -> Dict[str, str]:
    return {c: canonical_name(c) for c in columns}


def require_columns(df: pd.DataFrame, *columns: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ColumnNotFoundError(missing, df.columns)
