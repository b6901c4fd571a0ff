"""
Data Loader Module
Reads the wine quality CSV, canonicalises column names and validates the schema.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Tuple

import numpy as np
import pandas as pd

from ..exceptions import DataError
from .schema import BASE_FEATURES, SCHEMA_COLUMNS, Col, canonical_columns

logger = logging.getLogger(__name__)


def _read_delimited(path: Path) -> pd.DataFrame:
    """Read comma- or semicolon-delimited text (UCI files use ';')."""
    try:
        df = pd.read_csv(path)
        if df.shape[1] == 1 and ";" in str(df.columns[0]):
            df = pd.read_csv(path, sep=";")
    except pd.errors.EmptyDataError as e:
        raise DataError(f"Input file is empty: {path}") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise DataError(f"Could not parse {path}: {e}") from e
    return df


def validate_data_schema(df: pd.DataFrame) -> Tuple[bool, Dict[str, Any]]:
    """Check columns, dtypes and completeness. Returns (is_valid, info)."""
    info: Dict[str, Any] = {
        "n_rows": int(df.shape[0]),
        "n_columns": int(df.shape[1]),
        "missing_columns": [c for c in SCHEMA_COLUMNS if c not in df.columns],
        "unexpected_columns": [c for c in df.columns if c not in SCHEMA_COLUMNS],
        "non_numeric_columns": [],
        "columns_with_missing": [],
        "non_integer_quality": False,
    }

    for col in SCHEMA_COLUMNS:
        if col not in df.columns:
            continue
        if not pd.api.types.is_numeric_dtype(df[col]):
            info["non_numeric_columns"].append(col)
        elif df[col].isnull().any():
            info["columns_with_missing"].append(col)

    if Col.QUALITY in df.columns and Col.QUALITY not in info["non_numeric_columns"]:
        q = df[Col.QUALITY].dropna()
        info["non_integer_quality"] = bool((q != np.round(q)).any())

    is_valid = (
        info["n_rows"] > 0
        and not info["missing_columns"]
        and not info["non_numeric_columns"]
        and not info["columns_with_missing"]
        and not info["non_integer_quality"]
    )
    return is_valid, info


def load_wine_data(path: str | Path) -> pd.DataFrame:
    """
    Load the wine quality table.

    Accepts the 13-column layout (row id + 11 features + quality) or the
    12-column UCI layout, in which case a sequential id is generated.

    Raises:
        DataError: file missing, unreadable, or schema/values unexpected.
    """
    path = Path(path)
    if not path.is_file():
        raise DataError(f"Input file not found: {path}")

    logger.info(f"Loading wine data from {path}")
    df = _read_delimited(path)
    df = df.rename(columns=canonical_columns(df.columns))

    if Col.ID not in df.columns:
        df.insert(0, Col.ID, np.arange(1, len(df) + 1))
        logger.info("No id column in input; generated sequential ids")

    is_valid, info = validate_data_schema(df)
    if not is_valid:
        raise DataError(f"Unexpected schema or values in {path}: {info}")
    if info["unexpected_columns"]:
        logger.warning(f"Ignoring unexpected columns: {info['unexpected_columns']}")

    df = df[SCHEMA_COLUMNS].copy()
    df[Col.ID] = df[Col.ID].astype(int)
    df[Col.QUALITY] = df[Col.QUALITY].astype(int)
    df[BASE_FEATURES] = df[BASE_FEATURES].astype(float)

    logger.info(f"Loaded {df.shape[0]} rows x {df.shape[1]} columns")
    return df
