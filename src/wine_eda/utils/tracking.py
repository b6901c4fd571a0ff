from __future__ import annotations
import time
from pathlib import Path
from typing import Any, Dict

import pandas as pd

from .io import write_json


def now_ts() -> str:
    """Return a UTC timestamp string for filenames or logs."""
    return time.strftime("%Y-%m-%dT%H-%M-%SZ", time.gmtime())


def save_metrics(metrics: Dict[str, Any], path: str | Path) -> None:
    """Save metrics (CV scores, summary numbers) to JSON."""
    write_json(metrics, path)


def save_table(table: pd.DataFrame, path: str | Path, index: bool = False) -> None:
    """Save a summary / ranking table to CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(path, index=index)


def save_model_metadata(model, name: str, feature_names, path: str | Path, cv_metrics: Dict[str, Any] | None = None) -> None:
    """Save metadata about a fitted model next to the joblib dump."""
    meta = {
        "model_name": name,
        "class": model.__class__.__name__,
        "params": {k: repr(v) for k, v in model.get_params().items()} if hasattr(model, "get_params") else {},
        "feature_names": list(feature_names) if feature_names is not None else None,
        "cv_metrics": cv_metrics or {},
        "timestamp_utc": now_ts(),
    }
    write_json(meta, path)
