"""Environment and run-input snapshot written next to every report."""
from __future__ import annotations
import platform, sys, datetime as dt
from importlib import metadata
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

from .io import write_json

# distributions the report is rendered with
REPORT_DISTRIBUTIONS = (
    "pandas", "numpy", "scikit-learn", "scipy",
    "matplotlib", "seaborn", "jinja2", "joblib", "pyyaml",
)


def package_versions(distributions: Iterable[str] = REPORT_DISTRIBUTIONS) -> Dict[str, str]:
    versions = {}
    for dist in distributions:
        try:
            versions[dist] = metadata.version(dist)
        except metadata.PackageNotFoundError:
            versions[dist] = "not_installed"
    return versions


def collect_runtime_info(run: Optional[Mapping[str, Any]] = None,
                         extra_distributions: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Interpreter, platform and package versions, plus the inputs of this run
    (data path, seed, log-transform switch) so a report can be traced back.
    """
    return {
        "timestamp_utc": dt.datetime.now(dt.timezone.utc).isoformat(),
        "python": sys.version.replace("\n", " "),
        "platform": platform.platform(),
        "packages": package_versions(tuple(REPORT_DISTRIBUTIONS) + tuple(extra_distributions)),
        "run": dict(run or {}),
    }


def save_runtime_info(path: str | Path,
                      run: Optional[Mapping[str, Any]] = None,
                      extra_distributions: Iterable[str] = ()) -> Dict[str, Any]:
    info = collect_runtime_info(run, extra_distributions)
    write_json(info, path)
    return info
