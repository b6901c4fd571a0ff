"""
Run configuration.

Settings come from a YAML file (see configs/default.yaml) and are mapped onto
dataclasses. Bin edges are not configuration; they live in
wine_eda.features.derivations.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError
from .utils.io import read_yaml
from .visualization.style import PlotStyle

logger = logging.getLogger(__name__)

_KNOWN_SECTIONS = {"random_state", "data", "features", "modeling", "plots", "report"}


@dataclass
class FeatureConfig:
    apply_log_transform: bool = True


@dataclass
class ModelingConfig:
    cv_folds: int = 3
    n_estimators: int = 100
    n_jobs: Optional[int] = -1
    random_state: int = 42

    def validate(self) -> None:
        if int(self.cv_folds) < 2:
            raise ConfigurationError(f"modeling.cv_folds must be >= 2, got {self.cv_folds}")
        if int(self.n_estimators) < 1:
            raise ConfigurationError(f"modeling.n_estimators must be >= 1, got {self.n_estimators}")


@dataclass
class ReportConfig:
    data_path: Optional[str] = None
    random_state: int = 42
    title: str = "White Wine Quality - Exploratory Data Analysis"
    features: FeatureConfig = field(default_factory=FeatureConfig)
    modeling: ModelingConfig = field(default_factory=ModelingConfig)
    plots: PlotStyle = field(default_factory=PlotStyle)

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any] | None) -> "ReportConfig":
        cfg = cfg or {}
        unknown = set(cfg) - _KNOWN_SECTIONS
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")

        random_state = int(cfg.get("random_state", 42))
        modeling_cfg = dict(cfg.get("modeling") or {})
        modeling_cfg.setdefault("random_state", random_state)

        plots_cfg = dict(cfg.get("plots") or {})
        if "figsize" in plots_cfg:
            plots_cfg["figsize"] = tuple(plots_cfg["figsize"])

        try:
            config = cls(
                data_path=(cfg.get("data") or {}).get("path"),
                random_state=random_state,
                title=(cfg.get("report") or {}).get("title", cls.title),
                features=FeatureConfig(**(cfg.get("features") or {})),
                modeling=ModelingConfig(**modeling_cfg),
                plots=PlotStyle(**plots_cfg),
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        config.modeling.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        plots = asdict(self.plots)
        plots["figsize"] = list(plots["figsize"])
        plots["marker_colors"] = list(plots["marker_colors"])
        return {
            "random_state": self.random_state,
            "data": {"path": self.data_path},
            "features": asdict(self.features),
            "modeling": asdict(self.modeling),
            "plots": plots,
            "report": {"title": self.title},
        }


def load_config(path: str | Path | None) -> ReportConfig:
    """Read a YAML config; a missing file falls back to defaults."""
    if path is None:
        return ReportConfig()
    path = Path(path)
    if not path.is_file():
        logger.warning(f"Config file {path} not found. Proceeding with defaults.")
        return ReportConfig()
    return ReportConfig.from_dict(read_yaml(path))
