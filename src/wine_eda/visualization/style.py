from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class PlotStyle:
    """Rendering options passed explicitly to every chart function."""

    figsize: Tuple[float, float] = (8.0, 5.0)
    dpi: int = 120
    palette: str = "viridis"
    context: str = "notebook"
    style: str = "whitegrid"
    marker_colors: Tuple[str, ...] = field(default=("tab:orange", "tab:red", "tab:orange", "tab:blue"))
    alpha: float = 0.4
    annotate_heatmap: bool = True
