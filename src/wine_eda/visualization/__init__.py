from .plots import (
    box_by_category,
    category_bar,
    correlation_heatmap,
    create_eda_plots,
    histogram,
    importance_bar,
    order_variables,
    save_figure,
    scatter,
)
from .style import PlotStyle

__all__ = [
    "PlotStyle",
    "box_by_category",
    "category_bar",
    "correlation_heatmap",
    "create_eda_plots",
    "histogram",
    "importance_bar",
    "order_variables",
    "save_figure",
    "scatter",
]
