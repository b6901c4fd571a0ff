"""
Visualization Module

Thin adapters over matplotlib / seaborn. Every chart function takes the table,
the columns to draw and an explicit PlotStyle, and returns a matplotlib Figure.
Nothing here sets global rendering defaults.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Sequence

import matplotlib
matplotlib.use("Agg")  # headless, figures are only written to files
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure
from scipy.cluster import hierarchy
from scipy.spatial.distance import squareform

from ..data_management.schema import BASE_FEATURES, Col, require_columns
from .style import PlotStyle

logger = logging.getLogger(__name__)

HEATMAP_ORDERS = ("original", "alphabetical", "hclust")


@contextmanager
def _styled(style: PlotStyle) -> Iterator[None]:
    """Apply seaborn style/context for the duration of one chart only."""
    with sns.axes_style(style.style), sns.plotting_context(style.context):
        yield


def _observed_categories(series: pd.Series) -> list:
    if isinstance(series.dtype, pd.CategoricalDtype):
        present = set(series.dropna().unique())
        return [c for c in series.cat.categories if c in present]
    return sorted(series.dropna().unique())


# =====================================================
#  UNIVARIATE
# =====================================================
def histogram(df: pd.DataFrame,
              column: str,
              style: PlotStyle,
              log_scale: bool = False,
              bins: int = 30,
              markers: bool = True) -> Figure:
    """
    Histogram with optional log10 x-axis and quartile / mean marker lines.

    A log axis is only used when every value is positive; otherwise the
    histogram falls back to a linear axis.
    """
    require_columns(df, column)
    values = df[column]
    if log_scale and (values <= 0).any():
        logger.warning(
            f"'{column}' has {int((values <= 0).sum())} non-positive values; drawing histogram on a linear axis"
        )
        log_scale = False

    with _styled(style):
        fig, ax = plt.subplots(figsize=style.figsize, dpi=style.dpi)
        sns.histplot(x=values, bins=bins, log_scale=log_scale, ax=ax, color=sns.color_palette(style.palette)[0])

        if markers:
            q25, median, q75 = values.quantile([0.25, 0.5, 0.75])
            lines = [("25%", q25, "--"), ("median", median, "-"), ("75%", q75, "--"), ("mean", values.mean(), ":")]
            for (label, x, ls), color in zip(lines, style.marker_colors):
                ax.axvline(x, color=color, linestyle=ls, linewidth=1.5, label=f"{label} = {x:.3g}")
            ax.legend(loc="upper right", fontsize="small")

        ax.set_title(f"{column}{' (log scale)' if log_scale else ''}")
        ax.set_xlabel(column)
        ax.set_ylabel("count")
        fig.tight_layout()
    return fig


def category_bar(df: pd.DataFrame, column: str, style: PlotStyle) -> Figure:
    """Frequency bar chart of a categorical (or small integer) column."""
    require_columns(df, column)
    with _styled(style):
        fig, ax = plt.subplots(figsize=style.figsize, dpi=style.dpi)
        data = df[[column]].astype({column: "category"})
        sns.countplot(data=data, x=column, hue=column, palette=style.palette, legend=False, ax=ax)
        ax.set_title(f"Count of wines by {column}")
        ax.set_ylabel("count")
        fig.tight_layout()
    return fig


# =====================================================
#  BIVARIATE
# =====================================================
def scatter(df: pd.DataFrame,
            x: str,
            y: str,
            style: PlotStyle,
            fit_line: bool = False,
            facet: Optional[str] = None,
            hue: Optional[str] = None,
            y_jitter: float = 0.0) -> Figure:
    """
    Scatter plot of y against x.

    fit_line overlays a least-squares line; facet draws one panel per category
    of that column (shared axes); hue colors points by a column; y_jitter
    spreads out integer-valued y such as quality.
    """
    cols = [x, y] + [c for c in (facet, hue) if c is not None]
    require_columns(df, *cols)
    scatter_kws = {"alpha": style.alpha, "s": 12}

    with _styled(style):
        if facet is not None:
            order = _observed_categories(df[facet])
            grid = sns.lmplot(
                data=df, x=x, y=y, col=facet, col_order=order, col_wrap=min(len(order), 3),
                fit_reg=fit_line, ci=None, y_jitter=y_jitter or None,
                scatter_kws=scatter_kws, line_kws={"color": "tab:red"},
                height=style.figsize[1] * 0.8, aspect=style.figsize[0] / style.figsize[1],
            )
            grid.figure.suptitle(f"{y} vs {x} by {facet}", y=1.02)
            grid.figure.set_dpi(style.dpi)
            return grid.figure

        fig, ax = plt.subplots(figsize=style.figsize, dpi=style.dpi)
        if hue is not None:
            sns.scatterplot(data=df, x=x, y=y, hue=hue, palette=style.palette, alpha=style.alpha, s=12, ax=ax)
            if fit_line:
                sns.regplot(data=df, x=x, y=y, scatter=False, ci=None, color="tab:red", ax=ax)
        else:
            sns.regplot(data=df, x=x, y=y, fit_reg=fit_line, ci=None, y_jitter=y_jitter or None,
                        scatter_kws=scatter_kws, line_kws={"color": "tab:red"}, ax=ax)
        ax.set_title(f"{y} vs {x}")
        fig.tight_layout()
    return fig


def box_by_category(df: pd.DataFrame, column: str, category: str, style: PlotStyle) -> Figure:
    """Box plot of a numeric column for each category."""
    require_columns(df, column, category)
    with _styled(style):
        fig, ax = plt.subplots(figsize=style.figsize, dpi=style.dpi)
        sns.boxplot(data=df, x=category, y=column, hue=category, palette=style.palette,
                    order=_observed_categories(df[category]), legend=False, ax=ax)
        ax.set_title(f"{column} by {category}")
        fig.tight_layout()
    return fig


# =====================================================
#  MULTIVARIATE
# =====================================================
def order_variables(corr: pd.DataFrame, order: str = "original") -> list:
    """Variable order for a correlation heatmap."""
    if order not in HEATMAP_ORDERS:
        raise ValueError(f"Unknown heatmap order '{order}', expected one of {HEATMAP_ORDERS}")
    names = list(corr.columns)
    if order == "alphabetical":
        return sorted(names, key=str.lower)
    if order == "hclust" and len(names) > 2:
        dist = 1.0 - corr.abs().to_numpy(copy=True)
        np.fill_diagonal(dist, 0.0)
        link = hierarchy.linkage(squareform(dist, checks=False), method="average")
        return [names[i] for i in hierarchy.leaves_list(link)]
    return names


def correlation_heatmap(corr: pd.DataFrame, style: PlotStyle, order: str = "original") -> Figure:
    """Annotated correlation heatmap with the chosen variable ordering."""
    names = order_variables(corr, order)
    ordered = corr.loc[names, names]
    with _styled(style):
        size = max(style.figsize[0], 0.6 * len(names) + 2)
        fig, ax = plt.subplots(figsize=(size, size * 0.85), dpi=style.dpi)
        sns.heatmap(ordered, annot=style.annotate_heatmap, fmt=".2f", cmap="RdBu_r",
                    vmin=-1, vmax=1, center=0, square=True, annot_kws={"size": 7},
                    xticklabels=True, yticklabels=True, cbar_kws={"label": "Pearson r"}, ax=ax)
        ax.set_title(f"Correlation matrix ({order} order)")
        fig.tight_layout()
    return fig


def importance_bar(importance: pd.DataFrame, style: PlotStyle, title: str = "Variable importance") -> Figure:
    """Horizontal bar chart of scaled (0-100) importance scores."""
    require_columns(importance, "feature", "importance")
    data = importance.sort_values("importance", ascending=False)
    with _styled(style):
        fig, ax = plt.subplots(figsize=style.figsize, dpi=style.dpi)
        sns.barplot(data=data, x="importance", y="feature", hue="feature",
                    palette=style.palette, legend=False, ax=ax)
        ax.set_xlim(0, 105)
        ax.set_title(title)
        ax.set_xlabel("importance (0-100)")
        ax.set_ylabel("")
        fig.tight_layout()
    return fig


# =====================================================
#  FILE OUTPUT
# =====================================================
def save_figure(fig: Figure, path: str | Path, style: PlotStyle) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=style.dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Figure saved to {path}")
    return str(path)


# histograms drawn on a log10 axis (long right tails)
LOG_SCALE_HISTOGRAMS = {Col.RESIDUAL_SUGAR, Col.CHLORIDES, Col.FREE_SULFUR_DIOXIDE}


def create_eda_plots(df: pd.DataFrame,
                     outdir: str | Path,
                     style: PlotStyle,
                     corr: Optional[pd.DataFrame] = None,
                     heatmap_orders: Sequence[str] = ("original", "hclust")) -> Dict[str, str]:
    """Render the standard univariate / bivariate / multivariate chart set to PNG files."""
    outdir = Path(outdir)
    paths: Dict[str, str] = {}

    def _save(name: str, fig: Figure) -> None:
        paths[name] = save_figure(fig, outdir / f"{name}.png", style)

    # Univariate
    _save("bar_quality_score", category_bar(df, Col.QUALITY, style))
    for col in BASE_FEATURES:
        _save(f"hist_{col}", histogram(df, col, style, log_scale=col in LOG_SCALE_HISTOGRAMS))
    for col in (Col.SWEETNESS, Col.ALCOHOL_CATEGORY, Col.QUALITY_CATEGORY, Col.DENSITY_BUCKET):
        if col in df.columns:
            _save(f"bar_{col}", category_bar(df, col, style))

    # Bivariate
    if Col.QUALITY_CATEGORY in df.columns:
        for col in (Col.ALCOHOL, Col.DENSITY, Col.VOLATILE_ACIDITY, Col.CHLORIDES):
            _save(f"box_{col}_by_quality_category", box_by_category(df, col, Col.QUALITY_CATEGORY, style))
    _save("scatter_quality_vs_alcohol", scatter(df, Col.ALCOHOL, Col.QUALITY, style, fit_line=True, y_jitter=0.2))
    _save("scatter_density_vs_residual_sugar",
          scatter(df, Col.RESIDUAL_SUGAR, Col.DENSITY, style, fit_line=True))
    _save("scatter_density_vs_alcohol", scatter(df, Col.ALCOHOL, Col.DENSITY, style, fit_line=True))

    # Multivariate
    if Col.QUALITY_CATEGORY in df.columns:
        _save("facet_density_vs_alcohol_by_quality_category",
              scatter(df, Col.ALCOHOL, Col.DENSITY, style, fit_line=True, facet=Col.QUALITY_CATEGORY))
    if Col.SWEETNESS in df.columns:
        _save("scatter_alcohol_vs_residual_sugar_by_sweetness",
              scatter(df, Col.RESIDUAL_SUGAR, Col.ALCOHOL, style, hue=Col.SWEETNESS))
    if corr is not None:
        for order in heatmap_orders:
            _save(f"heatmap_correlation_{order}", correlation_heatmap(corr, style, order=order))

    logger.info(f"EDA plots created: {len(paths)} plots")
    return paths
