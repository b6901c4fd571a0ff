from pathlib import Path

import pytest
from matplotlib.figure import Figure

from wine_eda.analysis import correlation_matrix
from wine_eda.data_management import Col
from wine_eda.exceptions import ColumnNotFoundError, DataError
from wine_eda.features import derive_features
from wine_eda.models import rank_importance
from wine_eda.visualization import (
    PlotStyle,
    box_by_category,
    category_bar,
    correlation_heatmap,
    create_eda_plots,
    histogram,
    importance_bar,
    order_variables,
    scatter,
)

import pandas as pd


@pytest.fixture
def style():
    return PlotStyle(figsize=(6.0, 4.0), dpi=60)


@pytest.fixture
def derived(small_wine_df):
    return derive_features(small_wine_df)


def test_histogram_markers_and_log_scale(derived, style):
    fig = histogram(derived, Col.RESIDUAL_SUGAR, style, log_scale=True)

    ax = fig.axes[0]
    assert isinstance(fig, Figure)
    assert ax.get_xscale() == "log"
    assert len(ax.lines) == 4  # quartiles + mean
    assert tuple(fig.get_size_inches()) == pytest.approx(style.figsize)


def test_histogram_without_markers(derived, style):
    fig = histogram(derived, Col.ALCOHOL, style, markers=False)
    assert fig.axes[0].get_xscale() == "linear"
    assert len(fig.axes[0].lines) == 0


def test_log_histogram_falls_back_to_linear_axis(derived, style):
    fig = histogram(derived.assign(**{Col.CITRIC_ACID: 0.0}), Col.CITRIC_ACID, style, log_scale=True)
    assert fig.axes[0].get_xscale() == "linear"
    assert "log scale" not in fig.axes[0].get_title()


def test_scatter_with_fit_line(derived, style):
    fig = scatter(derived, Col.ALCOHOL, Col.DENSITY, style, fit_line=True)
    assert len(fig.axes[0].lines) == 1


def test_scatter_faceted_one_panel_per_category(derived, style):
    fig = scatter(derived, Col.ALCOHOL, Col.DENSITY, style, fit_line=True, facet=Col.QUALITY_CATEGORY)
    observed = derived[Col.QUALITY_CATEGORY].nunique()
    assert len(fig.axes) == observed


def test_box_and_bar(derived, style):
    assert isinstance(box_by_category(derived, Col.ALCOHOL, Col.QUALITY_CATEGORY, style), Figure)
    assert isinstance(category_bar(derived, Col.SWEETNESS, style), Figure)
    assert isinstance(category_bar(derived, Col.QUALITY, style), Figure)


def test_unknown_column_raises(derived, style):
    with pytest.raises(ColumnNotFoundError) as exc:
        scatter(derived, Col.ALCOHOL, "colour", style)
    assert isinstance(exc.value, DataError)
    assert isinstance(exc.value, KeyError)
    assert exc.value.missing == ["colour"]


def test_heatmap_orders(derived, style):
    corr = correlation_matrix(derived)

    clustered = order_variables(corr, "hclust")
    assert sorted(clustered) == sorted(corr.columns)
    assert order_variables(corr, "alphabetical") == sorted(corr.columns, key=str.lower)
    assert order_variables(corr) == list(corr.columns)
    with pytest.raises(ValueError):
        order_variables(corr, "random")

    fig = correlation_heatmap(corr, style, order="hclust")
    labels = [t.get_text() for t in fig.axes[0].get_xticklabels()]
    assert labels == clustered


def test_importance_bar(style):
    table = rank_importance(pd.Series([0.1, 0.5, 0.3], index=["a", "b", "c"]))
    fig = importance_bar(table, style, title="test")
    assert fig.axes[0].get_title() == "test"


def test_create_eda_plots_writes_files(derived, style, tmp_path):
    corr = correlation_matrix(derived)
    paths = create_eda_plots(derived, tmp_path / "figures", style, corr=corr)

    assert "bar_quality_score" in paths
    assert "heatmap_correlation_hclust" in paths
    assert f"hist_{Col.ALCOHOL}" in paths
    for path in paths.values():
        assert Path(path).is_file()
        assert Path(path).stat().st_size > 0
