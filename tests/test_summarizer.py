import numpy as np
import pandas as pd
import pytest

from wine_eda.analysis import (
    category_counts,
    correlation_matrix,
    correlations_with_target,
    describe_numeric,
    log_transform_gain,
    quality_mode,
    summarize,
)
from wine_eda.data_management import Col
from wine_eda.exceptions import DataError, DegenerateInputError
from wine_eda.features import build_derivations, derive_features
from wine_eda.features.derivations import ALCOHOL_LABELS


@pytest.fixture
def derived(wine_df):
    return derive_features(wine_df)


def test_correlation_matrix_symmetric_unit_diagonal(derived):
    corr = correlation_matrix(derived)
    values = corr.to_numpy()

    assert corr.shape[0] == corr.shape[1]
    assert (values == values.T).all()
    assert (np.diag(values) == 1.0).all()
    assert np.abs(values).max() <= 1.0


def test_correlation_matrix_is_deterministic(derived):
    first = correlation_matrix(derived).to_numpy()
    second = correlation_matrix(derived).to_numpy()
    assert np.array_equal(first, second)


def test_constant_column_raises_degenerate_input(derived):
    df = derived.assign(**{Col.SULPHATES: 0.5})
    with pytest.raises(DegenerateInputError) as exc:
        correlation_matrix(df)
    assert exc.value.columns == [Col.SULPHATES]


def test_correlation_rejects_non_numeric(derived):
    with pytest.raises(DataError):
        correlation_matrix(derived, columns=[Col.ALCOHOL, Col.SWEETNESS])


def test_white_wine_scale_summary(wine_df):
    """4898 rows, alcohol in [8.0, 14.2], quality in [3, 9]."""
    assert len(wine_df) == 4898
    assert wine_df[Col.ALCOHOL].between(8.0, 14.2).all()
    assert wine_df[Col.QUALITY].between(3, 9).all()

    table = describe_numeric(wine_df)

    assert abs(table.loc[Col.ALCOHOL, "mean"] - 10.5) <= 0.5
    assert quality_mode(wine_df) == 6


def test_describe_numeric_quartiles(wine_df):
    table = describe_numeric(wine_df, columns=[Col.ALCOHOL, Col.PH])

    assert list(table.columns) == ["min", "q25", "median", "mean", "q75", "max", "std"]
    assert list(table.index) == [Col.ALCOHOL, Col.PH]
    assert table.loc[Col.PH, "median"] == pytest.approx(wine_df[Col.PH].median())
    assert table.loc[Col.PH, "q25"] <= table.loc[Col.PH, "median"] <= table.loc[Col.PH, "q75"]


def test_category_counts_cover_every_row(derived):
    counts = category_counts(derived)

    assert set(counts) == {Col.SWEETNESS, Col.ALCOHOL_CATEGORY, Col.QUALITY_CATEGORY, Col.DENSITY_BUCKET}
    for table in counts.values():
        assert table["count"].sum() == len(derived)
        assert table["percent"].sum() == pytest.approx(100.0)
    # empty categories are kept, in category order
    assert list(counts[Col.ALCOHOL_CATEGORY].index) == list(ALCOHOL_LABELS)


def test_correlations_with_target_sorted(derived):
    table = correlations_with_target(derived)

    assert Col.QUALITY not in table["feature"].tolist()
    assert table["abs_r"].is_monotonic_decreasing
    assert table.iloc[0]["feature"] == Col.ALCOHOL
    assert table["p_value"].between(0, 1).all()


def test_log_transform_gain_zero_when_untransformed(wine_df):
    df = derive_features(wine_df, build_derivations(apply_log_transform=False))
    gain = log_transform_gain(df)

    assert gain["feature"].tolist() == [Col.CHLORIDES, Col.FREE_SULFUR_DIOXIDE]
    np.testing.assert_allclose(gain["pct_change"], 0.0, atol=1e-9)


def test_summarize_bundles_sections(derived):
    report = summarize(derived)

    assert report.n_rows == len(derived)
    assert report.quality_mode == 6
    assert report.correlation is not None
    assert report.log_gain is not None
    assert report.skipped == []
    assert isinstance(report.quality_counts, pd.DataFrame)


def test_summarize_skips_correlation_on_degenerate_input(derived):
    report = summarize(derived.assign(**{Col.CITRIC_ACID: 0.3}))

    assert report.correlation is None
    assert report.target_correlations is None
    assert report.numeric_summary.loc[Col.CITRIC_ACID, "std"] == pytest.approx(0.0, abs=1e-12)
    assert any("Correlation" in note for note in report.skipped)
