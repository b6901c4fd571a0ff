import numpy as np
import pandas as pd
import pytest

from wine_eda.data_management import BASE_FEATURES, CATEGORICAL_DERIVED, Col
from wine_eda.exceptions import ColumnNotFoundError, DataError
from wine_eda.features import (
    add_alcohol_category,
    add_density_bucket,
    add_log_columns,
    add_quality_category,
    add_sweetness,
    bin_column,
    build_derivations,
    derive_features,
)
from wine_eda.features.derivations import SWEETNESS_LABELS


def _frame(**cols):
    return pd.DataFrame(cols)


@pytest.mark.parametrize("sugar, expected", [
    (0.6, "dry"),
    (3.99, "dry"),
    (4.0, "medium-dry"),
    (11.99, "medium-dry"),
    (12.0, "medium"),
    (44.9, "medium"),
    (45.0, "sweet"),
    (65.8, "sweet"),
])
def test_sweetness_boundaries(sugar, expected):
    out = add_sweetness(_frame(residual_sugar=[sugar]))
    assert out[Col.SWEETNESS].iloc[0] == expected


@pytest.mark.parametrize("alcohol, expected", [
    (8.0, "very-low"),
    (12.49, "very-low"),
    (12.5, "moderately-low"),
    (13.5, "high"),
    (14.5, "very-high"),
])
def test_alcohol_category_boundaries(alcohol, expected):
    out = add_alcohol_category(_frame(alcohol=[alcohol]))
    assert out[Col.ALCOHOL_CATEGORY].iloc[0] == expected


@pytest.mark.parametrize("quality, expected", [
    (3, "poor"), (5, "poor"), (6, "average"), (7, "average"), (8, "good"), (9, "good"),
])
def test_quality_category(quality, expected):
    out = add_quality_category(_frame(quality=[quality]))
    assert out[Col.QUALITY_CATEGORY].iloc[0] == expected


@pytest.mark.parametrize("density, expected", [
    (0.98, "<0.985"),
    (0.985, "[0.985, 0.990)"),
    (0.99, "[0.990, 0.995)"),
    (0.9949, "[0.990, 0.995)"),
    (1.039, "[1.035, 1.040)"),
    (1.05, ">=1.040"),
])
def test_density_bucket(density, expected):
    out = add_density_bucket(_frame(density=[density]))
    assert out[Col.DENSITY_BUCKET].iloc[0] == expected


def test_every_row_gets_exactly_one_category(wine_df):
    out = derive_features(wine_df)
    for col in CATEGORICAL_DERIVED:
        assert isinstance(out[col].dtype, pd.CategoricalDtype)
        assert out[col].notna().all(), col


def test_sweetness_is_monotonic_in_residual_sugar(wine_df):
    out = add_sweetness(wine_df).sort_values(Col.RESIDUAL_SUGAR)
    codes = out[Col.SWEETNESS].cat.codes.to_numpy()
    assert (np.diff(codes) >= 0).all()
    assert list(out[Col.SWEETNESS].cat.categories) == list(SWEETNESS_LABELS)


def test_derive_features_is_idempotent(wine_df):
    once = derive_features(wine_df)
    twice = derive_features(once)
    pd.testing.assert_frame_equal(once, twice)


def test_derive_features_does_not_mutate_input(wine_df):
    before = wine_df.copy()
    out = derive_features(wine_df)

    pd.testing.assert_frame_equal(wine_df, before)
    pd.testing.assert_frame_equal(out[before.columns], before)
    assert len(out) == len(before)
    assert set(out.columns) - set(before.columns) == {
        Col.SWEETNESS, Col.ALCOHOL_CATEGORY, Col.QUALITY_CATEGORY, Col.DENSITY_BUCKET,
        Col.LOG_CHLORIDES, Col.LOG_FREE_SULFUR_DIOXIDE,
    }


def test_log_columns_apply_log1p(wine_df):
    out = add_log_columns(wine_df)
    np.testing.assert_allclose(out[Col.LOG_CHLORIDES], np.log1p(wine_df[Col.CHLORIDES]))
    np.testing.assert_allclose(out[Col.LOG_FREE_SULFUR_DIOXIDE], np.log1p(wine_df[Col.FREE_SULFUR_DIOXIDE]))


def test_log_columns_untransformed_copy(wine_df):
    out = derive_features(wine_df, build_derivations(apply_log_transform=False))
    np.testing.assert_array_equal(out[Col.LOG_CHLORIDES], wine_df[Col.CHLORIDES])


def test_log_columns_defined_at_zero():
    out = add_log_columns(_frame(chlorides=[0.04, 0.0], free_sulfur_dioxide=[0.0, 20.0]))
    assert out[Col.LOG_CHLORIDES].iloc[1] == 0.0
    assert out[Col.LOG_FREE_SULFUR_DIOXIDE].iloc[0] == 0.0
    assert np.isfinite(out[Col.LOG_FREE_SULFUR_DIOXIDE]).all()


def test_log_of_negative_raises():
    with pytest.raises(DataError, match="negative"):
        add_log_columns(_frame(chlorides=[0.04, -0.01], free_sulfur_dioxide=[10.0, 20.0]))


def test_non_numeric_source_raises_data_error():
    with pytest.raises(DataError, match="not numeric"):
        add_sweetness(_frame(residual_sugar=["dry", "sweet"]))


def test_missing_value_raises_data_error():
    with pytest.raises(DataError, match="missing"):
        add_alcohol_category(_frame(alcohol=[10.0, np.nan]))


def test_missing_column_raises():
    df = pd.DataFrame({c: [1.0] for c in BASE_FEATURES if c != Col.DENSITY})
    with pytest.raises(ColumnNotFoundError):
        add_density_bucket(df)


def test_bin_column_checks_edges():
    with pytest.raises(ValueError):
        bin_column(pd.Series([1.0]), [0, 1], ["a", "b"])
