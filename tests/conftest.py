import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
from matplotlib import pyplot as plt

from wine_eda.data_management.schema import SCHEMA_COLUMNS

R_STYLE_NAMES = {
    "fixed_acidity": "fixed.acidity",
    "volatile_acidity": "volatile.acidity",
    "citric_acid": "citric.acid",
    "residual_sugar": "residual.sugar",
    "chlorides": "chlorides",
    "free_sulfur_dioxide": "free.sulfur.dioxide",
    "total_sulfur_dioxide": "total.sulfur.dioxide",
    "density": "density",
    "pH": "pH",
    "sulphates": "sulphates",
    "alcohol": "alcohol",
    "quality": "quality",
}


def make_wine_frame(n: int = 4898, seed: int = 0) -> pd.DataFrame:
    """White-wine-like table with the loader's canonical columns."""
    rng = np.random.default_rng(seed)

    alcohol = np.clip(rng.normal(10.5, 1.2, n), 8.0, 14.2)
    residual_sugar = np.clip(rng.lognormal(np.log(5.2), 0.8, n), 0.6, 65.8)
    volatile_acidity = np.clip(rng.normal(0.28, 0.10, n), 0.08, 1.10)
    density = 0.9915 + 0.0004 * residual_sugar - 0.001 * (alcohol - 10.5) + rng.normal(0, 0.0008, n)

    latent = 5.88 + 0.45 * (alcohol - 10.5) - 2.0 * (volatile_acidity - 0.28) + rng.normal(0, 0.7, n)
    quality = np.clip(np.round(latent), 3, 9).astype(int)

    df = pd.DataFrame({
        "id": np.arange(1, n + 1),
        "fixed_acidity": np.clip(rng.normal(6.85, 0.84, n), 3.8, 14.2),
        "volatile_acidity": volatile_acidity,
        "citric_acid": np.clip(rng.normal(0.33, 0.12, n), 0.0, 1.66),
        "residual_sugar": residual_sugar,
        "chlorides": np.clip(rng.lognormal(np.log(0.043), 0.35, n), 0.009, 0.346),
        "free_sulfur_dioxide": np.clip(rng.normal(35.0, 17.0, n), 2.0, 289.0),
        "total_sulfur_dioxide": np.clip(rng.normal(138.0, 42.0, n), 9.0, 440.0),
        "density": density,
        "pH": np.clip(rng.normal(3.19, 0.15, n), 2.72, 3.82),
        "sulphates": np.clip(rng.normal(0.49, 0.11, n), 0.22, 1.08),
        "alcohol": alcohol,
        "quality": quality,
    })
    return df[SCHEMA_COLUMNS]


def drop_rare_classes(df: pd.DataFrame, min_count: int = 3) -> pd.DataFrame:
    """Keep quality classes large enough for min_count stratified folds."""
    return df.groupby("quality").filter(lambda g: len(g) >= min_count).reset_index(drop=True)


def write_r_style_csv(df: pd.DataFrame, path) -> None:
    """CSV as written by R's write.csv: unnamed id column, dotted names."""
    out = df.drop(columns="id").rename(columns=R_STYLE_NAMES)
    out.index = df["id"].to_numpy()
    out.to_csv(path, index_label="")


@pytest.fixture
def wine_df():
    return make_wine_frame()


@pytest.fixture
def small_wine_df():
    return drop_rare_classes(make_wine_frame(n=600, seed=1))


@pytest.fixture
def wine_csv(tmp_path, small_wine_df):
    path = tmp_path / "wineQualityWhites.csv"
    write_r_style_csv(small_wine_df, path)
    return path


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


