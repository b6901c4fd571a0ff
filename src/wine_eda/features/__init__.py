from .derivations import (
    DERIVATIONS,
    add_alcohol_category,
    add_density_bucket,
    add_log_columns,
    add_quality_category,
    add_sweetness,
    bin_column,
    build_derivations,
    derive_features,
)

__all__ = [
    "DERIVATIONS",
    "add_alcohol_category",
    "add_density_bucket",
    "add_log_columns",
    "add_quality_category",
    "add_sweetness",
    "bin_column",
    "build_derivations",
    "derive_features",
]
