from .loader import load_wine_data, validate_data_schema
from .schema import (
    BASE_FEATURES,
    CATEGORICAL_DERIVED,
    LOG_DERIVED,
    SCHEMA_COLUMNS,
    Col,
    require_columns,
)

__all__ = [
    "load_wine_data",
    "validate_data_schema",
    "BASE_FEATURES",
    "CATEGORICAL_DERIVED",
    "LOG_DERIVED",
    "SCHEMA_COLUMNS",
    "Col",
    "require_columns",
]
