from .summarizer import (
    SummaryReport,
    category_counts,
    correlation_matrix,
    correlations_with_target,
    default_numeric_columns,
    describe_numeric,
    log_transform_gain,
    quality_distribution,
    quality_mode,
    summarize,
)

__all__ = [
    "SummaryReport",
    "category_counts",
    "correlation_matrix",
    "correlations_with_target",
    "default_numeric_columns",
    "describe_numeric",
    "log_transform_gain",
    "quality_distribution",
    "quality_mode",
    "summarize",
]
