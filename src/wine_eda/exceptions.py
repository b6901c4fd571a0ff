"""
Exception hierarchy for the report run.

DataError aborts the whole run. DegenerateInputError and ConfigurationError
are fatal to a single report section; the pipeline skips that section.
"""


class WineReportError(Exception):
    """Base class for all report errors."""


class DataError(WineReportError):
    """Input file missing, unreadable, wrong schema, or non-numeric values."""


class ColumnNotFoundError(DataError, KeyError):
    """A requested column is not in the table."""

    def __init__(self, missing, available=None):
        self.missing = list(missing)
        self.available = list(available) if available is not None else []
        super().__init__(f"Column(s) not found: {self.missing}")

    def __str__(self) -> str:
        return f"Column(s) not found: {self.missing}"


class DegenerateInputError(WineReportError):
    """A zero-variance column breaks correlation or model fitting."""

    def __init__(self, columns, message: str = ""):
        self.columns = list(columns)
        super().__init__(message or f"Zero-variance column(s): {self.columns}")


class ConfigurationError(WineReportError):
    """Invalid configuration, e.g. a CV fold count the data cannot support."""
