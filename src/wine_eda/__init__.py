"""
Wine Quality EDA

Loads the white wine quality table, derives categorical / log features,
summarizes, plots, models and writes a static HTML report.
"""

__version__ = "1.0.0"
