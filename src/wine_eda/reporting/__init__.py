from .narrative import build_narrative
from .report import ReportSection, figure_data_uri, render_report, table_html, write_report

__all__ = [
    "ReportSection",
    "build_narrative",
    "figure_data_uri",
    "render_report",
    "table_html",
    "write_report",
]
