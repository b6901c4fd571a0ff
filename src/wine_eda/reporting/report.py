"""
HTML report rendering.

The report is a single static file: tables are rendered with pandas, charts
are embedded as base64 PNG data URIs, layout comes from a Jinja2 template.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "report.html.j2"

_ENV = Environment(
    loader=PackageLoader("wine_eda.reporting", "templates"),
    autoescape=select_autoescape(enabled_extensions=("html", "j2")),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass
class ReportSection:
    title: str
    paragraphs: List[str] = field(default_factory=list)
    tables: List[Dict[str, Any]] = field(default_factory=list)
    figures: List[Dict[str, Any]] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def add_table(self, caption: str, table: pd.DataFrame, index: bool = True, digits: int = 3) -> None:
        self.tables.append({"caption": caption, "html": table_html(table, index=index, digits=digits)})

    def add_figure(self, caption: str, path: str | Path) -> None:
        self.figures.append({"caption": caption, "src": figure_data_uri(path)})


def figure_data_uri(path: str | Path) -> str:
    data = Path(path).read_bytes()
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


def table_html(table: pd.DataFrame, index: bool = True, digits: int = 3) -> Markup:
    html = table.to_html(
        index=index,
        float_format=lambda x: f"{x:.{digits}f}",
        classes="data",
        border=0,
        na_rep="-",
    )
    return Markup(html)


def render_report(title: str,
                  sections: Sequence[ReportSection],
                  narrative: Sequence[str] = (),
                  skipped: Sequence[str] = (),
                  meta: Optional[Dict[str, Any]] = None) -> str:
    template = _ENV.get_template(TEMPLATE_NAME)
    return template.render(
        title=title,
        sections=list(sections),
        narrative=list(narrative),
        skipped=list(skipped),
        meta=meta or {},
    )


def write_report(html: str, path: str | Path) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html, encoding="utf-8")
    logger.info(f"Report written to {path}")
    return str(path)
