"""
Narrative discussion of the findings.

Paragraphs are built from the computed summaries, so the numbers in the text
always match the tables and charts of the same run.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd

from ..analysis.summarizer import SummaryReport
from ..data_management.schema import Col
from ..models.modeler import ModelResult


def _fmt_pct(x: float) -> str:
    return f"{x:+.0f}%"


def dataset_paragraph(summary: SummaryReport) -> str:
    counts = summary.quality_counts
    q = summary.numeric_summary
    lines = [
        f"The dataset holds {summary.n_rows:,} wines described by eleven physicochemical "
        f"measurements and a sensory quality score.",
        f"Quality ranges from {int(counts.index.min())} to {int(counts.index.max())}; the most common "
        f"score is {summary.quality_mode}, given to {counts.loc[summary.quality_mode, 'percent']:.1f}% of wines.",
    ]
    if Col.ALCOHOL in q.index:
        a = q.loc[Col.ALCOHOL]
        lines.append(
            f"Alcohol runs from {a['min']:.1f}% to {a['max']:.1f}% with a mean of {a['mean']:.2f}% "
            f"(median {a['median']:.2f}%)."
        )
    if Col.RESIDUAL_SUGAR in q.index:
        s = q.loc[Col.RESIDUAL_SUGAR]
        lines.append(
            f"Residual sugar is strongly right-skewed: median {s['median']:.1f} g/l but a maximum of "
            f"{s['max']:.1f} g/l, so it is plotted on a log scale."
        )
    return " ".join(lines)


def categories_paragraph(summary: SummaryReport) -> Optional[str]:
    parts: List[str] = []
    for col, table in summary.category_counts.items():
        if col == Col.DENSITY_BUCKET or table.empty:
            continue
        top = table["count"].idxmax()
        parts.append(f"the most common {col.replace('_', ' ')} is '{top}' ({table.loc[top, 'percent']:.1f}%)")
    if not parts:
        return None
    return "Among the derived categories, " + "; ".join(parts) + "."


def correlation_paragraph(summary: SummaryReport, top_n: int = 3) -> Optional[str]:
    tc = summary.target_correlations
    if tc is None or tc.empty:
        return None
    top = tc.head(top_n)
    described = ", ".join(f"{row.feature} (r = {row.r:+.2f})" for row in top.itertuples())
    text = f"The measurements most correlated with quality are {described}."

    gain = summary.log_gain
    if gain is not None and not gain.empty:
        changes = ", ".join(
            f"{row.feature} {_fmt_pct(row.pct_change)}" for row in gain.itertuples() if pd.notna(row.pct_change)
        )
        if changes:
            text += f" Log-transforming changes the strength of the correlation with quality: {changes}."
    return text


def models_paragraph(models: Dict[str, ModelResult], top_n: int = 3) -> Optional[str]:
    parts: List[str] = []
    forest = models.get("random_forest")
    if forest is not None:
        acc = forest.cv_summary["accuracy"]
        feats = ", ".join(forest.importance["feature"].head(top_n))
        parts.append(
            f"The random forest classifier reaches a cross-validated accuracy of {acc['mean']:.3f} "
            f"(sd {acc['std']:.3f}); its most important variables are {feats}."
        )
    linear = models.get("linear_regression")
    if linear is not None:
        summ = linear.cv_summary
        feats = ", ".join(linear.importance["feature"].head(top_n))
        parts.append(
            f"The standardized linear regression explains R² = {summ['r2']['mean']:.3f} of quality variance "
            f"(RMSE {summ['rmse']['mean']:.3f}); ranked by |t| its strongest predictors are {feats}."
        )
    if forest is not None and linear is not None:
        if forest.top_feature == linear.top_feature:
            parts.append(f"Both models agree that {forest.top_feature} matters most.")
        else:
            parts.append(
                f"The models disagree on the leading variable ({forest.top_feature} vs {linear.top_feature}), "
                f"a reminder that impurity importance and linear effect size measure different things."
            )
    return " ".join(parts) if parts else None


def build_narrative(summary: SummaryReport,
                    models: Optional[Dict[str, ModelResult]] = None,
                    log_transform_applied: bool = True) -> List[str]:
    """Discussion paragraphs for the end of the report."""
    paragraphs = [dataset_paragraph(summary)]
    for text in (categories_paragraph(summary),
                 correlation_paragraph(summary),
                 models_paragraph(models or {})):
        if text:
            paragraphs.append(text)
    if not log_transform_applied:
        paragraphs.append(
            "Note: the log_chlorides and log_free_sulfur_dioxide columns in this run are untransformed "
            "copies of their source columns, so any correlation change attributed to a log transform is zero."
        )
    return paragraphs
