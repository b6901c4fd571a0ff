"""
Main Pipeline Module - Orchestrates the complete EDA report run

load -> derive features -> summarize -> plots -> models -> HTML report
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from ..analysis import SummaryReport, summarize
from ..config import ReportConfig, load_config
from ..data_management import Col, load_wine_data
from ..exceptions import ConfigurationError, DataError, DegenerateInputError, WineReportError
from ..features import build_derivations, derive_features
from ..models import ModelResult, WineQualityModeler, compare_importance
from ..reporting import ReportSection, build_narrative, render_report, write_report
from ..utils.io import write_yaml
from ..utils.runtime_info import save_runtime_info
from ..utils.tracking import save_metrics, save_model_metadata, save_table
from ..visualization import create_eda_plots, importance_bar, save_figure

logger = logging.getLogger(__name__)


def _caption(name: str) -> str:
    return name.replace("_", " ")


class WineReportPipeline:
    """Complete EDA report run for the wine quality table."""

    def __init__(self, config: ReportConfig | None = None, outdir: str | Path = "reports/runs/local"):
        self.cfg = config or ReportConfig()

        self.outdir = Path(outdir)
        self.figures_dir = self.outdir / "figures"
        self.metrics_dir = self.outdir / "metrics"
        self.models_dir = self.outdir / "models"
        for d in (self.figures_dir, self.metrics_dir, self.models_dir,
                  self.outdir / "configs", self.outdir / "runtime"):
            d.mkdir(parents=True, exist_ok=True)

        self.raw_data: pd.DataFrame | None = None
        self.data: pd.DataFrame | None = None
        self.summary: SummaryReport | None = None
        self.plot_paths: Dict[str, str] = {}
        self.models: Dict[str, ModelResult] = {}
        self.importance_comparison: pd.DataFrame | None = None
        self.skipped: List[str] = []

    # -------------------------------------------------
    #  stages
    # -------------------------------------------------
    def load_data(self) -> pd.DataFrame:
        logger.info("Starting data loading...")
        if not self.cfg.data_path:
            raise DataError("No input file configured (data.path / --data)")
        self.raw_data = load_wine_data(self.cfg.data_path)
        return self.raw_data

    def derive_features(self) -> pd.DataFrame:
        logger.info("Starting feature derivation...")
        if self.raw_data is None:
            raise ValueError("raw_data is None. Run load_data() first.")
        derivations = build_derivations(self.cfg.features.apply_log_transform)
        self.data = derive_features(self.raw_data, derivations)
        return self.data

    def summarize(self) -> SummaryReport:
        if self.data is None:
            raise ValueError("data is None. Run derive_features() first.")

        self.summary = summarize(self.data)
        self.skipped.extend(self.summary.skipped)

        save_table(self.summary.numeric_summary, self.metrics_dir / "numeric_summary.csv", index=True)
        save_table(self.summary.quality_counts, self.metrics_dir / "quality_counts.csv", index=True)
        for col, table in self.summary.category_counts.items():
            save_table(table, self.metrics_dir / f"counts_{col}.csv", index=True)
        if self.summary.correlation is not None:
            save_table(self.summary.correlation, self.metrics_dir / "correlation_matrix.csv", index=True)
        if self.summary.target_correlations is not None:
            save_table(self.summary.target_correlations, self.metrics_dir / "correlations_with_quality.csv")
        if self.summary.log_gain is not None:
            save_table(self.summary.log_gain, self.metrics_dir / "log_transform_gain.csv")

        save_metrics({
            "n_rows": self.summary.n_rows,
            "n_columns": self.summary.n_columns,
            "quality_mode": self.summary.quality_mode,
            "mean_alcohol": self.summary.numeric_summary.loc[Col.ALCOHOL, "mean"],
            "skipped": self.summary.skipped,
        }, self.metrics_dir / "summary.json")
        return self.summary

    def create_plots(self) -> Dict[str, str]:
        logger.info("Creating EDA plots...")
        if self.data is None:
            raise ValueError("data is None. Run derive_features() first.")
        corr = self.summary.correlation if self.summary is not None else None
        self.plot_paths = create_eda_plots(self.data, self.figures_dir, self.cfg.plots, corr=corr)
        return self.plot_paths

    def fit_models(self) -> Dict[str, ModelResult]:
        logger.info("Starting model fitting...")
        if self.data is None:
            raise ValueError("data is None. Run derive_features() first.")

        m = self.cfg.modeling
        modeler = WineQualityModeler(
            cv_folds=m.cv_folds,
            n_estimators=m.n_estimators,
            n_jobs=m.n_jobs,
            random_state=m.random_state,
        )

        for name, fit in (("random_forest", modeler.fit_classifier),
                          ("linear_regression", modeler.fit_regressor)):
            try:
                result = fit(self.data)
            except (ConfigurationError, DegenerateInputError) as e:
                logger.warning(f"Skipping {name}: {e}")
                self.skipped.append(f"Model '{name}' skipped: {e}")
                continue

            self.models[name] = result
            modeler.save_model(name, self.models_dir / f"{name}.joblib")
            save_model_metadata(result.model, name, result.importance["feature"].tolist(),
                                self.models_dir / f"{name}_metadata.json", cv_metrics=result.cv_summary)
            save_metrics(result.cv_summary, self.metrics_dir / f"{name}_cv_metrics.json")
            save_table(result.cv_scores, self.metrics_dir / f"{name}_cv_folds.csv")
            save_table(result.importance, self.metrics_dir / f"{name}_importance.csv")

            fig = importance_bar(result.importance, self.cfg.plots, title=f"Variable importance - {_caption(name)}")
            self.plot_paths[f"importance_{name}"] = save_figure(
                fig, self.figures_dir / f"importance_{name}.png", self.cfg.plots
            )

        if len(self.models) > 1:
            self.importance_comparison = compare_importance(
                [(name, result.importance) for name, result in self.models.items()]
            )
            save_table(self.importance_comparison, self.metrics_dir / "importance_comparison.csv")

        logger.info("Model fitting completed")
        return self.models

    # -------------------------------------------------
    #  report
    # -------------------------------------------------
    def _figures(self, section: ReportSection, prefixes: tuple) -> None:
        for name, path in self.plot_paths.items():
            if name.startswith(prefixes):
                section.add_figure(_caption(name), path)

    def build_sections(self) -> List[ReportSection]:
        summary = self.summary
        sections: List[ReportSection] = []

        overview = ReportSection("Dataset overview")
        if summary is not None:
            overview.paragraphs.append(
                f"{summary.n_rows:,} wines, {summary.n_columns} columns after feature derivation."
            )
            overview.add_table("Summary statistics of numeric columns", summary.numeric_summary)
            overview.add_table("Quality score distribution", summary.quality_counts, digits=1)
        self._figures(overview, ("bar_quality_score",))
        sections.append(overview)

        univariate = ReportSection("Univariate analysis")
        if summary is not None:
            for col, table in summary.category_counts.items():
                univariate.add_table(f"Frequency of {_caption(col)}", table, digits=1)
        self._figures(univariate, ("hist_", "bar_sweetness", "bar_alcohol_category",
                                   "bar_quality_category", "bar_density_bucket"))
        sections.append(univariate)

        bivariate = ReportSection("Bivariate analysis")
        if summary is not None and summary.target_correlations is not None:
            bivariate.add_table("Pearson correlation with quality", summary.target_correlations, index=False)
        if summary is not None and summary.log_gain is not None:
            bivariate.add_table("Correlation with quality before and after log transform",
                                summary.log_gain, index=False, digits=2)
        if not self.cfg.features.apply_log_transform:
            bivariate.notes.append("Log transform disabled: log_* columns are untransformed copies.")
        self._figures(bivariate, ("box_", "scatter_quality", "scatter_density"))
        sections.append(bivariate)

        multivariate = ReportSection("Multivariate analysis")
        self._figures(multivariate, ("facet_", "scatter_alcohol", "heatmap_"))
        sections.append(multivariate)

        models = ReportSection("Models")
        models.paragraphs.append(
            f"{self.cfg.modeling.cv_folds}-fold cross-validation; random forest with "
            f"{self.cfg.modeling.n_estimators} trees; linear regression on standardized features."
        )
        for name, result in self.models.items():
            cv = pd.DataFrame(result.cv_summary).T
            models.add_table(f"{_caption(name)}: cross-validated scores", cv)
            models.add_table(f"{_caption(name)}: variable importance (0-100)", result.importance, index=False)
            if "coefficients" in result.extra:
                models.add_table(f"{_caption(name)}: standardized coefficients",
                                 result.extra["coefficients"], index=False)
        if self.importance_comparison is not None:
            models.add_table("Importance ranking of both models", self.importance_comparison,
                             index=False, digits=1)
        self._figures(models, ("importance_",))
        sections.append(models)

        return sections

    def write_report(self) -> str:
        if self.summary is None:
            raise ValueError("summary is None. Run summarize() first.")
        narrative = build_narrative(self.summary, self.models, self.cfg.features.apply_log_transform)
        html = render_report(
            self.cfg.title,
            self.build_sections(),
            narrative=narrative,
            skipped=self.skipped,
            meta={"rows": self.summary.n_rows, "source": self.cfg.data_path},
        )
        return write_report(html, self.outdir / "report.html")

    def run_complete_pipeline(self) -> Dict[str, Any]:
        logger.info("Starting complete wine quality EDA report...")

        try:
            save_runtime_info(
                self.outdir / "runtime" / "runtime_info.json",
                run={
                    "data_path": self.cfg.data_path,
                    "outdir": str(self.outdir),
                    "random_state": self.cfg.random_state,
                    "apply_log_transform": self.cfg.features.apply_log_transform,
                },
            )
            write_yaml(self.cfg.to_dict(), self.outdir / "configs" / "config_used.yaml")

            self.load_data()
            self.derive_features()
            self.summarize()
            self.create_plots()
            self.fit_models()
            report_path = self.write_report()

        except WineReportError as e:
            logger.error(f"Report run aborted: {e}")
            return {"status": "error", "error": str(e), "error_type": type(e).__name__}

        logger.info("Complete report run finished successfully!")
        return {
            "status": "success",
            "data_shape": None if self.data is None else self.data.shape,
            "report_path": report_path,
            "plot_paths": self.plot_paths,
            "models": sorted(self.models),
            "skipped": self.skipped,
            "outdir": str(self.outdir),
        }


def cli(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate the wine quality EDA report.")
    p.add_argument("--config", type=str, default="configs/default.yaml", help="Path to a YAML config with run settings.")
    p.add_argument("--data", type=str, default=None, help="Input CSV (overrides data.path in the config).")
    p.add_argument("--outdir", type=str, default="reports/runs/local", help="Where to save outputs for this run.")
    return p.parse_args(argv)


def run_complete_pipeline(config: ReportConfig | None = None,
                          outdir: str | Path = "reports/runs/local") -> Dict[str, Any]:
    pipeline = WineReportPipeline(config=config, outdir=outdir)
    return pipeline.run_complete_pipeline()


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    args = cli(argv)

    try:
        cfg = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"Invalid config {args.config}: {e}")
        return 1
    if args.data:
        cfg.data_path = args.data

    results = run_complete_pipeline(config=cfg, outdir=args.outdir)
    print(f"Report run completed with status: {results.get('status')}")
    return 0 if results.get("status") == "success" else 1


if __name__ == "__main__":
    sys.exit(main())
