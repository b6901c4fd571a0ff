"""
Model Fitting Module

Two illustrative models of wine quality on the eleven base features:
- random forest classifier, quality as a categorical target
- linear regression on standardized features, quality as a continuous target

Both are scored with k-fold cross-validation, refitted on all rows, and
ranked by variable importance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import joblib
import numpy as np
import pandas as pd

from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LinearRegression
from sklearn.metrics import make_scorer
from sklearn.model_selection import KFold, StratifiedKFold, cross_validate
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from ..data_management.schema import BASE_FEATURES, Col, require_columns
from ..evaluation.ordinal_metrics import band_accuracy, ordinal_mae, severe_error_rate, within_one_accuracy
from ..exceptions import ConfigurationError, DegenerateInputError
from .importance import forest_importance, linear_importance

logger = logging.getLogger(__name__)


CLASSIFIER_SCORING = {
    "accuracy": "accuracy",
    "f1_weighted": "f1_weighted",
    "ordinal_mae": make_scorer(ordinal_mae, greater_is_better=False),
    "within_1_accuracy": make_scorer(within_one_accuracy),
    "severe_error_rate": make_scorer(severe_error_rate, greater_is_better=False),
    "band_accuracy": make_scorer(band_accuracy),
}

REGRESSOR_SCORING = {
    "rmse": "neg_root_mean_squared_error",
    "mae": "neg_mean_absolute_error",
    "r2": "r2",
}

# scorers sklearn reports negated
_NEGATED = {"ordinal_mae", "severe_error_rate", "rmse", "mae"}


@dataclass
class ModelResult:
    """A fitted model with its CV scores and importance ranking."""

    name: str
    model: Any
    cv_scores: pd.DataFrame
    importance: pd.DataFrame
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def cv_summary(self) -> Dict[str, Dict[str, float]]:
        metrics = [c for c in self.cv_scores.columns if c != "fold"]
        return {
            m: {"mean": float(self.cv_scores[m].mean()), "std": float(self.cv_scores[m].std(ddof=1))}
            for m in metrics
        }

    @property
    def top_feature(self) -> str:
        return str(self.importance.iloc[0]["feature"])


class WineQualityModeler:
    """
    Fits the random forest and the linear regression with the same k-fold scheme.

    cv_folds and n_estimators are defaults, not tuned.
    """

    def __init__(self,
                 cv_folds: int = 3,
                 n_estimators: int = 100,
                 n_jobs: Optional[int] = -1,
                 random_state: int = 42):
        self.cv_folds = int(cv_folds)
        self.n_estimators = int(n_estimators)
        self.n_jobs = n_jobs
        self.random_state = random_state
        self.results: Dict[str, ModelResult] = {}

    # -------------------------------------------------
    #  helpers
    # -------------------------------------------------
    def _xy(self, df: pd.DataFrame):
        require_columns(df, *BASE_FEATURES, Col.QUALITY)
        return df[BASE_FEATURES].astype(float), df[Col.QUALITY].astype(int)

    def check_folds(self, y: pd.Series, stratified: bool) -> None:
        """
        Raises:
            ConfigurationError: k folds cannot be formed from y.
        """
        k = self.cv_folds
        if k < 2:
            raise ConfigurationError(f"cv_folds must be >= 2, got {k}")
        if k > len(y):
            raise ConfigurationError(f"cv_folds={k} exceeds the number of rows ({len(y)})")
        if stratified:
            counts = y.value_counts()
            small = counts[counts < k]
            if not small.empty:
                raise ConfigurationError(
                    f"cv_folds={k} but quality class(es) {small.to_dict()} have fewer than {k} members; "
                    f"choose a smaller k"
                )

    @staticmethod
    def _fold_table(cv_out: Dict[str, np.ndarray], scoring: Dict[str, Any]) -> pd.DataFrame:
        table = {"fold": np.arange(1, len(cv_out["fit_time"]) + 1)}
        for metric in scoring:
            scores = np.asarray(cv_out[f"test_{metric}"], dtype=float)
            table[metric] = -scores if metric in _NEGATED else scores
        return pd.DataFrame(table)

    # -------------------------------------------------
    #  models
    # -------------------------------------------------
    def fit_classifier(self, df: pd.DataFrame) -> ModelResult:
        """Cross-validated random forest on quality as a categorical target."""
        X, y = self._xy(df)
        self.check_folds(y, stratified=True)
        logger.info(f"Fitting random forest ({self.n_estimators} trees, {self.cv_folds}-fold CV)...")

        model = RandomForestClassifier(
            n_estimators=self.n_estimators,
            random_state=self.random_state,
            n_jobs=self.n_jobs,
        )
        cv = StratifiedKFold(n_splits=self.cv_folds, shuffle=True, random_state=self.random_state)
        cv_out = cross_validate(model, X, y, cv=cv, scoring=CLASSIFIER_SCORING)
        scores = self._fold_table(cv_out, CLASSIFIER_SCORING)

        model.fit(X, y)
        result = ModelResult(
            name="random_forest",
            model=model,
            cv_scores=scores,
            importance=forest_importance(model, BASE_FEATURES),
            extra={"classes": [int(c) for c in model.classes_]},
        )
        self.results[result.name] = result
        logger.info(
            f"random_forest CV accuracy: {scores['accuracy'].mean():.4f}, "
            f"top feature: {result.top_feature}"
        )
        return result

    def fit_regressor(self, df: pd.DataFrame) -> ModelResult:
        """Cross-validated linear regression on standardized features."""
        X, y = self._xy(df)
        self.check_folds(y, stratified=False)

        constant = [c for c in X.columns if X[c].nunique() <= 1]
        if y.nunique() <= 1:
            constant.append(Col.QUALITY)
        if constant:
            raise DegenerateInputError(constant, f"Linear regression undefined for zero-variance column(s): {constant}")

        logger.info(f"Fitting standardized linear regression ({self.cv_folds}-fold CV)...")
        pipeline = Pipeline([
            ("scaler", StandardScaler()),
            ("regressor", LinearRegression()),
        ])
        cv = KFold(n_splits=self.cv_folds, shuffle=True, random_state=self.random_state)
        cv_out = cross_validate(pipeline, X, y.astype(float), cv=cv, scoring=REGRESSOR_SCORING)
        scores = self._fold_table(cv_out, REGRESSOR_SCORING)

        pipeline.fit(X, y.astype(float))
        regressor = pipeline.named_steps["regressor"]
        X_scaled = pipeline.named_steps["scaler"].transform(X)
        importance, t_stats = linear_importance(
            X_scaled, y.to_numpy(dtype=float), regressor.coef_, float(regressor.intercept_), BASE_FEATURES
        )

        coefficients = pd.DataFrame({
            "feature": BASE_FEATURES,
            "coef_standardized": regressor.coef_,
            "t_statistic": t_stats,
        })
        result = ModelResult(
            name="linear_regression",
            model=pipeline,
            cv_scores=scores,
            importance=importance,
            extra={"coefficients": coefficients, "intercept": float(regressor.intercept_)},
        )
        self.results[result.name] = result
        logger.info(
            f"linear_regression CV RMSE: {scores['rmse'].mean():.4f}, R2: {scores['r2'].mean():.4f}, "
            f"top feature: {result.top_feature}"
        )
        return result

    def save_model(self, model_name: str, filepath: str | Path) -> None:
        """Save a fitted model to disk."""
        if model_name not in self.results:
            raise KeyError(f"Model {model_name} has not been fitted")
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(self.results[model_name].model, filepath)
        logger.info(f"Model {model_name} saved to {filepath}")

    def list_fitted(self) -> List[str]:
        return sorted(self.results)
