"""
tek_contagion/models/logit.py — Logistic regression sequence + k-fold CV.

Four nested specifications of intrastate war incidence. Each adds one piece
of the kinship-contagion argument to a common set of controls:

    baseline      war ~ controls
    neighbor_war  + kin neighbors at war last year
    clustering    + ego-network clustering of kin ties
    interaction   + neighbor_war × clustering

Fitting uses statsmodels (formula API) for coefficient tables; out-of-sample
performance uses scikit-learn's StratifiedKFold with the same statsmodels
fit refit on every training split.
"""

import logging
import re
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from sklearn.metrics import brier_score_loss, log_loss, roc_auc_score
from sklearn.model_selection import StratifiedKFold

from tek_contagion.config import DEFAULT_CONFIG, TekConfig

logger = logging.getLogger(__name__)

OUTCOME = "war"
CONTROLS = "war_lag + polity + log_gdp + peace_years"


@dataclass(frozen=True)
class ModelSpec:
    """A named patsy formula."""

    name: str
    formula: str

    @property
    def outcome(self) -> str:
        return self.formula.split("~", 1)[0].strip()

    @property
    def variables(self) -> list[str]:
        """Every bare column name the formula references, outcome first."""
        names = re.findall(r"[A-Za-z_][A-Za-z0-9_]*", self.formula)
        seen = list(dict.fromkeys(n for n in names if n not in {"C", "np", "log"}))
        return seen


MODEL_SEQUENCE: list[ModelSpec] = [
    ModelSpec("baseline", f"{OUTCOME} ~ {CONTROLS}"),
    ModelSpec("neighbor_war", f"{OUTCOME} ~ {CONTROLS} + tek_neighbor_war"),
    ModelSpec("clustering", f"{OUTCOME} ~ {CONTROLS} + tek_neighbor_war + tek_clustering"),
    ModelSpec("interaction", f"{OUTCOME} ~ {CONTROLS} + tek_neighbor_war * tek_clustering"),
]


@dataclass
class CVResult:
    """Held-out performance of one specification across k folds."""

    model: str
    n_folds: int
    fold_auc: list[float] = field(default_factory=list)
    fold_brier: list[float] = field(default_factory=list)
    fold_log_loss: list[float] = field(default_factory=list)

    @property
    def mean_auc(self) -> float:
        return float(np.mean(self.fold_auc)) if self.fold_auc else float("nan")

    @property
    def mean_brier(self) -> float:
        return float(np.mean(self.fold_brier)) if self.fold_brier else float("nan")

    @property
    def mean_log_loss(self) -> float:
        return float(np.mean(self.fold_log_loss)) if self.fold_log_loss else float("nan")


@dataclass
class ModelResult:
    """Full-sample fit plus cross-validated performance for one spec."""

    spec: ModelSpec
    fit: object  # statsmodels BinaryResultsWrapper
    cv: CVResult
    nobs: int
    aic: float
    pseudo_r2: float

    def summary_text(self) -> str:
        return self.fit.summary2().as_text()


def model_frame(spec: ModelSpec, data: pd.DataFrame) -> pd.DataFrame:
    """Complete cases of the columns spec references."""
    missing = [v for v in spec.variables if v not in data.columns]
    if missing:
        raise ValueError(f"Model '{spec.name}': column(s) {missing} not in data")
    frame = data[spec.variables].dropna().reset_index(drop=True)
    frame[spec.outcome] = frame[spec.outcome].astype(int)
    return frame


def fit_logit(spec: ModelSpec, data: pd.DataFrame):
    """Fit spec on the complete cases of data with statsmodels' logit."""
    frame = model_frame(spec, data)
    result = smf.logit(spec.formula, data=frame).fit(disp=False)
    logger.debug("Fitted '%s' on %d rows (AIC=%.1f).", spec.name, int(result.nobs), result.aic)
    return result


def cross_validate_logit(
    spec: ModelSpec,
    data: pd.DataFrame,
    config: TekConfig = DEFAULT_CONFIG,
) -> CVResult:
    """
    Stratified k-fold cross-validation of one logit specification.

    Each fold refits the statsmodels logit on the training split and scores
    predicted probabilities on the held-out split with ROC AUC, Brier score
    and log loss.

    Notes:
        - The fold count is reduced to the minority-class count when that is
          smaller than config.cv_folds, so every test fold holds both classes.

    Raises:
        ValueError: If either outcome class has fewer than 2 observations.
    """
    frame = model_frame(spec, data)
    y = frame[spec.outcome].to_numpy()
    minority = int(min((y == 1).sum(), (y == 0).sum()))
    if minority < 2:
        raise ValueError(
            f"Model '{spec.name}': need at least 2 observations of each outcome "
            f"class for cross-validation, got {minority}"
        )

    n_folds = min(config.cv_folds, minority)
    if n_folds < config.cv_folds:
        logger.warning(
            "Model '%s': reducing folds from %d to %d (minority class size).",
            spec.name, config.cv_folds, n_folds,
        )

    splitter = StratifiedKFold(n_splits=n_folds, shuffle=True, random_state=config.random_state)
    cv = CVResult(model=spec.name, n_folds=n_folds)

    for train_idx, test_idx in splitter.split(frame, y):
        train = frame.iloc[train_idx]
        test = frame.iloc[test_idx]
        fitted = smf.logit(spec.formula, data=train).fit(disp=False)
        prob = np.clip(fitted.predict(test).to_numpy(), 1e-12, 1 - 1e-12)
        truth = test[spec.outcome].to_numpy()
        cv.fold_auc.append(float(roc_auc_score(truth, prob)))
        cv.fold_brier.append(float(brier_score_loss(truth, prob)))
        cv.fold_log_loss.append(float(log_loss(truth, prob, labels=[0, 1])))

    logger.info(
        "CV '%s': %d folds, mean AUC %.3f, mean Brier %.4f.",
        spec.name, n_folds, cv.mean_auc, cv.mean_brier,
    )
    return cv


def run_model_sequence(
    data: pd.DataFrame,
    config: TekConfig = DEFAULT_CONFIG,
    specs: list[ModelSpec] | None = None,
) -> list[ModelResult]:
    """Fit and cross-validate every specification in order."""
    specs = specs if specs is not None else MODEL_SEQUENCE
    results: list[ModelResult] = []
    for spec in specs:
        fitted = fit_logit(spec, data)
        cv = cross_validate_logit(spec, data, config)
        results.append(
            ModelResult(
                spec=spec,
                fit=fitted,
                cv=cv,
                nobs=int(fitted.nobs),
                aic=float(fitted.aic),
                pseudo_r2=float(fitted.prsquared),
            )
        )
    return results


def comparison_table(results: list[ModelResult]) -> pd.DataFrame:
    """One row per model: nobs, AIC, pseudo R², mean CV AUC/Brier/log loss."""
    return pd.DataFrame(
        [
            {
                "model": r.spec.name,
                "nobs": r.nobs,
                "aic": r.aic,
                "pseudo_r2": r.pseudo_r2,
                "cv_folds": r.cv.n_folds,
                "cv_auc": r.cv.mean_auc,
                "cv_brier": r.cv.mean_brier,
                "cv_log_loss": r.cv.mean_log_loss,
            }
            for r in results
        ]
    )
