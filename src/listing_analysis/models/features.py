"""Feature selection and linear-model diagnostics for listing prices.

Ranks numeric features by Pearson correlation with price and categorical
features by Spearman correlation of their level codes, then fits an OLS
model on the selected predictors to check for nonlinearity (Ramsey RESET).
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.regression.linear_model import RegressionResultsWrapper
from statsmodels.stats.diagnostic import linear_reset

from listing_analysis.constants import MODELING_DEFAULTS, TARGET
from listing_analysis.data.cleaning import is_categorical_column

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictorSpec:
    """Column roles for a price model."""

    target: str
    numeric: tuple[str, ...]
    categorical: tuple[str, ...]

    @property
    def predictors(self) -> list[str]:
        return [*self.numeric, *self.categorical]

    def validate(self, df: pd.DataFrame) -> None:
        missing = [c for c in [self.target, *self.predictors] if c not in df.columns]
        if missing:
            raise KeyError(f"Columns not in data: {missing}")


def _categorical_columns(df: pd.DataFrame) -> list[str]:
    return [c for c in df.columns if is_categorical_column(df[c])]


def top_numeric_features(df: pd.DataFrame, n: int = 5, target: str = TARGET) -> list[str]:
    """Numeric columns with the largest absolute Pearson correlation with the target.

    Args:
        df: Cleaned listings DataFrame
        n: Number of features to return
        target: Target column

    Returns:
        Column names, strongest correlation first
    """
    numeric = df.select_dtypes(include="number").astype(float)
    corr = numeric.corr()[target].drop(target).abs().dropna()
    ranked = corr.sort_values(ascending=False)
    logger.debug(f"Pearson |r| with {target}:\n{ranked.head(n)}")
    return list(ranked.index[:n])


def top_categorical_features(df: pd.DataFrame, n: int = 5, target: str = TARGET) -> list[str]:
    """Categorical columns with the largest absolute Spearman correlation with the target.

    Levels are replaced by their integer codes before ranking, so the result
    is only meaningful for ordered or binary categories; nominal ones are
    ranked by their alphabetical order.

    Args:
        df: Cleaned listings DataFrame
        n: Number of features to return
        target: Target column

    Returns:
        Column names, strongest correlation first
    """
    columns = _categorical_columns(df)
    if not columns:
        return []

    codes = pd.DataFrame(
        {c: df[c].astype("category").cat.codes.replace(-1, np.nan) for c in columns},
        index=df.index,
    )
    corr = codes.corrwith(df[target].astype(float), method="spearman").abs().dropna()
    ranked = corr.sort_values(ascending=False)
    logger.debug(f"Spearman |rho| with {target}:\n{ranked.head(n)}")
    return list(ranked.index[:n])


def select_predictors(
    df: pd.DataFrame,
    n_numeric: int = MODELING_DEFAULTS["top_n_features"],
    n_categorical: int = MODELING_DEFAULTS["top_n_features"],
    target: str = TARGET,
) -> PredictorSpec:
    """Pick the top correlated numeric and categorical predictors of the target."""
    spec = PredictorSpec(
        target=target,
        numeric=tuple(top_numeric_features(df, n_numeric, target)),
        categorical=tuple(top_categorical_features(df, n_categorical, target)),
    )
    logger.info(f"Selected predictors: numeric={spec.numeric}, categorical={spec.categorical}")
    return spec


def design_matrix(df: pd.DataFrame, spec: PredictorSpec) -> tuple[pd.DataFrame, pd.Series]:
    """Build an OLS design matrix (with constant) for the spec's predictors.

    Rows missing the target or any predictor are dropped; categoricals are
    one-hot encoded with the first level as reference.
    """
    spec.validate(df)
    data = df[[spec.target, *spec.predictors]].dropna()

    X = pd.get_dummies(
        data[spec.predictors],
        columns=list(spec.categorical),
        drop_first=True,
        dtype=float,
    ).astype(float)
    X = sm.add_constant(X, has_constant="add")
    y = data[spec.target].astype(float)
    return X, y


def fit_linear_model(df: pd.DataFrame, spec: PredictorSpec) -> RegressionResultsWrapper:
    """Fit OLS of the target on the spec's predictors.

    Args:
        df: Cleaned listings DataFrame
        spec: Predictor roles

    Returns:
        Fitted statsmodels results
    """
    X, y = design_matrix(df, spec)
    if len(y) <= X.shape[1]:
        raise ValueError(f"Not enough complete rows ({len(y)}) for {X.shape[1]} parameters")

    results = sm.OLS(y, X).fit()
    logger.info(
        f"OLS on {len(y)} listings: R^2={results.rsquared:.3f}, adj R^2={results.rsquared_adj:.3f}"
    )
    return results


def reset_test(results: RegressionResultsWrapper, power: int = 2) -> dict[str, float]:
    """Ramsey RESET test on fitted values.

    A small p-value indicates the linear specification misses nonlinearity.

    Returns:
        Dict with F statistic and p-value
    """
    test = linear_reset(results, power=power, test_type="fitted", use_f=True)
    stats = {
        "statistic": float(np.squeeze(test.statistic)),
        "pvalue": float(np.squeeze(test.pvalue)),
    }
    logger.info(f"RESET (power={power}): F={stats['statistic']:.3f}, p={stats['pvalue']:.4g}")
    return stats
