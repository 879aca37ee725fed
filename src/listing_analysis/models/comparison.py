"""Model comparison utilities for listing price models.

Fits a regression tree, random forest, gradient-boosted trees, LASSO and
ordinary least squares on the same train/test split and reports test-set
MSE, RMSE and R² for each.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
import pandas as pd
from sklearn.base import RegressorMixin
from sklearn.ensemble import RandomForestRegressor
from sklearn.linear_model import LassoCV, LinearRegression
from sklearn.model_selection import train_test_split
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.tree import DecisionTreeRegressor
from xgboost import XGBRegressor

from listing_analysis.constants import FINAL_MODEL_DEFAULTS, MODELING_DEFAULTS, TARGET
from listing_analysis.data.cleaning import is_categorical_column, prepare_model_data

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelScore:
    """Test-set error metrics for one model."""

    model: str
    mse: float
    rmse: float
    r2: float


@dataclass
class FinalModelResult:
    """Enhanced gradient boosting model fitted on log1p(price)."""

    model: XGBRegressor
    score: ModelScore
    rmse_log: float
    feature_importance: pd.Series


def score_predictions(name: str, actual: np.ndarray, predicted: np.ndarray) -> ModelScore:
    """Compute MSE, RMSE and R² (squared Pearson correlation) for predictions.

    R² is NaN when either series is constant.
    """
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    mse = float(np.mean((actual - predicted) ** 2))

    if np.std(actual) == 0 or np.std(predicted) == 0:
        r2 = np.nan
    else:
        r2 = float(np.corrcoef(actual, predicted)[0, 1] ** 2)

    return ModelScore(model=name, mse=mse, rmse=float(np.sqrt(mse)), r2=r2)


def encode_features(df: pd.DataFrame, exclude: list[str]) -> pd.DataFrame:
    """One-hot encode categoricals (first level dropped) into a float matrix."""
    features = df.drop(columns=exclude)
    categorical = [c for c in features.columns if is_categorical_column(features[c])]
    X = pd.get_dummies(features, columns=categorical, drop_first=True, dtype=float)
    return X.astype(float)


def build_models(
    random_state: int = MODELING_DEFAULTS["random_state"],
    n_estimators: int = MODELING_DEFAULTS["n_estimators"],
) -> dict[str, RegressorMixin]:
    """Unfitted models compared by compare_models, keyed by display name."""
    return {
        "Regression Tree": DecisionTreeRegressor(random_state=random_state),
        "Random Forest": RandomForestRegressor(
            n_estimators=n_estimators, random_state=random_state
        ),
        "Gradient Boosting": XGBRegressor(
            n_estimators=n_estimators,
            objective="reg:squarederror",
            random_state=random_state,
            verbosity=0,
        ),
        "LASSO": make_pipeline(StandardScaler(), LassoCV(cv=5, random_state=random_state)),
        "Linear Regression": make_pipeline(StandardScaler(), LinearRegression()),
    }


def compare_models(
    df: pd.DataFrame,
    target: str = TARGET,
    test_size: float = MODELING_DEFAULTS["test_size"],
    random_state: int = MODELING_DEFAULTS["random_state"],
    n_estimators: int = MODELING_DEFAULTS["n_estimators"],
    top_n_neighbourhoods: int | None = MODELING_DEFAULTS["top_n_neighbourhoods"],
    models: dict[str, Any] | None = None,
) -> pd.DataFrame:
    """Fit each model on the same train/test split and score it on the test set.

    Args:
        df: Cleaned listings DataFrame
        target: Target column
        test_size: Fraction of rows held out for testing
        random_state: Seed for the split and the models
        n_estimators: Trees / boosting rounds for the ensembles
        top_n_neighbourhoods: Neighbourhood levels kept before lumping into "Other"
        models: Optional dict of name -> unfitted sklearn-style regressor,
            defaults to build_models()

    Returns:
        DataFrame with one row per model: model, mse, rmse, r2
    """
    model_df = prepare_model_data(df, target=target, top_n_neighbourhoods=top_n_neighbourhoods)
    X = encode_features(model_df, exclude=[target])
    y = model_df[target].astype(float)

    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=test_size, random_state=random_state
    )
    logger.info(
        f"Comparing models on {len(X_train)} train / {len(X_test)} test listings, "
        f"{X.shape[1]} features"
    )

    if models is None:
        models = build_models(random_state=random_state, n_estimators=n_estimators)

    scores = []
    for name, model in models.items():
        model.fit(X_train, y_train)
        score = score_predictions(name, y_test.to_numpy(), model.predict(X_test))
        logger.info(f"{name}: RMSE={score.rmse:,.2f}, R^2={score.r2:.3f}")
        scores.append(score)

    return pd.DataFrame([asdict(s) for s in scores])


def fit_final_model(
    df: pd.DataFrame,
    target: str = TARGET,
    test_size: float = MODELING_DEFAULTS["test_size"],
    random_state: int = MODELING_DEFAULTS["random_state"],
    n_estimators: int = FINAL_MODEL_DEFAULTS["n_estimators"],
    max_depth: int = FINAL_MODEL_DEFAULTS["max_depth"],
    learning_rate: float = FINAL_MODEL_DEFAULTS["learning_rate"],
    top_n_neighbourhoods: int = FINAL_MODEL_DEFAULTS["top_n_neighbourhoods"],
    n_importance: int = 10,
) -> FinalModelResult:
    """Fit gradient boosting on log1p(price) and score it back on the price scale.

    Args:
        df: Cleaned listings DataFrame
        target: Target column (modelled as log1p)
        test_size: Fraction of rows held out for testing
        random_state: Seed for the split and the model
        n_estimators: Boosting rounds
        max_depth: Maximum tree depth
        learning_rate: Boosting learning rate (eta)
        top_n_neighbourhoods: Neighbourhood levels kept before lumping into "Other"
        n_importance: Number of top features reported

    Returns:
        FinalModelResult with the fitted model, price-scale score, log-scale RMSE
        and top feature importances
    """
    model_df = prepare_model_data(df, target=target, top_n_neighbourhoods=top_n_neighbourhoods)
    X = encode_features(model_df, exclude=[target])
    y_log = np.log1p(model_df[target].astype(float))

    X_train, X_test, y_train, y_test = train_test_split(
        X, y_log, test_size=test_size, random_state=random_state
    )

    model = XGBRegressor(
        n_estimators=n_estimators,
        max_depth=max_depth,
        learning_rate=learning_rate,
        objective="reg:squarederror",
        random_state=random_state,
        verbosity=0,
    )
    model.fit(X_train, y_train)

    pred_log = model.predict(X_test)
    rmse_log = float(np.sqrt(np.mean((y_test.to_numpy() - pred_log) ** 2)))
    score = score_predictions(
        "Gradient Boosting (log price)", np.expm1(y_test.to_numpy()), np.expm1(pred_log)
    )

    importance = (
        pd.Series(model.feature_importances_, index=X.columns, name="importance")
        .sort_values(ascending=False)
        .head(n_importance)
    )

    logger.info(
        f"Final model: RMSE={score.rmse:,.2f} (log RMSE={rmse_log:.4f}), R^2={score.r2:.3f}"
    )
    return FinalModelResult(
        model=model, score=score, rmse_log=rmse_log, feature_importance=importance
    )
