"""Feature selection and model comparison for listing prices."""

from listing_analysis.models.comparison import (
    build_models,
    compare_models,
    fit_final_model,
    score_predictions,
)
from listing_analysis.models.features import (
    PredictorSpec,
    fit_linear_model,
    reset_test,
    select_predictors,
)

__all__ = [
    "PredictorSpec",
    "select_predictors",
    "fit_linear_model",
    "reset_test",
    "build_models",
    "compare_models",
    "fit_final_model",
    "score_predictions",
]
