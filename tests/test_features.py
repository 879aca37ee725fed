"""Tests for predictor selection and linear model diagnostics."""

import pandas as pd
import pytest

from listing_analysis.data.cleaning import read_listings, write_listings
from listing_analysis.models.features import (
    PredictorSpec,
    design_matrix,
    fit_linear_model,
    reset_test,
    select_predictors,
    top_categorical_features,
    top_numeric_features,
)


class TestFeatureSelection:
    """Test correlation-based feature ranking."""

    def test_top_numeric_features(self, model_data_df: pd.DataFrame):
        """Strongest numeric driver ranks first; target is excluded."""
        result = top_numeric_features(model_data_df, n=3)

        assert len(result) == 3
        assert result[0] == "accommodates"
        assert "price" not in result

    def test_top_numeric_ignores_booleans(self, model_data_df: pd.DataFrame):
        result = top_numeric_features(model_data_df, n=20)

        assert "email_verified" not in result

    def test_top_categorical_features(self, model_data_df: pd.DataFrame):
        result = top_categorical_features(model_data_df, n=2)

        assert len(result) == 2
        assert result[0] == "room_type"

    def test_no_categoricals(self):
        df = pd.DataFrame({"price": [1.0, 2.0, 3.0], "x": [1, 2, 3]})

        assert top_categorical_features(df) == []

    def test_select_predictors(self, model_data_df: pd.DataFrame):
        spec = select_predictors(model_data_df, n_numeric=2, n_categorical=1)

        assert isinstance(spec, PredictorSpec)
        assert spec.target == "price"
        assert spec.numeric[0] == "accommodates"
        assert spec.categorical == ("room_type",)
        assert spec.predictors == [*spec.numeric, "room_type"]


class TestLinearModel:
    """Test OLS fit on an explicit predictor spec."""

    @pytest.fixture
    def spec(self) -> PredictorSpec:
        return PredictorSpec(
            target="price",
            numeric=("accommodates", "bedrooms"),
            categorical=("room_type",),
        )

    def test_design_matrix(self, model_data_df: pd.DataFrame, spec: PredictorSpec):
        """Incomplete rows dropped, categoricals dummy-coded with a constant."""
        X, y = design_matrix(model_data_df, spec)

        assert len(X) == len(y) == len(model_data_df) - 4
        assert "const" in X.columns
        assert "room_type_Private room" in X.columns
        assert "room_type_Entire home/apt" not in X.columns

    def test_fit_recovers_structure(self, model_data_df: pd.DataFrame, spec: PredictorSpec):
        results = fit_linear_model(model_data_df, spec)

        assert results.rsquared > 0.9
        assert results.params["accommodates"] == pytest.approx(30, abs=3)
        assert results.params["room_type_Private room"] == pytest.approx(-80, abs=8)

    def test_unknown_column_raises(self, model_data_df: pd.DataFrame):
        spec = PredictorSpec(target="price", numeric=("square_feet",), categorical=())

        with pytest.raises(KeyError, match="square_feet"):
            fit_linear_model(model_data_df, spec)

    def test_reset_test(self, model_data_df: pd.DataFrame, spec: PredictorSpec):
        stats = reset_test(fit_linear_model(model_data_df, spec))

        assert set(stats) == {"statistic", "pvalue"}
        assert stats["statistic"] >= 0
        assert 0 <= stats["pvalue"] <= 1


class TestCsvInput:
    """Feature ranking on a cleaned table read back from CSV."""

    def test_categorical_ranking_from_csv(self, model_data_df: pd.DataFrame, tmp_path):
        path = write_listings(model_data_df, tmp_path / "cleaned.csv")
        result = top_categorical_features(read_listings(path), n=20)

        assert result[0] == "room_type"
        assert "email_verified" not in result
