"""Tests for the command-line entry point."""

import pandas as pd
import pytest

from listing_analysis.cli import build_parser, main


class TestClean:
    """Test the clean subcommand end to end."""

    def test_clean_writes_output(self, raw_listings_df: pd.DataFrame, tmp_path):
        raw_path = tmp_path / "listings.csv.gz"
        out_path = tmp_path / "out" / "cleaned.csv"
        raw_listings_df.to_csv(raw_path, index=False)

        assert main(["clean", str(raw_path), str(out_path)]) == 0

        cleaned = pd.read_csv(out_path)
        assert len(cleaned) == 9
        assert "amenities" not in cleaned.columns
        assert "property_type_grouped" in cleaned.columns

    def test_cutoff_option(self, raw_listings_df: pd.DataFrame, tmp_path):
        raw_path = tmp_path / "listings.csv"
        out_path = tmp_path / "cleaned.csv"
        raw_listings_df.to_csv(raw_path, index=False)

        assert main(["clean", str(raw_path), str(out_path), "--cutoff", "2024-06-01"]) == 0
        assert len(pd.read_csv(out_path)) == 10

    def test_missing_input_fails(self, tmp_path):
        out_path = tmp_path / "cleaned.csv"

        assert main(["clean", str(tmp_path / "missing.csv"), str(out_path)]) == 1
        assert not out_path.exists()

    def test_missing_column_fails(self, raw_listings_df: pd.DataFrame, tmp_path):
        raw_path = tmp_path / "listings.csv"
        raw_listings_df.drop(columns=["price"]).to_csv(raw_path, index=False)

        assert main(["clean", str(raw_path), str(tmp_path / "cleaned.csv")]) == 1


class TestParser:
    """Test argument parsing."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_compare_defaults(self):
        args = build_parser().parse_args(["compare", "cleaned.csv"])

        assert args.seed == 42
        assert args.test_size == 0.2
        assert args.top_n == 5
        assert not args.final


@pytest.mark.slow
class TestCompare:
    """Smoke test the compare subcommand on synthetic cleaned data."""

    def test_compare_prints_table(self, model_data_df: pd.DataFrame, tmp_path, capsys):
        path = tmp_path / "cleaned.csv"
        model_data_df.to_csv(path, index=False)

        assert main(["compare", str(path), "--top-n", "2", "--final"]) == 0

        out = capsys.readouterr().out
        assert "Random Forest" in out
        assert "LASSO" in out
        assert "RESET" in out
        assert "Final model" in out
