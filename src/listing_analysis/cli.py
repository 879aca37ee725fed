"""Command-line entry point: clean a listings export or compare price models."""

import argparse
import logging
import sys
from datetime import date

from listing_analysis.constants import MODELING_DEFAULTS
from listing_analysis.data.cleaning import (
    CleaningConfig,
    SchemaError,
    clean_listings,
    read_listings,
    validate_cleaned_listings,
    write_listings,
)
from listing_analysis.models.comparison import compare_models, fit_final_model
from listing_analysis.models.features import fit_linear_model, reset_test, select_predictors

logger: logging.Logger = logging.getLogger(__name__)


def run_clean(args: argparse.Namespace) -> int:
    config = CleaningConfig(cutoff_date=args.cutoff, iqr_multiplier=args.iqr_multiplier)
    raw = read_listings(args.input)
    cleaned = clean_listings(raw, config)

    result = validate_cleaned_listings(cleaned)
    for warning in result.warnings:
        logger.warning(warning)
    if not result.is_valid:
        for error in result.errors:
            logger.error(error)
        return 1

    write_listings(cleaned, args.output)
    return 0


def run_compare(args: argparse.Namespace) -> int:
    df = read_listings(args.input)

    spec = select_predictors(df, n_numeric=args.top_n, n_categorical=args.top_n)
    ols = fit_linear_model(df, spec)
    reset = reset_test(ols)
    print(f"Linear model on {', '.join(spec.predictors)}")
    print(f"  R^2={ols.rsquared:.3f}  RESET F={reset['statistic']:.3f} p={reset['pvalue']:.4g}")

    scores = compare_models(df, test_size=args.test_size, random_state=args.seed)
    print(scores.to_string(index=False, float_format=lambda v: f"{v:,.4f}"))

    if args.final:
        final = fit_final_model(df, test_size=args.test_size, random_state=args.seed)
        print(
            f"Final model: MSE={final.score.mse:,.2f} RMSE={final.score.rmse:,.2f} "
            f"R^2={final.score.r2:.4f}"
        )
        print(final.feature_importance.to_string())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="listing-analysis", description="Short-term-rental listing price analysis"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    clean = subparsers.add_parser("clean", help="Clean a raw listings CSV")
    clean.add_argument("input", help="Raw listings CSV (may be gzipped)")
    clean.add_argument("output", help="Destination for the cleaned CSV")
    clean.add_argument(
        "--cutoff",
        type=date.fromisoformat,
        default=CleaningConfig.cutoff_date,
        help="Keep listings scraped on or after this date (default: %(default)s)",
    )
    clean.add_argument(
        "--iqr-multiplier",
        type=float,
        default=CleaningConfig.iqr_multiplier,
        help="IQR multiplier for price outlier removal (default: %(default)s)",
    )
    clean.set_defaults(func=run_clean)

    compare = subparsers.add_parser("compare", help="Compare price models on a cleaned CSV")
    compare.add_argument("input", help="Cleaned listings CSV")
    compare.add_argument("--seed", type=int, default=MODELING_DEFAULTS["random_state"])
    compare.add_argument("--test-size", type=float, default=MODELING_DEFAULTS["test_size"])
    compare.add_argument(
        "--top-n",
        type=int,
        default=MODELING_DEFAULTS["top_n_features"],
        help="Predictors of each kind used by the linear model (default: %(default)s)",
    )
    compare.add_argument(
        "--final", action="store_true", help="Also fit the log-price gradient boosting model"
    )
    compare.set_defaults(func=run_compare)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (FileNotFoundError, SchemaError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
