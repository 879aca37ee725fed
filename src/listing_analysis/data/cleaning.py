"""Data cleaning and feature engineering for short-term-rental listings."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from functools import partial
from pathlib import Path

import numpy as np
import pandas as pd

logger: logging.Logger = logging.getLogger(__name__)

# Columns with no predictive value: identifiers, URLs, scrape metadata,
# free text and unstructured duplicates of neighbourhood_cleansed
DROP_COLUMNS = [
    "listing_url",
    "host_url",
    "host_thumbnail_url",
    "host_picture_url",
    "picture_url",
    "calendar_updated",
    "scrape_id",
    "source",
    "license",
    "neighbourhood_group_cleansed",
    "name",
    "host_name",
    "host_location",
    "host_neighbourhood",
    "neighbourhood",
    "calendar_last_scraped",
    "last_scraped",
    "description",
    "neighborhood_overview",
    "host_about",
    "longitude",
    "latitude",
    "id",
    "host_id",
]

DATE_COLUMNS = ["host_since", "first_review", "last_review"]

PERCENT_COLUMNS = ["host_response_rate", "host_acceptance_rate"]

BOOLEAN_COLUMNS = [
    "host_is_superhost",
    "host_has_profile_pic",
    "host_identity_verified",
    "instant_bookable",
    "has_availability",
]

BOOLEAN_LEVELS = ["f", "t"]

VERIFICATION_TYPES = ["email", "phone", "work_email", "photographer"]

ROOM_TYPES = ["Entire home/apt", "Hotel room", "Private room", "Shared room"]

# 4 = slowest, 1 = quickest
RESPONSE_TIME_RANKS = {
    "within an hour": 1,
    "within a few hours": 2,
    "within a day": 3,
    "a few days or more": 4,
}

AMENITY_CATEGORIES: dict[str, list[str]] = {
    "kitchen": [
        "Kitchen",
        "Cooking basics",
        "Stove",
        "Oven",
        "Microwave",
        "Refrigerator",
        "Toaster",
        "Freezer",
        "Baking sheet",
    ],
    "tv": ["TV", "Netflix", "TV with standard cable", "Smart TV"],
    "work_friendly": ["Dedicated workspace", "Ethernet connection"],
    "bathroom": ["Shampoo", "Conditioner", "Body soap", "Hair dryer", "Bathtub", "Shower gel"],
    "laundry": [
        "Washer",
        "Dryer",
        "Free washer – In unit",
        "Free dryer – In unit",
        "Laundromat nearby",
    ],
    "heating_cooling": ["Heating", "Central heating", "Air conditioning", "Portable fans"],
    "safety": [
        "Smoke alarm",
        "Carbon monoxide alarm",
        "Fire extinguisher",
        "First aid kit",
        "Safe",
    ],
    "sleeping_comfort": ["Bed linens", "Extra pillows and blankets", "Room-darkening shades"],
    "child_friendly": [
        "Crib",
        "High chair",
        "Pack ’n play/Travel crib",
        "Children’s books and toys",
        "Children’s dinnerware",
    ],
    "luxury": ["Hot water kettle", "Wine glasses", "Garden view", "City skyline view"],
    "outdoor_space": [
        "Private patio or balcony",
        "Backyard",
        "Outdoor dining area",
        "Outdoor furniture",
        "BBQ grill",
    ],
    "security": ["Lockbox", "Smart lock", "Keypad", "Exterior security cameras"],
}

VERIFICATION_COLUMNS = [f"{v}_verified" for v in VERIFICATION_TYPES]
AMENITY_SCORE_COLUMNS = [f"{c}_score" for c in AMENITY_CATEGORIES]

PROPERTY_TYPE_DEFAULT = "Other"


def _contains_any(*fragments: str) -> Callable[[str], bool]:
    """Build a case-sensitive substring predicate over several fragments."""
    return lambda text: any(f in text for f in fragments)


# Order matters - first matching rule wins
PROPERTY_TYPE_RULES: list[tuple[Callable[[str], bool], str]] = [
    (_contains_any("rental unit", "condo", "serviced apartment"), "Apartment/Condo"),
    (_contains_any("home", "townhouse", "guesthouse", "villa"), "House/Townhouse"),
    (_contains_any("hotel", "boutique hotel", "aparthotel"), "Hotel/Serviced Living"),
    (_contains_any("Shared room", "hostel"), "Shared Living Space"),
    (
        _contains_any(
            "Houseboat",
            "Campsite",
            "Tent",
            "Yurt",
            "Barn",
            "Castle",
            "Treehouse",
            "Dome",
            "Shepherd’s hut",
            "Cycladic home",
            "Lighthouse",
        ),
        "Unique Stay",
    ),
]

PROPERTY_TYPE_GROUPS = [label for _, label in PROPERTY_TYPE_RULES] + [PROPERTY_TYPE_DEFAULT]

# Raw columns consumed by the pipeline; a cleaned table has none of them
SOURCE_COLUMNS = [
    "last_scraped",
    "host_verifications",
    "property_type",
    "bathrooms_text",
    "amenities",
]
DERIVED_COLUMNS = VERIFICATION_COLUMNS + ["property_type_grouped"] + AMENITY_SCORE_COLUMNS


class SchemaError(Exception):
    """Raised when the listings table is missing a column a step requires."""

    pass


@dataclass(frozen=True)
class CleaningConfig:
    """Fixed parameters of the cleaning pipeline."""

    cutoff_date: date = date(2024, 9, 1)
    date_epoch: date = date(2000, 1, 1)
    iqr_multiplier: float = 1.5


@dataclass(frozen=True)
class PriceFence:
    """IQR fence on price: [q1 - k*iqr, q3 + k*iqr]."""

    q1: float
    q3: float
    lower: float
    upper: float

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1


@dataclass
class ValidationResult:
    """Result of validating a cleaned listings table."""

    is_valid: bool
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _require_columns(df: pd.DataFrame, columns: list[str], step: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(f"{step}: missing required column(s) {missing}")


def _already_applied(df: pd.DataFrame, source: str, produced: list[str], step: str) -> bool:
    """Whether a step consuming `source` has already run on this table.

    Raises SchemaError when neither the source column nor its outputs exist.
    """
    if source in df.columns:
        return False
    if all(c in df.columns for c in produced):
        logger.debug(f"{step}: '{source}' already consumed, skipping")
        return True
    raise SchemaError(f"{step}: missing required column '{source}'")


def _strip_to_numeric(series: pd.Series, pattern: str) -> pd.Series:
    """Remove characters matching `pattern` and coerce to float (bad values -> NaN)."""
    if pd.api.types.is_numeric_dtype(series):
        return series.astype(float)
    stripped = series.astype(object).str.replace(pattern, "", regex=True).str.strip()
    return pd.to_numeric(stripped, errors="coerce").astype(float)


def _to_closed_category(series: pd.Series, categories: list[str]) -> pd.Series:
    """Cast to a fixed-vocabulary categorical, masking values outside it first."""
    values = series.astype(object)
    return values.where(values.isin(categories)).astype(pd.CategoricalDtype(categories))


def is_categorical_column(series: pd.Series) -> bool:
    """Whether a column holds categorical levels rather than numbers or flags.

    Covers category dtype and text columns, whether pandas stores the text as
    object or as its dedicated string dtype (the default for read_csv in
    pandas 3). Boolean columns are not categorical.
    """
    dtype = series.dtype
    if isinstance(dtype, pd.CategoricalDtype):
        return True
    if pd.api.types.is_bool_dtype(dtype) or pd.api.types.is_numeric_dtype(dtype):
        return False
    return pd.api.types.is_object_dtype(dtype) or pd.api.types.is_string_dtype(dtype)


def is_cleaned_table(df: pd.DataFrame) -> bool:
    """Check whether a table is already the output of clean_listings."""
    return not any(c in df.columns for c in SOURCE_COLUMNS) and all(
        c in df.columns for c in DERIVED_COLUMNS
    )


def read_listings(path: str | Path) -> pd.DataFrame:
    """Read a listings CSV (optionally gzipped).

    Args:
        path: Path to the CSV file

    Returns:
        Raw listings DataFrame

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Listings file not found: {path}")

    df = pd.read_csv(path, low_memory=False)
    logger.info(f"Read {len(df)} listings with {len(df.columns)} columns from {path}")
    return df


def write_listings(df: pd.DataFrame, path: str | Path) -> Path:
    """Write a listings table to CSV without the index."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logger.info(f"Wrote {len(df)} listings to {path}")
    return path


def filter_by_scrape_date(df: pd.DataFrame, cutoff: date) -> pd.DataFrame:
    """Keep listings scraped on or after `cutoff`; unparseable dates are dropped."""
    _require_columns(df, ["last_scraped"], "filter_by_scrape_date")

    scraped = pd.to_datetime(df["last_scraped"], errors="coerce", format="%Y-%m-%d")
    result = df[scraped >= pd.Timestamp(cutoff)].copy()

    logger.info(f"Scrape date filter (>= {cutoff}): kept {len(result)} of {len(df)} listings")
    return result


def drop_unused_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Drop identifier, URL and free-text columns present in the table."""
    to_drop = [c for c in DROP_COLUMNS if c in df.columns]
    logger.debug(f"Dropping {len(to_drop)} columns: {to_drop}")
    return df.drop(columns=to_drop)


def convert_dates(df: pd.DataFrame, epoch: date) -> pd.DataFrame:
    """Convert date columns to days since `epoch`; missing dates stay missing."""
    _require_columns(df, DATE_COLUMNS, "convert_dates")
    df = df.copy()

    for col in DATE_COLUMNS:
        if pd.api.types.is_numeric_dtype(df[col]):
            continue
        parsed = pd.to_datetime(df[col], errors="coerce", format="%Y-%m-%d")
        df[col] = (parsed - pd.Timestamp(epoch)).dt.days.astype(float)

    return df


def convert_percentages(df: pd.DataFrame) -> pd.DataFrame:
    """Convert '95%' style strings to fractions (0.95)."""
    _require_columns(df, PERCENT_COLUMNS, "convert_percentages")
    df = df.copy()

    for col in PERCENT_COLUMNS:
        if pd.api.types.is_numeric_dtype(df[col]):
            continue
        df[col] = _strip_to_numeric(df[col], r"%") / 100

    return df


def _to_flag(value: object) -> str | float:
    if isinstance(value, (bool, np.bool_)):
        return "t" if value else "f"
    if isinstance(value, str):
        token = value.strip().lower()
        if token in ("t", "true"):
            return "t"
        if token in ("f", "false"):
            return "f"
    return np.nan


def convert_booleans(df: pd.DataFrame) -> pd.DataFrame:
    """Convert t/f flags to a two-level category, keeping missing as missing."""
    _require_columns(df, BOOLEAN_COLUMNS, "convert_booleans")
    df = df.copy()

    dtype = pd.CategoricalDtype(BOOLEAN_LEVELS)
    for col in BOOLEAN_COLUMNS:
        df[col] = df[col].astype(object).map(_to_flag).astype(dtype)

    return df


def convert_price(df: pd.DataFrame) -> pd.DataFrame:
    """Parse '$1,250.00' style prices; negative or non-finite values become NaN."""
    _require_columns(df, ["price"], "convert_price")
    df = df.copy()

    price = _strip_to_numeric(df["price"], r"[$£€,]")
    df["price"] = price.where(np.isfinite(price) & (price >= 0))

    n_bad = df["price"].isna().sum()
    if n_bad > 0:
        logger.info(f"{n_bad} listings have a missing or unparseable price")
    return df


def parse_verifications(value: object) -> set[str]:
    """Split a "['email', 'phone']" style list into its verification tokens."""
    if not isinstance(value, str):
        return set()
    tokens = (t.strip().strip("'\"").strip() for t in value.strip().strip("[]").split(","))
    return {t for t in tokens if t}


def expand_verifications(df: pd.DataFrame) -> pd.DataFrame:
    """Expand host_verifications into one boolean column per known method."""
    if _already_applied(df, "host_verifications", VERIFICATION_COLUMNS, "expand_verifications"):
        return df.copy()
    df = df.copy()

    tokens = df["host_verifications"].map(parse_verifications)
    for method, col in zip(VERIFICATION_TYPES, VERIFICATION_COLUMNS, strict=True):
        df[col] = tokens.map(lambda found, m=method: m in found).astype(bool)

    return df.drop(columns=["host_verifications"])


def convert_categoricals(df: pd.DataFrame) -> pd.DataFrame:
    """Make room_type and neighbourhood_cleansed closed categoricals.

    room_type uses a fixed vocabulary (unknown values become missing);
    neighbourhood_cleansed uses the districts observed in this table.
    """
    _require_columns(df, ["room_type", "neighbourhood_cleansed"], "convert_categoricals")
    df = df.copy()

    df["room_type"] = _to_closed_category(df["room_type"], ROOM_TYPES)

    districts = df["neighbourhood_cleansed"].astype(object)
    vocabulary = sorted(districts.dropna().unique())
    df["neighbourhood_cleansed"] = districts.astype(pd.CategoricalDtype(vocabulary))

    return df


def group_property_type(property_type: str | None) -> str:
    """Map a raw property type to its semantic bucket (first matching rule wins).

    Args:
        property_type: Raw property type, e.g. "Entire rental unit"

    Returns:
        Group label, "Other" when no rule matches
    """
    if not isinstance(property_type, str):
        return PROPERTY_TYPE_DEFAULT
    for predicate, label in PROPERTY_TYPE_RULES:
        if predicate(property_type):
            return label
    return PROPERTY_TYPE_DEFAULT


def group_property_types(df: pd.DataFrame) -> pd.DataFrame:
    """Replace property_type with the low-cardinality property_type_grouped."""
    if _already_applied(df, "property_type", ["property_type_grouped"], "group_property_types"):
        df = df.copy()
        df["property_type_grouped"] = _to_closed_category(
            df["property_type_grouped"], PROPERTY_TYPE_GROUPS
        )
        return df
    df = df.copy()

    df["property_type_grouped"] = df["property_type"].map(group_property_type).astype(
        pd.CategoricalDtype(PROPERTY_TYPE_GROUPS)
    )
    logger.debug(
        f"Property type groups: {df['property_type_grouped'].value_counts().to_dict()}"
    )

    return df.drop(columns=["property_type"])


def parse_bathrooms_text(text: str | None) -> float:
    """Parse bathroom descriptions like '1.5 shared baths' or 'Half-bath'.

    Only the exact 'Half-bath' token maps to 0.5; variants such as
    'Shared half-bath' carry no digits and stay missing.
    """
    if not isinstance(text, str):
        return np.nan
    if text.strip() == "Half-bath":
        return 0.5
    digits = re.sub(r"[^0-9.]", "", text)
    try:
        return float(digits)
    except ValueError:
        return np.nan


def reconcile_bathrooms(df: pd.DataFrame) -> pd.DataFrame:
    """Fill missing bathrooms from bathrooms_text, then drop the text column."""
    if "bathrooms_text" not in df.columns and is_cleaned_table(df):
        logger.debug("reconcile_bathrooms: 'bathrooms_text' already consumed, skipping")
        return df.copy()
    _require_columns(df, ["bathrooms", "bathrooms_text"], "reconcile_bathrooms")
    df = df.copy()

    from_text = df["bathrooms_text"].map(parse_bathrooms_text).astype(float)
    bathrooms = pd.to_numeric(df["bathrooms"], errors="coerce").astype(float)
    df["bathrooms"] = bathrooms.fillna(from_text)

    return df.drop(columns=["bathrooms_text"])


def score_amenities(amenities: str | None, keywords: list[str]) -> int:
    """Count keywords found in the amenities text (case-insensitive substring)."""
    if not isinstance(amenities, str):
        return 0
    text = amenities.lower()
    return sum(kw.lower() in text for kw in keywords)


def add_amenity_scores(df: pd.DataFrame) -> pd.DataFrame:
    """Add one <category>_score column per amenity category and drop amenities."""
    if _already_applied(df, "amenities", AMENITY_SCORE_COLUMNS, "add_amenity_scores"):
        return df.copy()
    df = df.copy()

    for category, col in zip(AMENITY_CATEGORIES, AMENITY_SCORE_COLUMNS, strict=True):
        keywords = AMENITY_CATEGORIES[category]
        df[col] = df["amenities"].map(partial(score_amenities, keywords=keywords)).astype(int)

    return df.drop(columns=["amenities"])


def encode_response_time(df: pd.DataFrame) -> pd.DataFrame:
    """Encode host_response_time as 1 (within an hour) .. 4 (a few days or more)."""
    _require_columns(df, ["host_response_time"], "encode_response_time")
    df = df.copy()

    col = df["host_response_time"]
    valid_ranks = list(RESPONSE_TIME_RANKS.values())
    if pd.api.types.is_numeric_dtype(col):
        ranks = col.where(col.isin(valid_ranks))
    else:
        ranks = col.astype(object).map(RESPONSE_TIME_RANKS)
    df["host_response_time"] = ranks.astype("Int64")

    return df


def compute_price_fence(prices: pd.Series, multiplier: float = 1.5) -> PriceFence:
    """Compute the IQR fence for a price series (missing values ignored)."""
    q1 = float(prices.quantile(0.25))
    q3 = float(prices.quantile(0.75))
    iqr = q3 - q1
    return PriceFence(q1=q1, q3=q3, lower=q1 - multiplier * iqr, upper=q3 + multiplier * iqr)


def filter_price_outliers(df: pd.DataFrame, multiplier: float = 1.5) -> pd.DataFrame:
    """Drop listings without a price or with a price outside the IQR fence.

    The fence is computed once from all listings that have a price.
    """
    _require_columns(df, ["price"], "filter_price_outliers")

    priced = df[df["price"].notna()]
    if priced.empty:
        logger.warning(f"No listings with a valid price; dropping all {len(df)} listings")
        return priced.copy()

    fence = compute_price_fence(priced["price"], multiplier)
    result = priced[(priced["price"] >= fence.lower) & (priced["price"] <= fence.upper)].copy()

    logger.info(
        f"Price fence [{fence.lower:,.2f}, {fence.upper:,.2f}] (IQR {fence.iqr:,.2f}): "
        f"kept {len(result)} of {len(df)} listings"
    )
    return result


def clean_listings(df: pd.DataFrame, config: CleaningConfig | None = None) -> pd.DataFrame:
    """Clean a raw listings table.

    Performs, in order:
    - Scrape date filter
    - Column pruning
    - Dates to day counts, percentages to fractions, t/f flags to categories
    - Price parsing
    - Verification, property type, bathroom and amenity feature engineering
    - Response time ordinal encoding
    - Price outlier removal (IQR fence)

    Each step returns a new DataFrame; the input is never modified. A table that
    is already cleaned passes through unchanged (the row filters are skipped).

    Args:
        df: Raw listings DataFrame
        config: Cleaning parameters (defaults to CleaningConfig())

    Returns:
        Cleaned DataFrame
    """
    config = config or CleaningConfig()
    already_cleaned = is_cleaned_table(df)
    logger.info(f"Cleaning {len(df)} listings")

    steps: list[tuple[str, Callable[[pd.DataFrame], pd.DataFrame]]] = [
        ("drop_unused_columns", drop_unused_columns),
        ("convert_dates", partial(convert_dates, epoch=config.date_epoch)),
        ("convert_percentages", convert_percentages),
        ("convert_booleans", convert_booleans),
        ("convert_price", convert_price),
        ("expand_verifications", expand_verifications),
        ("convert_categoricals", convert_categoricals),
        ("group_property_types", group_property_types),
        ("reconcile_bathrooms", reconcile_bathrooms),
        ("add_amenity_scores", add_amenity_scores),
        ("encode_response_time", encode_response_time),
    ]

    if already_cleaned:
        logger.info("Table is already cleaned; skipping scrape date and price outlier filters")
    else:
        steps.insert(
            0, ("filter_by_scrape_date", partial(filter_by_scrape_date, cutoff=config.cutoff_date))
        )
        steps.append(
            (
                "filter_price_outliers",
                partial(filter_price_outliers, multiplier=config.iqr_multiplier),
            )
        )

    for name, step in steps:
        n_before = len(df)
        df = step(df)
        if n_before > 0 and len(df) < 0.5 * n_before:
            logger.warning(f"{name} dropped {n_before - len(df)} of {n_before} listings")

    df["neighbourhood_cleansed"] = df["neighbourhood_cleansed"].cat.remove_unused_categories()

    logger.info(f"Cleaning complete. Final dataset: {len(df)} listings, {len(df.columns)} columns")
    return df


def validate_cleaned_listings(
    df: pd.DataFrame, fence: PriceFence | None = None
) -> ValidationResult:
    """Check a cleaned table against the guarantees downstream analysis relies on.

    Args:
        df: Cleaned listings DataFrame
        fence: Optional price fence the prices must fall within

    Returns:
        ValidationResult with validity flag and any warnings/errors
    """
    warnings: list[str] = []
    errors: list[str] = []

    missing = [c for c in ["price", "host_response_time", *DERIVED_COLUMNS] if c not in df.columns]
    if missing:
        errors.append(f"Missing columns: {missing}")
        return ValidationResult(is_valid=False, warnings=warnings, errors=errors)

    price = pd.to_numeric(df["price"], errors="coerce")
    if price.isna().any():
        errors.append(f"{price.isna().sum()} listings with missing price")
    if np.isinf(price).any():
        errors.append("Non-finite price values")
    if fence is not None:
        outside = ((price < fence.lower) | (price > fence.upper)).sum()
        if outside > 0:
            errors.append(f"{outside} prices outside [{fence.lower:,.2f}, {fence.upper:,.2f}]")

    ranks = df["host_response_time"].dropna()
    if not ranks.isin(list(RESPONSE_TIME_RANKS.values())).all():
        errors.append("host_response_time outside 1..4")

    groups = df["property_type_grouped"].dropna()
    if not groups.isin(PROPERTY_TYPE_GROUPS).all():
        unknown = sorted(set(groups) - set(PROPERTY_TYPE_GROUPS))
        errors.append(f"Unknown property_type_grouped: {unknown}")

    for col in AMENITY_SCORE_COLUMNS:
        max_score = len(AMENITY_CATEGORIES[col.removesuffix("_score")])
        if not df[col].between(0, max_score).all():
            errors.append(f"{col} outside 0..{max_score}")

    for col in df.columns:
        missing_pct = df[col].isna().mean()
        if missing_pct > 0.5:
            warnings.append(f"{col} is {missing_pct:.0%} missing")

    return ValidationResult(is_valid=len(errors) == 0, warnings=warnings, errors=errors)


def get_summary_stats(df: pd.DataFrame) -> dict:
    """Get summary statistics for a cleaned dataset.

    Args:
        df: Cleaned listings DataFrame

    Returns:
        Dict with summary statistics
    """
    return {
        "n_listings": len(df),
        "n_columns": len(df.columns),
        "price_range": (df["price"].min(), df["price"].max()),
        "price_median": df["price"].median(),
        "by_room_type": df["room_type"].value_counts().to_dict(),
        "by_property_group": df["property_type_grouped"].value_counts().to_dict(),
        "by_response_time": df["host_response_time"].value_counts().to_dict(),
        "missing_share": df.isna().mean().loc[lambda s: s > 0].to_dict(),
    }


def lump_categories(series: pd.Series, n: int, other: str = "Other") -> pd.Series:
    """Keep the `n` most frequent levels and merge the rest into `other`."""
    top = series.value_counts().nlargest(n).index
    lumped = series.astype(object).where(series.isin(top) | series.isna(), other)
    return lumped.astype("category")


def prepare_model_data(
    df: pd.DataFrame, target: str = "price", top_n_neighbourhoods: int | None = 7
) -> pd.DataFrame:
    """Prepare cleaned data for model fitting.

    Drops rows without a target, median-imputes numeric columns, mode-imputes
    categorical columns and optionally lumps sparse neighbourhoods into "Other".

    Args:
        df: Cleaned listings DataFrame
        target: Target column name
        top_n_neighbourhoods: Neighbourhoods kept as their own level (None keeps all)

    Returns:
        DataFrame with no missing values
    """
    _require_columns(df, [target], "prepare_model_data")
    model_df = df[df[target].notna()].copy()
    if model_df.empty:
        raise SchemaError(f"prepare_model_data: no rows with a non-missing '{target}'")

    # Columns with no observed values carry nothing to impute from
    empty_cols = [c for c in model_df.columns if model_df[c].isna().all()]
    if empty_cols:
        logger.info(f"Dropping entirely missing columns: {empty_cols}")
        model_df = model_df.drop(columns=empty_cols)

    for col in model_df.columns:
        values = model_df[col]
        if pd.api.types.is_bool_dtype(values) or not values.isna().any():
            continue
        if pd.api.types.is_numeric_dtype(values):
            model_df[col] = values.astype(float).fillna(values.median())
        else:
            model_df[col] = values.fillna(values.mode().iloc[0])

    if top_n_neighbourhoods is not None and "neighbourhood_cleansed" in model_df.columns:
        model_df["neighbourhood_cleansed"] = lump_categories(
            model_df["neighbourhood_cleansed"], top_n_neighbourhoods
        )

    for col in model_df.columns:
        if is_categorical_column(model_df[col]) and not isinstance(
            model_df[col].dtype, pd.CategoricalDtype
        ):
            model_df[col] = model_df[col].astype("category")

    logger.info(f"Model-ready dataset: {len(model_df)} listings (from {len(df)} cleaned)")
    return model_df
