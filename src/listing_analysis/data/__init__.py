"""Data loading, cleaning and validation utilities."""

from listing_analysis.data.cleaning import (
    CleaningConfig,
    SchemaError,
    clean_listings,
    read_listings,
    validate_cleaned_listings,
    write_listings,
)

__all__ = [
    "CleaningConfig",
    "SchemaError",
    "clean_listings",
    "read_listings",
    "validate_cleaned_listings",
    "write_listings",
]
