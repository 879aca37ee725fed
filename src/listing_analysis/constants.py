"""Central constants module for listing analysis.

This module consolidates constants used across the project, including:
- Closed vocabularies fixed by the cleaning pipeline
- Modelling defaults (split, seeds, ensemble sizes)
- Re-exports from cleaning.py for convenience
"""

# Re-export vocabularies from cleaning.py
from listing_analysis.data.cleaning import (
    AMENITY_CATEGORIES,
    BOOLEAN_LEVELS,
    PROPERTY_TYPE_GROUPS,
    RESPONSE_TIME_RANKS,
    ROOM_TYPES,
    VERIFICATION_TYPES,
)

TARGET = "price"

# Modelling configuration defaults
MODELING_DEFAULTS = {
    "test_size": 0.2,
    "random_state": 42,
    "n_estimators": 100,
    "top_n_features": 5,
    "top_n_neighbourhoods": 7,
}

# Enhanced gradient boosting model on log1p(price)
FINAL_MODEL_DEFAULTS = {
    "n_estimators": 200,
    "max_depth": 6,
    "learning_rate": 0.1,
    "top_n_neighbourhoods": 10,
}

__all__ = [
    # Re-exports from cleaning.py
    "AMENITY_CATEGORIES",
    "BOOLEAN_LEVELS",
    "PROPERTY_TYPE_GROUPS",
    "RESPONSE_TIME_RANKS",
    "ROOM_TYPES",
    "VERIFICATION_TYPES",
    # Modelling config
    "TARGET",
    "MODELING_DEFAULTS",
    "FINAL_MODEL_DEFAULTS",
]
