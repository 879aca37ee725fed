"""Shared test fixtures for listing analysis tests."""

from collections.abc import Callable

import numpy as np
import pandas as pd
import pytest


def make_raw_listing(**overrides) -> dict:
    """One raw listings-export row with sensible defaults."""
    row = {
        "id": 1,
        "listing_url": "https://www.airbnb.com/rooms/1",
        "scrape_id": 20240915000000,
        "last_scraped": "2024-09-15",
        "name": "Bright flat near the canal",
        "description": "A lovely place.",
        "host_id": 100,
        "host_name": "Sam",
        "host_since": "2015-03-01",
        "host_about": "",
        "host_response_time": "within an hour",
        "host_response_rate": "100%",
        "host_acceptance_rate": "90%",
        "host_is_superhost": "f",
        "host_has_profile_pic": "t",
        "host_identity_verified": "t",
        "host_verifications": "['email', 'phone']",
        "neighbourhood": "London, United Kingdom",
        "neighbourhood_cleansed": "Camden",
        "latitude": 51.54,
        "longitude": -0.14,
        "property_type": "Entire rental unit",
        "room_type": "Entire home/apt",
        "accommodates": 2,
        "bathrooms": np.nan,
        "bathrooms_text": "1 bath",
        "bedrooms": 1,
        "amenities": '["Wifi", "Kitchen", "TV", "Smoke alarm", "Hair dryer"]',
        "price": "$100.00",
        "has_availability": "t",
        "first_review": "2016-05-01",
        "last_review": "2024-08-30",
        "instant_bookable": "f",
    }
    row.update(overrides)
    return row


@pytest.fixture
def raw_listing_factory() -> Callable[..., dict]:
    """Factory for single raw rows; keyword arguments override defaults."""
    return make_raw_listing


@pytest.fixture
def raw_listings_df() -> pd.DataFrame:
    """Realistic sample of a raw listings export.

    Includes:
    - One listing scraped before the cutoff (dropped)
    - One price far above the rest (dropped by the IQR fence)
    - One unparseable price (dropped)
    - Missing and malformed values in coerced fields
    """
    rows = [
        make_raw_listing(id=1, price="$80.00"),
        make_raw_listing(
            id=2,
            price="$90.00",
            host_response_rate="95%",
            host_response_time="within a few hours",
            neighbourhood_cleansed="Hackney",
        ),
        make_raw_listing(
            id=3,
            price="$100.00",
            bathrooms=np.nan,
            bathrooms_text="Half-bath",
            property_type="Private room in home",
            room_type="Private room",
        ),
        make_raw_listing(
            id=4,
            price="$110.00",
            bathrooms=2.0,
            bathrooms_text="1 bath",
            host_verifications="['email', 'phone', 'work_email']",
            host_response_time="within a day",
        ),
        make_raw_listing(
            id=5,
            price="$120.00",
            host_is_superhost=np.nan,
            host_response_rate="N/A",
            host_response_time="N/A",
            property_type="Room in boutique hotel",
            room_type="Hotel room",
        ),
        make_raw_listing(
            id=6,
            price="$130.00",
            host_verifications="[]",
            host_response_time="a few days or more",
            property_type="Shared room in hostel",
            room_type="Shared room",
            bathrooms_text="1.5 shared baths",
        ),
        make_raw_listing(
            id=7,
            price="$140.00",
            host_since=np.nan,
            host_verifications=np.nan,
            host_response_time=np.nan,
            property_type="Tent",
            amenities=np.nan,
            neighbourhood_cleansed="Westminster",
        ),
        make_raw_listing(
            id=8,
            price="$150.00",
            host_verifications="['email', 'phone', 'passport']",
            property_type="Entire loft",
            room_type="Cabin",
            host_is_superhost="maybe",
        ),
        make_raw_listing(
            id=9,
            price="$160.00",
            host_acceptance_rate="abc%",
            first_review="not a date",
            bathrooms_text=np.nan,
            neighbourhood_cleansed="Hackney",
        ),
        # Far above the rest of the distribution
        make_raw_listing(id=10, price="$2,000.00", neighbourhood_cleansed="Kensington and Chelsea"),
        # Unparseable price
        make_raw_listing(id=11, price="price on request"),
        # Scraped before the cutoff
        make_raw_listing(id=12, price="$120.00", last_scraped="2024-06-15"),
    ]
    return pd.DataFrame(rows)


@pytest.fixture
def model_data_df() -> pd.DataFrame:
    """Synthetic cleaned listings for feature selection and model smoke tests.

    - Price driven mostly by accommodates and room type
    - Nine neighbourhoods so lumping has something to merge
    - A few missing values in numeric and ordinal columns
    """
    np.random.seed(42)

    n = 80
    neighbourhoods = [
        "Camden",
        "Hackney",
        "Islington",
        "Lambeth",
        "Southwark",
        "Tower Hamlets",
        "Wandsworth",
        "Westminster",
        "Brent",
    ]
    accommodates = np.random.randint(1, 7, n)
    bedrooms = np.random.randint(1, 4, n).astype(float)
    room_type = np.random.choice(["Entire home/apt", "Private room"], n)
    price = (
        40
        + 30 * accommodates
        + 10 * bedrooms
        + np.where(room_type == "Entire home/apt", 80, 0)
        + np.random.normal(0, 5, n)
    )
    bedrooms[:4] = np.nan

    response_time = pd.array(np.random.randint(1, 5, n), dtype="Int64")
    response_time[5:8] = pd.NA

    data = {
        "host_since": np.random.uniform(3000, 9000, n),
        "host_response_rate": np.random.uniform(0.5, 1.0, n),
        "host_is_superhost": pd.Categorical(np.random.choice(["f", "t"], n), categories=["f", "t"]),
        "host_response_time": response_time,
        "neighbourhood_cleansed": pd.Categorical(np.random.choice(neighbourhoods, n)),
        "room_type": pd.Categorical(room_type),
        "property_type_grouped": pd.Categorical(
            np.random.choice(["Apartment/Condo", "House/Townhouse", "Other"], n)
        ),
        "accommodates": accommodates,
        "bedrooms": bedrooms,
        "bathrooms": np.random.choice([1.0, 1.5, 2.0], n),
        "email_verified": np.random.choice([True, False], n),
        "kitchen_score": np.random.randint(0, 10, n),
        "tv_score": np.random.randint(0, 5, n),
        "price": price,
    }
    return pd.DataFrame(data)
