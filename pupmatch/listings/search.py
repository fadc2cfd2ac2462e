from __future__ import annotations

import pandas as pd

from ..catalog.config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import ListingFilters, Puppy

_df: pd.DataFrame | None = None


def load_listings(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> pd.DataFrame:
    df = pd.read_csv(config.puppies_path, dtype={"id": str})

    # Lowercase text columns for case-insensitive matching
    df["breed_lower"] = df["breed"].fillna("").str.strip().str.lower()
    df["gender_lower"] = df["gender"].fillna("").str.lower()
    df["country_lower"] = df["country"].fillna("").str.lower()
    df["state_lower"] = df["state"].fillna("").str.lower()
    df["size"] = df["size"].fillna("").str.lower()
    df["verified"] = df["verified"].fillna(False).astype(bool)
    df["shipping"] = df["shipping"].fillna(False).astype(bool)

    return df


def get_listing_frame() -> pd.DataFrame:
    """Return the in-memory listing DataFrame, loading it on first call."""
    global _df
    if _df is None:
        _df = load_listings()
    return _df


def set_listing_frame(df: pd.DataFrame | None) -> None:
    global _df
    _df = df


def _row_to_puppy(row: pd.Series) -> Puppy:
    return Puppy(
        id=str(row["id"]),
        name=row["name"],
        breed=row["breed"],
        size=row["size"] or None,
        gender=row["gender"],
        age_weeks=int(row["age_weeks"]),
        price=float(row["price"]),
        country=row["country"],
        state=row["state"],
        city=row["city"],
        breeder_name=row["breeder_name"],
        verified=bool(row["verified"]),
        shipping=bool(row["shipping"]),
    )


def search_puppies(filters: ListingFilters, df: pd.DataFrame | None = None) -> list[Puppy]:
    """Return listed puppies that satisfy every active filter, in listing order."""
    if df is None:
        df = get_listing_frame()

    mask = pd.Series(True, index=df.index)

    if filters.breed:
        mask = mask & (df["breed_lower"] == filters.breed.strip().lower())

    if filters.size:
        mask = mask & df["size"].isin([s.value for s in filters.size])

    if filters.gender:
        mask = mask & (df["gender_lower"] == filters.gender.strip().lower())

    if filters.shipping:
        mask = mask & df["shipping"]

    if filters.verified:
        mask = mask & df["verified"]

    if filters.country:
        mask = mask & (df["country_lower"] == filters.country.strip().lower())

    if filters.state:
        mask = mask & (df["state_lower"] == filters.state.strip().lower())

    return [_row_to_puppy(row) for _, row in df.loc[mask].iterrows()]
