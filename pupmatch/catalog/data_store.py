from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import Breed, BreedCharacteristics

logger = logging.getLogger(__name__)

_breeds: tuple[Breed, ...] | None = None


def _optional_int(value: Any) -> int | None:
    if value is None or pd.isna(value):
        return None
    return int(value)


def _split_tags(value: Any) -> tuple[str, ...]:
    if value is None or pd.isna(value):
        return ()
    return tuple(t.strip() for t in str(value).split("|") if t.strip())


def _row_to_breed(row: pd.Series) -> Breed:
    characteristics = BreedCharacteristics(
        **{field: _optional_int(row.get(field)) for field in BreedCharacteristics.model_fields}
    )
    return Breed(
        id=str(row["id"]),
        name=str(row["name"]).strip(),
        size=str(row["size"]).strip().lower(),
        characteristics=characteristics,
        temperament=_split_tags(row.get("temperament")),
        ideal_for=_split_tags(row.get("ideal_for")),
    )


def load_breeds(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> tuple[Breed, ...]:
    """Read the breed catalog CSV into immutable ``Breed`` records."""
    df = pd.read_csv(config.breeds_path, dtype={"id": str})
    breeds = tuple(_row_to_breed(row) for _, row in df.iterrows())
    logger.info("Loaded %d breeds from %s", len(breeds), config.breeds_path)
    return breeds


def get_breeds() -> tuple[Breed, ...]:
    """Return the in-memory breed catalog, loading it on first call."""
    global _breeds
    if _breeds is None:
        _breeds = load_breeds()
    return _breeds


def find_breed(name: str) -> Breed | None:
    """Case-insensitive lookup by display name."""
    wanted = name.strip().casefold()
    for breed in get_breeds():
        if breed.name.casefold() == wanted:
            return breed
    return None


def set_breeds(breeds: tuple[Breed, ...] | None) -> None:
    """Replace the cached catalog snapshot (``None`` forces a reload)."""
    global _breeds
    _breeds = breeds
